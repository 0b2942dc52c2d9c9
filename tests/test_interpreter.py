import pytest

from app.services.interpreter import interpret
from app.utils.exceptions import ExtractionError, NoUrlFound
from app.utils.filename import content_disposition, sanitize_filename

UNSAFE = set('<>:"/\\|?*\n\r')


def test_url_then_title():
    result = interpret("https://cdn.example/video.mp4\nSample Title\n", "youtube")
    assert result.media_url == "https://cdn.example/video.mp4"
    assert result.title == "Sample Title"


def test_first_url_wins_and_title_is_last_line():
    output = "https://cdn.example/v.mp4\nhttps://cdn.example/a.m4a\nMy: Video\n"
    result = interpret(output, "youtube")
    assert result.media_url == "https://cdn.example/v.mp4"
    assert result.title == "My_ Video"


def test_noise_before_url():
    result = interpret("[info] something\nhttp://cdn.example/x\nTitle", "facebook")
    assert result.media_url == "http://cdn.example/x"
    assert result.title == "Title"


@pytest.mark.parametrize("output", ["", "\n\n", "Only a title", "ftp://cdn.example/x\nTitle", "httpfoo\n"])
def test_no_url_found(output):
    with pytest.raises(NoUrlFound):
        interpret(output, "youtube")


def test_no_url_found_is_extraction_error():
    assert issubclass(NoUrlFound, ExtractionError)
    assert NoUrlFound.status_code == 500


def test_missing_title_falls_back_to_unique_name():
    first = interpret("https://cdn.example/v.mp4", "instagram")
    second = interpret("https://cdn.example/v.mp4", "instagram")
    assert first.title.startswith("instagram_")
    assert first.title != second.title


def test_title_that_sanitizes_to_nothing_falls_back():
    result = interpret("https://cdn.example/v.mp4\n ... \n", "youtube")
    assert result.title.startswith("youtube_")


@pytest.mark.parametrize("raw", [
    'a<b>c:d"e/f\\g|h?i*j',
    "line one\nline two",
    "tabs\tand\x00nulls\x1f",
    "   padded title...   ",
    "x" * 500,
    "ＦＵＬＬ／ＷＩＤＴＨ",
    "CON",
    "emoji 🎬 title",
    "",
])
def test_sanitize_properties(raw):
    once = sanitize_filename(raw, max_length=80)
    assert not (set(once) & UNSAFE)
    assert len(once) <= 80
    assert sanitize_filename(once, max_length=80) == once


def test_sanitize_examples():
    assert sanitize_filename("CON") == "_CON"
    assert sanitize_filename("ＦＵＬＬ／ＷＩＤＴＨ") == "FULL_WIDTH"
    assert sanitize_filename("a\n\nb") == "a__b"
    assert sanitize_filename("x" * 100) == "x" * 80


def test_content_disposition_has_ascii_fallback():
    header = content_disposition('Vidéo "final".mp4')
    assert header.startswith('attachment; filename="Vido final.mp4"')
    assert "filename*=UTF-8''Vid%C3%A9o%20%22final%22.mp4" in header
