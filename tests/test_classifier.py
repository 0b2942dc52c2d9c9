import pytest

from app.models.internal import Platform
from app.services.classifier import classify, detect_platform


@pytest.mark.parametrize("url", [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://youtube.com/shorts/abc",
    "http://m.youtube.com/watch?v=abc",
    "youtu.be/abc123",
    "HTTPS://WWW.YOUTUBE.COM/watch?v=abc",
])
def test_youtube_urls(url):
    assert classify(url, Platform.YOUTUBE)
    assert classify(url, "youtube")


@pytest.mark.parametrize("url", [
    "https://www.facebook.com/watch/?v=123",
    "https://m.facebook.com/story.php?id=1",
    "https://web.facebook.com/reel/123",
    "https://fb.watch/abcDEF/",
    "facebook.com/user/videos/1",
])
def test_facebook_urls(url):
    assert classify(url, Platform.FACEBOOK)


@pytest.mark.parametrize("url", [
    "https://www.instagram.com/p/Cxyz/",
    "https://instagram.com/reel/Cxyz/",
    "https://www.instagram.com/reels/Cxyz/",
    "https://www.instagram.com/tv/Cxyz",
])
def test_instagram_urls(url):
    assert classify(url, Platform.INSTAGRAM)


@pytest.mark.parametrize("url, platform", [
    ("https://www.instagram.com/p/Cxyz/", Platform.YOUTUBE),
    ("https://youtu.be/abc", Platform.FACEBOOK),
    ("https://www.facebook.com/watch/?v=1", Platform.INSTAGRAM),
    ("https://www.instagram.com/someuser/", Platform.INSTAGRAM),
    ("not-a-url", Platform.YOUTUBE),
    ("", Platform.YOUTUBE),
    ("https://youtube.com.evil.example/watch", Platform.YOUTUBE),
    ("https://notyoutube.com/watch?v=1", Platform.YOUTUBE),
    ("ftp://youtube.com/watch?v=1", Platform.YOUTUBE),
    ("https://youtube.com/", Platform.YOUTUBE),
])
def test_rejections(url, platform):
    assert not classify(url, platform)


@pytest.mark.parametrize("platform", ["vimeo", None, 42, "", object()])
def test_unknown_platform_is_false(platform):
    assert classify("https://youtu.be/abc", platform) is False


def test_non_string_url_is_false():
    assert classify(None, Platform.YOUTUBE) is False
    assert classify(b"https://youtu.be/abc", Platform.YOUTUBE) is False


def test_detect_platform():
    assert detect_platform("https://fb.watch/x/") == Platform.FACEBOOK
    assert detect_platform("https://youtu.be/x") == Platform.YOUTUBE
    assert detect_platform("https://example.com/x") is None
