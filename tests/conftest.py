from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.state import state
from app.main import app
from app.services.links import LinkRegistry
from app.services.ytdlp import CompletedProcess, SubprocessExecutor


class FakeExtractor:
    """Stands in for the yt-dlp process; records every argument vector"""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.replies: List[CompletedProcess] = []

    def reply(self, stdout: str = "", stderr: str = "", returncode: int = 0):
        """Queue a result; the last one is repeated once the queue runs dry"""
        self.replies.append(CompletedProcess(returncode, stdout.encode(), stderr.encode()))

    async def run(self, cmd, timeout, max_output):
        self.calls.append(list(cmd))
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0] if self.replies else CompletedProcess(0, b"", b"")


@pytest.fixture
def fake_extractor(monkeypatch):
    fake = FakeExtractor()
    monkeypatch.setattr(SubprocessExecutor, "run", fake.run)
    return fake


@pytest.fixture(autouse=True)
def link_registry():
    """Fresh in-memory registry per test"""
    original = state.link_registry
    state.link_registry = LinkRegistry(ttl_seconds=300)
    yield state.link_registry
    state.link_registry = original


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
