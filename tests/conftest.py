"""Shared test fixtures for omnichat tests."""

import pytest
from PySide6.QtCore import QCoreApplication

from omnichat.core.models import FeedRecord, RecordSource
from omnichat.core.settings import FeedSettings


def _make_record(
    body: str = "hello",
    source: RecordSource = RecordSource.PRIMARY,
    timestamp_ms: int = 0,
    author: str = "user",
    source_key: str = "",
) -> FeedRecord:
    return FeedRecord(
        source=source,
        timestamp_ms=timestamp_ms,
        author=author,
        body=body,
        source_key=source_key,
    )


@pytest.fixture(scope="session")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def feed_settings():
    return FeedSettings(max_messages=100, max_messages_scroll=1000, render_debounce_ms=0)


@pytest.fixture
def dgg_payload():
    return {"nick": "Alice", "data": "hello world", "timestamp": 1_700_000_000_000}


@pytest.fixture
def kick_payload():
    return {
        "platform": "kick",
        "slug": "kickstreamer",
        "content": "[emote:37226:KEKW]",
        "createdAt": "2025-01-01T12:00:00Z",
        "sender": {"id": 1, "username": "KickFan", "slug": "kickfan"},
    }


@pytest.fixture
def session(qapp, feed_settings, tmp_path):
    from omnichat.chat.session import ChatSession

    s = ChatSession(feed_settings, whisper_path=tmp_path / "correspondents.json")
    yield s
    s.deleteLater()


@pytest.fixture
def make_record():
    return _make_record
