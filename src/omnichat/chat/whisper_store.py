"""Whisper conversations: unread counts and the local conversation list."""

import json
import logging
from pathlib import Path
from typing import Iterable

from ..core.settings import get_data_dir

logger = logging.getLogger(__name__)


def _whisper_dir() -> Path:
    """Get the whisper storage directory."""
    path = get_data_dir() / "whispers"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _correspondents_path() -> Path:
    return _whisper_dir() / "correspondents.json"


def load_correspondents(path: Path | None = None) -> list[str]:
    """Load the remembered conversation list."""
    if path is None:
        path = _correspondents_path()
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read whisper list {path}: {e}")
        return []
    if not isinstance(data, list):
        return []
    return [name for name in data if isinstance(name, str) and name.strip()]


def save_correspondents(names: Iterable[str], path: Path | None = None) -> None:
    """Persist the conversation list."""
    if path is None:
        path = _correspondents_path()
    try:
        path.write_text(json.dumps(list(names), indent=1), encoding="utf-8")
    except OSError as e:
        logger.warning(f"Failed to save whisper list {path}: {e}")


class UnreadTracker:
    """Per-correspondent unread whisper counts.

    A correspondent stays in the conversation list until `remove()` is
    called; opening a conversation only zeroes its count.
    """

    def __init__(self, correspondents: Iterable[str] = ()):
        self._order: list[str] = []
        self._counts: dict[str, int] = {}
        self.send_error: str | None = None
        for name in correspondents:
            self._add(name)

    @staticmethod
    def _clean(name: str) -> str:
        return (name or "").strip()

    def _add(self, name: str) -> bool:
        name = self._clean(name)
        if not name:
            return False
        if name not in self._counts:
            self._order.append(name)
            self._counts[name] = 0
        return True

    def record(self, name: str) -> None:
        """A whisper arrived from `name`."""
        if not self._add(name):
            logger.debug("Ignoring whisper without a sender")
            return
        self._counts[self._clean(name)] += 1

    def seed_unread(self, names: Iterable[str]) -> None:
        """Apply the server's unread list (one unread per listed sender)."""
        for name in names:
            self.record(name)

    def open(self, name: str) -> int:
        """The user opened the conversation; returns how many were unread."""
        name = self._clean(name)
        cleared = self._counts.get(name, 0)
        if name in self._counts:
            self._counts[name] = 0
        return cleared

    def remove(self, name: str) -> None:
        """The user removed the conversation from the list."""
        name = self._clean(name)
        if name in self._counts:
            del self._counts[name]
            self._order.remove(name)

    def reorder(self, names: Iterable[str]) -> None:
        """Put the listed correspondents first, in the given order."""
        front = [n for n in dict.fromkeys(self._clean(n) for n in names) if n in self._counts]
        self._order = front + [n for n in self._order if n not in front]

    def unread(self, name: str) -> int:
        return self._counts.get(self._clean(name), 0)

    def total_unread(self) -> int:
        return sum(self._counts.values())

    def counts(self) -> dict[str, int]:
        return {name: self._counts[name] for name in self._order}

    def correspondents(self) -> list[str]:
        return list(self._order)

    def set_send_error(self, error: str | None) -> None:
        """Result of the last whisper send; the connector's message, verbatim."""
        self.send_error = error or None
