"""Up/Down recall of previously sent chat lines."""

HISTORY_MAX = 50


class InputHistory:
    """Sent-message history for one chat input.

    `older()` steps back from the newest line; stepping forward past the
    newest line restores whatever was being typed before browsing started.
    """

    def __init__(self, max_entries: int = HISTORY_MAX):
        self._entries: list[str] = []
        self._max = max_entries
        self._index = -1  # -1 = not browsing
        self._draft = ""

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def browsing(self) -> bool:
        return self._index >= 0

    def push(self, line: str) -> None:
        """Remember a sent line and stop browsing."""
        self._index = -1
        line = line.strip()
        if not line:
            return
        self._entries.append(line)
        del self._entries[: -self._max]

    def older(self, current: str) -> str | None:
        """Step to an older line. Returns the text to show, or None."""
        if not self._entries:
            return None
        if self._index == -1:
            self._draft = current
            self._index = len(self._entries) - 1
        else:
            self._index = max(0, self._index - 1)
        return self._entries[self._index]

    def newer(self) -> str | None:
        """Step to a newer line, or back to the draft. None when not browsing."""
        if self._index == -1:
            return None
        if self._index >= len(self._entries) - 1:
            self._index = -1
            return self._draft
        self._index += 1
        return self._entries[self._index]

    def reset(self) -> None:
        self._index = -1
