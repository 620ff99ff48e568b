"""Known chatter nicks for mention matching and @-completion."""

from typing import Iterable


def _sort_key(nick: str) -> tuple[str, str]:
    return (nick.lower(), nick)


class NickDirectory:
    """Unique nicks, kept in case-insensitive order.

    Fed by the primary chat's NAMES list and JOIN/QUIT events; nicks seen
    in messages are added too so completion works before NAMES arrives.
    """

    def __init__(self, nicks: Iterable[str] = ()):
        self._nicks: list[str] = []
        self.replace(nicks)

    def __len__(self) -> int:
        return len(self._nicks)

    def __contains__(self, nick: object) -> bool:
        return nick in self._nicks

    def replace(self, nicks: Iterable[str]) -> None:
        """Replace the whole list (NAMES)."""
        cleaned = {n.strip() for n in nicks if n and n.strip()}
        self._nicks = sorted(cleaned, key=_sort_key)

    def join(self, nick: str) -> bool:
        """Add a nick; returns True if it was new."""
        nick = (nick or "").strip()
        if not nick or nick in self._nicks:
            return False
        self._nicks.append(nick)
        self._nicks.sort(key=_sort_key)
        return True

    # Seen in a message; same effect as a JOIN
    observe = join

    def quit(self, nick: str) -> bool:
        """Remove a nick; returns True if it was present."""
        nick = (nick or "").strip()
        if nick not in self._nicks:
            return False
        self._nicks.remove(nick)
        return True

    def nicks(self) -> list[str]:
        return list(self._nicks)
