"""Tab completion for emote names and @mentions."""

import logging
from dataclasses import dataclass
from typing import Callable, Collection, Iterable

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 20
MENTION_TRIGGER = "@"


def _ordered(candidates: Iterable[str]) -> list[str]:
    """Sequences keep their order; sets have none, so sort them."""
    if isinstance(candidates, (list, tuple)):
        return list(candidates)
    return sorted(candidates, key=lambda s: (s.lower(), s))


def suggest(
    fragment: str,
    emote_names: Iterable[str],
    nicks: Iterable[str],
    trigger: str = MENTION_TRIGGER,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Prefix-match `fragment` against emotes, or nicks when it starts with the trigger.

    Matching is a case-insensitive prefix test only. Ordered candidate lists
    (the nick directory, the session's emote list) are already in
    case-insensitive order and keep it.
    """
    if not fragment:
        return []
    is_user_search = fragment.startswith(trigger)
    search = (fragment[len(trigger) :] if is_user_search else fragment).strip().lower()
    if not search and not is_user_search:
        return []

    pool = nicks if is_user_search else emote_names
    matches: list[str] = []
    for name in _ordered(pool):
        if name.lower().startswith(search):
            matches.append(name)
            if len(matches) >= limit:
                break
    return matches


def word_at_cursor(text: str, cursor: int) -> tuple[int, int, str]:
    """The word being typed: from after the last space/newline up to the cursor."""
    cursor = max(0, min(cursor, len(text)))
    before = text[:cursor]
    start = max(before.rfind(" "), before.rfind("\n")) + 1
    return start, cursor, text[start:cursor]


@dataclass(frozen=True)
class Replacement:
    """Result of a completion step: the new input text and cursor."""

    text: str
    cursor: int
    start: int  # Span of the original text that was replaced
    end: int
    word: str  # The inserted word, without the trailing space


class Completer:
    """Suggestion list plus Tab-cycling state for one chat input.

    Emote names and nicks are read through callables so the completer always
    sees the session's current directories.
    """

    def __init__(
        self,
        emote_names: Callable[[], Collection[str]],
        nicks: Callable[[], Collection[str]],
        trigger: str = MENTION_TRIGGER,
        limit: int = MAX_SUGGESTIONS,
    ):
        self._emote_names = emote_names
        self._nicks = nicks
        self.trigger = trigger
        self.limit = limit

        self.fragment = ""
        self.index = -1
        self.last_inserted: str | None = None
        self._fragment_suggestions: list[str] = []
        self._last_suggestions: list[str] = []
        self._cursor_after_insert = -1

    @property
    def suggestions(self) -> list[str]:
        """What the dropdown shows.

        Right after an insertion the fragment is empty; the previous list
        stays up so Tab can keep cycling without retyping.
        """
        if self.fragment:
            return list(self._fragment_suggestions)
        if self.last_inserted is not None:
            return list(self._last_suggestions)
        return []

    @property
    def is_open(self) -> bool:
        return bool(self.suggestions)

    def update(self, text: str, cursor: int) -> list[str]:
        """Recompute suggestions for the word at the cursor."""
        _start, _end, self.fragment = word_at_cursor(text, cursor)
        self._fragment_suggestions = suggest(
            self.fragment, self._emote_names(), self._nicks(), self.trigger, self.limit
        )
        if self.fragment and self._fragment_suggestions:
            self._last_suggestions = list(self._fragment_suggestions)
        return self.suggestions

    def reset(self) -> None:
        """Drop the cycling state (typing, cursor moved, or cancelled)."""
        self.index = -1
        self.last_inserted = None
        self._cursor_after_insert = -1

    def text_edited(self, text: str, cursor: int) -> list[str]:
        """A character was inserted or deleted."""
        self.reset()
        return self.update(text, cursor)

    def cursor_moved(self, text: str, cursor: int) -> list[str]:
        """The cursor moved without an edit."""
        if cursor != self._cursor_after_insert:
            self.reset()
        return self.update(text, cursor)

    def cancel(self) -> None:
        self.reset()

    def move_highlight(self, delta: int) -> int:
        """Arrow-key navigation of the open dropdown, wrapping at both ends."""
        items = self.suggestions
        if not items:
            return -1
        if self.index < 0:
            self.index = 0 if delta > 0 else len(items) - 1
        else:
            self.index = (self.index + delta) % len(items)
        return self.index

    def _insertion(self, suggestion: str) -> str:
        if self.fragment.startswith(self.trigger) or (
            not self.fragment
            and self.last_inserted is not None
            and self.last_inserted.startswith(self.trigger)
        ):
            return self.trigger + suggestion
        return suggestion

    def advance(self, text: str, cursor: int, backward: bool = False) -> Replacement | None:
        """Tab / Shift+Tab: insert the next (or previous) suggestion.

        The span to replace is always derived from `text` and `cursor` as
        they are now, never from an earlier snapshot.
        """
        if cursor != self._cursor_after_insert:
            self.reset()
        self.update(text, cursor)

        items = self.suggestions
        if not items:
            return None

        if backward:
            nxt = len(items) - 1 if self.index <= 0 else self.index - 1
        else:
            nxt = 0 if self.index < 0 else (self.index + 1) % len(items)

        start, end, fragment = word_at_cursor(text, cursor)
        if not fragment:
            # Re-replace the word we inserted last time, trailing space included
            inserted = self.last_inserted or ""
            start = cursor - len(inserted) - 1
            if start < 0 or text[start:cursor] != inserted + " ":
                logger.debug("Inserted word no longer at cursor; resetting completion")
                self.reset()
                return None
            end = cursor

        self.index = nxt
        word = self._insertion(items[nxt])
        new_text = text[:start] + word + " " + text[end:]
        new_cursor = start + len(word) + 1
        self.last_inserted = word
        self._cursor_after_insert = new_cursor
        # Following steps see an empty fragment and cycle the same list
        self.fragment = ""
        self._fragment_suggestions = []
        self._last_suggestions = list(items)
        return Replacement(text=new_text, cursor=new_cursor, start=start, end=end, word=word)
