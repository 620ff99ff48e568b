"""Chat session - owns the combined feed and its input state."""

import logging
from pathlib import Path
from typing import Any, Iterable

from PySide6.QtCore import QObject, QTimer, Signal

from ..core.models import DisplayMode, FeedRecord, RecordSource
from ..core.settings import FeedSettings
from .annotate import Segment, annotate, matching_terms
from .autocomplete import Completer, Replacement
from .buffer import UnifiedBuffer
from .combos import RenderEntry, build_render_list, single_emote_key
from .input_history import InputHistory
from .nicks import NickDirectory
from .normalizer import normalize, normalize_history
from .whisper_store import UnreadTracker, load_correspondents, save_correspondents

logger = logging.getLogger(__name__)

# Records whose bodies use the primary chat's emote set and nick list
PRIMARY_FAMILY = (RecordSource.PRIMARY, RecordSource.BROADCAST)


class ChatSession(QObject):
    """Single owner of the feed buffer, completion state and whisper counts.

    Connectors deliver events on the main thread (queued signals), so every
    handler runs to completion before the next one starts. Render-list
    rebuilds and suggestion refreshes are debounced with single-shot timers;
    restarting a timer drops the pending action.
    """

    # Emitted with the buffer's update sequence after the render list changes
    feed_updated = Signal(int)
    # Emitted with the source value when a reconnect needs a history snapshot
    history_requested = Signal(str)
    suggestions_changed = Signal(list, int)  # suggestions, highlighted index
    unread_changed = Signal(int)  # total unread
    whisper_error = Signal(str)

    def __init__(
        self,
        settings: FeedSettings | None = None,
        whisper_path: Path | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._settings = settings or FeedSettings()
        self._whisper_path = whisper_path

        self._buffer = UnifiedBuffer(
            soft_cap=self._settings.soft_cap,
            hard_cap=self._settings.hard_cap,
            mode=self._settings.sort_mode,
        )
        self._emote_names: frozenset[str] = frozenset()
        self._emote_list: list[str] = []
        self._emote_key = single_emote_key(self._emote_names)
        self._nicks = NickDirectory()
        self._completer = Completer(
            emote_names=lambda: self._emote_list,
            nicks=self._nicks.nicks,
            trigger=self._settings.mention_trigger,
            limit=self._settings.max_suggestions,
        )
        self._input_history = InputHistory()
        self._unread = UnreadTracker(load_correspondents(self._whisper_path))
        self._unread_seeded = False

        self._entries: list[RenderEntry] = []
        self._dirty = False

        self._render_timer = QTimer(self)
        self._render_timer.setSingleShot(True)
        self._render_timer.setInterval(self._settings.render_debounce_ms)
        self._render_timer.timeout.connect(self._rebuild)

        self._pending_input: tuple[str, int] = ("", 0)
        self._suggest_timer = QTimer(self)
        self._suggest_timer.setSingleShot(True)
        self._suggest_timer.setInterval(self._settings.suggest_debounce_ms)
        self._suggest_timer.timeout.connect(self._refresh_suggestions)

    # --- Read-only state ---

    @property
    def settings(self) -> FeedSettings:
        return self._settings

    @property
    def buffer(self) -> UnifiedBuffer:
        return self._buffer

    @property
    def nicks(self) -> NickDirectory:
        return self._nicks

    @property
    def completer(self) -> Completer:
        return self._completer

    @property
    def input_history(self) -> InputHistory:
        return self._input_history

    @property
    def unread(self) -> UnreadTracker:
        return self._unread

    @property
    def update_seq(self) -> int:
        return self._buffer.update_seq

    def view(self) -> list[FeedRecord]:
        return self._buffer.view()

    def render_entries(self) -> list[RenderEntry]:
        """Current render list, rebuilt now if a rebuild is pending."""
        if self._dirty:
            self._render_timer.stop()
            self._rebuild()
        return list(self._entries)

    # --- Feed ---

    def _schedule_render(self) -> None:
        self._dirty = True
        self._render_timer.start()

    def _rebuild(self) -> None:
        self._entries = build_render_list(
            self._buffer.view(), self._emote_key, self._settings.combo_min_length
        )
        self._dirty = False
        self.feed_updated.emit(self._buffer.update_seq)

    def handle_messages(self, source: RecordSource, payloads: Iterable[Any]) -> int:
        """Live messages from one connector, in the order received.

        Returns how many were accepted.
        """
        records = []
        for payload in payloads:
            record = normalize(source, payload)
            if record is None:
                continue
            if source == RecordSource.PRIMARY:
                self._nicks.observe(record.author)
            records.append(record)
        if not records:
            return 0
        self._buffer.append(records)
        self._schedule_render()
        return len(records)

    def handle_message(self, source: RecordSource, payload: Any) -> bool:
        return self.handle_messages(source, [payload]) == 1

    def handle_history(self, source: RecordSource, payloads: Any) -> int:
        """A history snapshot for `source` after (re)connecting.

        An empty snapshot leaves the current records alone.
        """
        records = normalize_history(source, payloads)
        if not records:
            logger.debug(f"Empty {source.value} history snapshot ignored")
            return 0
        stamped = self._buffer.replace_history(source, records)
        self._schedule_render()
        return len(stamped)

    def handle_reconnect(self, source: RecordSource) -> None:
        """A connector reconnected; ask for the history that supersedes ours."""
        logger.info(f"{source.value} reconnected, requesting history")
        self.history_requested.emit(source.value)

    def set_at_bottom(self, at_bottom: bool) -> None:
        """Scroll state from the view, computed from the real scroll position."""
        was_at_bottom = self._buffer.at_bottom
        self._buffer.set_at_bottom(at_bottom)
        if at_bottom and not was_at_bottom:
            before = self._buffer.update_seq
            self._buffer.flush_trim()
            if self._buffer.update_seq != before:
                self._schedule_render()

    def set_capacity(self, soft_cap: int, hard_cap: int) -> None:
        """Change the caps; settings are only updated once the buffer accepts them."""
        self._buffer.set_capacity(min(soft_cap, hard_cap), hard_cap)
        self._settings.max_messages = soft_cap
        self._settings.max_messages_scroll = hard_cap
        self._schedule_render()

    def set_sort_mode(self, mode: DisplayMode) -> None:
        if mode == self._buffer.mode:
            return
        self._settings.sort_mode = mode
        self._buffer.mode = mode
        self._schedule_render()

    def set_emotes(self, names: Iterable[str]) -> None:
        """Emote directory finished loading (or changed)."""
        self._emote_names = frozenset(n for n in names if n)
        self._emote_list = sorted(self._emote_names, key=lambda s: (s.lower(), s))
        self._emote_key = single_emote_key(self._emote_names)
        logger.debug(f"Emote set updated: {len(self._emote_names)} emotes")
        self._schedule_render()

    # --- Nicks ---

    def handle_names(self, nicks: Iterable[str]) -> None:
        self._nicks.replace(nicks)

    def handle_user_event(self, event_type: str, nick: str) -> None:
        """JOIN / QUIT from the primary chat."""
        if event_type == "JOIN":
            self._nicks.join(nick)
        elif event_type == "QUIT":
            self._nicks.quit(nick)

    # --- Annotation ---

    def annotate(self, record: FeedRecord) -> list[Segment]:
        """Segments for a record; emote names and nicks apply to primary chat only."""
        if record.source in PRIMARY_FAMILY:
            return annotate(record.body, self._emote_names, self._nicks.nicks())
        return annotate(record.body)

    def matching_terms(self, record: FeedRecord) -> list[str]:
        return matching_terms(record, self._settings.highlight_terms)

    # --- Input ---

    def input_changed(self, text: str, cursor: int) -> None:
        """A keystroke edited the input; suggestions refresh after a short pause."""
        self._completer.reset()
        self._input_history.reset()
        self._pending_input = (text, cursor)
        self._suggest_timer.start()

    def _refresh_suggestions(self) -> None:
        text, cursor = self._pending_input
        suggestions = self._completer.update(text, cursor)
        self.suggestions_changed.emit(suggestions, self._completer.index)

    def complete(self, text: str, cursor: int, backward: bool = False) -> Replacement | None:
        """Tab / Shift+Tab in the input."""
        self._suggest_timer.stop()
        replacement = self._completer.advance(text, cursor, backward)
        self.suggestions_changed.emit(self._completer.suggestions, self._completer.index)
        return replacement

    def cancel_completion(self) -> None:
        self._suggest_timer.stop()
        self._completer.cancel()
        self.suggestions_changed.emit([], -1)

    def message_sent(self, text: str) -> None:
        """The user sent `text`; remember it for Up/Down recall."""
        self._input_history.push(text)
        self._completer.cancel()

    # --- Whispers ---

    def _unread_updated(self) -> None:
        save_correspondents(self._unread.correspondents(), self._whisper_path)
        self.unread_changed.emit(self._unread.total_unread())

    def handle_privmsg(self, payload: Any) -> None:
        """Incoming whisper: {privmsg: {nick, ...}} or the bare privmsg."""
        if not isinstance(payload, dict):
            return
        privmsg = payload.get("privmsg", payload)
        nick = privmsg.get("nick") if isinstance(privmsg, dict) else None
        if not isinstance(nick, str) or not nick.strip():
            logger.debug("Ignoring whisper without a sender")
            return
        self._unread.record(nick)
        self._unread_updated()

    def handle_unread_result(self, result: Any) -> None:
        """Result of the one-time unread fetch: {success, data: [{username}]}."""
        if self._unread_seeded:
            return
        if not isinstance(result, dict) or not result.get("success"):
            return
        data = result.get("data")
        if not isinstance(data, list):
            return
        self._unread_seeded = True
        names = [
            u["username"].strip()
            for u in data
            if isinstance(u, dict) and isinstance(u.get("username"), str) and u["username"].strip()
        ]
        if not names:
            return
        self._unread.seed_unread(names)
        self._unread_updated()

    def open_conversation(self, name: str) -> None:
        self._unread.open(name)
        self._unread.set_send_error(None)
        self.unread_changed.emit(self._unread.total_unread())

    def remove_conversation(self, name: str) -> None:
        self._unread.remove(name)
        self._unread_updated()

    def handle_whisper_sent(self, error: str | None = None) -> None:
        """Completion of a whisper send; `error` is shown as-is."""
        self._unread.set_send_error(error)
        if error:
            self.whisper_error.emit(error)
