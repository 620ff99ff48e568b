"""Feed buffer, combos, annotation, completion and whisper tracking."""

from .annotate import Segment, SegmentKind, annotate
from .autocomplete import Completer, suggest
from .buffer import UnifiedBuffer
from .combos import ComboEntry, MessageEntry, build_render_list, single_emote_key
from .session import ChatSession
from .whisper_store import UnreadTracker

__all__ = [
    "ChatSession",
    "ComboEntry",
    "Completer",
    "MessageEntry",
    "Segment",
    "SegmentKind",
    "UnifiedBuffer",
    "UnreadTracker",
    "annotate",
    "build_render_list",
    "single_emote_key",
    "suggest",
]
