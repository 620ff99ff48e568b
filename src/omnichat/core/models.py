"""Core data models for the combined chat feed."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class RecordSource(str, Enum):
    """Where a feed record came from."""

    PRIMARY = "primary"  # Community chat (MSG)
    KICK = "kick"
    YOUTUBE = "youtube"
    TWITCH = "twitch"
    EVENT = "event"  # Gift subs, mass gifts, donations
    SYSTEM = "system"  # Mute / ban / unmute notices
    BROADCAST = "broadcast"  # Primary chat BROADCAST


# Sources whose records are ordinary chat lines (eligible for combos, highlights)
CHAT_SOURCES = frozenset(
    {RecordSource.PRIMARY, RecordSource.KICK, RecordSource.YOUTUBE, RecordSource.TWITCH}
)


def history_family(source: RecordSource) -> frozenset[RecordSource]:
    """Sources replaced together when a history snapshot for `source` arrives.

    The primary chat's history interleaves MSG and BROADCAST items, so a
    primary reconnect supersedes both.
    """
    if source == RecordSource.PRIMARY:
        return frozenset({RecordSource.PRIMARY, RecordSource.BROADCAST})
    return frozenset({source})


class DisplayMode(str, Enum):
    """How the feed orders records for display."""

    TIMESTAMP = "timestamp"
    ARRIVAL = "arrival"


@dataclass(frozen=True)
class FeedRecord:
    """A normalized chat record from any source.

    `seq` is stamped by the buffer on ingest; records built by the
    normalizer carry -1 until then.
    """

    source: RecordSource
    timestamp_ms: int
    author: str
    body: str
    source_key: str = ""
    kind: str = ""  # Event type or system notice kind
    is_history: bool = False
    seq: int = -1
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def partition(self) -> tuple[RecordSource, str]:
        """The (source, source_key) pair this record's combos are scoped to."""
        return (self.source, self.source_key)

    @property
    def is_chat(self) -> bool:
        return self.source in CHAT_SOURCES

    @property
    def sort_key(self) -> tuple[int, int]:
        """Timestamp order with arrival sequence as the tiebreaker."""
        return (self.timestamp_ms, self.seq)
