"""Unified feed buffer backed by a deque."""

import collections
import dataclasses
import logging
from typing import Iterable

from ..core.models import DisplayMode, FeedRecord, RecordSource, history_family

logger = logging.getLogger(__name__)

DEFAULT_SOFT_CAP = 70
DEFAULT_HARD_CAP = 5000


class UnifiedBuffer:
    """Capped, ordered collection of feed records from every source.

    The buffer is the only owner of the arrival sequence counter, so every
    record it holds has a unique, strictly increasing `seq`. Trimming always
    removes from the oldest end: down to `soft_cap` while the consumer is at
    the bottom of the feed, and only down to `hard_cap` while it is scrolled
    up (so the rows the user is reading do not jump).
    """

    def __init__(
        self,
        soft_cap: int = DEFAULT_SOFT_CAP,
        hard_cap: int = DEFAULT_HARD_CAP,
        mode: DisplayMode = DisplayMode.ARRIVAL,
    ):
        # No maxlen on deque; the limit depends on the scroll state
        self._records: collections.deque[FeedRecord] = collections.deque()
        self._next_seq = 0
        self._update_seq = 0
        self._at_bottom = True
        self._soft_cap, self._hard_cap = self._check_caps(soft_cap, hard_cap)
        self.mode = mode

    @staticmethod
    def _check_caps(soft: int, hard: int) -> tuple[int, int]:
        if soft < 1 or hard < 1:
            raise ValueError(f"Capacities must be positive (soft={soft}, hard={hard})")
        return min(soft, hard), hard

    def __len__(self) -> int:
        return len(self._records)

    @property
    def soft_cap(self) -> int:
        return self._soft_cap

    @property
    def hard_cap(self) -> int:
        return self._hard_cap

    @property
    def at_bottom(self) -> bool:
        return self._at_bottom

    @property
    def update_seq(self) -> int:
        """Bumped on every mutation; the stick-to-bottom trigger for views."""
        return self._update_seq

    @property
    def limit(self) -> int:
        """The cap that applies in the current scroll state."""
        return self._soft_cap if self._at_bottom else self._hard_cap

    def set_at_bottom(self, at_bottom: bool) -> None:
        """Record whether the consumer is scrolled to the bottom."""
        self._at_bottom = at_bottom

    def _stamp(self, record: FeedRecord, is_history: bool | None = None) -> FeedRecord:
        changes = {"seq": self._next_seq}
        if is_history is not None:
            changes["is_history"] = is_history
        self._next_seq += 1
        return dataclasses.replace(record, **changes)

    def _trim(self) -> int:
        overflow = max(0, len(self._records) - self.limit)
        for _ in range(overflow):
            self._records.popleft()
        return overflow

    def append(self, records: Iterable[FeedRecord]) -> list[FeedRecord]:
        """Append records in order, stamping each with the next sequence.

        Returns the stamped records.
        """
        stamped = [self._stamp(r) for r in records]
        if not stamped:
            return []
        self._records.extend(stamped)
        trimmed = self._trim()
        self._update_seq += 1
        if trimmed:
            logger.debug(f"Trimmed {trimmed} records (limit {self.limit})")
        return stamped

    def replace_history(self, source: RecordSource, records: Iterable[FeedRecord]) -> list[FeedRecord]:
        """Replace every record of `source` with a fresh history snapshot.

        For the primary chat the paired broadcast records are replaced too.
        Records of other sources are left as they are.
        """
        family = history_family(source)
        backfill = []
        for record in records:
            if record.source not in family:
                logger.warning(
                    f"Discarding {record.source.value} record from {source.value} history"
                )
                continue
            backfill.append(record)
        # A snapshot larger than the hard cap could never be shown
        backfill = backfill[-self._hard_cap :]

        kept = [r for r in self._records if r.source not in family]
        removed = len(self._records) - len(kept)
        stamped = [self._stamp(r, is_history=True) for r in backfill]
        self._records = collections.deque(kept)
        self._records.extend(stamped)
        self._trim()
        self._update_seq += 1
        logger.debug(
            f"Replaced {source.value} history: removed {removed}, added {len(stamped)}"
        )
        return stamped

    def set_capacity(self, soft_cap: int, hard_cap: int) -> None:
        """Change the limits and retrim using the current scroll state."""
        self._soft_cap, self._hard_cap = self._check_caps(soft_cap, hard_cap)
        self._trim()
        self._update_seq += 1

    def flush_trim(self) -> None:
        """Trim deferred overflow after the user scrolls back to the bottom."""
        if self._trim():
            self._update_seq += 1

    def clear(self) -> None:
        """Remove all records. Sequence numbers are never reused."""
        if self._records:
            self._records.clear()
            self._update_seq += 1

    def records(self) -> list[FeedRecord]:
        """All records in arrival order."""
        return list(self._records)

    def view(self, mode: DisplayMode | None = None) -> list[FeedRecord]:
        """The displayable sequence, without touching stored order.

        In arrival mode, history from every source is blended by timestamp
        and shown before live records, which stay in arrival order.
        """
        mode = mode or self.mode
        if mode == DisplayMode.TIMESTAMP:
            return sorted(self._records, key=lambda r: r.sort_key)

        history = sorted((r for r in self._records if r.is_history), key=lambda r: r.sort_key)
        live = [r for r in self._records if not r.is_history]
        return history + live
