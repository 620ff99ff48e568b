"""Collapse runs of identical single-emote messages into combo entries."""

import re
from dataclasses import dataclass
from typing import Callable, Collection, Sequence, Union

from ..core.models import FeedRecord, RecordSource
from ..core.settings import COMBO_MIN_LENGTH

# Kick inlines emotes as [emote:<id>:<name>]
KICK_EMOTE_TOKEN = re.compile(r"^\[emote:(\d+):([^\]]+)\]$")

EmoteKeyFn = Callable[[FeedRecord], Union[str, None]]


@dataclass(frozen=True)
class MessageEntry:
    """An ordinary feed row."""

    index: int  # Position in the displayable sequence
    record: FeedRecord


@dataclass(frozen=True)
class ComboEntry:
    """A run of identical single-emote messages shown as one row."""

    index: int  # Position of the run's last member
    record: FeedRecord  # The run's last member
    count: int
    emote_key: str

    @property
    def source(self) -> RecordSource:
        return self.record.source

    @property
    def timestamp_ms(self) -> int:
        return self.record.timestamp_ms


RenderEntry = Union[MessageEntry, ComboEntry]


def single_emote_key(emote_names: Collection[str]) -> EmoteKeyFn:
    """Build the default predicate for combo eligibility.

    A primary chat record qualifies when its trimmed body is exactly one
    known emote name; a Kick record when its body is exactly one inline
    emote token. Anything else (including surrounding text) returns None.
    """

    def emote_key(record: FeedRecord) -> str | None:
        text = record.body.strip()
        if not text:
            return None
        if record.source == RecordSource.PRIMARY:
            if any(ch.isspace() for ch in text):
                return None
            return text if text in emote_names else None
        if record.source == RecordSource.KICK:
            match = KICK_EMOTE_TOKEN.match(text)
            if match:
                return f"kick:{match.group(1)}:{match.group(2)}"
        return None

    return emote_key


def find_runs(
    records: Sequence[FeedRecord],
    emote_key: EmoteKeyFn,
    min_length: int = COMBO_MIN_LENGTH,
) -> list[tuple[list[int], str]]:
    """Find maximal runs of the same emote, at least `min_length` long.

    Each (source, source_key) partition is scanned over its own index
    subsequence, so records from other partitions interleaved in between
    never break a run. Returns (member indices, emote key) pairs.
    """
    partitions: dict[tuple[RecordSource, str], list[int]] = {}
    for i, record in enumerate(records):
        if record.is_chat:
            partitions.setdefault(record.partition, []).append(i)

    runs: list[tuple[list[int], str]] = []
    for indices in partitions.values():
        run: list[int] = []
        run_key: str | None = None
        for idx in indices:
            key = emote_key(records[idx])
            if key is not None and key == run_key:
                run.append(idx)
                continue
            if run_key is not None and len(run) >= min_length:
                runs.append((run, run_key))
            run = [idx] if key is not None else []
            run_key = key
        if run_key is not None and len(run) >= min_length:
            runs.append((run, run_key))
    return runs


def build_render_list(
    records: Sequence[FeedRecord],
    emote_key: EmoteKeyFn,
    min_length: int = COMBO_MIN_LENGTH,
) -> list[RenderEntry]:
    """Turn the displayable sequence into render entries.

    A run of `min_length` or more collapses to one ComboEntry placed at the
    run's last member; shorter runs render as plain messages. Relative order
    of everything else is preserved.
    """
    absorbed: set[int] = set()
    combo_at: dict[int, tuple[int, str]] = {}
    for members, key in find_runs(records, emote_key, min_length):
        absorbed.update(members[:-1])
        combo_at[members[-1]] = (len(members), key)

    entries: list[RenderEntry] = []
    for i, record in enumerate(records):
        if i in absorbed:
            continue
        combo = combo_at.get(i)
        if combo:
            entries.append(ComboEntry(index=i, record=record, count=combo[0], emote_key=combo[1]))
        else:
            entries.append(MessageEntry(index=i, record=record))
    return entries
