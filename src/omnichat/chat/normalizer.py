"""Convert per-platform chat payloads into FeedRecords.

Connectors hand over already-decoded dictionaries. Anything that is not a
mapping, or that has neither an author nor a body, is dropped here and never
reaches the buffer.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..core.models import FeedRecord, RecordSource

logger = logging.getLogger(__name__)

EVENT_KINDS = ("giftsub", "massgift", "donation")
SYSTEM_KINDS = ("mute", "ban", "unmute")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _epoch_ms(value: Any, fallback: int) -> int:
    """Accept a finite number of epoch milliseconds, else the fallback."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)) and value == value and abs(value) != float("inf"):
        return int(value)
    return fallback


def _iso_ms(value: Any, fallback: int) -> int:
    """Parse an ISO-8601 timestamp (Kick createdAt)."""
    if not isinstance(value, str) or not value:
        return fallback
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return fallback
    if dt.tzinfo is None:
        # No offset given; read as UTC, never as the host's local time
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _usec_ms(value: Any, fallback: int) -> int:
    """Parse YouTube's timestampUsec string."""
    try:
        return int(value) // 1000
    except (TypeError, ValueError, OverflowError):
        return fallback


def _build(
    source: RecordSource,
    payload: Mapping[str, Any],
    author: str,
    body: str,
    timestamp_ms: int,
    source_key: str = "",
    kind: str = "",
    is_history: bool = False,
) -> FeedRecord | None:
    author = author.strip()
    if not author and not body.strip():
        logger.debug(f"Dropping empty {source.value} record: {payload!r:.200}")
        return None
    return FeedRecord(
        source=source,
        timestamp_ms=timestamp_ms,
        author=author,
        body=body,
        source_key=source_key,
        kind=kind,
        is_history=is_history,
        raw=payload,
    )


def normalize_primary(msg: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Primary chat MSG payload: {nick, data, timestamp}."""
    if not isinstance(msg, Mapping):
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    return _build(
        RecordSource.PRIMARY,
        msg,
        _text(msg.get("nick")),
        _text(msg.get("data")),
        _epoch_ms(msg.get("timestamp"), fallback),
    )


def normalize_broadcast(payload: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Primary chat BROADCAST payload, optionally wrapped as {broadcast: {...}}."""
    if not isinstance(payload, Mapping):
        return None
    b = payload.get("broadcast", payload)
    if not isinstance(b, Mapping):
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    return _build(
        RecordSource.BROADCAST,
        b,
        _text(b.get("nick")),
        _text(b.get("data")),
        _epoch_ms(b.get("timestamp"), fallback),
    )


def normalize_kick(msg: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Kick chat message: {sender: {username, slug}, content, createdAt, slug}."""
    if not isinstance(msg, Mapping):
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    sender = msg.get("sender")
    if not isinstance(sender, Mapping):
        sender = {}
    author = _text(sender.get("username")) or _text(sender.get("slug"))
    return _build(
        RecordSource.KICK,
        msg,
        author,
        _text(msg.get("content")),
        _iso_ms(msg.get("createdAt"), fallback),
        source_key=_text(msg.get("slug")) or "kick",
        is_history=bool(msg.get("isHistory")),
    )


def normalize_youtube(msg: Any, received_ms: int | None = None) -> FeedRecord | None:
    """YouTube live chat message: {authorName, message, timestampUsec, videoId}."""
    if not isinstance(msg, Mapping):
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    body = _text(msg.get("message"))
    runs = msg.get("runs")
    if not body and isinstance(runs, list):
        # Text runs only; emoji runs carry an image, not text
        body = "".join(_text(r.get("text")) for r in runs if isinstance(r, Mapping))
    return _build(
        RecordSource.YOUTUBE,
        msg,
        _text(msg.get("authorName")),
        body,
        _usec_ms(msg.get("timestampUsec"), fallback),
        source_key=_text(msg.get("videoId")) or "unknown",
    )


def normalize_twitch(msg: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Twitch IRC message: {displayName, text, tmiSentTs, channel}."""
    if not isinstance(msg, Mapping):
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    return _build(
        RecordSource.TWITCH,
        msg,
        _text(msg.get("displayName")),
        _text(msg.get("text")),
        _epoch_ms(msg.get("tmiSentTs"), fallback),
        source_key=_text(msg.get("channel")) or "unknown",
    )


def normalize_event(payload: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Gift sub / mass gift / donation: {type, nick|from, data|message}."""
    if not isinstance(payload, Mapping):
        return None
    kind = _text(payload.get("type")).lower()
    if kind not in EVENT_KINDS:
        logger.debug(f"Ignoring unknown event type {kind!r}")
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    author = _text(payload.get("nick")) or _text(payload.get("from"))
    body = _text(payload.get("data")) or _text(payload.get("message"))
    return _build(
        RecordSource.EVENT,
        payload,
        author,
        body,
        _epoch_ms(payload.get("timestamp"), fallback),
        kind=kind,
    )


def normalize_system(payload: Any, received_ms: int | None = None) -> FeedRecord | None:
    """Mute / ban / unmute notice: {type, data (target nick), nick (moderator)}.

    System records carry no author; the body is the human readable notice.
    """
    if not isinstance(payload, Mapping):
        return None
    kind = _text(payload.get("type")).lower()
    if kind not in SYSTEM_KINDS:
        logger.debug(f"Ignoring unknown system notice {kind!r}")
        return None
    target = _text(payload.get("data")).strip()
    if not target:
        return None
    fallback = received_ms if received_ms is not None else now_ms()
    if kind == "mute":
        body = f"{target} was muted"
    elif kind == "ban":
        body = f"{target} was banned"
    else:
        body = f"{target} was unbanned"
    return _build(
        RecordSource.SYSTEM,
        payload,
        "",
        body,
        _epoch_ms(payload.get("timestamp"), fallback),
        kind=kind,
    )


_NORMALIZERS: dict[RecordSource, Callable[[Any, int | None], FeedRecord | None]] = {
    RecordSource.PRIMARY: normalize_primary,
    RecordSource.BROADCAST: normalize_broadcast,
    RecordSource.KICK: normalize_kick,
    RecordSource.YOUTUBE: normalize_youtube,
    RecordSource.TWITCH: normalize_twitch,
    RecordSource.EVENT: normalize_event,
    RecordSource.SYSTEM: normalize_system,
}


def normalize(
    source: RecordSource, payload: Any, received_ms: int | None = None
) -> FeedRecord | None:
    """Normalize one payload from `source`; None when it is malformed."""
    return _NORMALIZERS[source](payload, received_ms)


def normalize_primary_history(history: Any, received_ms: int | None = None) -> list[FeedRecord]:
    """Normalize a primary chat HISTORY snapshot.

    Newer servers send `items` (MSG and BROADCAST interleaved in timeline
    order); older ones only `messages`.
    """
    if not isinstance(history, Mapping):
        return []
    fallback = received_ms if received_ms is not None else now_ms()
    records: list[FeedRecord] = []
    items = history.get("items")
    if isinstance(items, list) and items:
        for item in items:
            if not isinstance(item, Mapping):
                continue
            if item.get("type") == "MSG":
                record = normalize_primary(item.get("message"), fallback)
            elif item.get("type") == "BROADCAST":
                record = normalize_broadcast(item.get("broadcast"), fallback)
            else:
                continue
            if record is not None:
                records.append(record)
        return records

    messages = history.get("messages")
    if isinstance(messages, list):
        for msg in messages:
            record = normalize_primary(msg, fallback)
            if record is not None:
                records.append(record)
    return records


def normalize_history(
    source: RecordSource, payloads: Any, received_ms: int | None = None
) -> list[FeedRecord]:
    """Normalize a backfill batch for one source, dropping malformed entries."""
    if source == RecordSource.PRIMARY and isinstance(payloads, Mapping):
        return normalize_primary_history(payloads, received_ms)
    if not isinstance(payloads, list):
        return []
    records = []
    for payload in payloads:
        record = normalize(source, payload, received_ms)
        if record is not None:
            records.append(record)
    return records
