"""Split message bodies into text, emote, link and mention segments.

Recognition order: links claim their span first, then inline emote tokens,
then emote names, then nicks, each rule only looking at text the earlier
rules left unclaimed. Lines starting with '>' are greentext; that is a flag
on every segment of the line rather than a segment of its own.
"""

import functools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Collection, Iterable

from ..core.models import FeedRecord

# http(s) URLs and in-app deep links such as #kick/<slug>
LINK_PATTERN = re.compile(r"https?://[^\s]+|#(?:kick|twitch|youtube)/[^\s]+", re.IGNORECASE)
INLINE_EMOTE_PATTERN = re.compile(r"\[emote:(\d+):([^\]]+)\]")


class SegmentKind(str, Enum):
    TEXT = "text"
    EMOTE = "emote"
    LINK = "link"
    MENTION = "mention"


@dataclass(frozen=True)
class Segment:
    """A run of message text with its annotation."""

    kind: SegmentKind
    value: str  # Text exactly as it appears in the body
    ref: str = ""  # Emote name, canonical nick, or link target
    emote_id: str = ""  # Platform emote id for inline emote tokens
    quoted: bool = False  # Part of a greentext line


@functools.lru_cache(maxsize=32)
def _word_pattern(names: frozenset[str], ignore_case: bool) -> re.Pattern | None:
    """Whole-word alternation of `names`, longest first.

    Compiled patterns hold no scan position, so sharing them between calls
    is safe; every scan goes through a fresh finditer().
    """
    usable = sorted((n for n in names if n), key=lambda n: (-len(n), n))
    if not usable:
        return None
    alternation = "|".join(re.escape(n) for n in usable)
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)", flags)


def _claim(
    segments: list[Segment],
    pattern: re.Pattern | None,
    build: Callable[[re.Match], Segment],
) -> list[Segment]:
    """Carve `pattern` matches out of the still-unclaimed text segments."""
    if pattern is None:
        return segments
    out: list[Segment] = []
    for seg in segments:
        if seg.kind != SegmentKind.TEXT:
            out.append(seg)
            continue
        last = 0
        for match in pattern.finditer(seg.value):
            if match.start() > last:
                out.append(Segment(SegmentKind.TEXT, seg.value[last : match.start()]))
            out.append(build(match))
            last = match.end()
        if last < len(seg.value):
            out.append(Segment(SegmentKind.TEXT, seg.value[last:]))
    return out


def _merge_text(segments: Iterable[Segment]) -> list[Segment]:
    merged: list[Segment] = []
    for seg in segments:
        if not seg.value:
            continue
        prev = merged[-1] if merged else None
        if (
            prev is not None
            and prev.kind == SegmentKind.TEXT
            and seg.kind == SegmentKind.TEXT
            and prev.quoted == seg.quoted
        ):
            merged[-1] = Segment(SegmentKind.TEXT, prev.value + seg.value, quoted=prev.quoted)
        else:
            merged.append(seg)
    return merged


def annotate(
    body: str,
    emote_names: Collection[str] = frozenset(),
    mention_names: Collection[str] = frozenset(),
) -> list[Segment]:
    """Annotate a message body.

    Emote names match case-sensitively, nicks case-insensitively, both only
    as whole words. A word that is both an emote and a nick is an emote.
    Pure: the same inputs always give equal output.
    """
    if not body:
        return []

    emote_re = _word_pattern(frozenset(emote_names), False)
    nick_re = _word_pattern(frozenset(mention_names), True)
    canonical_nicks: dict[str, str] = {}
    for nick in sorted(mention_names):
        canonical_nicks.setdefault(nick.lower(), nick)

    def link(m: re.Match) -> Segment:
        return Segment(SegmentKind.LINK, m.group(0), ref=m.group(0))

    def inline_emote(m: re.Match) -> Segment:
        return Segment(SegmentKind.EMOTE, m.group(0), ref=m.group(2), emote_id=m.group(1))

    def emote(m: re.Match) -> Segment:
        return Segment(SegmentKind.EMOTE, m.group(0), ref=m.group(0))

    def mention(m: re.Match) -> Segment:
        text = m.group(0)
        return Segment(SegmentKind.MENTION, text, ref=canonical_nicks.get(text.lower(), text))

    result: list[Segment] = []
    lines = body.split("\n")
    for n, line in enumerate(lines):
        quoted = line.strip().startswith(">")
        segments = [Segment(SegmentKind.TEXT, line)]
        segments = _claim(segments, LINK_PATTERN, link)
        segments = _claim(segments, INLINE_EMOTE_PATTERN, inline_emote)
        segments = _claim(segments, emote_re, emote)
        segments = _claim(segments, nick_re, mention)
        if quoted:
            segments = [
                Segment(s.kind, s.value, ref=s.ref, emote_id=s.emote_id, quoted=True)
                for s in segments
            ]
        result.extend(segments)
        if n < len(lines) - 1:
            result.append(Segment(SegmentKind.TEXT, "\n"))
    return _merge_text(result)


def plain_text(segments: Iterable[Segment]) -> str:
    """Reassemble the original body from its segments."""
    return "".join(s.value for s in segments)


def highlight_text(record: FeedRecord) -> str:
    """Text used for highlight-term matching.

    Inline emote tokens are left out so a term never matches an emote's name.
    """
    return INLINE_EMOTE_PATTERN.sub("", record.body)


def matching_terms(record: FeedRecord, terms: Iterable[str]) -> list[str]:
    """Highlight terms (case-insensitive substrings) found in a chat record."""
    if not record.is_chat:
        return []
    content = highlight_text(record).lower()
    return [t for t in terms if t.strip() and t.strip().lower() in content]
