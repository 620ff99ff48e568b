"""Tests for emote combo detection."""

from omnichat.chat.combos import (
    ComboEntry,
    MessageEntry,
    build_render_list,
    find_runs,
    single_emote_key,
)
from omnichat.core.models import RecordSource

EMOTES = {"PEPE", "KEKW", "Kappa"}


def _key():
    return single_emote_key(EMOTES)


def _shape(entries):
    out = []
    for e in entries:
        if isinstance(e, ComboEntry):
            out.append(("combo", e.emote_key, e.count))
        else:
            out.append(("msg", e.record.body))
    return out


# --- single_emote_key ---


def test_single_emote_key_exact_match(make_record):
    assert _key()(make_record("  PEPE  ")) == "PEPE"


def test_single_emote_key_rejects_extra_text(make_record):
    key = _key()
    assert key(make_record("PEPE PEPE")) is None
    assert key(make_record("PEPE!")) is None
    assert key(make_record("pepe")) is None
    assert key(make_record("")) is None


def test_single_emote_key_kick_token(make_record):
    record = make_record("[emote:37226:KEKW]", source=RecordSource.KICK, source_key="s")
    assert _key()(record) == "kick:37226:KEKW"


def test_single_emote_key_kick_plain_name_is_not_eligible(make_record):
    record = make_record("KEKW", source=RecordSource.KICK, source_key="s")
    assert _key()(record) is None


# --- build_render_list ---


def test_runs_split_by_other_message(make_record):
    records = [make_record(b) for b in ["PEPE", "PEPE", "PEPE", "hello", "PEPE", "PEPE"]]
    entries = build_render_list(records, _key())
    assert _shape(entries) == [
        ("combo", "PEPE", 3),
        ("msg", "hello"),
        ("combo", "PEPE", 2),
    ]


def test_combo_positioned_at_last_member(make_record):
    records = [make_record(b) for b in ["PEPE", "PEPE", "PEPE", "hello"]]
    entries = build_render_list(records, _key())
    assert isinstance(entries[0], ComboEntry)
    assert entries[0].index == 2
    assert entries[0].record is records[2]


def test_interleaved_partition_does_not_break_run(make_record):
    kick = RecordSource.KICK
    records = [
        make_record("PEPE"),
        make_record("hi", source=kick, source_key="s"),
        make_record("PEPE"),
        make_record("hey", source=kick, source_key="s"),
        make_record("PEPE"),
    ]
    entries = build_render_list(records, _key())
    assert _shape(entries) == [
        ("msg", "hi"),
        ("msg", "hey"),
        ("combo", "PEPE", 3),
    ]


def test_same_emote_on_different_partitions_never_combines(make_record):
    token = "[emote:1:KEKW]"
    records = [
        make_record(token, source=RecordSource.KICK, source_key="a"),
        make_record(token, source=RecordSource.KICK, source_key="b"),
    ]
    entries = build_render_list(records, _key())
    assert all(isinstance(e, MessageEntry) for e in entries)


def test_different_emotes_do_not_combine(make_record):
    records = [make_record("PEPE"), make_record("KEKW"), make_record("KEKW")]
    assert _shape(build_render_list(records, _key())) == [
        ("msg", "PEPE"),
        ("combo", "KEKW", 2),
    ]


def test_single_emote_renders_as_message(make_record):
    records = [make_record("PEPE"), make_record("text")]
    assert _shape(build_render_list(records, _key())) == [("msg", "PEPE"), ("msg", "text")]


def test_non_chat_sources_never_combo(make_record):
    records = [
        make_record("PEPE", source=RecordSource.BROADCAST),
        make_record("PEPE", source=RecordSource.BROADCAST),
    ]
    assert find_runs(records, _key()) == []


def test_custom_min_length(make_record):
    records = [make_record("PEPE"), make_record("PEPE")]
    assert _shape(build_render_list(records, _key(), min_length=3)) == [
        ("msg", "PEPE"),
        ("msg", "PEPE"),
    ]


def test_kick_combo_with_count(make_record):
    token = "[emote:37226:KEKW]"
    records = [make_record(token, source=RecordSource.KICK, source_key="s") for _ in range(4)]
    entries = build_render_list(records, _key())
    assert len(entries) == 1
    assert entries[0].count == 4
    assert entries[0].source == RecordSource.KICK


def test_empty_input():
    assert build_render_list([], _key()) == []
