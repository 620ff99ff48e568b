"""Tests for the event log replay entry point."""

import json

from omnichat.main import main, replay


def _line(event, source, payload):
    return json.dumps({"event": event, "source": source, "payload": payload})


def test_replay_applies_events(session):
    lines = [
        _line("message", "primary", {"nick": "Alice", "data": "hi", "timestamp": 1}),
        _line("history", "twitch", [{"displayName": "T", "text": "old", "tmiSentTs": 0, "channel": "c"}]),
        _line("privmsg", "primary", {"privmsg": {"nick": "bob"}}),
        "",
    ]
    assert replay(session, lines) == 3
    assert sorted(r.body for r in session.view()) == ["hi", "old"]
    assert session.unread.total_unread() == 1


def test_replay_skips_bad_lines(session, caplog):
    lines = [
        "{broken",
        _line("message", "myspace", {}),
        _line("wave", "primary", {}),
        _line("message", "primary", {"nick": "A", "data": "ok"}),
    ]
    assert replay(session, lines) == 1
    assert "Skipping line 1" in caplog.text
    assert "unknown event 'wave'" in caplog.text


def test_main_prints_feed(qapp, tmp_path, capsys, monkeypatch):
    monkeypatch.setattr("omnichat.chat.whisper_store.get_data_dir", lambda: tmp_path)
    log = tmp_path / "events.jsonl"
    log.write_text(
        "\n".join(
            [
                _line("message", "primary", {"nick": "Alice", "data": "hello", "timestamp": 1}),
                _line("message", "system", {"type": "mute", "data": "troll"}),
            ]
        ),
        encoding="utf-8",
    )
    assert main([str(log)]) == 0
    out = capsys.readouterr().out
    assert "[primary] Alice: hello" in out
    assert "[system] troll was muted" in out


def test_main_usage_and_missing_file(qapp, tmp_path, monkeypatch):
    monkeypatch.setattr("omnichat.chat.whisper_store.get_data_dir", lambda: tmp_path)
    assert main([]) == 1
    assert main([str(tmp_path / "missing.jsonl")]) == 1
