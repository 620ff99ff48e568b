"""Tests for the nick directory."""

from omnichat.chat.nicks import NickDirectory


def test_replace_dedupes_and_sorts_case_insensitively():
    nicks = NickDirectory(["bob", "Alice", "albert", "bob", " ", ""])
    assert nicks.nicks() == ["albert", "Alice", "bob"]
    assert len(nicks) == 3


def test_replace_discards_previous_list():
    nicks = NickDirectory(["old"])
    nicks.replace(["new"])
    assert nicks.nicks() == ["new"]
    assert "old" not in nicks


def test_join_keeps_order():
    nicks = NickDirectory(["Alice", "carol"])
    assert nicks.join("Bob") is True
    assert nicks.nicks() == ["Alice", "Bob", "carol"]


def test_join_existing_or_blank_is_noop():
    nicks = NickDirectory(["Alice"])
    assert nicks.join("Alice") is False
    assert nicks.join("  ") is False
    assert nicks.join(None) is False
    assert nicks.nicks() == ["Alice"]


def test_observe_behaves_like_join():
    nicks = NickDirectory()
    assert nicks.observe("Zed") is True
    assert "Zed" in nicks


def test_quit_removes_nick():
    nicks = NickDirectory(["Alice", "bob"])
    assert nicks.quit("bob") is True
    assert nicks.quit("bob") is False
    assert nicks.nicks() == ["Alice"]


def test_nicks_returns_copy():
    nicks = NickDirectory(["Alice"])
    nicks.nicks().append("mallory")
    assert nicks.nicks() == ["Alice"]
