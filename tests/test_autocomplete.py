"""Tests for emote/mention suggestions and Tab cycling."""

from omnichat.chat.autocomplete import (
    MAX_SUGGESTIONS,
    Completer,
    suggest,
    word_at_cursor,
)

EMOTES = ["KEKW", "PEPE", "PepeLaugh"]
NICKS = ["Alice", "albert", "bob"]


def _completer(emotes=EMOTES, nicks=NICKS):
    return Completer(lambda: emotes, lambda: nicks)


# --- suggest ---


def test_suggest_mention_scenario():
    assert suggest("@al", ["PEPE"], NICKS) == ["Alice", "albert"]


def test_suggest_emotes_prefix_case_insensitive():
    assert suggest("pe", EMOTES, NICKS) == ["PEPE", "PepeLaugh"]


def test_suggest_is_prefix_only():
    assert suggest("augh", EMOTES, NICKS) == []


def test_suggest_empty_fragment():
    assert suggest("", EMOTES, NICKS) == []


def test_suggest_bare_trigger_lists_nicks():
    assert suggest("@", EMOTES, NICKS) == NICKS


def test_suggest_sorts_unordered_candidates():
    assert suggest("p", {"pog", "PEPE", "Pause"}, []) == ["Pause", "PEPE", "pog"]


def test_suggest_limit():
    emotes = [f"Emote{i:02d}" for i in range(40)]
    result = suggest("emo", emotes, [])
    assert len(result) == MAX_SUGGESTIONS
    assert result == emotes[:MAX_SUGGESTIONS]
    assert len(suggest("emo", emotes, [], limit=5)) == 5


def test_suggest_custom_trigger():
    assert suggest("#bo", EMOTES, NICKS, trigger="#") == ["bob"]


def test_word_at_cursor():
    assert word_at_cursor("hello wor", 9) == (6, 9, "wor")
    assert word_at_cursor("line\nPE", 7) == (5, 7, "PE")
    assert word_at_cursor("hello ", 6) == (6, 6, "")
    assert word_at_cursor("abc", 99) == (0, 3, "abc")


# --- Completer ---


def test_update_tracks_fragment():
    comp = _completer()
    assert comp.update("say PE", 6) == ["PEPE", "PepeLaugh"]
    assert comp.is_open
    assert comp.update("say ", 4) == []
    assert not comp.is_open


def test_tab_cycles_mentions_forward():
    comp = _completer()
    first = comp.advance("hi @al", 6)
    assert first.text == "hi @Alice "
    assert first.cursor == 10
    assert first.word == "@Alice"

    second = comp.advance(first.text, first.cursor)
    assert second.text == "hi @albert "
    assert second.cursor == 11

    third = comp.advance(second.text, second.cursor)
    assert third.text == "hi @Alice "


def test_shift_tab_cycles_backward():
    comp = _completer()
    first = comp.advance("PE", 2, backward=True)
    assert first.text == "PepeLaugh "
    second = comp.advance(first.text, first.cursor, backward=True)
    assert second.text == "PEPE "
    third = comp.advance(second.text, second.cursor, backward=True)
    assert third.text == "PepeLaugh "


def test_tab_keeps_text_after_cursor():
    comp = _completer()
    result = comp.advance("PE tail", 2)
    assert result.text == "PEPE  tail"
    assert result.cursor == 5
    assert (result.start, result.end) == (0, 2)


def test_suggestions_stay_open_after_insert():
    comp = _completer()
    result = comp.advance("KE", 2)
    assert result.text == "KEKW "
    assert comp.fragment == ""
    assert comp.suggestions == ["KEKW"]
    # A single suggestion cycles onto itself
    again = comp.advance(result.text, result.cursor)
    assert again.text == "KEKW "


def test_cursor_move_resets_cycle():
    comp = _completer()
    result = comp.advance("PE", 2)
    comp.cursor_moved(result.text, 0)
    assert comp.last_inserted is None
    assert comp.index == -1


def test_typing_resets_cycle():
    comp = _completer()
    result = comp.advance("PE", 2)
    text = result.text + "P"
    suggestions = comp.text_edited(text, len(text))
    assert comp.last_inserted is None
    assert suggestions == ["PEPE", "PepeLaugh"]


def test_stale_insertion_is_not_replaced():
    comp = _completer()
    result = comp.advance("PE", 2)
    # Same cursor position but the inserted word was overwritten elsewhere
    edited = "XXXX "
    assert comp.advance(edited, result.cursor) is None
    assert comp.last_inserted is None


def test_advance_without_suggestions():
    comp = _completer()
    assert comp.advance("zzz", 3) is None
    assert comp.advance("", 0) is None


def test_cancel_clears_state():
    comp = _completer()
    comp.advance("@b", 2)
    comp.cancel()
    assert comp.index == -1
    assert comp.last_inserted is None


def test_move_highlight_wraps():
    comp = _completer()
    comp.update("PE", 2)
    assert comp.move_highlight(1) == 0
    assert comp.move_highlight(1) == 1
    assert comp.move_highlight(1) == 0
    assert comp.move_highlight(-1) == 1


def test_move_highlight_up_from_nothing_selects_last():
    comp = _completer()
    comp.update("PE", 2)
    assert comp.move_highlight(-1) == 1


def test_move_highlight_closed_dropdown():
    comp = _completer()
    assert comp.move_highlight(1) == -1


def test_completer_reads_live_directories():
    nicks = ["carol"]
    comp = _completer(nicks=nicks)
    assert comp.update("@c", 2) == ["carol"]
    nicks.append("chris")
    assert comp.update("@c", 2) == ["carol", "chris"]
