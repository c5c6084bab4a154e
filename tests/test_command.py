"""Tests for command parsing."""

import random

import pytest

from chanwatch.command import (
    Chuck,
    Cookie,
    Dice,
    JoinChannel,
    LeaveChannel,
    ListMessages,
    Quote,
    Roll,
    SetDebug,
    SetNick,
    SetTopic,
    format_roll,
    parse_command,
)


class TestParsePublicCommands:

    def test_chuck(self):
        assert parse_command(".chuck") == Chuck()

    def test_cookie(self):
        assert parse_command(".cookie") == Cookie()

    def test_quote_without_category(self):
        assert parse_command(".quote") == Quote(None)

    def test_quote_with_category(self):
        assert parse_command(".quote inspire") == Quote("inspire")

    def test_roll_default_die(self):
        assert parse_command(".roll") == Roll((Dice(1, 6),))

    def test_roll_multiple_dice(self):
        assert parse_command(".roll 2d6 d20") == Roll((Dice(2, 6), Dice(1, 20)))

    def test_roll_drops_unparseable_tokens(self):
        assert parse_command(".roll 3d4 banana") == Roll((Dice(3, 4),))

    def test_roll_only_garbage_falls_back_to_d6(self):
        assert parse_command(".roll banana 0d6") == Roll((Dice(1, 6),))

    def test_public_commands_are_not_admin_only(self):
        for text in (".chuck", ".cookie", ".quote", ".roll"):
            assert parse_command(text).admin_only is False


class TestParseAdminCommands:

    def test_nick(self):
        assert parse_command(".nick NewWatcher") == SetNick("NewWatcher")

    def test_debug_true(self):
        assert parse_command(".debug true") == SetDebug(True)
        assert parse_command(".debug TRUE") == SetDebug(True)

    def test_debug_anything_else_is_false(self):
        assert parse_command(".debug false") == SetDebug(False)
        assert parse_command(".debug yes") == SetDebug(False)

    def test_join_and_leave(self):
        assert parse_command(".join #new") == JoinChannel("#new")
        assert parse_command(".leave #old") == LeaveChannel("#old")

    def test_topic_keeps_full_text(self):
        assert parse_command(".topic Danger zone:  be careful") == SetTopic("Danger zone:  be careful")

    def test_list_messages_aliases(self):
        for text in (".messages", ".listmessages", ".list-messages"):
            assert parse_command(text) == ListMessages()

    def test_admin_commands_are_admin_only(self):
        for text in (".nick x", ".debug true", ".join #a", ".leave #a", ".topic t", ".messages"):
            assert parse_command(text).admin_only is True


class TestParseRejects:

    @pytest.mark.parametrize("text", [
        "",
        ".",
        "chuck",
        ".frobnicate",
        ".chuck extra",
        ".nick",
        ".nick a b",
        ".join",
        ".join #a #b",
        ".debug",
        ".topic",
        ".quote a b",
        ".messages now",
    ])
    def test_not_a_command(self, text):
        assert parse_command(text) is None

    def test_custom_prefix(self):
        assert parse_command("!chuck", prefix="!") == Chuck()
        assert parse_command(".chuck", prefix="!") is None

    def test_keyword_case_insensitive(self):
        assert parse_command(".CHUCK") == Chuck()


class TestDice:

    def test_parse(self):
        assert Dice.parse("2d6") == Dice(2, 6)
        assert Dice.parse("d20") == Dice(1, 20)
        assert Dice.parse("1D8") == Dice(1, 8)

    @pytest.mark.parametrize("token", ["", "d", "2d", "6", "d1", "0d6", "101d6", "1d1001", "-1d6", "2x6"])
    def test_parse_invalid(self, token):
        assert Dice.parse(token) is None

    def test_roll_in_range(self):
        rng = random.Random(7)
        results = Dice(50, 6).roll(rng)
        assert len(results) == 50
        assert all(1 <= n <= 6 for n in results)

    def test_str(self):
        assert str(Dice(3, 8)) == "3d8"


class TestFormatRoll:

    def test_single(self):
        assert format_roll("bob", [4]) == "bob rolled 4 (4)"

    def test_many(self):
        assert format_roll("bob", [3, 5, 1]) == "bob rolled 3, 5, 1 (9)"
