import pytest

from cloak.resolution import parse_role_id, resolve_role_input

from fakes import FakeGuild, FakeRole


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123", 123),
        (" 123 ", 123),
        ("<@&456>", 456),
        ("<@456>", None),
        ("Red", None),
        ("", None),
    ],
)
def test_parse_role_id(text, expected):
    assert parse_role_id(text) == expected


def test_resolve_by_id_mention_and_name():
    red = FakeRole(10, "Red")
    guild = FakeGuild(1, [red, FakeRole(11, "Blue")])

    assert resolve_role_input(guild, "10") is red
    assert resolve_role_input(guild, "<@&10>") is red
    assert resolve_role_input(guild, "rEd") is red
    assert resolve_role_input(guild, "  red  ") is red


def test_unresolved_input_returns_none():
    guild = FakeGuild(1, [FakeRole(10, "Red"), FakeRole(11, "99")])

    assert resolve_role_input(guild, "") is None
    assert resolve_role_input(guild, "   ") is None
    assert resolve_role_input(guild, "Re") is None
    # Numeric input is an id lookup only, never a name match
    assert resolve_role_input(guild, "99") is None
