import asyncio
import uuid
from types import SimpleNamespace

import pytest

from cloak.commands.handlers import _shared
from cloak.commands.handlers.role_info import _parse_order, _parse_section_id
from cloak.runtime import build_services
from cloak.storage import open_store

from fakes import FakeGuild, FakeRole


def test_parse_order_falls_back_to_minus_one():
    assert _parse_order(" 3 ") == 3
    assert _parse_order("-2") == -2
    assert _parse_order("first") == -1


def test_parse_section_id():
    value = uuid.uuid4()
    assert _parse_section_id(str(value)) == value
    assert _parse_section_id("not-a-uuid") is None


def test_services_of_requires_initialised_bot():
    with pytest.raises(RuntimeError):
        _shared.services_of(SimpleNamespace(services=None))


def test_autocomplete_filters_self_roles_and_groups():
    guild = FakeGuild(1, [FakeRole(10, "Red"), FakeRole(11, "Blue"), FakeRole(12, "Cat")])

    async def scenario():
        services = build_services(open_store(":memory:"), guild.resolver())
        await services.reload_guild(1)
        await services.self_roles.add(1, 10, "colour")
        await services.self_roles.add(1, 11, "colour")
        await services.self_roles.add(1, 12, "pets")
        await services.info_embed.get_intro_section(1)
        await services.info_embed.add_section(1, "Colours", "Pick one")

        interaction = SimpleNamespace(guild=guild, client=SimpleNamespace(services=services))
        roles = await _shared.self_role_autocomplete(interaction, "e")
        groups = await _shared.group_autocomplete(interaction, "")
        sections = await _shared.section_autocomplete(interaction, "col")
        no_guild = await _shared.group_autocomplete(SimpleNamespace(guild=None), "")
        services.store.close()
        return roles, groups, sections, no_guild

    roles, groups, sections, no_guild = asyncio.run(scenario())
    assert [(c.name, c.value) for c in roles] == [("Red", "10"), ("Blue", "11")]
    assert [c.value for c in groups] == ["colour", "pets"]
    assert [c.name for c in sections] == ["Colours"]
    assert no_guild == []
