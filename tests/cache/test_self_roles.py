import asyncio

import pytest

from cloak.cache import SelfRoleCache
from cloak.errors import InvalidArgumentError, RoleNotFoundError
from cloak.storage import open_store
from cloak.storage.models import SelfRole

from fakes import FakeGuild, FakeRole


def _setup(guild):
    store = open_store(":memory:")
    return store, SelfRoleCache(store.self_roles, guild.resolver())


def test_unloaded_guild_reads_empty():
    guild = FakeGuild(1, [FakeRole(10)])
    store, cache = _setup(guild)

    assert not cache.is_loaded(1)
    assert cache.is_self_role(1, 10) is False
    assert cache.groups(1) == []
    assert cache.roles(1) == []
    store.close()


def test_add_edit_remove_round_trip():
    red, blue = FakeRole(10, "Red"), FakeRole(11, "Blue")
    guild = FakeGuild(1, [red, blue])

    async def scenario():
        store, cache = _setup(guild)
        await cache.reload(1)

        added = await cache.add(1, 10, "colour")
        assert added.group == "colour"
        await cache.add(1, 11, "   ")
        assert cache.group_of(1, 11) is None
        assert cache.groups(1) == ["colour"]
        assert cache.roles_in_group(1, "colour") == {10}
        assert cache.roles_in_group(1, "Colour") == set()

        edited = await cache.edit(1, 11, "colour")
        assert edited.group == "colour"
        assert cache.roles_in_group(1, "colour") == {10, 11}
        assert await cache.edit(1, 99, "colour") is None

        assert await cache.remove(1, 10) is True
        assert await cache.remove(1, 10) is False
        assert [r.role_id for r in await store.self_roles.query(guild_id=1)] == [11]
        store.close()

    asyncio.run(scenario())


def test_add_unknown_role_raises_without_writing():
    guild = FakeGuild(1, [])

    async def scenario():
        store, cache = _setup(guild)
        with pytest.raises(RoleNotFoundError):
            await cache.add(1, 10)
        assert await store.self_roles.query() == []
        store.close()

    asyncio.run(scenario())


def test_roles_in_group_rejects_blank_group():
    guild = FakeGuild(1, [])
    store, cache = _setup(guild)
    with pytest.raises(InvalidArgumentError):
        cache.roles_in_group(1, "  ")
    with pytest.raises(InvalidArgumentError):
        cache.roles_in_group(1, None)
    store.close()


def test_reload_prunes_rows_for_deleted_roles():
    guild = FakeGuild(1, [FakeRole(10)])

    async def scenario():
        store, cache = _setup(guild)
        await store.self_roles.add(SelfRole(1, 10, "a"))
        await store.self_roles.add(SelfRole(1, 20, "a"))
        await store.self_roles.add(SelfRole(2, 30, "a"))

        assert await cache.reload(1) == 1
        assert cache.is_self_role(1, 10)
        assert not cache.is_self_role(1, 20)
        assert not cache.is_self_role(2, 30)
        assert [r.role_id for r in await store.self_roles.query(guild_id=1)] == [10]
        assert await store.self_roles.exists(guild_id=2, role_id=30)
        store.close()

    asyncio.run(scenario())


def test_add_to_unloaded_guild_waits_for_reload():
    guild = FakeGuild(1, [FakeRole(10)])

    async def scenario():
        store, cache = _setup(guild)
        await cache.add(1, 10, "colour")

        assert not cache.is_loaded(1)
        assert not cache.is_self_role(1, 10)
        assert await store.self_roles.exists(guild_id=1, role_id=10)

        await cache.reload(1)
        assert cache.group_of(1, 10) == "colour"
        store.close()

    asyncio.run(scenario())
