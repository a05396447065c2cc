import asyncio

from cloak.cache import PersistentRoleCache
from cloak.storage import open_store
from cloak.storage.models import PersistentRole

from fakes import FakeGuild, FakeRole


def test_add_and_remove_report_changes():
    guild = FakeGuild(1, [FakeRole(5), FakeRole(6)])

    async def scenario():
        store = open_store(":memory:")
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())
        await cache.reload(1)

        assert await cache.add(1, 6) is True
        assert await cache.add(1, 5) is True
        assert await cache.add(1, 5) is False
        assert cache.list(1) == [5, 6]

        assert await cache.remove(1, 5) is True
        assert await cache.remove(1, 5) is False
        assert cache.list(1) == [6]
        assert [r.role_id for r in await store.persistent_roles.query(guild_id=1)] == [6]
        store.close()

    asyncio.run(scenario())


def test_add_when_store_already_has_row_syncs_cache():
    guild = FakeGuild(1, [FakeRole(5)])

    async def scenario():
        store = open_store(":memory:")
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())
        await cache.reload(1)
        await store.persistent_roles.add(PersistentRole(1, 5))

        assert await cache.add(1, 5) is False
        assert cache.is_persistent_role(1, 5)
        store.close()

    asyncio.run(scenario())


def test_remove_drops_cache_entry_missing_from_store():
    guild = FakeGuild(1, [FakeRole(5)])

    async def scenario():
        store = open_store(":memory:")
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())
        await cache.reload(1)
        await cache.add(1, 5)
        await store.persistent_roles.remove(PersistentRole(1, 5))

        assert await cache.remove(1, 5) is False
        assert not cache.is_persistent_role(1, 5)
        store.close()

    asyncio.run(scenario())


def test_reload_prunes_unresolvable_roles():
    guild = FakeGuild(1, [FakeRole(5)])

    async def scenario():
        store = open_store(":memory:")
        await store.persistent_roles.add(PersistentRole(1, 5))
        await store.persistent_roles.add(PersistentRole(1, 9))
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())

        assert await cache.reload(1) == 1
        assert cache.list(1) == [5]
        assert not await store.persistent_roles.exists(guild_id=1, role_id=9)
        store.close()

    asyncio.run(scenario())


def test_add_to_unloaded_guild_waits_for_reload():
    guild = FakeGuild(1, [FakeRole(5)])

    async def scenario():
        store = open_store(":memory:")
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())

        assert await cache.add(1, 5) is True
        assert not cache.is_loaded(1)
        assert cache.list(1) == []

        await cache.reload(1)
        assert cache.list(1) == [5]
        store.close()

    asyncio.run(scenario())


def test_ids_above_signed_range_survive_reload():
    big_guild = 2**64 - 1
    guild = FakeGuild(big_guild, [FakeRole(2**64 - 2)])

    async def scenario():
        store = open_store(":memory:")
        cache = PersistentRoleCache(store.persistent_roles, guild.resolver())
        assert await cache.reload(big_guild) == 0
        assert await cache.add(big_guild, 2**64 - 2) is True
        assert cache.list(big_guild) == [2**64 - 2]

        fresh = PersistentRoleCache(store.persistent_roles, guild.resolver())
        assert await fresh.reload(big_guild) == 1
        assert fresh.is_persistent_role(big_guild, 2**64 - 2)
        store.close()

    asyncio.run(scenario())
