import asyncio
from types import SimpleNamespace

from cloak.event_hooks import guild_hook, member_hook

from fakes import FakeGuild, FakeMember, FakeRole


def _services(**coordinator):
    return SimpleNamespace(coordinator=SimpleNamespace(**coordinator))


def test_join_restores_through_coordinator():
    restored = []

    async def apply_persistent_roles(member):
        restored.append(member.id)
        return 2

    member = FakeMember(42, FakeGuild(1))
    asyncio.run(member_hook.handle_join(_services(apply_persistent_roles=apply_persistent_roles), member))
    assert restored == [42]


def test_leave_failure_is_logged_not_raised(caplog):
    async def save_persistent_roles(member):
        raise RuntimeError("store down")

    member = FakeMember(42, FakeGuild(1))
    with caplog.at_level("ERROR"):
        asyncio.run(member_hook.handle_leave(_services(save_persistent_roles=save_persistent_roles), member))
    assert "Could not save persistent roles" in caplog.text


def test_guild_hook_reloads_guild():
    reloaded = []

    async def reload_guild(guild_id):
        reloaded.append(guild_id)

    services = SimpleNamespace(reload_guild=reload_guild)
    asyncio.run(guild_hook.handle(services, FakeGuild(7, [FakeRole(1)])))
    assert reloaded == [7]
