import asyncio
import sqlite3
import uuid

import pytest

from cloak.errors import InvalidArgumentError, StoreError
from cloak.storage import db, open_store
from cloak.storage.models import InformationEmbedSection, MemberRoles, PersistentRole, SelfRole
from cloak.storage.repositories import decode_id, encode_id, pack_role_ids, unpack_role_ids


def test_role_id_blob_is_little_endian_u64():
    blob = pack_role_ids([1, 2**63 + 5])
    assert blob[:8] == (1).to_bytes(8, "little")
    assert len(blob) == 16
    assert unpack_role_ids(blob) == (1, 2**63 + 5)
    assert unpack_role_ids(b"") == ()


def test_unpack_rejects_truncated_blob():
    with pytest.raises(ValueError):
        unpack_role_ids(b"\x01\x02\x03")


def test_ids_map_onto_signed_sqlite_integers():
    assert encode_id(5) == 5
    assert encode_id(2**63) == -(2**63)
    assert encode_id(2**64 - 1) == -1
    assert decode_id(-1) == 2**64 - 1
    assert decode_id(encode_id(2**63 + 7)) == 2**63 + 7


def test_out_of_range_ids_are_rejected():
    with pytest.raises(InvalidArgumentError):
        encode_id(2**64)
    with pytest.raises(InvalidArgumentError):
        encode_id(-1)


def test_ids_above_signed_range_are_stored_and_queried():
    big_guild = 2**64 - 1
    big_role = 2**64 - 2

    async def scenario():
        store = open_store(":memory:")
        await store.self_roles.add(SelfRole(big_guild, big_role, "colour"))
        await store.persistent_roles.add(PersistentRole(big_guild, big_role))
        snapshot = await store.member_roles.add(MemberRoles(big_guild, 2**63, (big_role,)))

        assert await store.self_roles.query(guild_id=big_guild) == [
            SelfRole(big_guild, big_role, "colour")
        ]
        assert await store.persistent_roles.exists(guild_id=big_guild, role_id=big_role)
        rows = await store.member_roles.query(guild_id=big_guild, user_id=2**63)
        assert [(r.id, r.user_id, r.role_ids) for r in rows] == [(snapshot.id, 2**63, (big_role,))]

        assert await store.persistent_roles.remove(PersistentRole(big_guild, big_role)) is True
        assert await store.persistent_roles.query(guild_id=big_guild) == []
        store.close()

    asyncio.run(scenario())


def test_self_role_crud():
    async def scenario():
        store = open_store(":memory:")
        repo = store.self_roles
        await repo.add(SelfRole(1, 10, "colour"))
        await repo.add(SelfRole(1, 11))
        await repo.add(SelfRole(2, 10, "colour"))

        assert {r.role_id for r in await repo.query(guild_id=1)} == {10, 11}
        assert [r.role_id for r in await repo.query(guild_id=1, role_group=None)] == [11]

        assert await repo.update(SelfRole(1, 11, "pets")) is True
        assert await repo.update(SelfRole(1, 99, "pets")) is False
        assert (await repo.query(guild_id=1, role_id=11))[0].group == "pets"

        assert await repo.remove(SelfRole(1, 10)) is True
        assert await repo.remove(SelfRole(1, 10)) is False
        assert await repo.exists(guild_id=2, role_id=10)
        store.close()

    asyncio.run(scenario())


def test_duplicate_insert_raises_store_error():
    async def scenario():
        store = open_store(":memory:")
        await store.persistent_roles.add(PersistentRole(1, 5))
        with pytest.raises(StoreError) as excinfo:
            await store.persistent_roles.add(PersistentRole(1, 5))
        assert isinstance(excinfo.value.__cause__, sqlite3.IntegrityError)
        store.close()

    asyncio.run(scenario())


def test_query_rejects_unknown_columns():
    async def scenario():
        store = open_store(":memory:")
        with pytest.raises(ValueError):
            await store.persistent_roles.query(nope=1)
        store.close()

    asyncio.run(scenario())


def test_member_roles_get_generated_ids_and_allow_many_per_member():
    async def scenario():
        store = open_store(":memory:")
        repo = store.member_roles
        first = await repo.add(MemberRoles(1, 7, (10, 11)))
        second = await repo.add(MemberRoles(1, 7, (12,)))
        assert first.id is not None and second.id is not None
        assert first.id != second.id

        rows = await repo.query(guild_id=1, user_id=7)
        assert sorted(r.role_ids for r in rows) == [(10, 11), (12,)]

        assert await repo.remove_range(rows) == 2
        assert await repo.query(guild_id=1) == []
        assert await repo.remove_range([]) == 0
        store.close()

    asyncio.run(scenario())


def test_section_round_trips_uuid_and_order():
    async def scenario():
        store = open_store(":memory:")
        section = InformationEmbedSection(guild_id=3, title="Colours", body="Pick one", order=2)
        await store.sections.add(section)

        (loaded,) = await store.sections.query(guild_id=3)
        assert isinstance(loaded.id, uuid.UUID)
        assert loaded == section

        section.order = 5
        assert await store.sections.update(section)
        (loaded,) = await store.sections.query(guild_id=3)
        assert loaded.order == 5
        store.close()

    asyncio.run(scenario())


def test_migrate_stamps_schema_version_and_is_repeatable():
    conn = db.connect(":memory:")
    assert db.migrate(conn) == db.SCHEMA_VERSION
    assert db.migrate(conn) == db.SCHEMA_VERSION
    assert db.schema_version(conn) == db.SCHEMA_VERSION

    conn.execute(f"PRAGMA user_version={db.SCHEMA_VERSION + 1};")
    with pytest.raises(StoreError):
        db.migrate(conn)
    conn.close()
