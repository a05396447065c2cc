"""
Repositories (SQL-only)
=======================
- One repository per table, all sharing :class:`TableRepo`'s generic
  add/update/remove/remove_range/query surface.
- Blocking sqlite calls run in a worker thread under the shared store lock.
- Discord ids are unsigned 64-bit; they are stored as the signed INTEGER with
  the same bits (:func:`encode_id` / :func:`decode_id`).
- ``sqlite3.Error`` is re-raised as :class:`~cloak.errors.StoreError` so callers
  can abort before touching their caches.
"""

from __future__ import annotations

import asyncio
import sqlite3
import struct
import uuid
from typing import Any, Callable, ClassVar, Generic, Iterable, Optional, Sequence, TypeVar

from cloak.errors import InvalidArgumentError, StoreError

from .models import InformationEmbedSection, MemberRoles, PersistentRole, SelfRole

R = TypeVar("R")


def pack_role_ids(role_ids: Sequence[int]) -> bytes:
    """Encode role ids as consecutive little-endian unsigned 64-bit integers."""
    return struct.pack(f"<{len(role_ids)}Q", *role_ids)


def unpack_role_ids(blob: bytes | None) -> tuple[int, ...]:
    if not blob:
        return ()
    if len(blob) % 8:
        raise ValueError(f"role id blob has invalid length {len(blob)}")
    return struct.unpack(f"<{len(blob) // 8}Q", blob)


def encode_id(value: int) -> int:
    """Reinterpret an unsigned 64-bit id as the signed value sqlite can bind."""
    try:
        return struct.unpack("<q", struct.pack("<Q", value))[0]
    except struct.error as exc:
        raise InvalidArgumentError(f"{value!r} is not an unsigned 64-bit id") from exc


def decode_id(value: int) -> int:
    return struct.unpack("<Q", struct.pack("<q", value))[0]


class TableRepo(Generic[R]):
    """Async CRUD helpers for one table.

    Subclasses declare ``table``, ``columns`` (in row order), ``key`` (the
    columns identifying a record) and the row <-> record mapping.
    """

    table: ClassVar[str]
    columns: ClassVar[tuple[str, ...]]
    key: ClassVar[tuple[str, ...]]
    # Columns filled in by sqlite on insert (omitted when the record leaves them as None)
    generated: ClassVar[tuple[str, ...]] = ()
    # Columns holding unsigned 64-bit Discord ids
    id_columns: ClassVar[tuple[str, ...]] = ()

    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock):
        self.conn = conn
        self._lock = lock

    # ------------------------------------------------------------------ #
    # Mapping
    # ------------------------------------------------------------------ #

    def to_row(self, record: R) -> dict[str, Any]:
        raise NotImplementedError

    def from_row(self, row: sqlite3.Row) -> R:
        raise NotImplementedError

    def with_generated(self, record: R, rowid: int) -> R:
        """Return ``record`` updated with values sqlite generated on insert."""
        return record

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    async def _call(self, fn: Callable[[], Any]) -> Any:
        async with self._lock:
            try:
                return await asyncio.to_thread(fn)  # blocking sqlite call
            except sqlite3.Error as exc:
                raise StoreError(f"{self.table}: {exc}") from exc

    def _where(self, filters: dict[str, Any]) -> tuple[str, list[Any]]:
        """Build a WHERE clause from caller filters, encoding id columns."""
        encoded = {
            col: encode_id(val) if col in self.id_columns and val is not None else val
            for col, val in filters.items()
        }
        return self._clause(encoded)

    def _clause(self, filters: dict[str, Any]) -> tuple[str, list[Any]]:
        unknown = set(filters) - set(self.columns)
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(sorted(unknown))}")
        if not filters:
            return "", []
        clauses = [f"{col} IS ?" if val is None else f"{col}=?" for col, val in filters.items()]
        return " WHERE " + " AND ".join(clauses), list(filters.values())

    def _key_params(self, record: R) -> tuple[str, list[Any]]:
        row = self.to_row(record)
        return self._clause({col: row[col] for col in self.key})

    # ------------------------------------------------------------------ #
    # CRUD
    # ------------------------------------------------------------------ #

    async def add(self, record: R) -> R:
        """Insert ``record`` and return it with any generated columns filled in."""
        row = self.to_row(record)
        cols = [c for c in self.columns if not (c in self.generated and row[c] is None)]
        ph = ",".join(["?"] * len(cols))
        sql = f"INSERT INTO {self.table} ({', '.join(cols)}) VALUES ({ph})"
        params = [row[c] for c in cols]

        def _run() -> int:
            with self.conn:
                cur = self.conn.execute(sql, params)
            return cur.lastrowid

        rowid = await self._call(_run)
        return self.with_generated(record, rowid)

    async def update(self, record: R) -> bool:
        """Overwrite the non-key columns of ``record``. Returns ``False`` if no row matched."""
        row = self.to_row(record)
        cols = [c for c in self.columns if c not in self.key]
        where, where_params = self._key_params(record)
        sql = f"UPDATE {self.table} SET {', '.join(f'{c}=?' for c in cols)}{where}"
        params = [row[c] for c in cols] + where_params

        def _run() -> bool:
            with self.conn:
                cur = self.conn.execute(sql, params)
            return cur.rowcount > 0

        return await self._call(_run)

    async def remove(self, record: R) -> bool:
        """Delete ``record``. Returns ``False`` if no row matched."""
        where, params = self._key_params(record)
        sql = f"DELETE FROM {self.table}{where}"

        def _run() -> bool:
            with self.conn:
                cur = self.conn.execute(sql, params)
            return cur.rowcount > 0

        return await self._call(_run)

    async def remove_range(self, records: Iterable[R]) -> int:
        """Delete every record in a single transaction, returning the row count."""
        statements = []
        for record in records:
            where, params = self._key_params(record)
            statements.append((f"DELETE FROM {self.table}{where}", params))
        if not statements:
            return 0

        def _run() -> int:
            removed = 0
            with self.conn:
                self.conn.execute("BEGIN")
                for sql, params in statements:
                    removed += self.conn.execute(sql, params).rowcount
            return removed

        return await self._call(_run)

    async def query(
        self,
        predicate: Optional[Callable[[R], bool]] = None,
        **where: Any,
    ) -> list[R]:
        """Return records matching the equality filters in ``where`` and ``predicate``."""
        clause, params = self._where(where)
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}{clause}"

        def _query() -> list[sqlite3.Row]:
            return self.conn.execute(sql, params).fetchall()

        rows = await self._call(_query)
        records = [self.from_row(r) for r in rows]
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    async def exists(self, **where: Any) -> bool:
        clause, params = self._where(where)
        sql = f"SELECT 1 FROM {self.table}{clause} LIMIT 1"

        def _query() -> bool:
            return self.conn.execute(sql, params).fetchone() is not None

        return await self._call(_query)


class SelfRoleRepo(TableRepo[SelfRole]):
    table = "self_role"
    columns = ("guild_id", "role_id", "role_group")
    key = ("guild_id", "role_id")
    id_columns = ("guild_id", "role_id")

    def to_row(self, record: SelfRole) -> dict[str, Any]:
        return {
            "guild_id": encode_id(record.guild_id),
            "role_id": encode_id(record.role_id),
            "role_group": record.group,
        }

    def from_row(self, row: sqlite3.Row) -> SelfRole:
        return SelfRole(
            guild_id=decode_id(row["guild_id"]),
            role_id=decode_id(row["role_id"]),
            group=row["role_group"],
        )


class PersistentRoleRepo(TableRepo[PersistentRole]):
    table = "persistent_role"
    columns = ("guild_id", "role_id")
    key = ("guild_id", "role_id")
    id_columns = ("guild_id", "role_id")

    def to_row(self, record: PersistentRole) -> dict[str, Any]:
        return {"guild_id": encode_id(record.guild_id), "role_id": encode_id(record.role_id)}

    def from_row(self, row: sqlite3.Row) -> PersistentRole:
        return PersistentRole(guild_id=decode_id(row["guild_id"]), role_id=decode_id(row["role_id"]))


class MemberRolesRepo(TableRepo[MemberRoles]):
    table = "member_roles"
    columns = ("id", "guild_id", "user_id", "role_ids")
    key = ("id",)
    generated = ("id",)
    id_columns = ("guild_id", "user_id")

    def to_row(self, record: MemberRoles) -> dict[str, Any]:
        return {
            "id": record.id,
            "guild_id": encode_id(record.guild_id),
            "user_id": encode_id(record.user_id),
            "role_ids": pack_role_ids(record.role_ids),
        }

    def from_row(self, row: sqlite3.Row) -> MemberRoles:
        return MemberRoles(
            id=int(row["id"]),
            guild_id=decode_id(row["guild_id"]),
            user_id=decode_id(row["user_id"]),
            role_ids=unpack_role_ids(row["role_ids"]),
        )

    def with_generated(self, record: MemberRoles, rowid: int) -> MemberRoles:
        if record.id is None:
            record.id = rowid
        return record


class InformationEmbedSectionRepo(TableRepo[InformationEmbedSection]):
    table = "information_embed_section"
    columns = ("id", "guild_id", "title", "body", "section_order")
    key = ("id",)
    id_columns = ("guild_id",)

    def to_row(self, record: InformationEmbedSection) -> dict[str, Any]:
        return {
            "id": record.id.bytes,
            "guild_id": encode_id(record.guild_id),
            "title": record.title,
            "body": record.body or "",
            "section_order": record.order,
        }

    def from_row(self, row: sqlite3.Row) -> InformationEmbedSection:
        return InformationEmbedSection(
            id=uuid.UUID(bytes=bytes(row["id"])),
            guild_id=decode_id(row["guild_id"]),
            title=row["title"],
            body=row["body"] or "",
            order=int(row["section_order"]),
        )


__all__ = [
    "TableRepo",
    "SelfRoleRepo",
    "PersistentRoleRepo",
    "MemberRolesRepo",
    "InformationEmbedSectionRepo",
    "pack_role_ids",
    "unpack_role_ids",
]
