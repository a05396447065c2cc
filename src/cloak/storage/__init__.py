"""
Durable store
=============

Opens the sqlite database, applies the schema, and exposes one repository per
table::

    from cloak.storage import open_store

    store = open_store()
    await store.self_roles.add(SelfRole(guild_id, role_id, "colour"))
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

from . import db as _db
from .models import InformationEmbedSection, MemberRoles, PersistentRole, SelfRole
from .repositories import (
    InformationEmbedSectionRepo,
    MemberRolesRepo,
    PersistentRoleRepo,
    SelfRoleRepo,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Store",
    "open_store",
    "SelfRole",
    "PersistentRole",
    "MemberRoles",
    "InformationEmbedSection",
]


@dataclass
class Store:
    """Shared connection plus the per-table repositories bound to it."""

    conn: sqlite3.Connection
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self.self_roles = SelfRoleRepo(self.conn, self.lock)
        self.persistent_roles = PersistentRoleRepo(self.conn, self.lock)
        self.member_roles = MemberRolesRepo(self.conn, self.lock)
        self.sections = InformationEmbedSectionRepo(self.conn, self.lock)

    def close(self) -> None:
        try:
            _db.wal_checkpoint_truncate(self.conn)
        except sqlite3.Error:
            logger.warning("WAL checkpoint failed during shutdown", exc_info=True)
        self.conn.close()


def open_store(path: Optional[str] = None) -> Store:
    """Connect to ``path`` (configured DB by default) and migrate the schema."""

    conn = _db.connect(path)
    version = _db.migrate(conn)
    logger.info("Opened store at %s (schema v%d)", path or _db.db_path(), version)
    return Store(conn)
