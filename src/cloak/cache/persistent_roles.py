"""Guild-scoped set of role ids that are restored when a member rejoins."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from cloak.storage.models import PersistentRole
from cloak.storage.repositories import PersistentRoleRepo

from .resolver import RoleResolver

logger = logging.getLogger(__name__)


class PersistentRoleCache:
    """Mirror of the ``persistent_role`` table, one id set per guild."""

    def __init__(self, repo: PersistentRoleRepo, resolve_role: RoleResolver) -> None:
        self._repo = repo
        self._resolve_role = resolve_role
        self._guilds: dict[int, set[int]] = {}
        self._reload_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def is_loaded(self, guild_id: int) -> bool:
        return guild_id in self._guilds

    def is_persistent_role(self, guild_id: int, role_id: int) -> bool:
        return role_id in self._guilds.get(guild_id, ())

    def list(self, guild_id: int) -> list[int]:
        return sorted(self._guilds.get(guild_id, ()))

    async def add(self, guild_id: int, role_id: int) -> bool:
        """Mark ``role_id`` persistent. Returns ``False`` if it already was."""

        if self.is_persistent_role(guild_id, role_id):
            return False

        record = PersistentRole(guild_id=guild_id, role_id=role_id)
        # The cache may be cold or partial; the store has the final say.
        if await self._repo.exists(guild_id=guild_id, role_id=role_id):
            if self.is_loaded(guild_id):
                self._guilds[guild_id].add(role_id)
            return False

        await self._repo.add(record)
        if self.is_loaded(guild_id):
            self._guilds[guild_id].add(role_id)
        logger.info("Marked role %s persistent in guild %s", role_id, guild_id)
        return True

    async def remove(self, guild_id: int, role_id: int) -> bool:
        """Un-mark ``role_id``. Returns ``False`` if it was not persistent."""

        if not self.is_persistent_role(guild_id, role_id):
            return False

        rows = await self._repo.query(guild_id=guild_id, role_id=role_id)
        if not rows:
            # Store already lost the row; drop the stale cache entry to match.
            self._guilds[guild_id].discard(role_id)
            return False

        await self._repo.remove(rows[0])
        self._guilds[guild_id].discard(role_id)
        logger.info("Un-marked persistent role %s in guild %s", role_id, guild_id)
        return True

    async def prune_stale(self, guild_id: int) -> int:
        """Delete marks whose role no longer exists in the guild."""

        stale = [
            row
            for row in await self._repo.query(guild_id=guild_id)
            if self._resolve_role(guild_id, row.role_id) is None
        ]
        if not stale:
            return 0

        removed = await self._repo.remove_range(stale)
        cached = self._guilds.get(guild_id)
        if cached is not None:
            cached.difference_update(row.role_id for row in stale)
        logger.info(
            "Removed %d persistent role(s) in guild %s that mapped to invalid roles",
            removed,
            guild_id,
        )
        return removed

    async def reload(self, guild_id: int) -> int:
        """Prune stale marks, then replace the guild's set from the store."""

        async with self._reload_locks[guild_id]:
            await self.prune_stale(guild_id)
            fresh = {
                row.role_id
                for row in await self._repo.query(guild_id=guild_id)
                if self._resolve_role(guild_id, row.role_id) is not None
            }
            self._guilds[guild_id] = fresh

        logger.info("Loaded %d persistent role(s) for guild %s", len(fresh), guild_id)
        return len(fresh)


__all__ = ["PersistentRoleCache"]
