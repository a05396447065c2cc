"""
Snapshots of the persistent roles members held when they left a guild.

A member who leaves several times before a join is processed owns several
snapshots; all of them are honoured (as a de-duplicated union) on the next
join, and exactly those are deleted afterwards.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Iterable

import discord

from cloak.storage.models import MemberRoles
from cloak.storage.repositories import MemberRolesRepo

from .persistent_roles import PersistentRoleCache
from .resolver import RoleResolver

logger = logging.getLogger(__name__)

GrantFn = Callable[[discord.Role], Awaitable[object]]


class MemberRoleCache:
    """Per-guild list of :class:`MemberRoles` snapshots mirrored from the store."""

    def __init__(
        self,
        repo: MemberRolesRepo,
        persistent_roles: PersistentRoleCache,
        resolve_role: RoleResolver,
    ) -> None:
        self._repo = repo
        self._persistent_roles = persistent_roles
        self._resolve_role = resolve_role
        self._guilds: dict[int, list[MemberRoles]] = {}
        self._reload_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def is_loaded(self, guild_id: int) -> bool:
        return guild_id in self._guilds

    def snapshots(self, guild_id: int, user_id: int) -> list[MemberRoles]:
        return [s for s in self._guilds.get(guild_id, ()) if s.user_id == user_id]

    def pending_roles(self, guild_id: int, user_id: int) -> list[discord.Role]:
        """
        Return the roles to restore for a member, in first-seen order.

        Ids are de-duplicated across snapshots; ids that no longer resolve or
        are no longer persistent are dropped.
        """
        return self._roles_of(guild_id, self.snapshots(guild_id, user_id))

    def _roles_of(self, guild_id: int, snapshots: list[MemberRoles]) -> list[discord.Role]:
        seen: set[int] = set()
        roles: list[discord.Role] = []
        for snapshot in snapshots:
            for role_id in snapshot.role_ids:
                if role_id in seen:
                    continue
                seen.add(role_id)
                if not self._persistent_roles.is_persistent_role(guild_id, role_id):
                    continue
                role = self._resolve_role(guild_id, role_id)
                if role is not None:
                    roles.append(role)
        return roles

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    async def record_departure(
        self, guild_id: int, user_id: int, held_role_ids: Iterable[int]
    ) -> int:
        """
        Snapshot the persistent subset of ``held_role_ids``.

        Nothing is written when the member held no persistent role.
        Returns the number of role ids recorded.
        """
        role_ids: list[int] = []
        for role_id in held_role_ids:
            if role_id in role_ids:
                continue
            if self._persistent_roles.is_persistent_role(guild_id, role_id):
                role_ids.append(role_id)

        if not role_ids:
            return 0

        # Serialized with reload of the same guild
        async with self._reload_locks[guild_id]:
            snapshot = await self._repo.add(
                MemberRoles(guild_id=guild_id, user_id=user_id, role_ids=tuple(role_ids))
            )
            # An unloaded guild picks the row up on its next reload
            if self.is_loaded(guild_id):
                self._guilds[guild_id].append(snapshot)
        return len(role_ids)

    async def discard(self, guild_id: int, user_id: int) -> int:
        """Delete every snapshot of a member from the store, then the cache."""

        rows = await self._repo.query(guild_id=guild_id, user_id=user_id)
        return await self._remove_snapshots(guild_id, rows)

    async def _remove_snapshots(self, guild_id: int, snapshots: list[MemberRoles]) -> int:
        if not snapshots:
            return 0

        removed = await self._repo.remove_range(snapshots)
        ids = {s.id for s in snapshots}
        cached = self._guilds.get(guild_id)
        if cached is not None:
            self._guilds[guild_id] = [s for s in cached if s.id not in ids]
        return removed

    async def restore_on_join(self, guild_id: int, user_id: int, grant: GrantFn) -> int:
        """
        Grant a rejoining member their snapshotted persistent roles.

        Each role is granted at most once, concurrently. A failed grant is
        logged and not retried. Afterwards only the snapshots read here are
        deleted; one recorded while the grants were in flight survives for the
        next join. Returns the number of roles actually granted.
        """
        if not self.is_loaded(guild_id):
            logger.warning(
                "Skipping persistent role restore for user %s: guild %s not loaded",
                user_id,
                guild_id,
            )
            return 0

        consumed = self.snapshots(guild_id, user_id)
        roles = self._roles_of(guild_id, consumed)
        granted = 0
        if roles:
            results = await asyncio.gather(
                *(grant(role) for role in roles), return_exceptions=True
            )
            for role, result in zip(roles, results):
                if isinstance(result, BaseException):
                    logger.error(
                        "Could not restore role %s for user %s in guild %s: %s",
                        role.id,
                        user_id,
                        guild_id,
                        result,
                    )
                else:
                    granted += 1

        await self._remove_snapshots(guild_id, consumed)
        return granted

    # ------------------------------------------------------------------ #
    # RELOAD
    # ------------------------------------------------------------------ #

    async def reload(self, guild_id: int) -> int:
        """Replace the guild's snapshots with every row the store holds for it."""

        async with self._reload_locks[guild_id]:
            rows = await self._repo.query(guild_id=guild_id)
            self._guilds[guild_id] = rows

        logger.info("Loaded %d member role snapshot(s) for guild %s", len(rows), guild_id)
        return len(rows)


__all__ = ["MemberRoleCache", "GrantFn"]
