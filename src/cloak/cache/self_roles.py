"""
Guild-scoped cache of self-role definitions.

Each guild maps ``role_id -> (SelfRole, discord.Role)``. Every mutation writes
to the store first and only touches the cache once the write succeeded. A guild
that has not been reloaded yet reads as empty; writes to it only reach the
store and show up on its first reload.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import NamedTuple

import discord

from cloak.errors import InvalidArgumentError, RoleNotFoundError
from cloak.storage.models import SelfRole
from cloak.storage.repositories import SelfRoleRepo

from .resolver import RoleResolver

logger = logging.getLogger(__name__)


def normalize_group(group: str | None) -> str | None:
    """Collapse blank group labels to ``None``. Non-blank labels are kept verbatim."""

    if group is None or not group.strip():
        return None
    return group


class _Entry(NamedTuple):
    definition: SelfRole
    role: discord.Role


class SelfRoleCache:
    """Self-role definitions and their live role handles, per guild."""

    def __init__(self, repo: SelfRoleRepo, resolve_role: RoleResolver) -> None:
        self._repo = repo
        self._resolve_role = resolve_role
        self._guilds: dict[int, dict[int, _Entry]] = {}
        self._reload_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def is_loaded(self, guild_id: int) -> bool:
        return guild_id in self._guilds

    def is_self_role(self, guild_id: int, role_id: int) -> bool:
        return role_id in self._guilds.get(guild_id, {})

    def get(self, guild_id: int, role_id: int) -> SelfRole | None:
        entry = self._guilds.get(guild_id, {}).get(role_id)
        return entry.definition if entry else None

    def group_of(self, guild_id: int, role_id: int) -> str | None:
        definition = self.get(guild_id, role_id)
        return definition.group if definition else None

    def roles_in_group(self, guild_id: int, group: str | None) -> set[int]:
        """Return the ids of every self-role in ``group`` (case-sensitive)."""

        if group is None or not group.strip():
            raise InvalidArgumentError("Group cannot be empty.")
        return {
            role_id
            for role_id, entry in self._guilds.get(guild_id, {}).items()
            if entry.definition.group == group
        }

    def groups(self, guild_id: int) -> list[str]:
        """Return distinct non-null group labels, sorted."""

        labels = {
            entry.definition.group
            for entry in self._guilds.get(guild_id, {}).values()
            if entry.definition.group is not None
        }
        return sorted(labels)

    def roles(self, guild_id: int) -> list[discord.Role]:
        """Return the live role handle of every self-role in the guild."""

        return [entry.role for entry in self._guilds.get(guild_id, {}).values()]

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    async def add(self, guild_id: int, role_id: int, group: str | None = None) -> SelfRole:
        """
        Register ``role_id`` as a self-role.

        Duplicate detection is the caller's job (check :meth:`is_self_role`).

        :raises RoleNotFoundError: if the role does not exist in the guild.
        :raises StoreError: if the write fails; the cache is left unchanged.
        """
        role = self._resolve_role(guild_id, role_id)
        if role is None:
            raise RoleNotFoundError(f"Role {role_id} does not exist in guild {guild_id}")

        definition = await self._repo.add(
            SelfRole(guild_id=guild_id, role_id=role_id, group=normalize_group(group))
        )
        if self.is_loaded(guild_id):
            self._guilds[guild_id][role_id] = _Entry(definition, role)
        logger.info(
            "Added self role %s in guild %s to group %s",
            role_id,
            guild_id,
            definition.group or "<none>",
        )
        return definition

    async def edit(self, guild_id: int, role_id: int, group: str | None = None) -> SelfRole | None:
        """Reassign the group of an existing self-role, or return ``None`` if it isn't one."""

        entry = self._guilds.get(guild_id, {}).get(role_id)
        if entry is None:
            return None

        updated = SelfRole(guild_id=guild_id, role_id=role_id, group=normalize_group(group))
        await self._repo.update(updated)
        self._guilds[guild_id][role_id] = _Entry(updated, entry.role)
        logger.info(
            "Edited self role %s in guild %s with new group %s",
            role_id,
            guild_id,
            updated.group or "<none>",
        )
        return updated

    async def remove(self, guild_id: int, role_id: int) -> bool:
        """Delete a self-role. Returns ``False`` (no-op) when it isn't one."""

        entry = self._guilds.get(guild_id, {}).get(role_id)
        if entry is None:
            return False

        await self._repo.remove(entry.definition)
        self._guilds[guild_id].pop(role_id, None)
        logger.info("Removed self role %s in guild %s", role_id, guild_id)
        return True

    # ------------------------------------------------------------------ #
    # RELOAD
    # ------------------------------------------------------------------ #

    async def reload(self, guild_id: int) -> int:
        """
        Replace the guild's entries with the store's rows.

        Rows whose role no longer resolves are pruned from the store and never
        cached. Returns the number of cached self-roles.
        """
        async with self._reload_locks[guild_id]:
            fresh: dict[int, _Entry] = {}
            stale: list[SelfRole] = []
            for definition in await self._repo.query(guild_id=guild_id):
                role = self._resolve_role(guild_id, definition.role_id)
                if role is None:
                    stale.append(definition)
                else:
                    fresh[definition.role_id] = _Entry(definition, role)

            self._guilds[guild_id] = fresh

            if stale:
                removed = await self._repo.remove_range(stale)
                logger.info(
                    "Pruned %d self role(s) in guild %s that mapped to missing roles",
                    removed,
                    guild_id,
                )

        logger.info("Loaded %d self role(s) for guild %s", len(fresh), guild_id)
        return len(fresh)


__all__ = ["SelfRoleCache", "normalize_group"]
