"""Wiring of the store, caches and coordinator shared by hooks and commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .cache import (
    InformationEmbedCache,
    MemberRoleCache,
    PersistentRoleCache,
    RoleResolver,
    SelfRoleCache,
)
from .coordinator import RoleCoordinator
from .storage import Store

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: Store
    self_roles: SelfRoleCache
    persistent_roles: PersistentRoleCache
    member_roles: MemberRoleCache
    info_embed: InformationEmbedCache
    coordinator: RoleCoordinator

    async def reload_guild(self, guild_id: int) -> None:
        """
        Reload every cache for ``guild_id``.

        Persistent roles go first since snapshot lookups filter on them. A
        failing step is logged and does not stop the remaining ones.
        """
        steps = (
            ("persistent roles", self.persistent_roles.reload),
            ("self roles", self.self_roles.reload),
            ("member role snapshots", self.member_roles.reload),
            ("information embed", self.info_embed.reload),
        )
        for name, reload in steps:
            try:
                await reload(guild_id)
            except Exception:
                logger.exception("Failed to reload %s for guild %s", name, guild_id)


def build_services(store: Store, resolve_role: RoleResolver) -> Services:
    persistent_roles = PersistentRoleCache(store.persistent_roles, resolve_role)
    self_roles = SelfRoleCache(store.self_roles, resolve_role)
    member_roles = MemberRoleCache(store.member_roles, persistent_roles, resolve_role)
    return Services(
        store=store,
        self_roles=self_roles,
        persistent_roles=persistent_roles,
        member_roles=member_roles,
        info_embed=InformationEmbedCache(store.sections),
        coordinator=RoleCoordinator(self_roles, persistent_roles, member_roles),
    )


__all__ = ["Services", "build_services"]
