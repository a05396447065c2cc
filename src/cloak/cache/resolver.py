"""
Live role lookup used by the caches.

Caches only ever hold raw guild/role ids; whether a role still exists is asked
of the gateway through a :data:`RoleResolver` so no cache keeps a reference to
a ``discord.Guild``.
"""

from __future__ import annotations

from typing import Callable, Optional

import discord

RoleResolver = Callable[[int, int], Optional[discord.Role]]


def client_resolver(client: discord.Client) -> RoleResolver:
    """Build a resolver backed by ``client``'s guild cache."""

    def resolve(guild_id: int, role_id: int) -> Optional[discord.Role]:
        guild = client.get_guild(guild_id)
        if guild is None:
            return None
        return guild.get_role(role_id)

    return resolve


__all__ = ["RoleResolver", "client_resolver"]
