"""Turn free-form role text from a command into a live role."""

from __future__ import annotations

import re
from typing import Optional

import discord

_ROLE_MENTION_RE = re.compile(r"^<@&(?P<id>\d+)>$")


def parse_role_id(text: str) -> Optional[int]:
    """Return the role id in ``text`` if it is a bare id or a role mention."""

    value = text.strip()
    if value.isdigit():
        return int(value)
    match = _ROLE_MENTION_RE.match(value)
    if match:
        return int(match.group("id"))
    return None


def resolve_role_input(guild: discord.Guild, text: str) -> Optional[discord.Role]:
    """
    Resolve ``text`` to a role of ``guild``.

    Tried in order: numeric id, role mention (``<@&id>``), then a
    case-insensitive exact name match. Returns ``None`` when nothing matches.
    """
    if not text or not text.strip():
        return None

    role_id = parse_role_id(text)
    if role_id is not None:
        return guild.get_role(role_id)

    wanted = text.strip().casefold()
    for role in guild.roles:
        if role.name.casefold() == wanted:
            return role
    return None


__all__ = ["parse_role_id", "resolve_role_input"]
