"""
Records persisted by the store.

Identity follows the table keys: ``(guild_id, role_id)`` for self-roles and
persistent roles, the surrogate ``id`` for member role snapshots (a member may
own several), and ``id`` for information embed sections.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

SECTION_TITLE_MAX = 256
SECTION_BODY_MAX = 1024


@dataclass
class SelfRole:
    guild_id: int
    role_id: int
    group: str | None = None


@dataclass(frozen=True)
class PersistentRole:
    guild_id: int
    role_id: int


@dataclass
class MemberRoles:
    """Persistent roles a member held at the moment they left a guild."""

    guild_id: int
    user_id: int
    role_ids: tuple[int, ...]
    id: int | None = None


@dataclass
class InformationEmbedSection:
    guild_id: int
    title: str
    body: str = ""
    order: int = 0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def create(
        cls, guild_id: int, title: str, body: str, order: int = 0
    ) -> "InformationEmbedSection":
        """Build a new section, truncating title and body to their limits."""

        return cls(
            guild_id=guild_id,
            title=title[:SECTION_TITLE_MAX],
            body=body[:SECTION_BODY_MAX],
            order=order,
        )


__all__ = [
    "SelfRole",
    "PersistentRole",
    "MemberRoles",
    "InformationEmbedSection",
    "SECTION_TITLE_MAX",
    "SECTION_BODY_MAX",
]
