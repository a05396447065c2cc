"""
Role assignment coordinator.

Orchestrates cross-cache work triggered by members:

* self-role grants (with group exclusivity) and removals issued by commands;
* persistent-role snapshots on leave and restoration on rejoin.

Grant requests move through :class:`GrantState`::

    REQUESTED -> VALIDATED -> GROUP_RESOLVED -> APPLIED
         \\            \\
          +-> REJECTED  +-> REJECTED

No lock is taken around the grant/revoke fan-out. Two overlapping requests by
the same member for roles of one group may leave them holding zero or two of
those roles.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Optional, Union

import discord

from .cache.member_roles import MemberRoleCache
from .cache.persistent_roles import PersistentRoleCache
from .cache.self_roles import SelfRoleCache
from .resolution import resolve_role_input

logger = logging.getLogger(__name__)

RoleInput = Union[discord.Role, str]


class GrantState(enum.Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    GROUP_RESOLVED = "group_resolved"
    APPLIED = "applied"
    REJECTED = "rejected"


class RejectReason(str, enum.Enum):
    NOT_FOUND = "not_found"
    NOT_SELF_ROLE = "not_self_role"


@dataclass
class RoleFailure:
    """One grant or revoke that raised while the rest of a fan-out went ahead."""

    action: str
    role: discord.Role
    error: BaseException


@dataclass
class RoleRequest:
    """Outcome of a self-role grant or removal request."""

    state: GrantState = GrantState.REQUESTED
    role: Optional[discord.Role] = None
    reason: Optional[RejectReason] = None
    revoked: list[discord.Role] = field(default_factory=list)
    failures: list[RoleFailure] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.state is GrantState.APPLIED

    @property
    def granted(self) -> bool:
        """``True`` when the request applied and its main grant/revoke did not fail."""

        if not self.applied or self.role is None:
            return False
        return not any(f.role.id == self.role.id for f in self.failures)

    def reject(self, reason: RejectReason) -> "RoleRequest":
        self.state = GrantState.REJECTED
        self.reason = reason
        return self


class RoleCoordinator:
    """Applies self-roles and persistent roles to members across the caches."""

    def __init__(
        self,
        self_roles: SelfRoleCache,
        persistent_roles: PersistentRoleCache,
        member_roles: MemberRoleCache,
    ) -> None:
        self.self_roles = self_roles
        self.persistent_roles = persistent_roles
        self.member_roles = member_roles

    # ------------------------------------------------------------------ #
    # Self-roles
    # ------------------------------------------------------------------ #

    @staticmethod
    def resolve_role_input(guild: discord.Guild, text: str) -> Optional[discord.Role]:
        return resolve_role_input(guild, text)

    def _validate(self, member: discord.Member, role_input: RoleInput) -> RoleRequest:
        request = RoleRequest()

        if isinstance(role_input, str):
            role = self.resolve_role_input(member.guild, role_input)
        else:
            role = role_input
        if role is None:
            return request.reject(RejectReason.NOT_FOUND)

        request.role = role
        request.state = GrantState.VALIDATED

        if not self.self_roles.is_self_role(member.guild.id, role.id):
            return request.reject(RejectReason.NOT_SELF_ROLE)

        request.state = GrantState.GROUP_RESOLVED
        return request

    async def give_self_role(self, member: discord.Member, role_input: RoleInput) -> RoleRequest:
        """
        Grant a self-role, revoking the member's other roles of the same group.

        The grant and every revoke run concurrently. A failure in one of them is
        logged and collected on the result without cancelling or rolling back
        the others.
        """
        request = self._validate(member, role_input)
        if request.state is GrantState.REJECTED:
            return request

        role = request.role
        guild_id = member.guild.id
        group = self.self_roles.group_of(guild_id, role.id)

        siblings: list[discord.Role] = []
        if group is not None:
            group_ids = self.self_roles.roles_in_group(guild_id, group)
            siblings = [
                held for held in member.roles
                if held.id in group_ids and held.id != role.id
            ]

        actions: list[tuple[str, discord.Role, Awaitable[object]]] = [
            ("grant", role, member.add_roles(role, reason="Self-role granted")),
        ]
        actions.extend(
            ("revoke", sibling, member.remove_roles(sibling, reason=f"Self-role group {group!r}"))
            for sibling in siblings
        )

        failures = await self._fan_out(member, actions)
        request.failures = failures
        failed_ids = {f.role.id for f in failures if f.action == "revoke"}
        request.revoked = [s for s in siblings if s.id not in failed_ids]
        request.state = GrantState.APPLIED
        return request

    async def remove_self_role(self, member: discord.Member, role_input: RoleInput) -> RoleRequest:
        request = self._validate(member, role_input)
        if request.state is GrantState.REJECTED:
            return request

        request.failures = await self._fan_out(
            member,
            [("revoke", request.role, member.remove_roles(request.role, reason="Self-role removed"))],
        )
        request.state = GrantState.APPLIED
        return request

    @staticmethod
    async def _fan_out(
        member: discord.Member,
        actions: list[tuple[str, discord.Role, Awaitable[object]]],
    ) -> list[RoleFailure]:
        results = await asyncio.gather(*(aw for _, _, aw in actions), return_exceptions=True)
        failures: list[RoleFailure] = []
        for (action, role, _), result in zip(actions, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Failed to %s role %s for member %s in guild %s: %s",
                    action,
                    role.id,
                    member.id,
                    member.guild.id,
                    result,
                )
                failures.append(RoleFailure(action, role, result))
        return failures

    # ------------------------------------------------------------------ #
    # Persistent roles
    # ------------------------------------------------------------------ #

    async def set_persistent(self, guild_id: int, role_id: int, persistent: bool) -> bool:
        """Mark or un-mark a persistent role. ``False`` means nothing changed."""

        if persistent:
            return await self.persistent_roles.add(guild_id, role_id)
        return await self.persistent_roles.remove(guild_id, role_id)

    async def save_persistent_roles(self, member: discord.Member) -> int:
        """Snapshot the departing member's persistent roles."""

        return await self.member_roles.record_departure(
            member.guild.id, member.id, [role.id for role in member.roles]
        )

    async def apply_persistent_roles(self, member: discord.Member) -> int:
        """Restore the rejoining member's snapshotted roles; returns how many were granted."""

        async def grant(role: discord.Role) -> None:
            await member.add_roles(role, reason="Persistent role restored")

        return await self.member_roles.restore_on_join(member.guild.id, member.id, grant)


__all__ = [
    "GrantState",
    "RejectReason",
    "RoleCoordinator",
    "RoleFailure",
    "RoleRequest",
]
