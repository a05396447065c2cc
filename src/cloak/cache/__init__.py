"""
Guild-scoped role-state caches.

Modules
=======

``resolver``
    The :data:`~cloak.cache.resolver.RoleResolver` accessor the caches use to
    ask whether a role id still exists in a guild.
``self_roles``
    :class:`~cloak.cache.self_roles.SelfRoleCache`, self-role definitions and
    their mutually exclusive groups.
``persistent_roles``
    :class:`~cloak.cache.persistent_roles.PersistentRoleCache`, the roles that
    are reinstated when a member rejoins.
``member_roles``
    :class:`~cloak.cache.member_roles.MemberRoleCache`, departure snapshots of
    members' persistent roles, consumed on rejoin.
``info_embed``
    :class:`~cloak.cache.info_embed.InformationEmbedCache`, the ordered
    sections of each guild's information embed.

Every cache is reloaded wholesale per guild when the guild becomes available
and writes to the store before mutating itself.
"""

from .info_embed import InformationEmbedCache
from .member_roles import MemberRoleCache
from .persistent_roles import PersistentRoleCache
from .resolver import RoleResolver, client_resolver
from .self_roles import SelfRoleCache

__all__ = [
    "InformationEmbedCache",
    "MemberRoleCache",
    "PersistentRoleCache",
    "RoleResolver",
    "SelfRoleCache",
    "client_resolver",
]
