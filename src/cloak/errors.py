"""
Exception taxonomy shared by the caches, coordinator and command layer.

Duplicate adds and removals of absent entries are not errors; they surface as
``False``/``None`` return values so commands can render a neutral message.
"""

from __future__ import annotations


class CloakError(Exception):
    """Base class for all bot errors."""


class NotFoundError(CloakError, LookupError):
    """A role, section or text input does not resolve."""


class RoleNotFoundError(NotFoundError):
    """No live role matches the given id or text."""


class SectionNotFoundError(NotFoundError):
    """No information embed section matches the given id."""


class InvalidArgumentError(CloakError, ValueError):
    """An argument is structurally invalid (e.g. an empty group name)."""


class StoreError(CloakError):
    """A durable store read or write failed. Caches are left untouched."""


__all__ = [
    "CloakError",
    "NotFoundError",
    "RoleNotFoundError",
    "SectionNotFoundError",
    "InvalidArgumentError",
    "StoreError",
]
