"""
Slash command cogs for Cloak.

Each module in ``commands/handlers`` declares its cog with::

    from cloak.commands import register_cog

    @register_cog
    class SelfRoleAdmin(commands.Cog): ...

:func:`setup` imports the handler modules (once), then adds every registered
cog to the bot. Cogs reach the caches and coordinator through ``bot.services``.
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import Type

from discord.ext import commands as commands_ext

logger = logging.getLogger(__name__)

_HANDLERS_DIR = Path(__file__).resolve().parent / "handlers"
_registry: dict[str, Type[commands_ext.Cog]] = {}
_discovered = False


def register_cog(cog_cls: Type[commands_ext.Cog]) -> Type[commands_ext.Cog]:
    """Class decorator adding ``cog_cls`` to the registry, keyed by class name."""

    if not issubclass(cog_cls, commands_ext.Cog):
        raise TypeError(f"{cog_cls!r} is not a discord.ext.commands.Cog")
    if _registry.get(cog_cls.__name__, cog_cls) is not cog_cls:
        raise ValueError(f"Duplicate cog name {cog_cls.__name__!r}")

    _registry[cog_cls.__name__] = cog_cls
    return cog_cls


def discover() -> list[Type[commands_ext.Cog]]:
    """Import every public handler module and return the registered cogs."""

    global _discovered
    if not _discovered:
        for module in iter_modules([str(_HANDLERS_DIR)]):
            # _-prefixed modules hold helpers shared by the cogs
            if not module.name.startswith("_"):
                import_module(f"{__name__}.handlers.{module.name}")
        _discovered = True
    return list(_registry.values())


async def setup(bot: commands_ext.Bot) -> None:
    """Add every discovered cog to ``bot``; call from ``Bot.setup_hook``."""

    added = 0
    for cog_cls in discover():
        if bot.get_cog(cog_cls.__name__) is None:
            await bot.add_cog(cog_cls(bot))
            added += 1

    if not _registry:
        logger.warning("No command cogs found in %s", _HANDLERS_DIR)
        return
    logger.info("Registered %d command cog(s)", added)


__all__ = ["discover", "register_cog", "setup"]
