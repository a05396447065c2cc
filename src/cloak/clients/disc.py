"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord.ext import commands as discord_commands

from cloak import commands as cloak_commands
from cloak.cache import client_resolver
from cloak.config import core
from cloak.event_hooks import guild_hook, member_hook
from cloak.runtime import Services, build_services
from cloak.storage import open_store

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.members = True


class CloakBot(discord_commands.Bot):
    """Role management bot: self-roles, persistent roles and the info embed."""

    def __init__(self) -> None:
        super().__init__(command_prefix=discord_commands.when_mentioned, intents=intents)
        self.services: Optional[Services] = None

    async def setup_hook(self) -> None:
        """Open the store, wire the caches, and register slash commands."""

        self.services = build_services(open_store(), client_resolver(self))
        await cloak_commands.setup(self)

        if not core.SYNC_COMMANDS:
            return
        try:
            synced = await self.tree.sync()
            logger.info("Synced %d application command(s)", len(synced))
        except Exception:
            logger.exception("Failed to sync application commands")

    async def close(self) -> None:
        await super().close()
        if self.services is not None:
            self.services.store.close()
            self.services = None


bot = CloakBot()


@bot.event
async def on_ready() -> None:
    logger.info(f"Logged in as {bot.user} (ID: {bot.user.id})")


@bot.event
async def on_guild_available(guild: discord.Guild) -> None:
    await guild_hook.handle(bot.services, guild)


@bot.event
async def on_guild_join(guild: discord.Guild) -> None:
    await guild_hook.handle(bot.services, guild)


@bot.event
async def on_member_join(member: discord.Member) -> None:
    await member_hook.handle_join(bot.services, member)


@bot.event
async def on_member_remove(member: discord.Member) -> None:
    await member_hook.handle_leave(bot.services, member)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    try:
        bot.run(core.DISCORD_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
