import logging

import discord

from cloak.runtime import Services

logger = logging.getLogger(__name__)


async def handle(services: Services, guild: discord.Guild):
    """Reload every guild-scoped cache when ``guild`` becomes available."""
    logger.info(f"Guild available: {guild.name} (ID: {guild.id})")
    await services.reload_guild(guild.id)
