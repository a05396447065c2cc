import asyncio

import discord
from discord.ext import commands as discord_commands

from cloak import commands as cloak_commands


async def _collect():
    bot = discord_commands.Bot(command_prefix="!", intents=discord.Intents.none())
    try:
        await cloak_commands.setup(bot)
        return set(bot.cogs.keys()), {cmd.name for cmd in bot.tree.get_commands()}
    finally:
        await bot.close()


def test_setup_registers_known_cogs_and_groups():
    cogs, groups = asyncio.run(_collect())
    assert {"SelfRoleAdmin", "PersistentRoleAdmin", "Role", "RoleInfo"}.issubset(cogs)
    assert {"selfrole", "persistentrole", "role", "roleinfo"}.issubset(groups)
