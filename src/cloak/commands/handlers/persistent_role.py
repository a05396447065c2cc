from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ._shared import notice_embed, services_of, success_embed


@register_cog
class PersistentRoleAdmin(commands.Cog):
    """
    Slash command group: ``/persistentrole``

    Marks roles that are handed back automatically when a member rejoins.
    """

    persistentrole = app_commands.Group(
        name="persistentrole",
        description="Manages persistent roles.",
        guild_only=True,
        default_permissions=discord.Permissions(manage_roles=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @persistentrole.command(name="add", description="Adds a new persistent role")
    @app_commands.describe(role="The role to add.")
    async def add(self, interaction: discord.Interaction, role: discord.Role) -> None:
        added = await services_of(self.bot).coordinator.set_persistent(
            interaction.guild.id, role.id, True
        )
        if added:
            embed = success_embed(f"The {role.mention} role has been marked persistent.")
        else:
            embed = notice_embed(f"The {role.mention} role is already persistent.")
        await interaction.response.send_message(embed=embed)

    @persistentrole.command(name="remove", description="Removes a persistent role")
    @app_commands.describe(role="The role to remove.")
    async def remove(self, interaction: discord.Interaction, role: discord.Role) -> None:
        removed = await services_of(self.bot).coordinator.set_persistent(
            interaction.guild.id, role.id, False
        )
        if removed:
            embed = success_embed(f"The {role.mention} role has been un-marked as persistent.")
        else:
            embed = notice_embed(f"The {role.mention} role was already not persistent.")
        await interaction.response.send_message(embed=embed)

    @persistentrole.command(name="list", description="Lists the persistent roles")
    async def list_roles(self, interaction: discord.Interaction) -> None:
        guild = interaction.guild
        role_ids = services_of(self.bot).persistent_roles.list(guild.id)
        mentions = [role.mention for role in map(guild.get_role, role_ids) if role is not None]
        if not mentions:
            await interaction.response.send_message(
                embed=notice_embed("No roles are marked persistent."), ephemeral=True
            )
            return

        await interaction.response.send_message(
            embed=success_embed("\n".join(mentions), title="Persistent roles"), ephemeral=True
        )
