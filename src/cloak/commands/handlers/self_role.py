from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...errors import RoleNotFoundError
from ._shared import error_embed, group_autocomplete, services_of, success_embed

logger = logging.getLogger(__name__)


@register_cog
class SelfRoleAdmin(commands.Cog):
    """
    Slash command group: ``/selfrole``

    Lets administrators register, regroup and unregister self-assignable roles.
    """

    selfrole = app_commands.Group(
        name="selfrole",
        description="Manages self roles",
        guild_only=True,
        default_permissions=discord.Permissions(manage_roles=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @selfrole.command(name="add", description="Adds a new self-role")
    @app_commands.describe(role="The role to add.", group="The group to assign.")
    @app_commands.autocomplete(group=group_autocomplete)
    async def add(
        self,
        interaction: discord.Interaction,
        role: discord.Role,
        group: Optional[str] = None,
    ) -> None:
        cache = services_of(self.bot).self_roles
        if cache.is_self_role(interaction.guild.id, role.id):
            await interaction.response.send_message(
                embed=error_embed(
                    f"The {role.mention} role is already assigned as a self-role.", title="Error"
                )
            )
            return

        try:
            definition = await cache.add(interaction.guild.id, role.id, group)
        except RoleNotFoundError:
            logger.warning(f"Role {role.id} vanished before it could be added as a self-role")
            await interaction.response.send_message(
                embed=error_embed(f"The {role.mention} role no longer exists.", title="Error")
            )
            return

        embed = success_embed(title="Self-role added")
        embed.add_field(name="Role", value=role.mention, inline=True)
        embed.add_field(name="Group", value=definition.group or "<none>", inline=True)
        await interaction.response.send_message(embed=embed)

    @selfrole.command(name="edit", description="Edits a self-role")
    @app_commands.describe(
        role="The role to edit.",
        group="The new group to assign. Leave unspecified to clear the group.",
    )
    @app_commands.autocomplete(group=group_autocomplete)
    async def edit(
        self,
        interaction: discord.Interaction,
        role: discord.Role,
        group: Optional[str] = None,
    ) -> None:
        definition = await services_of(self.bot).self_roles.edit(interaction.guild.id, role.id, group)
        if definition is None:
            await interaction.response.send_message(
                embed=error_embed(f"The {role.mention} role is not a self-role.", title="Error")
            )
            return

        embed = success_embed(title="Self-role edited")
        embed.add_field(name="Role", value=role.mention, inline=True)
        embed.add_field(name="New Group", value=definition.group or "<none>", inline=True)
        await interaction.response.send_message(embed=embed)

    @selfrole.command(name="remove", description="Removes a self-role")
    @app_commands.describe(role="The role to remove.")
    async def remove(self, interaction: discord.Interaction, role: discord.Role) -> None:
        removed = await services_of(self.bot).self_roles.remove(interaction.guild.id, role.id)
        if not removed:
            await interaction.response.send_message(
                embed=error_embed(f"The {role.mention} role is not a self-role.", title="Error")
            )
            return

        await interaction.response.send_message(
            embed=success_embed(
                f"The role {role.mention} has been removed from the self-roles database.",
                title="Self-role removed",
            )
        )
