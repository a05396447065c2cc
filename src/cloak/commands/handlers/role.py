from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...coordinator import RejectReason, RoleRequest
from ._shared import error_embed, self_role_autocomplete, services_of, success_embed

logger = logging.getLogger(__name__)


def _rejection_embed(request: RoleRequest, role_input: str, verb: str) -> discord.Embed:
    if request.reason is RejectReason.NOT_FOUND:
        return error_embed(f"No role matching `{role_input}` was found.")
    return error_embed(f"You do not have permission to {verb} the {request.role.mention} role.")


@register_cog
class Role(commands.Cog):
    """
    Slash command group: ``/role``

    Lets members give themselves or remove self-roles. Roles may be given by
    id, mention or (case-insensitive) name.
    """

    role = app_commands.Group(name="role", description="Adds or removes self-roles.", guild_only=True)

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @role.command(name="give", description="Grants a self-role.")
    @app_commands.describe(role_input="The role to gain.")
    @app_commands.rename(role_input="role")
    @app_commands.autocomplete(role_input=self_role_autocomplete)
    async def give(self, interaction: discord.Interaction, role_input: str) -> None:
        request = await services_of(self.bot).coordinator.give_self_role(interaction.user, role_input)
        if not request.applied:
            await interaction.response.send_message(
                embed=_rejection_embed(request, role_input, "gain"), ephemeral=True
            )
            return

        if not request.granted:
            await interaction.response.send_message(
                embed=error_embed(f"Could not give you the {request.role.mention} role."),
                ephemeral=True,
            )
            return

        logger.info(
            f"{interaction.user} gained self-role {request.role.name}"
            f" (revoked {len(request.revoked)} grouped role(s))"
        )
        await interaction.response.send_message(
            embed=success_embed(f"You have successfully gained the {request.role.mention} role."),
            ephemeral=True,
        )

    @role.command(name="remove", description="Removes a self-role.")
    @app_commands.describe(role_input="The role to remove.")
    @app_commands.rename(role_input="role")
    @app_commands.autocomplete(role_input=self_role_autocomplete)
    async def remove(self, interaction: discord.Interaction, role_input: str) -> None:
        request = await services_of(self.bot).coordinator.remove_self_role(interaction.user, role_input)
        if not request.applied:
            await interaction.response.send_message(
                embed=_rejection_embed(request, role_input, "remove"), ephemeral=True
            )
            return

        if not request.granted:
            await interaction.response.send_message(
                embed=error_embed(f"Could not remove the {request.role.mention} role."),
                ephemeral=True,
            )
            return

        await interaction.response.send_message(
            embed=success_embed(f"You have successfully removed the {request.role.mention} role."),
            ephemeral=True,
        )
