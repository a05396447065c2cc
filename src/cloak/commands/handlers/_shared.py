"""Embed builders and autocomplete callbacks shared by the command cogs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands

if TYPE_CHECKING:
    from cloak.runtime import Services

# Discord caps autocomplete responses at 25 choices.
MAX_CHOICES = 25


def services_of(client: discord.Client) -> "Services":
    services = getattr(client, "services", None)
    if services is None:
        raise RuntimeError("Bot services are not initialised yet")
    return services


def success_embed(description: str | None = None, *, title: str | None = None) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=discord.Colour.green())


def notice_embed(description: str | None = None, *, title: str | None = None) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=discord.Colour.orange())


def error_embed(description: str | None = None, *, title: str | None = None) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=discord.Colour.red())


async def group_autocomplete(
    interaction: discord.Interaction, current: str
) -> list[app_commands.Choice[str]]:
    if interaction.guild is None:
        return []
    query = current.strip().casefold()
    groups = services_of(interaction.client).self_roles.groups(interaction.guild.id)
    return [
        app_commands.Choice(name=g, value=g)
        for g in groups
        if not query or query in g.casefold()
    ][:MAX_CHOICES]


async def self_role_autocomplete(
    interaction: discord.Interaction, current: str
) -> list[app_commands.Choice[str]]:
    if interaction.guild is None:
        return []
    query = current.strip().casefold()
    roles = services_of(interaction.client).self_roles.roles(interaction.guild.id)
    return [
        app_commands.Choice(name=role.name, value=str(role.id))
        for role in roles
        if not query or query in role.name.casefold()
    ][:MAX_CHOICES]


async def section_autocomplete(
    interaction: discord.Interaction, current: str
) -> list[app_commands.Choice[str]]:
    if interaction.guild is None:
        return []
    query = current.strip().casefold()
    sections = services_of(interaction.client).info_embed.sections(interaction.guild.id)
    return [
        app_commands.Choice(name=s.title[:100], value=str(s.id))
        for s in sections
        if not query or query in s.title.casefold()
    ][:MAX_CHOICES]
