from __future__ import annotations

import dataclasses
import logging
import uuid
from typing import Awaitable, Callable, Optional

import discord
from discord import app_commands
from discord.ext import commands

from .. import register_cog
from ...errors import SectionNotFoundError
from ...storage.models import SECTION_BODY_MAX, SECTION_TITLE_MAX, InformationEmbedSection
from ._shared import error_embed, section_autocomplete, services_of, success_embed

logger = logging.getLogger(__name__)

SectionSubmit = Callable[[discord.Interaction, str, str, int], Awaitable[None]]
IntroSubmit = Callable[[discord.Interaction, str], Awaitable[None]]


def _parse_order(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return -1


def _parse_section_id(raw: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        return None


class SectionModal(discord.ui.Modal):
    """Title / order / body form used by ``addsection`` and ``editsection``."""

    def __init__(
        self,
        modal_title: str,
        on_done: SectionSubmit,
        existing: Optional[InformationEmbedSection] = None,
    ) -> None:
        super().__init__(title=modal_title, timeout=600)
        self._on_done = on_done

        self.section_title = discord.ui.TextInput(
            label="Title",
            default=existing.title if existing else None,
            required=True,
            max_length=SECTION_TITLE_MAX,
            style=discord.TextStyle.short,
        )
        self.order = discord.ui.TextInput(
            label="Order in embed",
            default=str(existing.order) if existing else "-1",
            required=True,
            max_length=10,
            style=discord.TextStyle.short,
        )
        self.body = discord.ui.TextInput(
            label="Body",
            default=existing.body if existing else None,
            required=True,
            max_length=SECTION_BODY_MAX,
            style=discord.TextStyle.paragraph,
        )
        self.add_item(self.section_title)
        self.add_item(self.order)
        self.add_item(self.body)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self._on_done(
            interaction,
            self.section_title.value.strip(),
            self.body.value.strip(),
            _parse_order(self.order.value),
        )


class IntroModal(discord.ui.Modal, title="Set intro text"):
    def __init__(self, on_done: IntroSubmit, current: str) -> None:
        super().__init__(timeout=600)
        self._on_done = on_done
        self.intro = discord.ui.TextInput(
            label="Intro",
            default=current or None,
            required=False,
            max_length=4000,
            style=discord.TextStyle.paragraph,
        )
        self.add_item(self.intro)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self._on_done(interaction, self.intro.value)


@register_cog
class RoleInfo(commands.Cog):
    """
    Slash command group: ``/roleinfo``

    Edits and posts the guild's role information embed. Sections are entered
    through modal forms; the intro section supplies the embed description.
    """

    roleinfo = app_commands.Group(
        name="roleinfo",
        description="Manages the role information embed.",
        guild_only=True,
        default_permissions=discord.Permissions(manage_roles=True),
    )

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    def _lookup(
        self, guild_id: int, raw: str
    ) -> tuple[Optional[InformationEmbedSection], Optional[discord.Embed]]:
        section_id = _parse_section_id(raw)
        if section_id is None:
            return None, error_embed(f"`{raw}` is not a valid section id.")

        try:
            section = services_of(self.bot).info_embed.require_section(guild_id, section_id)
        except SectionNotFoundError:
            return None, error_embed(f"Section `{raw}` was not found")
        return section, None

    @roleinfo.command(name="display", description="Displays the role information embed.")
    @app_commands.describe(channel="The channel in which to display the information embed.")
    async def display(
        self,
        interaction: discord.Interaction,
        channel: Optional[discord.TextChannel] = None,
    ) -> None:
        target = channel or interaction.channel
        await services_of(self.bot).info_embed.display_in_channel(target)
        logger.info(f"Posted role information embed in #{target} (guild {interaction.guild.id})")
        await interaction.response.send_message(
            f"Embed has been sent to {target.mention}", ephemeral=True
        )

    @roleinfo.command(name="addsection", description="Adds a section to the information embed.")
    async def add_section(self, interaction: discord.Interaction) -> None:
        cache = services_of(self.bot).info_embed
        guild_id = interaction.guild.id

        async def on_done(modal_interaction: discord.Interaction, title: str, body: str, order: int) -> None:
            section = await cache.add_section(guild_id, title, body, order)
            embed = success_embed(title="Section added")
            embed.add_field(name=section.title, value=section.body)
            await modal_interaction.response.send_message(embed=embed)

        await interaction.response.send_modal(SectionModal("Add section", on_done))

    @roleinfo.command(name="editsection", description="Edits a section of the information embed.")
    @app_commands.describe(section="The section to edit.")
    @app_commands.autocomplete(section=section_autocomplete)
    async def edit_section(self, interaction: discord.Interaction, section: str) -> None:
        existing, problem = self._lookup(interaction.guild.id, section)
        if existing is None:
            await interaction.response.send_message(embed=problem, ephemeral=True)
            return

        cache = services_of(self.bot).info_embed

        async def on_done(modal_interaction: discord.Interaction, title: str, body: str, order: int) -> None:
            updated = dataclasses.replace(
                existing,
                title=title,
                body=body,
                order=order if order > -1 else existing.order,
            )
            await cache.update_section(updated)
            embed = success_embed(title="Section edited")
            embed.add_field(name=updated.title, value=updated.body)
            await modal_interaction.response.send_message(embed=embed)

        await interaction.response.send_modal(SectionModal("Edit section", on_done, existing))

    @roleinfo.command(name="removesection", description="Removes a section from the information embed.")
    @app_commands.describe(section="The section to remove.")
    @app_commands.autocomplete(section=section_autocomplete)
    async def remove_section(self, interaction: discord.Interaction, section: str) -> None:
        existing, problem = self._lookup(interaction.guild.id, section)
        if existing is None:
            await interaction.response.send_message(embed=problem, ephemeral=True)
            return

        await services_of(self.bot).info_embed.remove_section(existing)
        await interaction.response.send_message(
            embed=success_embed(f"Section `{existing.title}` was removed")
        )

    @roleinfo.command(name="setintro", description="Sets the introduction text of the information embed.")
    async def set_intro(self, interaction: discord.Interaction) -> None:
        cache = services_of(self.bot).info_embed
        intro = await cache.get_intro_section(interaction.guild.id)

        async def on_done(modal_interaction: discord.Interaction, text: str) -> None:
            await cache.update_section(dataclasses.replace(intro, body=text))
            if text.strip():
                embed = success_embed(text, title="Intro updated")
            else:
                embed = success_embed(title="Intro cleared")
            await modal_interaction.response.send_message(embed=embed)

        await interaction.response.send_modal(IntroModal(on_done, intro.body))
