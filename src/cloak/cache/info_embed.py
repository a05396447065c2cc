"""
Guild-scoped cache of information embed sections.

The section titled with the configured intro name (``#INTRO`` by default)
becomes the embed description; every other section is rendered as a field,
ordered by ``order``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import defaultdict

import discord

from cloak.config import embed as embed_cfg
from cloak.errors import InvalidArgumentError, SectionNotFoundError
from cloak.storage.models import InformationEmbedSection
from cloak.storage.repositories import InformationEmbedSectionRepo

logger = logging.getLogger(__name__)


class InformationEmbedCache:
    """Sections of each guild's information embed, mirrored from the store."""

    def __init__(self, repo: InformationEmbedSectionRepo) -> None:
        self._repo = repo
        self._guilds: dict[int, list[InformationEmbedSection]] = {}
        self._reload_locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def intro_title(self) -> str:
        return embed_cfg.INTRO_SECTION

    # ------------------------------------------------------------------ #
    # READ helpers
    # ------------------------------------------------------------------ #

    def is_loaded(self, guild_id: int) -> bool:
        return guild_id in self._guilds

    def get_section(self, guild_id: int, section_id: uuid.UUID) -> InformationEmbedSection | None:
        for section in self._guilds.get(guild_id, ()):
            if section.id == section_id:
                return section
        return None

    def require_section(self, guild_id: int, section_id: uuid.UUID) -> InformationEmbedSection:
        section = self.get_section(guild_id, section_id)
        if section is None:
            raise SectionNotFoundError(f"Section {section_id} was not found in guild {guild_id}")
        return section

    def get_section_by_title(self, guild_id: int, title: str) -> InformationEmbedSection | None:
        for section in self._guilds.get(guild_id, ()):
            if section.title == title:
                return section
        return None

    def sections(self, guild_id: int, include_intro: bool = False) -> list[InformationEmbedSection]:
        """Return a copy of the guild's sections in insertion order."""

        sections = list(self._guilds.get(guild_id, ()))
        if include_intro:
            return sections
        return [s for s in sections if s.title != self.intro_title]

    def build_embed(self, guild_id: int) -> discord.Embed:
        embed = discord.Embed(title=embed_cfg.TITLE, color=discord.Colour(embed_cfg.COLOR))

        intro = self.get_section_by_title(guild_id, self.intro_title)
        if intro is not None and intro.body:
            embed.description = intro.body

        for section in sorted(self.sections(guild_id), key=lambda s: s.order):
            embed.add_field(name=section.title, value=section.body, inline=False)
        return embed

    # ------------------------------------------------------------------ #
    # WRITE helpers
    # ------------------------------------------------------------------ #

    async def add_section(
        self, guild_id: int, title: str, body: str, order: int = 0
    ) -> InformationEmbedSection:
        section = await self._repo.add(InformationEmbedSection.create(guild_id, title, body, order))
        if self.is_loaded(guild_id):
            self._guilds[guild_id].append(section)
        logger.info("Added section %r (%s) to guild %s", section.title, section.id, guild_id)
        return section

    async def update_section(self, section: InformationEmbedSection) -> None:
        await self._repo.update(section)
        cached = self._guilds.get(section.guild_id)
        if cached is None:
            return
        for index, existing in enumerate(cached):
            if existing.id == section.id:
                cached[index] = section
                break
        else:
            cached.append(section)

    async def remove_section(self, section: InformationEmbedSection) -> bool:
        if self.get_section(section.guild_id, section.id) is None:
            return False

        await self._repo.remove(section)
        self._guilds[section.guild_id] = [
            s for s in self._guilds[section.guild_id] if s.id != section.id
        ]
        logger.info("Removed section %s from guild %s", section.id, section.guild_id)
        return True

    async def get_intro_section(self, guild_id: int) -> InformationEmbedSection:
        """Return the intro section, creating an empty one on first use."""

        # An unloaded guild has no cached intro; load it before creating one
        if not self.is_loaded(guild_id):
            await self.reload(guild_id)

        section = self.get_section_by_title(guild_id, self.intro_title)
        if section is not None:
            return section
        return await self.add_section(guild_id, self.intro_title, "")

    async def display_in_channel(self, channel: discord.abc.Messageable) -> discord.Message:
        guild = getattr(channel, "guild", None)
        if guild is None:
            raise InvalidArgumentError("Channel must be in a guild")
        return await channel.send(embed=self.build_embed(guild.id))

    # ------------------------------------------------------------------ #
    # RELOAD
    # ------------------------------------------------------------------ #

    async def reload(self, guild_id: int) -> int:
        async with self._reload_locks[guild_id]:
            rows = await self._repo.query(guild_id=guild_id)
            self._guilds[guild_id] = rows

        logger.info("Loaded %d information embed section(s) for guild %s", len(rows), guild_id)
        return len(rows)


__all__ = ["InformationEmbedCache"]
