import logging

import discord

from cloak.runtime import Services

logger = logging.getLogger(__name__)


def _quantity(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


async def handle_join(services: Services, member: discord.Member):
    """Restore persistent roles snapshotted when ``member`` last left."""
    try:
        count = await services.coordinator.apply_persistent_roles(member)
    except Exception:
        logger.exception(f"Could not restore persistent roles for {member} (ID: {member.id})")
        return

    if count > 0:
        logger.info(f"Restored {_quantity(count, 'persistent role')} for {member} (ID: {member.id})")


async def handle_leave(services: Services, member: discord.Member):
    """Snapshot the persistent roles ``member`` held when leaving."""
    try:
        count = await services.coordinator.save_persistent_roles(member)
    except Exception:
        logger.exception(f"Could not save persistent roles for {member} (ID: {member.id})")
        return

    if count > 0:
        logger.info(f"Saved {_quantity(count, 'persistent role')} for {member} (ID: {member.id})")
