"""Cloak: self-roles, persistent roles and a role information embed for Discord guilds."""
