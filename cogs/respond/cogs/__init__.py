"""Cogs module - Discord command handlers."""

from .respond_cog import RespondCog
from .settings_cog import SettingsCog

__all__ = [
    "RespondCog",
    "SettingsCog",
]
