"""
AI Respond Module
===============================

Extension entry point. Reads recent channel history from the bot's message
cache, asks OpenRouter for a reply and shows it privately to the invoker.
"""

from discord.ext import commands

import logging

from .cogs import RespondCog, SettingsCog
from .core import SettingsStore

logger = logging.getLogger(__name__)


async def setup(bot: commands.Bot) -> None:
    """
    Initialize the respond module and register its cogs with the bot.

    Called by ``bot.load_extension("cogs.respond")``. Both cogs share one
    SettingsStore, loaded here and saved on every change.

    Args:
        bot: The Discord bot instance
    """
    settings_path = getattr(getattr(bot, 'config', None), 'respond_settings_file', None)
    settings_store = SettingsStore(settings_path)

    await bot.add_cog(RespondCog(bot, settings_store))
    logger.info("✅ RespondCog loaded")

    await bot.add_cog(SettingsCog(bot, settings_store))
    logger.info("✅ SettingsCog loaded")
