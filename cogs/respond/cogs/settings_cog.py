"""
Respond Settings Cog
====================

Owner-only settings panel. Every change is validated, saved to the
settings file and applies to the next invocation.
"""

import discord
from discord.ext import commands
from discord import app_commands
from typing import Any
import logging

from ..core import (
    CONTEXT_LENGTH_CHOICES,
    DEBUG_FLAGS,
    MODEL_CHOICES,
    ChatScope,
    ConfigurationException,
    OutputMode,
    SettingsStore,
)
from ..core.config import mask_secret
from ..ui import RespondEmbeds

logger = logging.getLogger(__name__)


class SettingsCog(commands.Cog):
    """Settings command handler for the responder."""

    settings_group = app_commands.Group(
        name="respondsettings",
        description="Configure the AI responder",
    )

    def __init__(self, bot: commands.Bot, settings_store: SettingsStore):
        self.bot = bot
        self.settings_store = settings_store

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return await self.bot.is_owner(interaction.user)

    async def _apply(self, interaction: discord.Interaction, summary: str, **changes: Any) -> None:
        try:
            self.settings_store.update(**changes)
        except ConfigurationException as e:
            await interaction.response.send_message(embed=RespondEmbeds.notice(e.message), ephemeral=True)
            return
        except OSError as e:
            logger.error(f"Failed to save respond settings: {e}")
            await interaction.response.send_message(
                embed=RespondEmbeds.notice("Setting applied but could not be saved to disk."), ephemeral=True
            )
            return
        await interaction.response.send_message(embed=RespondEmbeds.success(summary), ephemeral=True)

    # ==================== Commands ====================

    @settings_group.command(name="show", description="Show the current responder settings")
    async def show(self, interaction: discord.Interaction) -> None:
        embed = RespondEmbeds.settings(self.settings_store.describe())
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @settings_group.command(name="context", description="Number of previous messages to include as context")
    @app_commands.describe(length="Messages of history to send")
    @app_commands.choices(length=[
        app_commands.Choice(name=str(value), value=value) for value in CONTEXT_LENGTH_CHOICES
    ])
    async def context(self, interaction: discord.Interaction, length: app_commands.Choice[int]) -> None:
        await self._apply(interaction, f"Context length set to {length.value}", context_length=length.value)

    @settings_group.command(name="model", description="Select the AI model to use (free models only)")
    @app_commands.choices(model=[
        app_commands.Choice(name=label, value=value) for label, value in MODEL_CHOICES
    ])
    async def model(self, interaction: discord.Interaction, model: app_commands.Choice[str]) -> None:
        await self._apply(interaction, f"Model set to {model.name}", model=model.value)

    @settings_group.command(name="scope", description="Where the AI can respond")
    @app_commands.choices(scope=[
        app_commands.Choice(name="Private DMs Only", value=ChatScope.DMS.value),
        app_commands.Choice(name="Public Channels Only", value=ChatScope.CHANNELS.value),
        app_commands.Choice(name="Both DMs and Channels", value=ChatScope.BOTH.value),
    ])
    async def scope(self, interaction: discord.Interaction, scope: app_commands.Choice[str]) -> None:
        await self._apply(interaction, f"Chat scope set to {scope.name}", chat_scope=scope.value)

    @settings_group.command(name="instructions", description="System instructions for the AI (tone, style, role)")
    @app_commands.describe(text="Leave empty to send no system message")
    async def instructions(self, interaction: discord.Interaction, text: str = "") -> None:
        summary = "System instructions updated" if text else "System instructions cleared"
        await self._apply(interaction, summary, system_instructions=text)

    @settings_group.command(name="output", description="How /respond outputs the AI response")
    @app_commands.choices(mode=[
        app_commands.Choice(name="Ephemeral (only you see it)", value=OutputMode.EPHEMERAL.value),
        app_commands.Choice(name="Draft to review and send", value=OutputMode.TYPEBAR.value),
    ])
    async def output(self, interaction: discord.Interaction, mode: app_commands.Choice[str]) -> None:
        await self._apply(interaction, f"Output mode set to {mode.name}", output_mode=mode.value)

    @settings_group.command(name="debug", description="Toggle debug options")
    @app_commands.choices(option=[
        app_commands.Choice(name="Show Debug Info", value="show_debug_info"),
        app_commands.Choice(name="Show Token Count", value="show_token_count"),
        app_commands.Choice(name="Log Errors", value="log_errors"),
    ])
    async def debug(
        self,
        interaction: discord.Interaction,
        option: app_commands.Choice[str],
        enabled: bool,
    ) -> None:
        if option.value not in DEBUG_FLAGS:
            await interaction.response.send_message(
                embed=RespondEmbeds.notice(f"Unknown debug option: {option.value}"), ephemeral=True
            )
            return
        state = "enabled" if enabled else "disabled"
        await self._apply(interaction, f"{option.name} {state}", **{option.value: enabled})

    @settings_group.command(name="singleflight", description="Allow only one pending response per channel")
    async def singleflight(self, interaction: discord.Interaction, enabled: bool) -> None:
        state = "enabled" if enabled else "disabled"
        await self._apply(interaction, f"Single flight per channel {state}", single_flight_per_channel=enabled)

    @settings_group.command(name="apikey", description="Set your OpenRouter API key (get one at openrouter.ai)")
    @app_commands.describe(key="OpenRouter API key; leave empty to remove it")
    async def apikey(self, interaction: discord.Interaction, key: str = "") -> None:
        key = key.strip()
        summary = f"API key set to {mask_secret(key)}" if key else "API key removed"
        await self._apply(interaction, summary, api_key=key)

    @settings_group.command(name="reload", description="Reload settings from disk")
    async def reload(self, interaction: discord.Interaction) -> None:
        self.settings_store.reload()
        await interaction.response.send_message(embed=RespondEmbeds.success("Settings reloaded"), ephemeral=True)
