"""
Respond Cog - AI Response Command Handler
=========================================

Discord-specific implementation of the /respond slash command and the
"AI Response" message context menu. Everything is answered ephemerally.
"""

import discord
from discord.ext import commands
from discord import app_commands
from typing import List, Optional
import logging

from ..core import InFlightGuard, SettingsStore
from ..models import OutcomeKind, RespondOutcome
from ..services import DEBUG_HEADER, ContextCollector, OpenRouterClient, RespondService
from ..ui import MESSAGE_LIMIT, ComposeView, RespondEmbeds, render_draft

logger = logging.getLogger(__name__)


class RespondCog(commands.Cog):
    """AI responder for the current channel."""

    def __init__(self, bot: commands.Bot, settings_store: Optional[SettingsStore] = None):
        self.bot = bot

        self.settings_store = settings_store or SettingsStore()
        self.guard = InFlightGuard()
        self.collector = ContextCollector(lambda: self.bot.cached_messages)
        self.client = OpenRouterClient()
        self.respond_service = RespondService(
            collector=self.collector,
            client=self.client,
            guard=self.guard,
        )

        self.ctx_menu = app_commands.ContextMenu(
            name="AI Response",
            callback=self.ai_response_menu,
        )
        self.bot.tree.add_command(self.ctx_menu)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(self.ctx_menu.name, type=self.ctx_menu.type)
        logger.info("RespondCog unloaded")

    # ==================== Core Processing ====================

    async def _handle(self, interaction: discord.Interaction) -> None:
        """Generate a response for the interaction's channel and render it."""
        channel = interaction.channel
        if channel is None:
            await interaction.response.send_message(
                embed=RespondEmbeds.notice("This channel is not available."), ephemeral=True
            )
            return

        await interaction.response.defer(ephemeral=True, thinking=True)

        settings = self.settings_store.settings
        outcome = await self.respond_service.respond(
            channel_id=channel.id,
            is_guild_channel=interaction.guild_id is not None,
            settings=settings,
        )
        await self._render(interaction, outcome)

    async def _render(self, interaction: discord.Interaction, outcome: RespondOutcome) -> None:
        """Deliver an outcome as ephemeral follow-ups."""
        if outcome.is_notice:
            await interaction.followup.send(embed=RespondEmbeds.notice(outcome.content), ephemeral=True)
            return

        if outcome.kind is OutcomeKind.TYPEBAR:
            view = ComposeView(outcome.content, author_id=interaction.user.id)
            await interaction.followup.send(render_draft(outcome.content), view=view, ephemeral=True)
        else:
            for chunk in self._output_chunks(outcome.content):
                await interaction.followup.send(chunk, ephemeral=True)

        if outcome.status_notice:
            await interaction.followup.send(embed=RespondEmbeds.success(outcome.status_notice), ephemeral=True)

    # ==================== Commands ====================

    @app_commands.command(name="respond", description="Generate a response using AI")
    async def respond(self, interaction: discord.Interaction) -> None:
        await self._handle(interaction)

    async def ai_response_menu(self, interaction: discord.Interaction, message: discord.Message) -> None:
        """Context menu entry on any message; works on the message's channel."""
        await self._handle(interaction)

    # ==================== Status Listeners ====================

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        settings = self.settings_store.settings
        logger.info("=" * 50)
        logger.info("🤖 RespondCog is READY!")
        logger.info(f"✅ Model: {settings.model}")
        logger.info(f"✅ Context length: {settings.context_length} messages")
        logger.info(f"✅ Chat scope: {settings.chat_scope.value}")
        logger.info(f"✅ Output mode: {settings.output_mode.value}")
        logger.info(f"✅ API key: {'configured' if settings.api_key else 'MISSING'}")
        logger.info("=" * 50)

    # ==================== Helper Methods ====================

    @classmethod
    def _output_chunks(cls, content: str) -> List[str]:
        """Message chunks for an ephemeral answer; a trailing debug summary is sent on its own."""
        body, marker, debug = content.rpartition(f"\n\n{DEBUG_HEADER}")
        if not marker:
            return cls._split_message(content, MESSAGE_LIMIT)
        return cls._split_message(body, MESSAGE_LIMIT) + cls._split_message(DEBUG_HEADER + debug, MESSAGE_LIMIT)

    @staticmethod
    def _split_message(text: str, max_length: int) -> List[str]:
        """Split a long message into Discord-compliant chunks."""
        if len(text) <= max_length:
            return [text]

        chunks = []
        remaining = text

        while remaining:
            if len(remaining) <= max_length:
                chunks.append(remaining)
                break

            break_point = max_length
            para_break = remaining.rfind('\n\n', 0, max_length)
            if para_break > max_length // 2:
                break_point = para_break + 2
            else:
                line_break = remaining.rfind('\n', 0, max_length)
                if line_break > max_length // 2:
                    break_point = line_break + 1
                else:
                    space_break = remaining.rfind(' ', 0, max_length)
                    if space_break > max_length // 2:
                        break_point = space_break + 1

            chunks.append(remaining[:break_point])
            remaining = remaining[break_point:]

        return chunks
