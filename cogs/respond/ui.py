"""
Respond UI Module
Embeds for notices and settings, plus the draft composer used in typebar mode
"""

import discord
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

MESSAGE_LIMIT = 2000


class RespondEmbeds:
    """Embed designs for the responder"""

    COLOR_INFO = 0x5865F2       # Discord blurple
    COLOR_ERROR = 0xFF0033      # Vibrant red
    COLOR_SUCCESS = 0x00D9A3    # Mint green

    @staticmethod
    def notice(message: str) -> discord.Embed:
        """Local-only warning or failure notice"""
        return discord.Embed(
            description=f"### ⚠️ Notice\n{message}",
            color=RespondEmbeds.COLOR_ERROR
        )

    @staticmethod
    def success(message: str) -> discord.Embed:
        return discord.Embed(
            description=f"### ✅ {message}",
            color=RespondEmbeds.COLOR_SUCCESS
        )

    @staticmethod
    def settings(rows: List[Tuple[str, str]]) -> discord.Embed:
        """Settings panel"""
        embed = discord.Embed(
            title="🤖 AI Responder Settings",
            color=RespondEmbeds.COLOR_INFO
        )
        for name, value in rows:
            # Embed field values are capped at 1024 characters
            if len(value) > 1024:
                value = value[:1021] + "..."
            embed.add_field(name=name, value=value, inline=name != "System Instructions")
        embed.set_footer(text="Change a value with /respondsettings <option>")
        return embed


class ComposeModal(discord.ui.Modal, title="Review AI Response"):
    """Editable draft of a generated response"""

    def __init__(self, text: str, view: "ComposeView"):
        super().__init__()
        self.compose_view = view
        self.draft = discord.ui.TextInput(
            label="Message",
            style=discord.TextStyle.paragraph,
            default=text[:MESSAGE_LIMIT],
            max_length=MESSAGE_LIMIT,
            required=True,
        )
        self.add_item(self.draft)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.compose_view.send(interaction, self.draft.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        logger.error(f"Error in compose modal: {error}", exc_info=error)
        if not interaction.response.is_done():
            await interaction.response.send_message(
                embed=RespondEmbeds.notice("Could not send the message."), ephemeral=True
            )


class ComposeView(discord.ui.View):
    """Draft controls shown privately to the invoking user"""

    def __init__(self, text: str, author_id: int, timeout: float = 600):
        super().__init__(timeout=timeout)
        self.text = text
        self.author_id = author_id
        self.sent = False

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return interaction.user.id == self.author_id

    @discord.ui.button(label="Edit & Send", style=discord.ButtonStyle.primary, emoji="✏️")
    async def edit_and_send(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(ComposeModal(self.text, self))

    @discord.ui.button(label="Discard", style=discord.ButtonStyle.secondary, emoji="🗑️")
    async def discard(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self._disable_all()
        self.stop()
        await interaction.response.edit_message(content="*Draft discarded.*", view=self)

    async def send(self, interaction: discord.Interaction, text: str) -> None:
        """Post the reviewed text to the channel the draft was made for"""
        if self.sent:
            await interaction.response.send_message(
                embed=RespondEmbeds.notice("This draft was already sent."), ephemeral=True
            )
            return

        channel: Optional[discord.abc.Messageable] = interaction.channel
        if channel is None:
            await interaction.response.send_message(
                embed=RespondEmbeds.notice("This channel is no longer available."), ephemeral=True
            )
            return

        await channel.send(text)
        self.sent = True
        self._disable_all()
        self.stop()
        await interaction.response.send_message(embed=RespondEmbeds.success("Message sent"), ephemeral=True)

    def _disable_all(self) -> None:
        for item in self.children:
            if isinstance(item, discord.ui.Button):
                item.disabled = True


def render_draft(text: str) -> str:
    """Ephemeral preview of a draft, trimmed to fit a single message"""
    header = "📝 **Draft response** (only you can see this)\n"
    body = text
    room = MESSAGE_LIMIT - len(header)
    if len(body) > room:
        body = body[:room - 3] + "..."
    return header + body
