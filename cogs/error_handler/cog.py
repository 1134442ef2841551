import discord
from discord import app_commands
from discord.ext import commands
import logging

logger = logging.getLogger(__name__)


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send a private error notice, whether or not the interaction was answered"""
    try:
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)
    except discord.HTTPException as e:
        # Interaction expired or was deleted
        logger.warning(f"Could not deliver error notice: {e}")


class ErrorHandler(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        self._previous_tree_handler = None

    async def cog_load(self) -> None:
        self._previous_tree_handler = self.bot.tree.on_error
        self.bot.tree.on_error = self.on_app_command_error

    async def cog_unload(self) -> None:
        self.bot.tree.on_error = self._previous_tree_handler

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ) -> None:
        """Global error handler for slash and context menu commands"""
        original = getattr(error, 'original', error)

        if isinstance(error, app_commands.CommandOnCooldown):
            await send_ephemeral(interaction, f"⏳ This command is on cooldown. Try again in **{error.retry_after:.1f}s**")

        elif isinstance(error, app_commands.NoPrivateMessage):
            await send_ephemeral(interaction, "❌ This command cannot be used in DMs!")

        elif isinstance(error, app_commands.CheckFailure):
            await send_ephemeral(interaction, "❌ You don't have permission to use this command!")

        elif isinstance(original, discord.Forbidden):
            await send_ephemeral(interaction, "❌ I don't have permission to do that!")

        else:
            command_name = interaction.command.qualified_name if interaction.command else "unknown"
            logger.error(
                f"Error in app command {command_name} "
                f"(user {interaction.user.id}, channel {interaction.channel_id}): {original}",
                exc_info=original
            )
            await send_ephemeral(interaction, "❌ An unexpected error occurred. Check the console for details.")

    @commands.Cog.listener()
    async def on_command_error(self, ctx, error):
        """Error handler for owner prefix commands"""
        if hasattr(ctx.command, 'on_error'):
            return

        error = getattr(error, 'original', error)

        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.NotOwner):
            await ctx.send("❌ Only the bot owner can use this command!")

        elif isinstance(error, commands.BadArgument):
            await ctx.send("❌ Invalid argument provided!")

        else:
            logger.error(f"Error in command {ctx.command}: {error}", exc_info=error)
            await ctx.send(f"❌ An unexpected error occurred: `{str(error)[:100]}`")
