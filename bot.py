import discord
from discord.ext import commands
import os
from dotenv import load_dotenv
import logging
import asyncio
from typing import List, Optional

from config import get_config

load_dotenv()
config = get_config()

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='[{asctime}] [{levelname:<8}] {name}: {message}',
    datefmt='%Y-%m-%d %H:%M:%S',
    style='{',
    handlers=[
        logging.FileHandler(config.log_file, encoding='utf-8', mode='a'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger('discord')

# Reduce gateway verbosity
logging.getLogger('discord.gateway').setLevel(logging.WARNING)

intents = discord.Intents.default()
intents.message_content = True  # Required to read cached message content for context
intents.guilds = True
intents.guild_messages = True
intents.dm_messages = True


class DiscordBot(commands.Bot):
    """Bot runner that loads every cog package under cogs/"""

    def __init__(self):
        super().__init__(
            command_prefix=config.prefix,
            intents=intents,
            owner_id=config.owner_id or None,
            max_messages=config.max_messages,
            heartbeat_timeout=60,
        )
        self.config = config
        self.cogs_dir = 'cogs'
        self.loaded_cogs: List[str] = []

    async def setup_hook(self):
        """Called after the bot is initialized but before login"""
        logger.info("Setting up bot...")
        await self.load_all_cogs()

    async def load_all_cogs(self):
        """Load all available cogs from the cogs directory"""
        self.loaded_cogs = []

        if not os.path.exists(self.cogs_dir):
            logger.warning(f"Cogs directory '{self.cogs_dir}' not found")
            return

        for item in sorted(os.listdir(self.cogs_dir)):
            item_path = os.path.join(self.cogs_dir, item)

            # Skip hidden files and directories
            if item.startswith('_') or item == '__pycache__':
                continue

            # Load cog packages (directories with __init__.py)
            if os.path.isdir(item_path):
                init_path = os.path.join(item_path, '__init__.py')
                if os.path.exists(init_path):
                    try:
                        await self.load_extension(f'cogs.{item}')
                        self.loaded_cogs.append(item)
                        logger.info(f"✅ Loaded cog: {item}")
                    except commands.ExtensionError as e:
                        logger.error(f"❌ Failed to load cog {item}: {e}")
                        continue

        logger.info(f"Loaded {len(self.loaded_cogs)} cogs successfully")


bot = DiscordBot()


@bot.event
async def on_ready():
    logger.info(f'{bot.user} is online!')
    logger.info(f'Connected to {len(bot.guilds)} guilds')
    logger.info(f'Loaded cogs: {", ".join(bot.loaded_cogs)}')

    try:
        synced = await bot.tree.sync()
        logger.info(f"✅ Synced {len(synced)} commands globally")
    except discord.HTTPException as e:
        logger.error(f"❌ Failed to sync commands: {e}")


@bot.event
async def on_disconnect():
    logger.warning("Bot disconnected from Discord Gateway")


@bot.event
async def on_resume():
    logger.info("Bot resumed connection to Discord Gateway")


@bot.command()
@commands.is_owner()
async def sync(ctx, guild_id: Optional[int] = None):
    """Sync slash commands (owner only)"""
    try:
        if guild_id:
            guild = discord.Object(id=guild_id)
            bot.tree.copy_global_to(guild=guild)
            synced = await bot.tree.sync(guild=guild)
            await ctx.send(f"✅ Synced {len(synced)} commands to guild {guild_id}")
        else:
            synced = await bot.tree.sync()
            await ctx.send(f"✅ Synced {len(synced)} commands globally")
    except discord.HTTPException as e:
        await ctx.send(f"❌ Error: {e}")


async def main():
    """Main function with reconnection handling"""
    if not config.token:
        logger.error("No Discord token configured. Set DISCORD_TOKEN or [discord] token.")
        return

    max_retries = 5
    retry_count = 0

    while retry_count < max_retries:
        try:
            logger.info("Starting bot...")
            await bot.start(config.token)
            retry_count = 0  # Reset on successful connection
        except discord.LoginFailure:
            logger.error("Invalid token - cannot reconnect")
            break
        except (discord.HTTPException, discord.GatewayNotFound, discord.ConnectionClosed, OSError) as e:
            retry_count += 1
            logger.error(f"Error (attempt {retry_count}/{max_retries}): {e}")
            if retry_count < max_retries:
                wait_time = min(5 * retry_count, 30)
                logger.info(f"Reconnecting in {wait_time}s...")
                await asyncio.sleep(wait_time)
            else:
                logger.error("Max retries reached. Exiting.")
                break


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by keyboard interrupt")
