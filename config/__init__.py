"""
Configuration Module
====================
Handles loading and parsing of the settings.ini file.
"""

import configparser
import os
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger('discord.config')

# Default configuration directory
CONFIG_DIR = Path(__file__).parent
CONFIG_FILE = CONFIG_DIR / 'settings.ini'


class Config:
    """Configuration manager for the bot runner."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config = configparser.ConfigParser(interpolation=None)
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self._loaded = False
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from INI file."""
        if not self.config_file.exists():
            logger.warning(f"Config file not found: {self.config_file}")
            logger.info("Using default configuration values")
            return

        try:
            self.config.read(self.config_file, encoding='utf-8')
            self._loaded = True
            logger.info(f"✅ Loaded configuration from {self.config_file}")
        except configparser.Error as e:
            logger.error(f"❌ Failed to load config: {e}")

    def get(self, section: str, key: str, fallback: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: INI section name
            key: Configuration key
            fallback: Default value if key not found

        Returns:
            Configuration value or fallback
        """
        try:
            value = self.config.get(section, key)

            # Convert string booleans
            if value.lower() in ('true', 'yes'):
                return True
            elif value.lower() in ('false', 'no'):
                return False

            # Convert numeric values
            try:
                if '.' in value:
                    return float(value)
                return int(value)
            except (ValueError, TypeError):
                pass

            # Return string as-is
            return value

        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def get_str(self, section: str, key: str, fallback: str = '') -> str:
        """Get raw string configuration value."""
        try:
            return self.config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def get_int(self, section: str, key: str, fallback: int = 0) -> int:
        """Get integer configuration value."""
        value = self.get(section, key, fallback)
        try:
            return int(value)
        except (ValueError, TypeError):
            return fallback

    @property
    def is_loaded(self) -> bool:
        """Check if configuration was loaded successfully."""
        return self._loaded

    # Convenience properties for commonly used settings

    @property
    def token(self) -> str:
        """Get Discord bot token."""
        return self.get_str('discord', 'token') or os.getenv('DISCORD_TOKEN', '')

    @property
    def prefix(self) -> str:
        """Get command prefix."""
        return self.get_str('discord', 'prefix', '!')

    @property
    def owner_id(self) -> int:
        """Get bot owner ID (0 = application owner)."""
        return self.get_int('discord', 'owner_id', 0)

    @property
    def max_messages(self) -> int:
        """Get size of the in-memory message cache used for context."""
        return self.get_int('discord', 'max_messages', 1000)

    @property
    def log_file(self) -> str:
        """Get log file path."""
        return self.get_str('logging', 'log_file', 'bot.log')

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self.get_str('logging', 'log_level', 'INFO').upper()

    @property
    def respond_settings_file(self) -> str:
        """Get path of the responder settings file."""
        return self.get_str('respond', 'settings_file', str(CONFIG_DIR / 'respond.ini'))


# Global config instance
_config: Optional[Config] = None


def get_config(config_file: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        config_file: Optional path to config file

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(config_file)
    return _config
