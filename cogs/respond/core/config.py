"""
Configuration Management for Respond Module
===========================================

Handles loading, validating and saving the responder settings INI file.
Settings are an immutable snapshot; the SettingsStore owns the only
mutable reference and writes the file back on every change.
"""

import os
import configparser
import dataclasses
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum
import logging

from .exceptions import ConfigurationException


logger = logging.getLogger(__name__)


class ChatScope(Enum):
    """Channel types the responder may act in."""
    DMS = "dms"
    CHANNELS = "channels"
    BOTH = "both"


class OutputMode(Enum):
    """Where a generated response is delivered."""
    EPHEMERAL = "ephemeral"
    TYPEBAR = "typebar"


CONTEXT_LENGTH_CHOICES: Tuple[int, ...] = (5, 10, 20, 30, 50, 100)

# (label, model id); all free tier
MODEL_CHOICES: Tuple[Tuple[str, str], ...] = (
    ("Google Gemini Flash 1.5 8B", "google/gemini-flash-1.5-8b-exp"),
    ("Google Gemini 2.0 Flash", "google/gemini-2.0-flash-exp:free"),
    ("Reka Flash 3", "rekaai/reka-flash-3:free"),
)

DEBUG_FLAGS: Tuple[str, ...] = ("show_debug_info", "show_token_count", "log_errors")

DEFAULT_SYSTEM_INSTRUCTIONS = (
    "You are acting as me in this conversation. Respond in my tone and voice, "
    "not as an AI assistant. Be concise and natural."
)


def model_label(model_id: str) -> str:
    """Get the display label for a model id."""
    for label, value in MODEL_CHOICES:
        if value == model_id:
            return label
    return model_id


def mask_secret(secret: str) -> str:
    """Mask all but the last four characters of a secret."""
    if not secret:
        return "*not set*"
    if len(secret) <= 4:
        return "•" * len(secret)
    return "•" * 8 + secret[-4:]


@dataclass(frozen=True)
class RespondSettings:
    """User-configured responder settings."""

    context_length: int = 20
    model: str = MODEL_CHOICES[0][1]
    chat_scope: ChatScope = ChatScope.BOTH
    system_instructions: str = DEFAULT_SYSTEM_INSTRUCTIONS
    output_mode: OutputMode = OutputMode.EPHEMERAL
    show_debug_info: bool = False
    show_token_count: bool = True
    log_errors: bool = True
    api_key: str = ""
    single_flight_per_channel: bool = False

    def validate(self) -> None:
        """
        Check every field against its allowed values.

        Raises:
            ConfigurationException: If a field holds an invalid value
        """
        if isinstance(self.context_length, bool) or not isinstance(self.context_length, int):
            raise ConfigurationException('context_length', "Context length must be an integer")
        if self.context_length <= 0:
            raise ConfigurationException('context_length', "Context length must be positive")
        if self.model not in {value for _, value in MODEL_CHOICES}:
            raise ConfigurationException('model', f"Unsupported model: {self.model}")
        if not isinstance(self.chat_scope, ChatScope):
            raise ConfigurationException('chat_scope', f"Invalid chat scope: {self.chat_scope}")
        if not isinstance(self.output_mode, OutputMode):
            raise ConfigurationException('output_mode', f"Invalid output mode: {self.output_mode}")
        if not isinstance(self.system_instructions, str):
            raise ConfigurationException('system_instructions', "System instructions must be text")
        if not isinstance(self.api_key, str):
            raise ConfigurationException('api_key', "API key must be text")

    def replace(self, **changes: Any) -> "RespondSettings":
        """Return a validated copy with the given fields changed."""
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigurationException(sorted(unknown)[0], f"Unknown setting: {sorted(unknown)[0]}")

        if 'chat_scope' in changes:
            changes['chat_scope'] = _coerce_enum(ChatScope, 'chat_scope', changes['chat_scope'])
        if 'output_mode' in changes:
            changes['output_mode'] = _coerce_enum(OutputMode, 'output_mode', changes['output_mode'])

        updated = dataclasses.replace(self, **changes)
        updated.validate()
        return updated


def _coerce_enum(enum_cls, key: str, value: Any):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as e:
        raise ConfigurationException(key, f"Invalid value for {key}: {value}") from e


class SettingsStore:
    """
    Owner of the responder settings.

    Loads the INI file once at construction and saves it after every
    successful update. Readers take the `settings` snapshot and pass it
    explicitly into each operation.
    """

    DEFAULT_CONFIG_PATH = "config/respond.ini"
    API_KEY_ENV = "OPENROUTER_API_KEY"

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH)
        self._config = configparser.ConfigParser(interpolation=None)
        self._settings = RespondSettings()
        self._load_config()

    @property
    def settings(self) -> RespondSettings:
        return self._settings

    def _load_config(self) -> None:
        """Load settings from file, falling back to defaults per field."""
        if self.config_path.exists():
            self._config.read(self.config_path, encoding='utf-8')
            logger.info(f"Loaded respond settings from {self.config_path}")
        else:
            logger.warning(f"Respond settings file not found: {self.config_path}. Using defaults.")

        defaults = RespondSettings()
        values: Dict[str, Any] = {
            'context_length': self._getint('respond', 'context_length', defaults.context_length),
            'model': self._get('respond', 'model', defaults.model),
            'chat_scope': self._get('respond', 'chat_scope', defaults.chat_scope.value),
            'system_instructions': self._get('respond', 'system_instructions', defaults.system_instructions),
            'output_mode': self._get('respond', 'output_mode', defaults.output_mode.value),
            'single_flight_per_channel': self._getboolean(
                'respond', 'single_flight_per_channel', defaults.single_flight_per_channel
            ),
            'show_debug_info': self._getboolean('debug', 'show_debug_info', defaults.show_debug_info),
            'show_token_count': self._getboolean('debug', 'show_token_count', defaults.show_token_count),
            'log_errors': self._getboolean('debug', 'log_errors', defaults.log_errors),
            'api_key': self._get('openrouter', 'api_key', '') or os.getenv(self.API_KEY_ENV, ''),
        }

        settings = defaults
        for key, value in values.items():
            try:
                settings = settings.replace(**{key: value})
            except ConfigurationException as e:
                logger.error(f"Invalid setting {key}={value!r}: {e.message}. Using default.")
        self._settings = settings

    def update(self, **changes: Any) -> RespondSettings:
        """
        Apply changes, persist them and return the new snapshot.

        Raises:
            ConfigurationException: If a value is invalid; nothing is saved
        """
        self._settings = self._settings.replace(**changes)
        self.save()
        logger.info(f"Respond settings updated: {', '.join(sorted(changes))}")
        return self._settings

    def save(self) -> None:
        """Write the current settings back to the INI file."""
        settings = self._settings
        self._config['respond'] = {
            'context_length': str(settings.context_length),
            'model': settings.model,
            'chat_scope': settings.chat_scope.value,
            'system_instructions': settings.system_instructions,
            'output_mode': settings.output_mode.value,
            'single_flight_per_channel': str(settings.single_flight_per_channel).lower(),
        }
        self._config['debug'] = {
            flag: str(getattr(settings, flag)).lower() for flag in DEBUG_FLAGS
        }
        # A key supplied through the environment stays out of the file
        stored_key = settings.api_key if settings.api_key != os.getenv(self.API_KEY_ENV, '') else ''
        self._config['openrouter'] = {'api_key': stored_key}

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            self._config.write(f)

    def reload(self) -> RespondSettings:
        """Reload settings from file."""
        self._config = configparser.ConfigParser(interpolation=None)
        self._load_config()
        logger.info("Respond settings reloaded")
        return self._settings

    def describe(self) -> List[Tuple[str, str]]:
        """Human readable (name, value) pairs with the API key masked."""
        settings = self._settings
        return [
            ("Context Length", f"{settings.context_length} messages"),
            ("Model", f"{model_label(settings.model)} (`{settings.model}`)"),
            ("Chat Scope", settings.chat_scope.value),
            ("Output Mode", settings.output_mode.value),
            ("System Instructions", settings.system_instructions or "*none*"),
            ("Show Debug Info", _on_off(settings.show_debug_info)),
            ("Show Token Count", _on_off(settings.show_token_count)),
            ("Log Errors", _on_off(settings.log_errors)),
            ("Single Flight Per Channel", _on_off(settings.single_flight_per_channel)),
            ("API Key", mask_secret(settings.api_key)),
        ]

    # Helper methods for config parsing
    def _get(self, section: str, key: str, fallback: Optional[str] = None) -> Optional[str]:
        """Get a string value from config."""
        try:
            return self._config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback

    def _getint(self, section: str, key: str, fallback: int = 0) -> int:
        """Get an integer value from config."""
        try:
            return self._config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback

    def _getboolean(self, section: str, key: str, fallback: bool = False) -> bool:
        """Get a boolean value from config."""
        try:
            return self._config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return fallback


def _on_off(value: bool) -> str:
    return "✅ On" if value else "❌ Off"
