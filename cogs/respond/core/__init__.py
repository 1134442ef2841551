"""Core module - Framework-independent logic."""

from .config import (
    ChatScope,
    OutputMode,
    RespondSettings,
    SettingsStore,
    CONTEXT_LENGTH_CHOICES,
    MODEL_CHOICES,
    DEBUG_FLAGS,
)
from .exceptions import (
    RespondException,
    MissingApiKeyException,
    EmptyContextException,
    UpstreamException,
    EmptyChoicesException,
    MalformedResponseException,
    RequestInFlightException,
    ConfigurationException,
)
from .in_flight import InFlightGuard

__all__ = [
    'ChatScope',
    'OutputMode',
    'RespondSettings',
    'SettingsStore',
    'CONTEXT_LENGTH_CHOICES',
    'MODEL_CHOICES',
    'DEBUG_FLAGS',
    'RespondException',
    'MissingApiKeyException',
    'EmptyContextException',
    'UpstreamException',
    'EmptyChoicesException',
    'MalformedResponseException',
    'RequestInFlightException',
    'ConfigurationException',
    'InFlightGuard',
]
