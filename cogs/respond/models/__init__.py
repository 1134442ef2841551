"""Models module - Data structures."""

from .chat import (
    Author,
    ChatMessage,
    Choice,
    CompletionRequest,
    CompletionResponse,
    GenerationResult,
    Usage,
)
from .outcome import OutcomeKind, RespondOutcome

__all__ = [
    'Author',
    'ChatMessage',
    'Choice',
    'CompletionRequest',
    'CompletionResponse',
    'GenerationResult',
    'Usage',
    'OutcomeKind',
    'RespondOutcome',
]
