"""Services module - Business logic layer (framework-independent)."""

from .completion_client import OpenRouterClient, build_request, OPENROUTER_URL
from .context_collector import ContextCollector
from .respond_service import RespondService, is_scope_allowed
from .response_interpreter import (
    DEBUG_HEADER,
    estimate_cost,
    estimate_tokens,
    extract_text,
    format_debug_info,
)

__all__ = [
    "OpenRouterClient",
    "build_request",
    "OPENROUTER_URL",
    "ContextCollector",
    "RespondService",
    "is_scope_allowed",
    "estimate_cost",
    "estimate_tokens",
    "extract_text",
    "format_debug_info",
    "DEBUG_HEADER",
]
