"""Interpretation of completion responses: text, token and cost estimates."""

import math
from typing import Iterable

from ..core.exceptions import EmptyChoicesException
from ..models.chat import ChatMessage, CompletionResponse, Usage

PROMPT_COST_PER_1K = 0.0001
COMPLETION_COST_PER_1K = 0.0002

DEBUG_HEADER = "**Debug Info:**"


def extract_text(response: CompletionResponse) -> str:
    """
    Get the generated text of the first choice.

    Raises:
        EmptyChoicesException: If the response has no choices or the first one is blank
    """
    if not response.choices:
        raise EmptyChoicesException(response.id)

    text = response.choices[0].text
    if not text.strip():
        raise EmptyChoicesException(response.id, "returned a blank message")
    return text


def estimate_tokens(messages: Iterable[ChatMessage]) -> int:
    """
    Rough token count: one token per four characters.

    This is not the model's tokenizer; the API's usage record is authoritative.
    """
    total_chars = sum(len(message.content) for message in messages)
    return math.ceil(total_chars / 4)


def estimate_cost(usage: Usage) -> float:
    """Estimated dollar cost of a completion from its reported usage."""
    prompt_cost = (usage.prompt_tokens / 1000) * PROMPT_COST_PER_1K
    completion_cost = (usage.completion_tokens / 1000) * COMPLETION_COST_PER_1K
    return prompt_cost + completion_cost


def format_debug_info(response: CompletionResponse) -> str:
    """Format the model, token usage and cost estimate of a response."""
    lines = [
        DEBUG_HEADER,
        f"- Model: {response.model}",
    ]

    usage = response.usage
    if usage is None:
        lines.append("- Usage: unavailable")
    else:
        lines.extend([
            f"- Prompt Tokens: {usage.prompt_tokens}",
            f"- Completion Tokens: {usage.completion_tokens}",
            f"- Total Tokens: {usage.total_tokens}",
            f"- Estimated Cost: ${estimate_cost(usage):.6f} (Free)",
        ])

    return "\n".join(lines)
