"""Chat message and completion models."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from ..core.exceptions import MalformedResponseException


@dataclass(frozen=True)
class Author:
    """Author of a cached chat message."""

    display_name: str
    is_bot: bool = False


@dataclass(frozen=True)
class ChatMessage:
    """A single role-tagged message sent to the completion API."""

    content: str
    role: str = "user"
    author: Optional[Author] = None

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class CompletionRequest:
    """Body of a chat completion request."""

    model: str
    messages: List[ChatMessage]
    temperature: float = 0.7
    max_tokens: int = 1024
    stream: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Serialize the request into the JSON body expected by OpenRouter."""
        return {
            "model": self.model,
            "messages": [message.to_payload() for message in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": self.stream,
        }


@dataclass(frozen=True)
class Choice:
    """One generated alternative of a completion."""

    text: str
    finish_reason: Optional[str] = None
    index: int = 0
    role: str = "assistant"


@dataclass(frozen=True)
class Usage:
    """Token usage reported by the API."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class CompletionResponse:
    """Parsed chat completion response."""

    id: str
    model: str
    choices: List[Choice] = field(default_factory=list)
    usage: Optional[Usage] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompletionResponse":
        """
        Build a response from the decoded JSON body.

        Args:
            data: Decoded response body

        Returns:
            CompletionResponse instance

        Raises:
            MalformedResponseException: If the body does not have the expected shape
        """
        if not isinstance(data, dict):
            raise MalformedResponseException(f"Expected a JSON object, got {type(data).__name__}")

        try:
            choices = []
            for position, raw in enumerate(data["choices"]):
                content = raw["message"]["content"]
                if not isinstance(content, str):
                    raise MalformedResponseException(
                        f"Choice {position} content is {type(content).__name__}, expected str"
                    )
                choices.append(Choice(
                    text=content,
                    finish_reason=raw.get("finish_reason"),
                    index=raw.get("index", position),
                    role=raw["message"].get("role", "assistant"),
                ))

            usage = None
            raw_usage = data.get("usage")
            if raw_usage:
                usage = Usage(
                    prompt_tokens=int(raw_usage["prompt_tokens"]),
                    completion_tokens=int(raw_usage["completion_tokens"]),
                    total_tokens=int(raw_usage["total_tokens"]),
                )

            return cls(
                id=data.get("id", ""),
                model=data.get("model", ""),
                choices=choices,
                usage=usage,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseException("Unexpected completion response shape", e)


@dataclass
class GenerationResult:
    """Outcome of a successful completion round trip."""

    text: str
    request: CompletionRequest
    response: CompletionResponse
