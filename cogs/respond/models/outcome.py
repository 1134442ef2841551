"""Presentation outcome handed from the service layer to Discord."""

from dataclasses import dataclass
from typing import Optional
from enum import Enum

from .chat import GenerationResult


class OutcomeKind(Enum):
    """How the cog must render an outcome."""
    NOTICE = "notice"
    EPHEMERAL = "ephemeral"
    TYPEBAR = "typebar"


@dataclass
class RespondOutcome:
    """Text to show the invoking user, and how to show it."""

    kind: OutcomeKind
    content: str
    status_notice: Optional[str] = None
    result: Optional[GenerationResult] = None

    @classmethod
    def notice(cls, content: str) -> "RespondOutcome":
        return cls(kind=OutcomeKind.NOTICE, content=content)

    @property
    def is_notice(self) -> bool:
        return self.kind is OutcomeKind.NOTICE
