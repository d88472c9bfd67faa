"""
Data models for assistant processing.
Contains conversation turns, their tagged content, and the per-request context.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union

from models.api_models import ProjectContext, StructuredReply
from services.errors import InvalidRequestError
from utils.logger import app_logger


class TurnRole(Enum):
    """Author of a conversation turn."""
    USER = "user"
    MODEL = "model"

    @classmethod
    def parse(cls, raw: Any) -> "TurnRole":
        """Map a wire role to a TurnRole. "assistant" is accepted for model turns."""
        if isinstance(raw, str):
            value = raw.strip().lower()
            if value == "assistant":
                return cls.MODEL
            for role in cls:
                if role.value == value:
                    return role
        raise InvalidRequestError(f"Unknown history role: {raw!r}")


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class StructuredContent:
    """Non-text content, typically a prior StructuredReply stored as an object."""
    data: Any


TurnContent = Union[TextContent, StructuredContent]


@dataclass(frozen=True)
class ConversationTurn:
    role: TurnRole
    content: TurnContent

    @classmethod
    def from_raw(cls, raw: Any, index: int = 0) -> "ConversationTurn":
        """
        Build a turn from a caller-supplied history entry.

        Raises:
            InvalidRequestError: entry is not an object or has no usable role
        """
        if isinstance(raw, ConversationTurn):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidRequestError(f"History entry {index} must be an object")
        if "role" not in raw:
            raise InvalidRequestError(f"History entry {index} is missing 'role'")

        role = TurnRole.parse(raw["role"])
        content = raw.get("content")

        if content is None:
            app_logger.debug(f"History entry {index} has no content, using empty text")
            return cls(role=role, content=TextContent(""))
        if isinstance(content, str):
            return cls(role=role, content=TextContent(content))
        if isinstance(content, StructuredReply):
            content = content.model_dump()
        return cls(role=role, content=StructuredContent(content))

    @property
    def text(self) -> str:
        """Plain text of a sanitized turn."""
        if not isinstance(self.content, TextContent):
            raise TypeError("Turn content is not text; sanitize the history first")
        return self.content.text


class AssistantStage(Enum):
    """Stages a single assistant request moves through."""
    RECEIVED = "received"
    SANITIZED = "sanitized"
    PROMPT_BUILT = "prompt_built"
    MODEL_INVOKED = "model_invoked"
    EXTRACTED = "extracted"
    FAILED = "failed"


@dataclass
class AssistantContext:
    """
    Request-scoped state for one assistant call.
    Created per request and discarded once the reply is returned.
    """
    prompt: str
    history: list = field(default_factory=list)
    project: ProjectContext = field(default_factory=ProjectContext)
    stage: AssistantStage = AssistantStage.RECEIVED
    system_instruction: Optional[str] = None
    raw_reply: Optional[str] = None
    reply: Optional[StructuredReply] = None
    transitions: list = field(default_factory=list)

    def advance(self, stage: AssistantStage) -> None:
        """Move to the next stage and record it."""
        app_logger.debug(f"Assistant stage: {self.stage.value} -> {stage.value}")
        self.transitions.append(stage)
        self.stage = stage
