"""
Pydantic data models for API requests and responses.
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import Config


class Credentials(BaseModel):
    """Sign-up and login payload."""
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        value = value.strip().lower()
        if "@" not in value or value.startswith("@") or value.endswith("@"):
            raise ValueError("must be a valid email address")
        return value


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)


class TodoCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)


class MaterialCreate(BaseModel):
    """Material line item. The client sends quantity as free text and cost as a number or numeric string."""
    name: str = Field(..., min_length=1, max_length=200)
    quantity: str = Field("", max_length=100)
    cost: float = Field(0.0, ge=0)

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("cost", mode="before")
    @classmethod
    def empty_cost_is_zero(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0.0
        return value


class PostCreate(BaseModel):
    content: str = Field(..., max_length=Config.MAX_POST_LENGTH)


class TodoSnapshot(BaseModel):
    """Checklist item as sent in the chat context."""
    id: Union[int, str, None] = None
    text: str = ""
    completed: bool = False

    @model_validator(mode="before")
    @classmethod
    def plain_text_todo(cls, value: Any) -> Any:
        """Older clients send checklist items as bare strings."""
        if isinstance(value, str):
            return {"text": value}
        return value


class MaterialSnapshot(BaseModel):
    """Material line item as sent in the chat context."""
    id: Union[int, str, None] = None
    name: str = ""
    quantity: Union[str, int, float, None] = None
    cost: Union[float, int, str, None] = None


class ProjectContext(BaseModel):
    """Read-only snapshot of the project the user is chatting about."""
    todos: List[TodoSnapshot] = Field(default_factory=list)
    materials: List[MaterialSnapshot] = Field(default_factory=list)

    @field_validator("todos", "materials", mode="before")
    @classmethod
    def missing_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class StructuredReply(BaseModel):
    """Assistant answer in the four-field shape the client renders."""
    model_config = ConfigDict(extra="ignore")

    summary: str = ""
    materials: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def missing_summary_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("materials", "steps", "questions", mode="before")
    @classmethod
    def missing_list_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ChatRequest(BaseModel):
    """Chat request model with caller-held conversation history."""
    prompt: str = Field("", max_length=Config.MAX_PROMPT_LENGTH)
    history: Optional[List[Any]] = None
    context: Optional[Dict[str, Any]] = None
