"""
Typed failures raised by the conversation assistant.
"""
from typing import Optional


class AssistantError(Exception):
    """Base class for assistant failures. All of them end the current request."""

    error_type: str = "assistant_error"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage


class InvalidRequestError(AssistantError):
    """Prompt is empty or history entries cannot be repaired."""

    error_type = "invalid_request"


class ModelUnavailableError(AssistantError):
    """The generative model call failed (network, quota, provider error)."""

    error_type = "model_unavailable"


class MalformedReplyError(AssistantError):
    """The model reply holds no parseable JSON object of the expected shape."""

    error_type = "malformed_reply"
