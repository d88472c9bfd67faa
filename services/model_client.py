"""
Generative model client used by the assistant.
The assistant only depends on the ModelClient protocol; OllamaModelClient is the
production implementation and tests substitute a stub.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

import ollama

from utils.logger import app_logger

if TYPE_CHECKING:
    from models.chat_models import ConversationTurn


@dataclass(frozen=True)
class AssistantConfig:
    """Provider settings for the model client."""
    model: str
    host: Optional[str] = None
    api_key: Optional[str] = None
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, settings) -> "AssistantConfig":
        """Build from the application Config class."""
        return cls(
            model=settings.MODEL_NAME,
            host=settings.MODEL_HOST or None,
            api_key=settings.MODEL_API_KEY or None,
            timeout=settings.MODEL_TIMEOUT,
        )


class ModelClient(Protocol):
    """Anything that can turn an instruction, history and message into text."""

    async def generate_reply(
        self,
        system_instruction: str,
        history: Sequence["ConversationTurn"],
        message: str,
    ) -> str:
        ...


class OllamaModelClient:
    """ModelClient backed by ollama.AsyncClient."""

    ROLE_MAPPING = {
        "user": "user",
        "model": "assistant",
    }

    def __init__(self, config: AssistantConfig, client: Optional[ollama.AsyncClient] = None):
        self.config = config
        if client is None:
            headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else None
            client = ollama.AsyncClient(host=config.host, timeout=config.timeout, headers=headers)
        self._client = client

    def build_messages(self, system_instruction: str, history: Sequence["ConversationTurn"], message: str) -> list:
        """Build the chat messages list: system instruction, history, then the new message."""
        messages = [{"role": "system", "content": system_instruction}]
        for turn in history:
            messages.append({
                "role": self.ROLE_MAPPING[turn.role.value],
                "content": turn.text,
            })
        messages.append({"role": "user", "content": message})
        return messages

    async def generate_reply(
        self,
        system_instruction: str,
        history: Sequence["ConversationTurn"],
        message: str,
    ) -> str:
        """Send one chat call and return the reply text. Errors propagate to the caller."""
        messages = self.build_messages(system_instruction, history, message)
        app_logger.info(f"Calling model {self.config.model} with {len(messages)} messages")

        response = await self._client.chat(
            model=self.config.model,
            messages=messages
        )
        content = response['message']['content'] or ""
        app_logger.info(f"Model call completed: Generated {len(content)} characters")
        return content
