"""
Assistant service containing the conversational core.
Handles history sanitization, system instruction building, the model call,
and extraction of the structured reply from free-form model text.
"""
import json
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from models.api_models import ProjectContext, StructuredReply
from models.chat_models import (
    AssistantContext,
    AssistantStage,
    ConversationTurn,
    StructuredContent,
    TextContent,
)
from services.errors import (
    AssistantError,
    InvalidRequestError,
    MalformedReplyError,
    ModelUnavailableError,
)
from services.model_client import ModelClient
from utils.constants import (
    ASSISTANT_SYSTEM_INSTRUCTION,
    MAX_RESEARCH_QUESTIONS,
    MIN_RESEARCH_QUESTIONS,
)
from utils.logger import app_logger


class AssistantService:
    """Service for answering project questions through the generative model."""

    def __init__(self, client: ModelClient):
        self.client = client

    @staticmethod
    def parse_history(raw_history: Optional[Iterable[Any]]) -> list[ConversationTurn]:
        """Parse caller-supplied history entries into turns."""
        if not raw_history:
            return []
        if isinstance(raw_history, (str, bytes, Mapping)):
            raise InvalidRequestError("History must be a list of turns")
        return [ConversationTurn.from_raw(entry, index) for index, entry in enumerate(raw_history)]

    @staticmethod
    def serialize_content(data: Any) -> str:
        """Canonical text form of structured turn content."""
        return json.dumps(data, ensure_ascii=False, default=str)

    @staticmethod
    def sanitize_history(turns: Iterable[ConversationTurn]) -> list[ConversationTurn]:
        """
        Collapse every turn to plain text content, preserving order and count.

        Model turns stored as structured objects are serialized to JSON text.
        User turns with non-text content get the same treatment.
        """
        sanitized = []
        for turn in turns:
            content = turn.content
            if isinstance(content, TextContent):
                sanitized.append(turn)
            elif isinstance(content, StructuredContent):
                text = AssistantService.serialize_content(content.data)
                sanitized.append(ConversationTurn(role=turn.role, content=TextContent(text)))
            else:
                raise InvalidRequestError(f"Unsupported turn content: {type(content).__name__}")
        return sanitized

    @staticmethod
    def parse_context(context: Union[ProjectContext, Mapping, None]) -> ProjectContext:
        """Coerce the caller's context into a ProjectContext. Missing fields become empty lists."""
        if isinstance(context, ProjectContext):
            return context
        if context is None:
            return ProjectContext()
        if not isinstance(context, Mapping):
            raise InvalidRequestError("Context must be an object")
        try:
            return ProjectContext.model_validate(dict(context))
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid project context: {e.errors()[0].get('msg', 'invalid value')}") from e

    @staticmethod
    def build_instruction(context: Union[ProjectContext, Mapping, None] = None) -> str:
        """Build the system instruction with the current checklist and materials embedded."""
        project = AssistantService.parse_context(context)
        todos = [todo.model_dump() for todo in project.todos]
        materials = [material.model_dump() for material in project.materials]

        return ASSISTANT_SYSTEM_INSTRUCTION.format(
            todos=json.dumps(todos, ensure_ascii=False),
            materials=json.dumps(materials, ensure_ascii=False)
        )

    @staticmethod
    def extract_reply(raw_text: Optional[str]) -> StructuredReply:
        """
        Recover a StructuredReply from raw model text.

        Takes the span from the first '{' to the last '}' so prose or code fences
        around the object are ignored.

        Raises:
            MalformedReplyError: no brace span, unparseable JSON, or wrong field types
        """
        text = raw_text or ""
        start = text.find("{")
        end = text.rfind("}")

        if start == -1 or end == -1 or end < start:
            raise MalformedReplyError("Model reply contains no JSON object")

        candidate = text[start:end + 1]
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise MalformedReplyError(f"Model reply is not valid JSON: {e.msg}") from e

        if not isinstance(parsed, dict):
            raise MalformedReplyError("Model reply JSON is not an object")

        try:
            reply = StructuredReply.model_validate(parsed)
        except ValidationError as e:
            first_error = e.errors()[0]
            field = (first_error.get('loc') or ('reply',))[0]
            raise MalformedReplyError(f"Model reply field '{field}': {first_error.get('msg')}") from e

        if not reply.summary:
            app_logger.warning("Model reply has an empty summary")

        question_count = len(reply.questions)
        if not MIN_RESEARCH_QUESTIONS <= question_count <= MAX_RESEARCH_QUESTIONS:
            app_logger.warning(
                f"Model reply has {question_count} research questions "
                f"(expected {MIN_RESEARCH_QUESTIONS}-{MAX_RESEARCH_QUESTIONS})"
            )

        return reply

    async def _invoke_model(self, context: AssistantContext) -> str:
        """Single model call. Any client failure becomes ModelUnavailableError."""
        try:
            raw_reply = await self.client.generate_reply(
                context.system_instruction,
                context.history,
                context.prompt
            )
        except Exception as e:
            app_logger.error(f"Model call failed: {type(e).__name__}: {e}")
            raise ModelUnavailableError("Generative model call failed") from e

        if not isinstance(raw_reply, str):
            raise MalformedReplyError(f"Model reply is {type(raw_reply).__name__}, expected text")
        return raw_reply

    async def ask(
        self,
        history: Optional[Iterable[Any]],
        prompt: Optional[str],
        context: Union[ProjectContext, Mapping, None] = None,
    ) -> StructuredReply:
        """
        Answer one user message for a project.

        Args:
            history: prior turns as {"role", "content"} objects, oldest first
            prompt: the new user message
            context: current project todos and materials

        Returns:
            The validated StructuredReply

        Raises:
            InvalidRequestError, ModelUnavailableError, MalformedReplyError
        """
        assistant_context = AssistantContext(prompt=prompt if isinstance(prompt, str) else "")
        return await self.process(assistant_context, history, context)

    async def process(
        self,
        assistant_context: AssistantContext,
        history: Optional[Iterable[Any]] = None,
        context: Union[ProjectContext, Mapping, None] = None,
    ) -> StructuredReply:
        """Drive one request from RECEIVED to EXTRACTED, or to FAILED on the first error."""
        try:
            if not assistant_context.prompt.strip():
                raise InvalidRequestError("Prompt must not be empty")

            assistant_context.history = self.sanitize_history(self.parse_history(history))
            assistant_context.project = self.parse_context(context)
            assistant_context.advance(AssistantStage.SANITIZED)

            assistant_context.system_instruction = self.build_instruction(assistant_context.project)
            assistant_context.advance(AssistantStage.PROMPT_BUILT)

            app_logger.info(f"Asking assistant with {len(assistant_context.history)} history turns")
            assistant_context.raw_reply = await self._invoke_model(assistant_context)
            assistant_context.advance(AssistantStage.MODEL_INVOKED)
            app_logger.debug(f"Raw reply preview: {assistant_context.raw_reply[:100]}...")

            assistant_context.reply = self.extract_reply(assistant_context.raw_reply)
            assistant_context.advance(AssistantStage.EXTRACTED)
            return assistant_context.reply

        except AssistantError as e:
            if e.stage is None:
                e.stage = assistant_context.stage.value
            assistant_context.advance(AssistantStage.FAILED)
            app_logger.error(f"Assistant failed after stage '{e.stage}' ({e.error_type}): {e.message}")
            raise
