"""
Route handler for the project assistant.
Handles the /api/chat endpoint (non-streaming).
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from auth import current_user_id
from models.api_models import ChatRequest
from services.assistant_service import AssistantService
from services.errors import AssistantError, InvalidRequestError, MalformedReplyError, ModelUnavailableError
from utils.constants import ASSISTANT_UNAVAILABLE_MESSAGE
from utils.logger import app_logger

router = APIRouter()

ERROR_STATUS = {
    InvalidRequestError: status.HTTP_400_BAD_REQUEST,
    MalformedReplyError: status.HTTP_502_BAD_GATEWAY,
    ModelUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_assistant(request: Request) -> AssistantService:
    """The AssistantService built at startup."""
    return request.app.state.assistant


def send_assistant_error(e: AssistantError) -> JSONResponse:
    """Map an assistant failure to a response. Only request errors echo their message."""
    status_code = ERROR_STATUS.get(type(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    message = e.message if isinstance(e, InvalidRequestError) else ASSISTANT_UNAVAILABLE_MESSAGE
    return JSONResponse(
        status_code=status_code,
        content={"error": e.error_type, "message": message}
    )


@router.post("/api/chat")
async def chat(request: ChatRequest, user_id: int = Depends(current_user_id),
               assistant: AssistantService = Depends(get_assistant)):
    """
    Ask the project assistant. The caller resends the conversation history each turn.
    """
    try:
        reply = await assistant.ask(request.history, request.prompt, request.context)
        app_logger.info(f"Assistant replied to user {user_id} with {len(reply.steps)} steps")
        return reply.model_dump()

    except AssistantError as e:
        app_logger.error(f"Chat error for user {user_id}: {e.error_type} at {e.stage}")
        return send_assistant_error(e)
