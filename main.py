"""
Project Hub - FastAPI application for planning home-improvement projects.
Users keep project checklists and materials, share posts with the community,
and ask a generative-model assistant for structured project guidance.
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from config import Config
from routes import auth_routes, chat, ideas, posts, projects
from auth import BearerTokenMiddleware
from services.assistant_service import AssistantService
from services.model_client import AssistantConfig, OllamaModelClient
from utils.logger import app_logger
from utils.store import get_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    if getattr(app.state, "assistant", None) is None:
        assistant_config = AssistantConfig.from_settings(Config)
        app.state.assistant = AssistantService(OllamaModelClient(assistant_config))
        app_logger.info(f"Assistant ready with model {assistant_config.model}")
    get_store()
    yield

app = FastAPI(title=Config.APP_TITLE, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def format_bound(value) -> str:
    """Numeric constraint as written in a message: 0.0 and 0 both read as 0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g}"
    return str(value)


def describe_validation_error(error: dict) -> str:
    """Readable message for one pydantic error, naming the offending field."""
    error_type = error.get('type', '')
    loc = error.get('loc') or ()
    field = loc[-1] if loc else 'field'
    ctx = error.get('ctx') or {}

    if error_type == 'string_too_long':
        current_length = len(error.get('input') or '')
        return f"Field '{field}' exceeds maximum length of {ctx.get('max_length')} characters (current: {current_length})"
    if error_type == 'string_too_short':
        return f"Field '{field}' must not be empty"
    if error_type == 'greater_than_equal':
        return f"Field '{field}' must be at least {format_bound(ctx.get('ge'))}"
    if error_type == 'missing':
        return f"Field '{field}' is required"
    return f"{field}: {error.get('msg', 'Validation error')}"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first validation error only, as {"detail": [{"msg", "type", "loc"}]}."""
    errors = exc.errors()
    app_logger.warning(f"Validation error for {request.method} {request.url.path}: {len(errors)} error(s)")
    app_logger.debug(f"Errors: {errors}")

    first_error = errors[0] if errors else {}
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [{
                "msg": describe_validation_error(first_error) if first_error else "Validation error",
                "type": first_error.get('type', 'value_error'),
                "loc": list(first_error.get('loc', []))
            }]
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Service errors carry both "detail" and "message"; the browser client reads "message"."""
    if exc.status_code >= 500:
        app_logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.add_middleware(BearerTokenMiddleware)

#root endpoint
@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {"message": "Project Hub Server is running"}

app.include_router(auth_routes.router, tags=["auth"])
app.include_router(projects.router, tags=["projects"])
app.include_router(posts.router, tags=["posts"])
app.include_router(ideas.router, tags=["ideas"])
app.include_router(chat.router, tags=["assistant"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
