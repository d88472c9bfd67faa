"""
Authentication middleware for bearer token verification.
"""
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config import Config
from utils.logger import app_logger
from utils.security import TokenError, verify_token


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """
    Checks the Authorization: Bearer <token> header on /api routes and
    exposes the caller as request.state.user_id and request.state.user_email.
    """

    PROTECTED_PREFIX = "/api/"
    PUBLIC_ROUTES = {
        ("POST", "/api/signup"),
        ("POST", "/api/login"),
        ("GET", "/api/posts"),
    }

    def is_public(self, request: Request) -> bool:
        path = request.url.path.rstrip("/") or "/"
        if not path.startswith(self.PROTECTED_PREFIX):
            return True
        if request.method == "OPTIONS":
            return True
        return (request.method, path) in self.PUBLIC_ROUTES

    async def dispatch(self, request: Request, call_next):
        """
        Process each request and verify the bearer token.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in chain

        Returns:
            Response from next handler or error response
        """
        if self.is_public(request):
            return await call_next(request)

        if not Config.JWT_SECRET:
            app_logger.error("CRITICAL: JWT_SECRET not set in .env file!")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "detail": "Server misconfiguration: JWT_SECRET not set. Please configure JWT_SECRET in .env file.",
                    "error": "server_error"
                },
            )

        client_host = request.client.host if request.client else "unknown"
        scheme, _, token = request.headers.get("Authorization", "").partition(" ")

        if scheme.lower() != "bearer" or not token.strip():
            app_logger.warning(f"Unauthorized request from {client_host} - Missing bearer token")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "detail": "Missing token. Include 'Authorization: Bearer <token>' header in your request.",
                    "error": "unauthorized"
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            claims = verify_token(token.strip())
        except TokenError as e:
            app_logger.warning(f"Rejected token from {client_host} - {e}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "detail": "Invalid or expired token",
                    "error": "invalid_token"
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user_id = claims["id"]
        request.state.user_email = claims.get("email", "")

        response = await call_next(request)
        return response


def current_user_id(request: Request) -> int:
    """Dependency returning the authenticated caller's id."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user_id


def current_user_email(request: Request) -> str:
    """Dependency returning the authenticated caller's email."""
    current_user_id(request)
    return getattr(request.state, "user_email", "")
