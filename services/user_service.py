"""
User service: sign-up and login against the JSON store.
"""
from datetime import datetime, timezone

from fastapi import HTTPException, status

from config import Config
from models.api_models import Credentials
from utils.logger import app_logger
from utils.security import TokenError, create_token, hash_password, verify_password
from utils.store import JsonStore


class UserService:
    """Service for account handling."""

    @staticmethod
    def public_view(user: dict) -> dict:
        """User fields safe to return to clients."""
        return {"id": user["id"], "email": user["email"]}

    @staticmethod
    def find_by_email(users: list, email: str) -> dict | None:
        email = email.strip().lower()
        return next((user for user in users if user.get("email", "").lower() == email), None)

    @staticmethod
    def signup(store: JsonStore, credentials: Credentials) -> dict:
        """Create an account. Raises 400 for a weak password and 409 for a taken email."""
        if len(credentials.password) < Config.MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {Config.MIN_PASSWORD_LENGTH} characters"
            )

        with store.transaction() as data:
            if UserService.find_by_email(data["users"], credentials.email):
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="User with this email already exists"
                )

            user = {
                "id": store.next_id(data["users"]),
                "email": credentials.email,
                "passwordHash": hash_password(credentials.password),
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            data["users"].append(user)

        app_logger.info(f"New user registered: {user['id']}")
        return UserService.public_view(user)

    @staticmethod
    def login(store: JsonStore, credentials: Credentials) -> dict:
        """Check credentials and issue a token. Raises 401 on any mismatch."""
        user = UserService.find_by_email(store.read_all()["users"], credentials.email)

        if not user or not verify_password(credentials.password, user.get("passwordHash", "")):
            app_logger.warning("Failed login attempt")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        try:
            token = create_token(user["id"], user["email"])
        except TokenError as e:
            app_logger.error(f"Cannot issue token: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: token signing is unavailable"
            )

        app_logger.info(f"User logged in: {user['id']}")
        return {"token": token, "user": UserService.public_view(user)}
