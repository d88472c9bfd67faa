"""
Configuration module for the Project Hub application.
Handles environment variables and application settings.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration class."""

    # Secrets
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    MODEL_API_KEY: str = os.getenv("MODEL_API_KEY", "")

    # Application Settings
    APP_TITLE: str = "Project Hub"
    DATA_FILE: str = os.getenv("DATA_FILE", "data/db.json")
    MAX_PROMPT_LENGTH: int = int(os.getenv("MAX_PROMPT_LENGTH", "4000"))
    MAX_POST_LENGTH: int = 2000

    # Identity
    TOKEN_TTL_SECONDS: int = int(os.getenv("TOKEN_TTL_SECONDS", "3600"))
    PASSWORD_HASH_ITERATIONS: int = int(os.getenv("PASSWORD_HASH_ITERATIONS", "200000"))
    MIN_PASSWORD_LENGTH: int = 6

    # Generative model
    MODEL_NAME: str = os.getenv("MODEL_NAME", "llama3.2:3b")
    MODEL_HOST: str = os.getenv("MODEL_HOST", "http://localhost:11434")

    # Timeouts (in seconds)
    MODEL_TIMEOUT: float = float(os.getenv("MODEL_TIMEOUT", "60.0"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and print warnings for missing secrets."""
        if not cls.JWT_SECRET:
            print("   WARNING: JWT_SECRET not found in .env file")
            print("   Login will be refused until a signing secret is configured.")

        if not cls.MODEL_API_KEY and not cls.MODEL_HOST.startswith("http://localhost"):
            print("   WARNING: MODEL_API_KEY not found in .env file")
            print(f"   Requests to {cls.MODEL_HOST} will be sent without credentials.")

Config.validate()
