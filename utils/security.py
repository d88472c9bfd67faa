"""
Password hashing and signed identity tokens.
Tokens use the compact JWT layout with HS256 so browser clients can decode the claims.
"""
import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Optional

from config import Config


class TokenError(ValueError):
    """Token is malformed, has a bad signature, or has expired."""


HASH_ALGORITHM = "pbkdf2_sha256"
TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def hash_password(password: str, iterations: Optional[int] = None, salt: Optional[str] = None) -> str:
    """
    Hash a password with PBKDF2-SHA256.

    Returns:
        "pbkdf2_sha256$<iterations>$<salt>$<hex digest>"
    """
    iterations = iterations or Config.PASSWORD_HASH_ITERATIONS
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a stored hash in constant time."""
    try:
        algorithm, iterations, salt, expected = stored_hash.split("$", 3)
        iterations = int(iterations)
    except (AttributeError, ValueError):
        return False

    if algorithm != HASH_ALGORITHM:
        return False

    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return hmac.compare_digest(digest.hex(), expected)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def _sign(signing_input: bytes, secret: str) -> str:
    return _b64encode(hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest())


def create_token(user_id: int, email: str, secret: Optional[str] = None, ttl_seconds: Optional[int] = None,
                 now: Optional[float] = None) -> str:
    """Issue a signed token carrying the user id and email."""
    secret = secret if secret is not None else Config.JWT_SECRET
    if not secret:
        raise TokenError("JWT_SECRET is not configured")

    issued_at = int(now if now is not None else time.time())
    ttl_seconds = ttl_seconds if ttl_seconds is not None else Config.TOKEN_TTL_SECONDS
    payload = {"id": user_id, "email": email, "iat": issued_at, "exp": issued_at + ttl_seconds}

    header_segment = _b64encode(json.dumps(TOKEN_HEADER, separators=(",", ":")).encode("utf-8"))
    payload_segment = _b64encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
    return f"{header_segment}.{payload_segment}.{_sign(signing_input, secret)}"


def verify_token(token: str, secret: Optional[str] = None, now: Optional[float] = None) -> dict:
    """
    Verify a token and return its claims.

    Raises:
        TokenError: on any malformed, forged or expired token
    """
    secret = secret if secret is not None else Config.JWT_SECRET
    if not secret:
        raise TokenError("JWT_SECRET is not configured")

    try:
        header_segment, payload_segment, signature = token.split(".")
        signing_input = f"{header_segment}.{payload_segment}".encode("ascii")
    except (AttributeError, ValueError):
        raise TokenError("Malformed token")

    if not hmac.compare_digest(_sign(signing_input, secret), signature):
        raise TokenError("Invalid token signature")

    try:
        header = json.loads(_b64decode(header_segment))
        claims = json.loads(_b64decode(payload_segment))
    except (ValueError, UnicodeDecodeError):
        raise TokenError("Malformed token")

    if header.get("alg") != TOKEN_HEADER["alg"]:
        raise TokenError("Unsupported token algorithm")

    current = now if now is not None else time.time()
    if not isinstance(claims.get("exp"), int) or claims["exp"] <= current:
        raise TokenError("Token has expired")
    if not isinstance(claims.get("id"), int):
        raise TokenError("Token has no user id")

    return claims
