"""Security utilities: JWT verification and invite code generation."""

import secrets
import string
from datetime import datetime, timedelta, timezone

import jwt

from privo.config import settings

CODE_ALPHABET = string.ascii_letters + string.digits


# --- JWT Tokens ---

def create_access_token(user_id: str, expires_in_minutes: int | None = None) -> str:
    """Issue a session token the way the identity provider does."""
    minutes = expires_in_minutes if expires_in_minutes is not None else settings.access_token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {
        "sub": user_id,
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


# --- Invite Codes ---

def generate_code(length: int | None = None) -> str:
    """Generate a random URL-safe alphanumeric code (12 chars ~ 71 bits)."""
    n = length or settings.invite_code_length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(n))
