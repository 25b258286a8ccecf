"""
Token issuing and validation for the dev backend.
Access tokens are HS256 JWTs; refresh tokens are opaque and rotated on every use.
"""
import logging
import secrets
import time
from dataclasses import dataclass

import jwt

from dev_backend.config import ACCESS_TOKEN_EXPIRES, ALGORITHM, REFRESH_TOKEN_EXPIRES, SECRET_KEY

logger = logging.getLogger(__name__)


@dataclass
class RefreshRecord:
    user_id: str
    expires_at: float


_refresh_tokens: dict[str, RefreshRecord] = {}
refresh_calls = 0


def issue_access_token(user_id: str, expires_in: int = ACCESS_TOKEN_EXPIRES) -> str:
    now = int(time.time())
    payload = {"sub": user_id, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Claims for a valid token, None when invalid or expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Access token rejected: %s", e)
        return None


def issue_refresh_token(user_id: str, expires_in: int = REFRESH_TOKEN_EXPIRES) -> str:
    token = secrets.token_urlsafe(32)
    _refresh_tokens[token] = RefreshRecord(user_id=user_id, expires_at=time.time() + expires_in)
    return token


def rotate_refresh_token(token: str) -> tuple[str, str] | None:
    """Consume a refresh token. Returns (user_id, new_refresh_token) or None if unknown/expired."""
    global refresh_calls
    refresh_calls += 1
    record = _refresh_tokens.pop(token, None)
    if record is None or record.expires_at < time.time():
        return None
    return record.user_id, issue_refresh_token(record.user_id)


def reset() -> None:
    """Forget all refresh tokens and counters (tests)."""
    global refresh_calls
    _refresh_tokens.clear()
    refresh_calls = 0
