from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from fastapi import Depends, Request, Response
from jose import JWTError, jwt

from nikki.errors import Unauthenticated
from nikki.settings import Settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_token"
ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    secret = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:BCRYPT_MAX_BYTES], password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_session_token(user_id: str, secret: str, ttl_days: int = 7, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "userId": user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=ttl_days),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_session_token(token: str, secret: str) -> str | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("userId")
    return str(user_id) if user_id else None


def _token_from_request(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization") or ""
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


async def optional_user_id(request: Request) -> str | None:
    token = _token_from_request(request)
    if not token:
        return None
    return decode_session_token(token, request.app.state.settings.session_secret)


async def require_user_id(user_id: str | None = Depends(optional_user_id)) -> str:
    if not user_id:
        raise Unauthenticated()
    return user_id


def set_session_cookie(response: Response, user_id: str, settings: Settings) -> str:
    token = create_session_token(user_id, settings.session_secret, settings.session_ttl_days)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return token


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")
