"""Dependency providers for API handlers and background workers."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from outfitter.auth.jwt import decode_jwt
from outfitter.core.config import Config, get_config
from outfitter.core.exceptions import AuthenticationError
from outfitter.database.db import get_db
from outfitter.utils.validators import normalize_email


@dataclass(frozen=True)
class CurrentUser:
    subject: str
    email: str
    role: str
    outfitter_id: int | None
    claims: dict[str, Any]


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_current_user(token: str, settings: Config | None = None) -> CurrentUser:
    """Resolve the caller from a bearer token; email is normalized lower/trim."""
    cfg = settings or get_settings()
    claims = decode_jwt(token=token, secret=cfg.JWT_SECRET)
    try:
        email = normalize_email(claims.get("email"))
        role = str(claims["role"]).strip().lower()
        outfitter_id = claims.get("outfitter_id")
        user = CurrentUser(
            subject=str(claims["sub"]),
            email=email,
            role=role,
            outfitter_id=int(outfitter_id) if outfitter_id is not None else None,
            claims=claims,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc
    if not user.email:
        raise AuthenticationError("Token is missing email claim.")
    return user
