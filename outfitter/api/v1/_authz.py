"""Shared authorization helpers for API v1 route modules."""

from __future__ import annotations

from outfitter.auth.rbac import require_scopes
from outfitter.core.config import get_config
from outfitter.core.dependencies import CurrentUser, get_current_user
from outfitter.core.exceptions import AuthenticationError, AuthorizationError


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(authorization: str | None, scopes: list[str]) -> CurrentUser:
    token = _extract_bearer_token(authorization)
    user = get_current_user(token=token, settings=get_config())
    require_scopes(user.role, scopes)
    return user


def authorize_outfitter(authorization: str | None, scopes: list[str]) -> CurrentUser:
    """Staff endpoints additionally need the outfitter the caller acts for."""
    user = authorize(authorization, scopes)
    if user.outfitter_id is None:
        raise AuthorizationError("Token is not bound to an outfitter.")
    return user
