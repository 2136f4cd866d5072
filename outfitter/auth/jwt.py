"""JWT token utilities using HS256 signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from outfitter.core.exceptions import AuthenticationError


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(f"{data}{padding}".encode("ascii"))


def _sign(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(digest)


def _json_dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    """Encode a signed JWT using HS256."""
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")

    now = datetime.now(timezone.utc)
    body = dict(payload)
    body.setdefault("iat", int(now.timestamp()))
    body.setdefault("exp", int((now + ttl).timestamp()))
    body.setdefault("jti", str(uuid.uuid4()))
    header = {"alg": "HS256", "typ": "JWT"}

    header_segment = _b64url_encode(_json_dumps(header).encode("utf-8"))
    payload_segment = _b64url_encode(_json_dumps(body).encode("utf-8"))
    signing_input = f"{header_segment}.{payload_segment}"
    return f"{signing_input}.{_sign(signing_input, secret=secret)}"


def decode_jwt(token: str, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Decode and validate a signed JWT token."""
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    try:
        header_segment, payload_segment, signature_segment = token.split(".")
    except ValueError as exc:
        raise AuthenticationError("Invalid token format.") from exc

    signing_input = f"{header_segment}.{payload_segment}"
    if not hmac.compare_digest(_sign(signing_input, secret=secret), signature_segment):
        raise AuthenticationError("Invalid token signature.")

    try:
        payload = json.loads(_b64url_decode(payload_segment).decode("utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise AuthenticationError("Invalid token payload.") from exc

    if verify_exp:
        exp = payload.get("exp")
        if exp is None:
            raise AuthenticationError("Token is missing exp claim.")
        if int(exp) < int(datetime.now(timezone.utc).timestamp()):
            raise AuthenticationError("Token has expired.")
    return payload


def create_access_token(
    subject: str,
    email: str,
    role: str,
    secret: str,
    outfitter_id: int | None = None,
    ttl_minutes: int = 60,
) -> str:
    """Create an access token carrying the caller's email, role and outfitter."""
    payload: dict[str, Any] = {
        "sub": str(subject),
        "email": email.strip().lower(),
        "role": role,
        "token_use": "access",
    }
    if outfitter_id is not None:
        payload["outfitter_id"] = outfitter_id
    return encode_jwt(payload=payload, secret=secret, ttl=timedelta(minutes=ttl_minutes))
