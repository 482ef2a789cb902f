"""Password hashing, session token encoding/verification and access-control primitives."""

import binascii
import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import IntEnum
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from jwt.utils import base64url_decode, base64url_encode

from clima.core.config import settings

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "

# Min/max lengths for identity and password inputs (input validation).
CORREO_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72


class Rol(IntEnum):
    """Role identifiers carried in the rol_id claim."""

    ADMINISTRADOR = 1
    USUARIO = 2


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    cost = rounds if rounds is not None else settings.BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


@lru_cache
def _dummy_hash() -> str:
    return hash_password("clima-dummy-password")


def verify_password_dummy(plain_password: str) -> bool:
    """
    Run one bcrypt verification against a throwaway hash and return False.

    Used when the identity is unknown so the response time matches a wrong password.
    """
    verify_password(plain_password, _dummy_hash())
    return False


def encode_token(
    claims: Mapping[str, Any],
    secret: str,
    ttl_seconds: int,
    issued_at: int | None = None,
) -> str:
    """
    Create a signed HS256 session token from claims, adding iat and exp (unix seconds).

    The header is serialized as {"typ":"JWT","alg":"HS256"} in that key order. Claims are
    signed as given; registered claim names (aud, iss, sub, ...) get no special treatment.
    """
    if ttl_seconds < 1:
        raise ValueError("ttl_seconds must be at least 1")
    now = int(datetime.now(UTC).timestamp()) if issued_at is None else int(issued_at)
    payload: dict[str, Any] = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + ttl_seconds
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return jwt.api_jws.encode(body, secret, algorithm=TOKEN_ALGORITHM, sort_headers=False)


def _is_canonical_segment(segment: str) -> bool:
    """True if segment is the exact unpadded base64url encoding of the bytes it decodes to."""
    try:
        raw = base64url_decode(segment)
    except (binascii.Error, ValueError):
        return False
    return base64url_encode(raw).decode("ascii") == segment


def decode_token(token: str, secret: str) -> dict[str, Any] | None:
    """
    Verify signature and expiry of a session token and return its claims.

    Returns None for any failure (malformed, bad signature, expired); the cause is
    only logged server-side so callers cannot tell the cases apart. Only exp is
    interpreted; every other claim is returned untouched.
    """
    if not isinstance(token, str) or token.count(".") != 2:
        logger.debug("Token rejected: wrong segment count")
        return None
    if not _is_canonical_segment(token.rsplit(".", 1)[1]):
        logger.debug("Token rejected: non-canonical signature segment")
        return None
    try:
        body = jwt.api_jws.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug("Token rejected: %s", type(e).__name__)
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        logger.debug("Token rejected: payload is not JSON")
        return None
    if not isinstance(payload, dict):
        logger.debug("Token rejected: payload is not an object")
        return None
    if "exp" in payload:
        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            logger.debug("Token rejected: exp is not a number")
            return None
        if exp <= datetime.now(UTC).timestamp():
            logger.debug("Token rejected: expired")
            return None
    return payload


def extract_bearer_token(raw_header: str | None, strict: bool = False) -> str | None:
    """
    Return the token from an Authorization header value, or None if there is none.

    A value without the "Bearer " prefix is taken whole as the token unless strict.
    """
    if raw_header is None:
        return None
    if raw_header.startswith(BEARER_PREFIX):
        token = raw_header[len(BEARER_PREFIX):]
    elif strict:
        return None
    else:
        token = raw_header
    if not token.strip():
        return None
    return token


def role_allows(claims: Mapping[str, Any], required_role: int) -> bool:
    """Exact match of the rol_id claim against required_role; no role hierarchy."""
    role = claims.get("rol_id")
    if isinstance(role, bool) or not isinstance(role, int):
        return False
    return role == int(required_role)
