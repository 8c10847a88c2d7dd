from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from typing import Optional

from fastapi import Depends, Request

from config import DEFAULT_TOKEN_MINUTES, load_config
from db.database import get_db
from db.users import resolve_owner
from utils.errors import AuthenticationError

PASSWORD_HASH_ALGO = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS = 200_000
BEARER_PREFIX = "bearer "


def _get_auth_config() -> dict:
    config = load_config()
    return config.get("auth", {})


def get_secret_key() -> str:
    return str(_get_auth_config().get("secret_key") or "")


def get_token_minutes() -> int:
    minutes = _get_auth_config().get("token_minutes", DEFAULT_TOKEN_MINUTES)
    try:
        return int(minutes)
    except (TypeError, ValueError):
        return DEFAULT_TOKEN_MINUTES


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    )
    digest = base64.urlsafe_b64encode(dk).decode("utf-8")
    return f"{PASSWORD_HASH_ALGO}${PASSWORD_HASH_ITERATIONS}${salt}${digest}"


def verify_password(password: str, stored_hash: str) -> bool:
    if not stored_hash:
        return False
    try:
        algo, iterations_str, salt, digest = stored_hash.split("$", 3)
    except ValueError:
        return False
    if algo != PASSWORD_HASH_ALGO:
        return False
    try:
        iterations = int(iterations_str)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
    )
    computed = base64.urlsafe_b64encode(dk).decode("utf-8")
    return hmac.compare_digest(computed, digest)


def _sign(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def create_access_token(username: str, duration_minutes: Optional[int] = None, secret: Optional[str] = None) -> str:
    """Issue a signed bearer token: base64url("username:expires_at").signature."""
    minutes = get_token_minutes() if duration_minutes is None else duration_minutes
    expires_at = int(time.time()) + int(minutes) * 60
    raw = f"{username}:{expires_at}".encode("utf-8")
    payload = base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")
    return f"{payload}.{_sign(payload, secret or get_secret_key())}"


def verify_access_token(token: Optional[str], secret: Optional[str] = None) -> Optional[str]:
    """Return the principal name for a valid, unexpired token, else None."""
    if not token:
        return None
    try:
        payload, signature = token.rsplit(".", 1)
    except ValueError:
        return None
    expected = _sign(payload, secret or get_secret_key())
    if not hmac.compare_digest(signature, expected):
        return None
    try:
        padded = payload + "=" * (-len(payload) % 4)
        username, expires_str = base64.urlsafe_b64decode(padded).decode("utf-8").rsplit(":", 1)
        expires_at = int(expires_str)
    except ValueError:
        return None
    if expires_at < int(time.time()):
        return None
    return username


def get_current_principal(request: Request) -> str:
    """FastAPI dependency: the principal name from the Authorization header."""
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise AuthenticationError()
    username = verify_access_token(header[len(BEARER_PREFIX):].strip())
    if not username:
        raise AuthenticationError("Invalid or expired token")
    return username


def get_current_owner_id(
    principal: str = Depends(get_current_principal),
    conn=Depends(get_db),
) -> int:
    """FastAPI dependency: the owner id behind the authenticated principal."""
    return resolve_owner(conn, principal)
