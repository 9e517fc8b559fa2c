"""Password hashing and caller identity helpers.

Authentication happens upstream: the gateway validates the session and
forwards the caller's identity in ``X-Auth-Email`` / ``X-Auth-Admin``.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Optional

import bcrypt
from fastapi import Depends, Header, HTTPException, status

from .config import get_settings

# No 0/O, 1/l/I: generated passwords are read off printed rosters.
PASSWORD_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnpqrstuvwxyz23456789"


def get_password_hash(password: str) -> str:
    """Hash password with the configured bcrypt cost factor."""
    # Bcrypt has a 72 byte limit
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=get_settings().bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password; accounts without a hash never match."""
    if not hashed_password:
        return False
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def generate_password(length: Optional[int] = None) -> str:
    """Return a random password drawn from an unambiguous alphabet."""
    length = length or get_settings().generated_password_length
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller."""

    email: str
    is_admin: bool = False


def get_auth_context(
    x_auth_email: Optional[str] = Header(default=None),
    x_auth_admin: Optional[str] = Header(default=None),
) -> AuthContext:
    """Build the caller identity from gateway headers."""

    if not x_auth_email or not x_auth_email.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    is_admin = (x_auth_admin or "").strip().lower() in {"1", "true", "yes"}
    return AuthContext(email=x_auth_email.strip().lower(), is_admin=is_admin)


def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Reject callers without the administrative capability."""

    if not auth.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return auth
