"""Security helpers for hashing passwords and issuing session tokens."""

from __future__ import annotations

import secrets
import uuid

from passlib.context import CryptContext


_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return _pwd_context.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return _pwd_context.verify(plain_password, password_hash)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def new_user_id() -> str:
    return str(uuid.uuid4())
