from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from peiwan.core.config import settings
from peiwan.models import Role, User

password_hasher = PasswordHasher()


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    role: Role


def get_password_hash(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return password_hasher.verify(hashed_password, password)
    except (VerificationError, InvalidHashError):
        return False


def password_needs_rehash(hashed_password: str) -> bool:
    return password_hasher.check_needs_rehash(hashed_password)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    claims = dict(data)
    claims["exp"] = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_user_token(user: User, *, remember_me: bool = False) -> str:
    expires_delta = None
    if remember_me:
        expires_delta = timedelta(days=settings.remember_me_access_token_expire_days)
    return create_access_token({"sub": str(user.id), "role": user.role.value}, expires_delta)


def decode_access_token(token: str) -> TokenPayload:
    """Decode a bearer token; raises ``ValueError`` when it is invalid or expired."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc

    try:
        return TokenPayload(user_id=int(claims["sub"]), role=Role(claims["role"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError("Malformed token claims") from exc
