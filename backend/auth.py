"""
Admin auth: one shared password, verified with passlib, exchanged for a
short-lived JWT that gates /api/admin/*.
"""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from passlib.context import CryptContext
from jose import JWTError, jwt

# Use pbkdf2_sha256 to avoid bcrypt backend init (passlib's bcrypt runs a 72+ byte test and raises)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 12
ADMIN_SUBJECT = "admin"


def _secret_key() -> str:
    return os.environ.get("JWT_SECRET_KEY", "survivor-pool-dev-secret-change-in-production")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


@lru_cache(maxsize=4)
def _hash_for(plain: str) -> str:
    return hash_password(plain)


def admin_password_hash() -> str:
    """ADMIN_PASSWORD_HASH if set, else a hash of ADMIN_PASSWORD. Empty means admin login is disabled."""
    hashed = os.environ.get("ADMIN_PASSWORD_HASH", "").strip()
    if hashed:
        return hashed
    plain = os.environ.get("ADMIN_PASSWORD", "")
    return _hash_for(plain) if plain else ""


def check_admin_password(password: str) -> bool:
    return verify_password(password, admin_password_hash())


def create_access_token(subject: str = ADMIN_SUBJECT) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, _secret_key(), algorithm=ALGORITHM)


def decode_token(token: str) -> str | None:
    try:
        payload = jwt.decode(token, _secret_key(), algorithms=[ALGORITHM])
        return payload.get("sub")
    except JWTError:
        return None


def is_admin_token(token: str | None) -> bool:
    return bool(token) and decode_token(token) == ADMIN_SUBJECT
