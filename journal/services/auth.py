"""Authentication utilities: password hashing and JWT access tokens."""

from datetime import datetime, timedelta, timezone
import re

import bcrypt
from jose import JWTError, jwt

from journal.config import settings

_PASSWORD_RULES = [
    (re.compile(r"[A-Z]"), "must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "must contain at least one number"),
]


def password_problems(password: str) -> list[str]:
    """Reasons a new password is too weak; empty when it is acceptable."""
    problems = []
    if len(password) < 8:
        problems.append("must be at least 8 characters")
    problems.extend(message for pattern, message in _PASSWORD_RULES if not pattern.search(password))
    return problems


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    pw = plain.encode("utf-8")[:72]
    return bcrypt.checkpw(pw, hashed.encode("utf-8"))


def create_access_token(user_id: int, email: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": str(user_id), "email": email, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int | None:
    """Decode JWT and return the user id. Returns None on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)
