"""User registration, password hashing and JWT issuance."""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt as _bcrypt
from jose import JWTError, jwt

from docbrief.core.config import get_settings
from docbrief.models.documents import UserRecord

ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return _bcrypt.hashpw(password.encode("utf-8"), _bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return _bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(user: UserRecord) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    claims = {"sub": user.id, "email": user.email, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Decode a JWT token. Returns payload dict or None if invalid/expired."""
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
    except (JWTError, ValueError, TypeError):
        return None
    if not payload.get("sub"):
        return None
    return payload


class UserStore:
    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self._users.clear()

    def register(self, *, email: str, password: str, name: str) -> UserRecord:
        """Create a user.

        Raises:
            ValueError: If a user with this email already exists
        """
        key = email.strip().lower()
        record = UserRecord(
            id=str(uuid.uuid4()),
            email=key,
            name=name.strip(),
            password_hash=hash_password(password),
        )
        with self._lock:
            if key in self._users:
                raise ValueError("User already exists")
            self._users[key] = record
        return record

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        with self._lock:
            record = self._users.get(email.strip().lower())
        if record is None or not verify_password(password, record.password_hash):
            return None
        return record


USER_STORE = UserStore()
