# route_planner/api/services/auth_service.py
"""Service layer for user accounts and auth tokens."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
from jose import JWTError, jwt

from route_planner.api.config import get_jwt_secret
from route_planner.api.errors import AuthenticationError, NotFoundError, ValidationError
from route_planner.api.services.route_service import utc_timestamp
from route_planner.api.storage import KeyValueStore

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=24)

# Fields a user may change through update_profile
EDITABLE_FIELDS = ("username", "email", "avatar", "password")

# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Raises:
        ValidationError: If the password is longer than bcrypt accepts
    """
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Пароль не должен превышать {MAX_PASSWORD_BYTES} байта")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User fields safe to return to clients."""
    return {
        "id": user["id"],
        "username": user.get("username"),
        "email": user.get("email"),
        "joinDate": user.get("joinDate"),
        "avatar": user.get("avatar"),
    }


class AuthService:
    """Registration, login and profile updates over the shared user store."""

    def __init__(self, users: KeyValueStore, secret: Optional[str] = None):
        self.users = users
        self._secret = secret

    @property
    def secret(self) -> str:
        if self._secret is None:
            self._secret = get_jwt_secret()
        return self._secret

    def create_token(self, user_id: str) -> str:
        payload = {
            "id": user_id,
            "exp": datetime.now(timezone.utc) + TOKEN_LIFETIME,
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by ``token``.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except JWTError as e:
            raise AuthenticationError("Недействительный токен") from e
        user_id = payload.get("id")
        if not user_id:
            raise AuthenticationError("Недействительный токен")
        return user_id

    def _check_unique(self, username: Optional[str], email: Optional[str], exclude_id: Optional[str] = None):
        for user_id, user in self.users.items():
            if user_id == exclude_id:
                continue
            if email and user.get("email") == email:
                raise ValidationError("Пользователь с таким email уже существует")
            if username and user.get("username") == username:
                raise ValidationError("Пользователь с таким именем уже существует")

    def register(self, username: str, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        """Create a user and return ``(token, public user)``.

        Raises:
            ValidationError: If a field is missing or the username/email is taken
        """
        if not username or not email or not password:
            raise ValidationError("username, email and password are required")
        password_hash = hash_password(password)

        def new_user(user_id):
            # Runs under the store lock, so the check and the insert are atomic.
            self._check_unique(username, email)
            return {
                "id": user_id,
                "username": username,
                "email": email,
                "password_hash": password_hash,
                "joinDate": utc_timestamp(),
                "avatar": None,
                "routes": [],
            }

        user_id, user = self.users.insert_new(new_user)
        logger.info(f"Registered user {user_id} ({username})")
        return self.create_token(user_id), public_user(user)

    def login(self, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        """Return ``(token, public user)`` for valid credentials.

        Raises:
            AuthenticationError: If the email/password pair is wrong
        """
        if email and password:
            for _, user in self.users.items():
                if user.get("email") != email or not user.get("password_hash"):
                    continue
                if verify_password(password, user["password_hash"]):
                    return self.create_token(user["id"]), public_user(user)
                break
        logger.warning(f"Failed login for {email}")
        raise AuthenticationError("Неверный email или пароль")

    def get_me(self, user_id: str) -> Dict[str, Any]:
        user = self.users.get(user_id)
        if not user:
            raise NotFoundError("Пользователь не найден")
        return public_user(user)

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Apply editable fields from ``updates`` and return the public user.

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the new username or email is taken
        """
        if user_id not in self.users:
            raise NotFoundError("Пользователь не найден")

        changes = {k: v for k, v in (updates or {}).items() if k in EDITABLE_FIELDS}
        password = changes.pop("password", None)
        if password:
            changes["password_hash"] = hash_password(password)

        def apply(current):
            # Runs under the store lock, so the check and the write are atomic.
            if current is None:
                raise NotFoundError("Пользователь не найден")
            new_username = changes.get("username")
            new_email = changes.get("email")
            self._check_unique(
                new_username if new_username != current.get("username") else None,
                new_email if new_email != current.get("email") else None,
                exclude_id=user_id,
            )
            current.update(changes)
            return current

        updated = self.users.update(user_id, apply)
        logger.info(f"Updated profile for user {user_id}: {sorted(changes)}")
        return public_user(updated)
