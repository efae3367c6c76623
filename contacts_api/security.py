"""Password hashing, session-token signing and avatar URL derivation."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from contacts_api.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

GRAVATAR_BASE_URL = "https://s.gravatar.com/avatar/"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_session_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT carrying the user id.

    :param user_id: Id of the user the token authenticates.
    :param expires_delta: Validity window, defaults to the configured hours.
    :return: Encoded JWT string.
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.access_token_expire_hours)
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {"sub": str(user_id), "jti": secrets.token_hex(8), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_session_token(token: str) -> int | None:
    """
    Check signature and expiry of a session token.

    :param token: Encoded JWT.
    :return: The embedded user id, or None if the token is not valid.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"{GRAVATAR_BASE_URL}{digest}"
