"""Password hashing and signed session tokens."""

from typing import Optional

from itsdangerous import BadData, URLSafeTimedSerializer
from passlib.context import CryptContext

from settings import get_settings

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().secret_key, salt="session")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_session_token(user_id: int, role: str) -> str:
    """
    Store user_id + role in the signed token.
    Example data:
        {"user_id": 3, "role": "volunteer"}
    """
    return _serializer().dumps({"user_id": user_id, "role": role})


def verify_session_token(token: str, max_age_seconds: Optional[int] = None) -> Optional[dict]:
    """
    Returns dict {'user_id': ..., 'role': ...} if valid,
    or None if token is invalid/expired.
    """
    if max_age_seconds is None:
        max_age_seconds = get_settings().session_max_age_seconds
    try:
        data = _serializer().loads(token, max_age=max_age_seconds)
    except BadData:
        return None
    if not isinstance(data, dict) or "user_id" not in data or "role" not in data:
        return None
    return data
