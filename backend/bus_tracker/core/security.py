"""Password hashing and signed bearer tokens."""

import logging
import re

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from bus_tracker.config import settings

logger = logging.getLogger(__name__)

TOKEN_SALT = "bus-tracker-auth"
MIN_PASSWORD_LENGTH = 6
PHONE_RE = re.compile(r"^\+?[0-9]{10,15}$")

ROLE_DRIVER = "driver"
ROLE_ADMIN = "admin"


class InvalidTokenError(Exception):
    """Token is malformed, tampered with, or expired."""


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def validate_credentials(phone: str, password: str) -> str | None:
    """Return an error message for unacceptable registration data, else None."""
    if not PHONE_RE.match(phone or ""):
        return "Enter a valid phone number"
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def _serializer(secret_key: str | None = None) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key or settings.secret_key, salt=TOKEN_SALT)


def create_token(user_id: int, role: str, secret_key: str | None = None) -> str:
    return _serializer(secret_key).dumps({"id": user_id, "role": role})


def decode_token(token: str, secret_key: str | None = None, max_age_seconds: int | None = None) -> dict:
    """Verify a token and return its ``{id, role}`` payload."""
    if max_age_seconds is None:
        max_age_seconds = settings.token_max_age_days * 86400
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age_seconds)
    except SignatureExpired as e:
        raise InvalidTokenError("Token expired") from e
    except BadSignature as e:
        raise InvalidTokenError("Bad token signature") from e

    if not isinstance(payload, dict) or "id" not in payload or "role" not in payload:
        raise InvalidTokenError("Malformed token payload")
    return payload
