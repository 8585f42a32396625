"""Session token helpers.

Session tokens are issued by the identity provider with the same signing
secret; this service only verifies them.
"""

from __future__ import annotations

import os

from itsdangerous import BadSignature, URLSafeTimedSerializer

SESSION_SALT = "session"
DEFAULT_MAX_AGE = int(os.environ.get("SESSION_MAX_AGE", 60 * 60 * 24 * 30))


def _serializer() -> URLSafeTimedSerializer:
    secret = os.environ.get("SIGNING_SECRET", "change-me")
    return URLSafeTimedSerializer(secret_key=secret)


def generate_session_token(user_id: str) -> str:
    serializer = _serializer()
    return serializer.dumps({"user_id": user_id}, salt=SESSION_SALT)


def load_session_token(token: str, max_age: int = DEFAULT_MAX_AGE) -> str | None:
    """Return the user id carried by ``token`` or None when it does not verify."""
    serializer = _serializer()
    try:
        data = serializer.loads(token, max_age=max_age, salt=SESSION_SALT)
    except BadSignature:
        return None
    if not isinstance(data, dict):
        return None
    user_id = data.get("user_id")
    return str(user_id) if user_id else None
