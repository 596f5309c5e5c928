"""
Identity tokens: bearer JWTs issued by the identity provider.
The API only verifies them; create_identity_token exists for local tooling and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Any

from jose import JWTError, jwt

from marketplace.config import get_settings


@dataclass(frozen=True)
class IdentityContext:
    """Verified caller: stable identity-provider subject plus optional email."""

    uid: str
    email: str | None = None


def create_identity_token(uid: str, email: str | None = None, extra: dict[str, Any] | None = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    to_encode: dict[str, Any] = {"sub": uid, "exp": expire}
    if email:
        to_encode["email"] = email
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_identity_token(token: str) -> IdentityContext | None:
    """Validate signature and expiry. Returns None if the token is unusable."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    uid = payload.get("sub")
    if not uid or not isinstance(uid, str):
        return None
    email = payload.get("email")
    return IdentityContext(uid=uid, email=email if isinstance(email, str) else None)
