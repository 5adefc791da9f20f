import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from membership.core.config import settings
from membership.core.constants import PUBLIC_ID_ALPHABET, PUBLIC_ID_LENGTH


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a bearer token. Production tokens come from the identity provider;
    this is used by local tooling and tests that need a signed token."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=30))
    to_encode = {
        "exp": expire,
        "iat": now,
        "sub": str(subject),
        "type": "access",
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id carried by a valid access token, or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type", "access") != "access":
        return None
    return payload.get("sub")


def generate_uid(length: int = PUBLIC_ID_LENGTH) -> str:
    """Random URL-safe identifier for public ids and invite codes."""
    return "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(length))
