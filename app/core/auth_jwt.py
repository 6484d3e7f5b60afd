"""JWT verification for tokens issued by the identity provider.

Tokens are issued elsewhere; the backend only verifies them. The 'sub' or
'email' claim carries the user's email, which keys the usuarios table.
"""

from __future__ import annotations

from jose import JWTError, jwt
from loguru import logger

from app.config.settings import settings


def decode_access_token(token: str) -> str:
    """Decode and verify a JWT access token.

    Args:
        token: JWT token string

    Returns:
        User email from the token 'email' claim, falling back to 'sub'

    Raises:
        ValueError: If token is invalid, expired or has no subject
    """
    if not settings.auth_secret_key:
        raise ValueError("AUTH_SECRET_KEY is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.auth_secret_key,
            algorithms=[settings.auth_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise ValueError("Invalid or expired token") from e

    subject = payload.get("email") or payload.get("sub")
    if not subject:
        raise ValueError("Token missing subject")
    return str(subject)
