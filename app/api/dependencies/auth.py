"""FastAPI dependencies for the caller's identity and role session.

Provides get_current_email (bearer token or session cookie) and
get_session_context, which loads a SessionContext for the caller.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger
from sqlalchemy.orm import Session

from app.core.auth_jwt import decode_access_token
from app.core.roles import SessionContext, load_roles_from_store
from app.db.session import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _get_auth_token(request: Request, token: str | None = Depends(oauth2_scheme)) -> str | None:
    """Extract auth token from either Authorization header or cookie."""
    if token:
        return token
    return request.cookies.get("session")


def get_current_email(request: Request, token: str | None = Depends(oauth2_scheme)) -> str:
    """FastAPI dependency returning the authenticated caller's email.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    auth_token = _get_auth_token(request, token)
    if not auth_token:
        logger.warning(f"Auth failed: Missing authentication token. Path: {request.url.path}, Method: {request.method}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(auth_token)
    except ValueError as e:
        logger.warning(f"Auth failed: {e}, Path: {request.url.path}, Method: {request.method}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_session_context(
    email: str = Depends(get_current_email),
    db: Session = Depends(get_db),
) -> SessionContext:
    """Load the role session for the caller. Role load failures yield no roles."""
    return SessionContext().load(lambda: load_roles_from_store(db, email))
