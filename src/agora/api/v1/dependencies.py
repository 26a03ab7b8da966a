"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from agora.core.settings import settings
from agora.db.session import get_db
from agora.models import User
from agora.services.summarizer import SummarizerClient, get_summarizer_client

# HTTP Bearer scheme for tokens issued by the identity provider
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _decode_token(token: str) -> dict[str, Any]:
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    return jwt.decode(
        token,
        settings.auth_jwt_secret,
        algorithms=[settings.auth_jwt_algorithm],
        audience=settings.auth_jwt_audience,
        options=options,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    try:
        payload = _decode_token(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired or invalid",
        ) from err

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.get(User, subject)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_summarizer_dep() -> SummarizerClient:
    """Return the shared summarization client."""
    return get_summarizer_client()


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
SummarizerDep = Annotated[SummarizerClient, Depends(get_summarizer_dep)]
