"""API key generation and verification."""

import hashlib
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_db
from ..models.user import User
from ..utils.clock import utcnow

API_KEY_PREFIX = "fair_scoring_sk_"
API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def generate_api_key() -> tuple[str, str]:
    """
    Generate a new API key and its hash.

    Returns:
        Tuple of (full_api_key, key_hash).
        The full key is shown once to the admin creating the user.
        The hash is stored in the database.
    """
    raw_key = secrets.token_urlsafe(32)
    full_key = f"{API_KEY_PREFIX}{raw_key}"
    return full_key, hash_api_key(full_key)


def hash_api_key(api_key: str) -> str:
    """Hash an API key for comparison."""
    return hashlib.sha256(api_key.encode()).hexdigest()


async def _lookup_user(api_key: str, db: AsyncSession) -> User | None:
    result = await db.execute(
        select(User).where(User.api_key_hash == hash_api_key(api_key))
    )
    return result.scalar_one_or_none()


async def get_current_user(
    api_key: Annotated[str | None, Security(API_KEY_HEADER)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency that verifies the API key and returns the associated user.

    Raises:
        HTTPException 401: If API key is missing or invalid
        HTTPException 403: If the user is deactivated
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not api_key.startswith(API_KEY_PREFIX):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key format",
        )

    user = await _lookup_user(api_key, db)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    user.last_active_at = utcnow()
    return user


async def get_current_user_optional(
    api_key: Annotated[str | None, Security(API_KEY_HEADER)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """
    Optional version of get_current_user.
    Returns None if no valid API key is provided, instead of raising an exception.
    """
    if not api_key or not api_key.startswith(API_KEY_PREFIX):
        return None

    user = await _lookup_user(api_key, db)
    if not user or not user.is_active:
        return None

    return user


async def get_current_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that only lets admins of any level through."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


async def get_current_coordinator(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency that only lets category coordinators through."""
    if not user.is_coordinator:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Coordinator access required",
        )
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_current_user_optional)]
AdminUser = Annotated[User, Depends(get_current_admin)]
CoordinatorUser = Annotated[User, Depends(get_current_coordinator)]
