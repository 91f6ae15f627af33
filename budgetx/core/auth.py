"""
Authentication utilities for FastAPI.

Tokens are issued elsewhere; this module only turns a bearer token into the
``Actor`` the rest of the application works with.
"""
from uuid import UUID
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from budgetx.core.security import TokenManager
from budgetx.db.session import get_db
from budgetx.models.user import User, Role
from budgetx.schemas.user import Actor, TokenData
from budgetx.core.logging import logger

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """
    Get the current authenticated user.

    Args:
        db: Database session
        token: JWT token

    Returns:
        Current user

    Raises:
        HTTPException: If authentication fails
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = TokenManager.verify_token(token)
    if payload is None:
        raise credentials_exception
    token_data = TokenData(subject=payload.get("sub"))
    if token_data.subject is None:
        raise credentials_exception

    try:
        user_id = UUID(token_data.subject)
    except ValueError:
        logger.warning(f"Malformed token subject: {token_data.subject}")
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()

    if user is None:
        logger.warning(f"User not found: {user_id}")
        raise credentials_exception

    return user


async def get_current_actor(
    request: Request,
    current_user: User = Depends(get_current_user)
) -> Actor:
    """
    Get the current active user as an immutable ``Actor``.

    Raises:
        HTTPException: If the user is inactive
    """
    if not current_user.is_active:
        logger.warning(f"Inactive user attempted access: {current_user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    actor = Actor(
        id=current_user.id,
        role=Role(current_user.role),
        department_id=current_user.department_id,
        name=current_user.name,
    )
    request.state.actor = actor
    return actor
