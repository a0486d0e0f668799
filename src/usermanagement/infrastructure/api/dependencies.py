"""FastAPI dependencies.

The request pipeline has already authenticated the request by the time a
protected route runs; these dependencies only expose the result and wire up
services.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from usermanagement.application.services import UserService
from usermanagement.infrastructure.auth.token_types import AuthenticatedIdentity
from usermanagement.infrastructure.persistence.database import get_db_session
from usermanagement.infrastructure.persistence.repositories import UserRepository


def get_current_identity(request: Request) -> AuthenticatedIdentity:
    """Return the identity the authentication stage attached to the request.

    Raises:
        HTTPException: 401 if the route was reached without authentication,
            which only happens on routes marked anonymous.
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def get_user_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserService:
    """Get the user service bound to the request's database session."""
    return UserService(UserRepository(session))


CurrentIdentity = Annotated[AuthenticatedIdentity, Depends(get_current_identity)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
