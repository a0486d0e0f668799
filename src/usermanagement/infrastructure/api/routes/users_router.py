"""Router for user management.

All endpoints require a valid bearer token; the request pipeline rejects
unauthenticated calls before they get here.
"""

from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from usermanagement.core.logging import get_logger
from usermanagement.infrastructure.api.dependencies import CurrentIdentity, UserServiceDep
from usermanagement.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

router = APIRouter(tags=["Users"])
logger = get_logger(__name__)


def email_required() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"email": ["Email is required."]},
    )


def email_conflict() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"message": "Email already in use."},
    )


@router.get("", summary="List users", response_model=UserListResponse)
async def list_users(
    service: UserServiceDep,
    page: int = 1,
    page_size: Annotated[int, Query(alias="pageSize")] = 20,
    query: str | None = None,
) -> UserListResponse:
    """List users with optional substring search and pagination.

    ``total`` is the number of items on the returned page.
    """
    users = await service.list_users(page, page_size, query)
    return UserListResponse(page=page, page_size=page_size, total=len(users), items=users)


@router.get("/{user_id}", summary="Get a user", response_model=UserResponse)
async def get_user(user_id: int, service: UserServiceDep) -> UserResponse:
    """Get a single user by ID."""
    user = await service.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    response_model=UserResponse,
)
async def create_user(
    user_data: UserCreateRequest,
    request: Request,
    response: Response,
    service: UserServiceDep,
    current: CurrentIdentity,
) -> Any:
    """Create a user.

    Emails are compared trimmed and case-insensitively for uniqueness.
    """
    if user_data.email is None:
        return email_required()

    if await service.email_in_use(str(user_data.email)):
        return email_conflict()

    created = await service.create_user(user_data)
    response.headers["Location"] = str(request.url_for("get_user", user_id=created.id))
    logger.info("User created via API", user_id=created.id, performed_by=current.subject)
    return created


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update a user")
async def update_user(
    user_id: int,
    user_data: UserUpdateRequest,
    service: UserServiceDep,
    current: CurrentIdentity,
) -> Response:
    """Update a user. The email is required and must not belong to another user."""
    if user_data.email is None:
        return email_required()

    if await service.email_in_use(str(user_data.email), exclude_id=user_id):
        return email_conflict()

    if not await service.update_user(user_id, user_data):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info("User updated via API", user_id=user_id, performed_by=current.subject)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a user")
async def delete_user(
    user_id: int,
    service: UserServiceDep,
    current: CurrentIdentity,
) -> Response:
    """Delete a user."""
    if not await service.delete_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info("User deleted via API", user_id=user_id, performed_by=current.subject)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
