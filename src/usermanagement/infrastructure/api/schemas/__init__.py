"""Pydantic schemas for request and response bodies."""

from usermanagement.infrastructure.api.schemas.problem_details import (
    PROBLEM_JSON,
    ProblemDetails,
)
from usermanagement.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "PROBLEM_JSON",
    "ProblemDetails",
    "UserCreateRequest",
    "UserListResponse",
    "UserResponse",
    "UserUpdateRequest",
]
