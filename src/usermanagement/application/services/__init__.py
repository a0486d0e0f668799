"""Application services coordinating repositories and domain rules."""

from usermanagement.application.services.user_service import UserService

__all__ = ["UserService"]
