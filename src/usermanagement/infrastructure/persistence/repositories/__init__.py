"""Repository classes for database operations."""

from usermanagement.infrastructure.persistence.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
