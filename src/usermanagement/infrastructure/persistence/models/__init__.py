"""SQLAlchemy models."""

from usermanagement.infrastructure.persistence.models.user import UserModel

__all__ = ["UserModel"]
