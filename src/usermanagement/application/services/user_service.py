"""User management service.

Turns API requests into repository calls, hashing plaintext passwords on the
way in and shaping models into response DTOs on the way out.
"""

from usermanagement.core.logging import get_logger
from usermanagement.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from usermanagement.infrastructure.auth.password_hasher import hash_password
from usermanagement.infrastructure.persistence.models import UserModel
from usermanagement.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)


class UserService:
    """Business operations on user records."""

    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository

    async def list_users(
        self, page: int = 1, page_size: int = 20, query: str | None = None
    ) -> list[UserResponse]:
        users = await self.repository.get_all(page, page_size, query)
        return [UserResponse.model_validate(user) for user in users]

    async def get_user(self, user_id: int) -> UserResponse | None:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            return None
        return UserResponse.model_validate(user)

    async def email_in_use(self, email: str, exclude_id: int | None = None) -> bool:
        return await self.repository.email_exists(email, exclude_id=exclude_id)

    async def create_user(self, data: UserCreateRequest) -> UserResponse:
        """Create a user, storing only the hash of the supplied password."""
        user = UserModel(
            first_name=data.first_name,
            last_name=data.last_name,
            email=str(data.email).strip(),
            password_hash=hash_password(data.password.get_secret_value()),
        )
        await self.repository.add(user)
        logger.info("User created", user_id=user.id)
        return UserResponse.model_validate(user)

    async def update_user(self, user_id: int, data: UserUpdateRequest) -> bool:
        """Apply the supplied fields to a user.

        Returns:
            False if the user does not exist.
        """
        user = await self.repository.get_by_id(user_id)
        if user is None:
            return False

        if data.first_name is not None:
            user.first_name = data.first_name
        if data.last_name is not None:
            user.last_name = data.last_name
        if data.email is not None:
            user.email = str(data.email).strip()
        if data.password is not None:
            user.password_hash = hash_password(data.password.get_secret_value())

        await self.repository.update(user)
        logger.info("User updated", user_id=user_id)
        return True

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user.

        Returns:
            False if the user does not exist.
        """
        user = await self.repository.get_by_id(user_id)
        if user is None:
            return False

        await self.repository.delete(user_id)
        logger.info("User deleted", user_id=user_id)
        return True
