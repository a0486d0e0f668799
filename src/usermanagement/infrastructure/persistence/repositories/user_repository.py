"""User repository for database operations."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from usermanagement.infrastructure.persistence.models import UserModel

MAX_QUERY_LENGTH = 100
MAX_PAGE_SIZE = 100


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        query: str | None = None,
    ) -> list[UserModel]:
        """Get a page of users, optionally filtered by a search term.

        Args:
            page: Page number (1-indexed). Values below 1 are treated as 1.
            page_size: Number of items per page, clamped to 1..100. Zero
                returns every matching user.
            query: Substring matched against first name, last name and email.
                Trimmed and cut to 100 characters.

        Returns:
            List of users ordered by ID.
        """
        page = max(1, page)

        stmt = select(UserModel)
        if query is not None and query.strip():
            term = query.strip()[:MAX_QUERY_LENGTH]
            stmt = stmt.where(
                or_(
                    UserModel.first_name.contains(term, autoescape=True),
                    UserModel.last_name.contains(term, autoescape=True),
                    UserModel.email.contains(term, autoescape=True),
                )
            )
        stmt = stmt.order_by(UserModel.id)

        if page_size != 0:
            page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
            stmt = stmt.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, user_id: int) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID.

        Returns:
            User model if found, None otherwise.
        """
        return await self.session.get(UserModel, user_id)

    async def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        """Check whether an email is taken, ignoring case and surrounding whitespace.

        Args:
            email: Email to check.
            exclude_id: User ID to leave out of the check (the user being updated).

        Returns:
            True if another user already has the email.
        """
        normalized = email.strip().lower()
        stmt = select(UserModel.id).where(func.lower(func.trim(UserModel.email)) == normalized)
        if exclude_id is not None:
            stmt = stmt.where(UserModel.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def add(self, user: UserModel) -> UserModel:
        """Persist a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model with its ID assigned.
        """
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def update(self, user: UserModel) -> UserModel:
        """Persist changes to an existing user."""
        await self.session.commit()
        return user

    async def delete(self, user_id: int) -> None:
        """Delete a user by ID. Missing users are ignored."""
        user = await self.get_by_id(user_id)
        if user is not None:
            await self.session.delete(user)
            await self.session.commit()
