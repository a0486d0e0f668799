"""SQLAlchemy model for the users table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from usermanagement.infrastructure.persistence.database import Base


class UserModel(Base):
    """SQLAlchemy model for the users table.

    Attributes:
        id: Primary key (autoincrement).
        first_name: Given name.
        last_name: Family name.
        email: Email address, unique case-insensitively (enforced by the API).
        password_hash: Encoded PBKDF2 hash record. Never returned by the API.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password ({iterations}.{salt}.{key})",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
