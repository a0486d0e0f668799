"""Pydantic schemas for User CRUD operations.

Field names are camelCased on the wire. Password hashes never appear in
any response schema.
"""

from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    SecretStr,
    field_validator,
)
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting and emitting camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _blank_to_none(v: object) -> object:
    if isinstance(v, str) and not v.strip():
        return None
    return v


OptionalEmail = Annotated[EmailStr | None, BeforeValidator(_blank_to_none)]


def _encodable_password(v: SecretStr | None) -> SecretStr | None:
    if v is not None:
        try:
            v.get_secret_value().encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("Password contains characters that cannot be encoded.") from None
    return v


class UserCreateRequest(CamelModel):
    """Request schema for creating a new user.

    A blank email is accepted here and rejected by the route with a field
    level error, so the client gets the same shape as for update.
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: OptionalEmail = Field(None, description="User's email address")
    password: SecretStr = Field(..., description="User's password")

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError("Password is required.")
        return v

    @field_validator("password")
    @classmethod
    def password_encodable(cls, v: SecretStr) -> SecretStr:
        return _encodable_password(v)


class UserUpdateRequest(CamelModel):
    """Request schema for updating a user.

    The password is re-hashed only when supplied.
    """

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: OptionalEmail = Field(None, description="User's email address")
    password: SecretStr | None = None

    @field_validator("password")
    @classmethod
    def password_encodable(cls, v: SecretStr | None) -> SecretStr | None:
        return _encodable_password(v)


class UserResponse(CamelModel):
    """Response schema for a single user."""

    id: int
    first_name: str
    last_name: str
    email: str


class UserListResponse(CamelModel):
    """Response schema for a page of users."""

    page: int
    page_size: int
    total: int
    items: list[UserResponse]
