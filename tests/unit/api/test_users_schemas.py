import pytest
from pydantic import ValidationError

from usermanagement.infrastructure.api.schemas import (
    UserCreateRequest,
    UserResponse,
    UserUpdateRequest,
)
from usermanagement.infrastructure.persistence.models import UserModel


def test_create_request_accepts_camel_case():
    request = UserCreateRequest.model_validate(
        {"firstName": "Carol", "lastName": "Danvers", "email": "carol@example.com", "password": "pw"}
    )

    assert request.first_name == "Carol"
    assert request.email == "carol@example.com"
    assert request.password.get_secret_value() == "pw"


def test_blank_email_becomes_none():
    request = UserCreateRequest(first_name="A", last_name="B", email="   ", password="pw")

    assert request.email is None


def test_invalid_email_rejected():
    with pytest.raises(ValidationError):
        UserCreateRequest(first_name="A", last_name="B", email="not-an-email", password="pw")


def test_empty_password_rejected():
    with pytest.raises(ValidationError):
        UserCreateRequest(first_name="A", last_name="B", email="a@example.com", password="")


def test_password_not_exposed_in_repr():
    request = UserCreateRequest(first_name="A", last_name="B", email="a@example.com", password="s3cret!")

    assert "s3cret!" not in repr(request)


def test_unencodable_password_rejected():
    with pytest.raises(ValidationError):
        UserCreateRequest(first_name="A", last_name="B", email="a@example.com", password="\ud800")

    with pytest.raises(ValidationError):
        UserUpdateRequest(email="a@example.com", password="\ud800")


def test_update_request_password_optional():
    request = UserUpdateRequest(first_name="A", last_name="B", email="a@example.com")

    assert request.password is None


def test_response_has_no_password_hash():
    user = UserModel(id=1, first_name="A", last_name="B", email="a@example.com", password_hash="10000.x.y")

    data = UserResponse.model_validate(user).model_dump(by_alias=True)

    assert data == {"id": 1, "firstName": "A", "lastName": "B", "email": "a@example.com"}
