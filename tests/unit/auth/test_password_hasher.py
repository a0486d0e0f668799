import base64
import hashlib

import pytest

from usermanagement.infrastructure.auth.password_hasher import (
    ITERATIONS,
    KEY_SIZE,
    SALT_SIZE,
    InvalidInputError,
    hash_password,
    needs_rehash,
    verify_password,
)


def legacy_record(password: str, iterations: int, salt: bytes, key_size: int) -> str:
    key = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations, dklen=key_size)
    return ".".join(
        [str(iterations), base64.b64encode(salt).decode(), base64.b64encode(key).decode()]
    )


def test_hash_record_format():
    """Hashes are '{iterations}.{salt}.{key}' with base64 salt and key."""
    hashed = hash_password("Alice!23")

    iterations, salt, key = hashed.split(".")
    assert int(iterations) == ITERATIONS == 10_000
    assert len(base64.b64decode(salt)) == SALT_SIZE
    assert len(base64.b64decode(key)) == KEY_SIZE


def test_hash_uses_fresh_salt():
    assert hash_password("same-password") != hash_password("same-password")


def test_verify_correct_password():
    hashed = hash_password("correct horse battery staple")

    assert verify_password("correct horse battery staple", hashed) is True


def test_verify_wrong_password():
    hashed = hash_password("correct horse battery staple")

    assert verify_password("Correct horse battery staple", hashed) is False


def test_verify_empty_password_round_trip():
    assert verify_password("", hash_password("")) is True


def test_hash_none_raises():
    with pytest.raises(InvalidInputError):
        hash_password(None)


def test_verify_none_password_is_false():
    assert verify_password(None, hash_password("x")) is False


@pytest.mark.parametrize(
    "record",
    [
        None,
        "",
        "   ",
        "plaintext",
        "10000.c2FsdA==",
        "10000.c2FsdA==.a2V5.extra",
        "abc.c2FsdA==.a2V5",
        "0.c2FsdA==.a2V5",
        "-1.c2FsdA==.a2V5",
        "10000.not*base64.a2V5",
        "10000..a2V5",
        "10000.c2FsdA==.",
        "99999999999999999999.c2FsdA==.a2V5",
        "4294967296.c2FsdA==.a2V5",
        "10000001.c2FsdA==.a2V5",
    ],
)
def test_malformed_records_fail_verification(record):
    """Malformed records never raise."""
    assert verify_password("anything", record) is False


def test_unencodable_password_fails_verification():
    assert verify_password("\ud800", hash_password("x")) is False


def test_hash_unencodable_password_raises_invalid_input():
    with pytest.raises(InvalidInputError):
        hash_password("pass\udfffword")


def test_verify_uses_parameters_from_record():
    """Records made with other parameters still verify."""
    record = legacy_record("Bob!23", iterations=1000, salt=b"0123456789ab", key_size=20)

    assert verify_password("Bob!23", record) is True
    assert verify_password("bob!23", record) is False


def test_needs_rehash():
    assert needs_rehash(hash_password("x")) is False
    assert needs_rehash(legacy_record("x", 1000, b"0123456789abcdef", 32)) is True
    assert needs_rehash("garbage") is True
