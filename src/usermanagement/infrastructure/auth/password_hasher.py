"""Password hashing utility using PBKDF2-HMAC-SHA256.

Hashes are stored as a single dot-separated record::

    {iterations}.{base64(salt)}.{base64(derived_key)}

The iteration count and key length travel with the record, so hashes created
with older parameters stay verifiable after the defaults change.
"""

import base64
import binascii
import hashlib
import hmac
import secrets

ITERATIONS = 10_000
MAX_ITERATIONS = 10_000_000
SALT_SIZE = 16  # 128 bit
KEY_SIZE = 32  # 256 bit
HASH_NAME = "sha256"
SEPARATOR = "."


class InvalidInputError(ValueError):
    """Raised when a credential to hash is missing or cannot be encoded."""

    pass


def _derive(password: str, salt: bytes, iterations: int, key_size: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        HASH_NAME, password.encode("utf-8"), salt, iterations, dklen=key_size
    )


def _decode(hashed: str | None) -> tuple[int, bytes, bytes] | None:
    """Split a stored record into (iterations, salt, key), or None if malformed."""
    if not hashed or not hashed.strip():
        return None

    parts = hashed.split(SEPARATOR)
    if len(parts) != 3:
        return None

    iterations_text, salt_text, key_text = parts
    if not (iterations_text.isascii() and iterations_text.isdigit()):
        return None
    iterations = int(iterations_text)
    if iterations <= 0 or iterations > MAX_ITERATIONS:
        return None

    try:
        salt = base64.b64decode(salt_text, validate=True)
        key = base64.b64decode(key_text, validate=True)
    except (binascii.Error, ValueError):
        return None

    if not salt or not key:
        return None
    return iterations, salt, key


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt.

    Args:
        password: The plaintext password to hash.

    Returns:
        The encoded hash record.

    Raises:
        InvalidInputError: If password is None or cannot be encoded as UTF-8.

    Example:
        >>> hashed = hash_password("Alice!23")
        >>> hashed.startswith("10000.")
        True
    """
    if password is None:
        raise InvalidInputError("password is required")

    salt = secrets.token_bytes(SALT_SIZE)
    try:
        key = _derive(password, salt, ITERATIONS, KEY_SIZE)
    except UnicodeEncodeError as e:
        raise InvalidInputError("password cannot be encoded as UTF-8") from e
    return SEPARATOR.join(
        [
            str(ITERATIONS),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(key).decode("ascii"),
        ]
    )


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a stored hash record.

    Malformed records and passwords that cannot be encoded never raise;
    they simply fail verification. The derived keys are compared in
    constant time.

    Args:
        password: The plaintext password to verify.
        hashed: The encoded hash record to verify against.

    Returns:
        True if the password matches, False otherwise.
    """
    if password is None:
        return False

    decoded = _decode(hashed)
    if decoded is None:
        return False

    iterations, salt, expected = decoded
    try:
        actual = _derive(password, salt, iterations, len(expected))
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(actual, expected)


def needs_rehash(hashed: str) -> bool:
    """Check if a password hash should be regenerated with current parameters.

    This should be called after successful password verification.

    Args:
        hashed: The encoded hash record to check.

    Returns:
        True if the record is malformed or weaker than the current defaults.
    """
    decoded = _decode(hashed)
    if decoded is None:
        return True
    iterations, salt, key = decoded
    return iterations < ITERATIONS or len(salt) < SALT_SIZE or len(key) < KEY_SIZE
