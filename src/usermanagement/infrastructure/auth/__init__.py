"""Authentication infrastructure components.

This module provides password hashing, token trust settings, and bearer
token issuing and verification.
"""

from usermanagement.infrastructure.auth.jwt_service import TokenIssuer
from usermanagement.infrastructure.auth.password_hasher import (
    InvalidInputError,
    hash_password,
    verify_password,
)
from usermanagement.infrastructure.auth.token_settings import (
    SecretOrigin,
    TokenTrustSettings,
    resolve_token_trust_settings,
)
from usermanagement.infrastructure.auth.token_types import (
    Authenticated,
    AuthenticatedIdentity,
    AuthenticationResult,
    Rejected,
    RejectionReason,
)
from usermanagement.infrastructure.auth.token_verifier import TokenVerifier

__all__ = [
    "Authenticated",
    "AuthenticatedIdentity",
    "AuthenticationResult",
    "InvalidInputError",
    "Rejected",
    "RejectionReason",
    "SecretOrigin",
    "TokenIssuer",
    "TokenTrustSettings",
    "TokenVerifier",
    "hash_password",
    "resolve_token_trust_settings",
    "verify_password",
]
