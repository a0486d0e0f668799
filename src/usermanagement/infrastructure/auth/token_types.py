"""Authentication result types.

Token verification never raises for a bad token; it returns either
``Authenticated`` or ``Rejected`` and the request pipeline decides what to do.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class RejectionReason(str, Enum):
    """Why a request failed authentication. Logged, never sent to clients."""

    MISSING_TOKEN = "missing_token"
    MALFORMED_HEADER = "malformed_header"
    EXPIRED = "expired"
    MISSING_EXPIRATION = "missing_expiration"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_AUDIENCE = "invalid_audience"
    INVALID_TOKEN = "invalid_token"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """The subject a valid bearer token was issued to."""

    subject: str | None
    name: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def id(self) -> str | None:
        """Alias for subject."""
        return self.subject


@dataclass(frozen=True)
class Authenticated:
    identity: AuthenticatedIdentity


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason


AuthenticationResult = Union[Authenticated, Rejected]
