"""Bearer token verification.

Validates HS256 tokens against the resolved trust settings: signature,
mandatory expiry (with a small clock-skew leeway), and issuer/audience only
when those are configured.
"""

from datetime import timedelta
from typing import Any

import jwt

from usermanagement.core.logging import get_logger
from usermanagement.infrastructure.auth.token_settings import TokenTrustSettings
from usermanagement.infrastructure.auth.token_types import (
    Authenticated,
    AuthenticatedIdentity,
    AuthenticationResult,
    Rejected,
    RejectionReason,
)

logger = get_logger(__name__)

DEFAULT_CLOCK_SKEW = timedelta(minutes=2)


class TokenVerifier:
    """Validates bearer tokens and reports the outcome as a result value."""

    ALGORITHMS = ["HS256"]

    def __init__(
        self,
        settings: TokenTrustSettings,
        clock_skew: timedelta = DEFAULT_CLOCK_SKEW,
    ) -> None:
        """Initialize the verifier.

        Args:
            settings: Resolved token trust settings.
            clock_skew: Leeway applied to expiry and not-before checks.
        """
        self._settings = settings
        self._clock_skew = clock_skew

    @property
    def clock_skew(self) -> timedelta:
        return self._clock_skew

    def authenticate(self, authorization: str | None) -> AuthenticationResult:
        """Authenticate an ``Authorization`` header value.

        Args:
            authorization: The raw header value, or None if absent.

        Returns:
            Authenticated with the token's identity, or Rejected with a reason.
        """
        if authorization is None or not authorization.strip():
            return Rejected(RejectionReason.MISSING_TOKEN)

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return Rejected(RejectionReason.MALFORMED_HEADER)

        return self.verify(parts[1])

    def verify(self, token: str) -> AuthenticationResult:
        """Validate an encoded token.

        Args:
            token: The encoded JWT.

        Returns:
            Authenticated with the token's identity, or Rejected with a reason.
        """
        try:
            payload = self._decode(token)
        except jwt.ExpiredSignatureError:
            return Rejected(RejectionReason.EXPIRED)
        except jwt.MissingRequiredClaimError as e:
            if e.claim == "exp":
                return Rejected(RejectionReason.MISSING_EXPIRATION)
            if e.claim == "iss":
                return Rejected(RejectionReason.INVALID_ISSUER)
            if e.claim == "aud":
                return Rejected(RejectionReason.INVALID_AUDIENCE)
            return Rejected(RejectionReason.INVALID_TOKEN)
        except jwt.InvalidSignatureError:
            return Rejected(RejectionReason.INVALID_SIGNATURE)
        except jwt.InvalidIssuerError:
            return Rejected(RejectionReason.INVALID_ISSUER)
        except jwt.InvalidAudienceError:
            return Rejected(RejectionReason.INVALID_AUDIENCE)
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected", error_type=type(e).__name__)
            return Rejected(RejectionReason.INVALID_TOKEN)

        subject = payload.get("sub")
        name = payload.get("name")
        return Authenticated(
            AuthenticatedIdentity(
                subject=str(subject) if subject is not None else None,
                name=str(name) if name is not None else None,
                claims=payload,
            )
        )

    def _decode(self, token: str) -> dict[str, Any]:
        issuer = self._settings.issuer
        audience = self._settings.audience
        return jwt.decode(
            token,
            self._settings.signing_secret,
            algorithms=self.ALGORITHMS,
            issuer=issuer,
            audience=audience,
            leeway=self._clock_skew,
            options={
                "require": ["exp"],
                "verify_exp": True,
                "verify_iss": issuer is not None,
                "verify_aud": audience is not None,
            },
        )
