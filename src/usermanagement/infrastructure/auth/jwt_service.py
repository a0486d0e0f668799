"""JWT token issuing.

Creates HS256 bearer tokens that ``TokenVerifier`` accepts. The API itself
has no login endpoint; this is used by the offline token tool and tests.
"""

from datetime import datetime, timedelta, timezone

import jwt

from usermanagement.infrastructure.auth.token_settings import TokenTrustSettings


class TokenIssuer:
    """Service for creating signed access tokens."""

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: bytes | str,
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        """Initialize the issuer.

        Args:
            secret_key: HMAC signing key.
            issuer: Value for the ``iss`` claim, omitted when None.
            audience: Value for the ``aud`` claim, omitted when None.
        """
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        self._secret_key = secret_key
        self.issuer = issuer
        self.audience = audience

    @classmethod
    def from_trust_settings(cls, settings: TokenTrustSettings) -> "TokenIssuer":
        return cls(settings.signing_secret, settings.issuer, settings.audience)

    def create_access_token(
        self,
        subject: str,
        name: str | None = None,
        expires_delta: timedelta | None = None,
        key_id: str | None = None,
    ) -> str:
        """Create an access token.

        Args:
            subject: Value for the ``sub`` claim.
            name: Optional display name claim.
            expires_delta: Lifetime of the token. Defaults to one hour.
            key_id: Optional ``kid`` header value.

        Returns:
            Encoded JWT access token.
        """
        if expires_delta is None:
            expires_delta = timedelta(hours=1)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": now,
            "nbf": now,
            "exp": now + expires_delta,
        }
        if name is not None:
            payload["name"] = name
        if self.issuer is not None:
            payload["iss"] = self.issuer
        if self.audience is not None:
            payload["aud"] = self.audience

        headers = {"kid": key_id} if key_id else None
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM, headers=headers)
