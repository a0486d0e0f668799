"""Bearer token trust settings.

Resolves the signing secret, issuer and audience once at startup and hands
them out as an immutable value. The secret is taken from the first source
that yields a non-blank value:

1. the ``JWT_SECRET`` environment variable
2. the ``USERMGMT_JWT__KEY`` environment variable
3. ``jwt.key`` in the layered configuration store
4. a fixed development-only fallback

Issuer and audience are read from the configuration store only; there is no
environment override for them.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from usermanagement.core.configuration import ConfigurationStore
from usermanagement.core.logging import get_logger

logger = get_logger(__name__)

PRIMARY_SECRET_ENV = "JWT_SECRET"
SECONDARY_SECRET_ENV = "USERMGMT_JWT__KEY"

SIGNING_KEY_PATH = "jwt.key"
ISSUER_PATH = "jwt.issuer"
AUDIENCE_PATH = "jwt.audience"

DEVELOPMENT_FALLBACK_SECRET = "development-only-signing-key-replace-before-deploying"


class SecretOrigin(str, Enum):
    """Where the signing secret came from."""

    ENVIRONMENT_VARIABLE = "environment_variable"
    CONFIGURATION_PROVIDER = "configuration_provider"
    DEVELOPMENT_FALLBACK = "development_fallback"


@dataclass(frozen=True)
class TokenTrustSettings:
    """Signing secret and expected issuer/audience for bearer tokens.

    Attributes:
        signing_secret: HMAC key bytes. Excluded from repr so it never ends up
            in logs or tracebacks.
        issuer: Expected ``iss`` claim, or None to skip the check.
        audience: Expected ``aud`` claim, or None to skip the check.
        secret_origin: Source of the secret, for operational diagnostics only.
    """

    signing_secret: bytes = field(repr=False)
    issuer: str | None = None
    audience: str | None = None
    secret_origin: SecretOrigin = SecretOrigin.CONFIGURATION_PROVIDER

    def __post_init__(self) -> None:
        if not self.signing_secret:
            raise ValueError("signing_secret must not be empty")

    @property
    def uses_development_fallback(self) -> bool:
        return self.secret_origin is SecretOrigin.DEVELOPMENT_FALLBACK


def _non_blank(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def resolve_token_trust_settings(
    configuration: ConfigurationStore,
    environment: str = "development",
    environ: Mapping[str, str] | None = None,
) -> TokenTrustSettings:
    """Resolve token trust settings from the environment and configuration.

    Args:
        configuration: Layered configuration store.
        environment: Deployment environment name, used only to flag the
            development fallback when it is used elsewhere.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        TokenTrustSettings: The resolved settings.
    """
    if environ is None:
        environ = os.environ

    env_secret = _non_blank(environ.get(PRIMARY_SECRET_ENV)) or _non_blank(
        environ.get(SECONDARY_SECRET_ENV)
    )
    config_secret = _non_blank(configuration.get_str(SIGNING_KEY_PATH))

    if env_secret is not None:
        secret, origin = env_secret, SecretOrigin.ENVIRONMENT_VARIABLE
    elif config_secret is not None:
        secret, origin = config_secret, SecretOrigin.CONFIGURATION_PROVIDER
    else:
        secret, origin = DEVELOPMENT_FALLBACK_SECRET, SecretOrigin.DEVELOPMENT_FALLBACK

    settings = TokenTrustSettings(
        signing_secret=secret.encode("utf-8"),
        issuer=configuration.get_str(ISSUER_PATH),
        audience=configuration.get_str(AUDIENCE_PATH),
        secret_origin=origin,
    )

    logger.info(
        "Token trust settings resolved",
        secret_origin=origin.value,
        issuer_enforced=settings.issuer is not None,
        audience_enforced=settings.audience is not None,
    )
    if settings.uses_development_fallback and environment != "development":
        logger.warning(
            "Using development fallback signing secret outside development",
            environment=environment,
        )

    return settings
