import dataclasses

import pytest
from structlog.testing import capture_logs

from usermanagement.core.configuration import ConfigurationStore
from usermanagement.infrastructure.auth.token_settings import (
    DEVELOPMENT_FALLBACK_SECRET,
    SecretOrigin,
    TokenTrustSettings,
    resolve_token_trust_settings,
)

CONFIG = {"Jwt": {"Key": "config-secret-value", "Issuer": "user-api", "Audience": "user-clients"}}


def test_primary_env_var_wins():
    settings = resolve_token_trust_settings(
        ConfigurationStore.from_mapping(CONFIG),
        environ={"JWT_SECRET": "primary-secret", "USERMGMT_JWT__KEY": "secondary-secret"},
    )

    assert settings.signing_secret == b"primary-secret"
    assert settings.secret_origin is SecretOrigin.ENVIRONMENT_VARIABLE


def test_secondary_env_var_used_when_primary_missing():
    settings = resolve_token_trust_settings(
        ConfigurationStore.from_mapping(CONFIG),
        environ={"USERMGMT_JWT__KEY": "secondary-secret"},
    )

    assert settings.signing_secret == b"secondary-secret"
    assert settings.secret_origin is SecretOrigin.ENVIRONMENT_VARIABLE


def test_blank_env_values_are_skipped():
    settings = resolve_token_trust_settings(
        ConfigurationStore.from_mapping(CONFIG),
        environ={"JWT_SECRET": "   ", "USERMGMT_JWT__KEY": ""},
    )

    assert settings.signing_secret == b"config-secret-value"
    assert settings.secret_origin is SecretOrigin.CONFIGURATION_PROVIDER


def test_fallback_secret_when_nothing_configured():
    settings = resolve_token_trust_settings(ConfigurationStore(), environ={})

    assert settings.signing_secret == DEVELOPMENT_FALLBACK_SECRET.encode()
    assert settings.uses_development_fallback is True
    assert settings.issuer is None
    assert settings.audience is None


def test_blank_config_key_falls_back():
    settings = resolve_token_trust_settings(
        ConfigurationStore.from_mapping({"Jwt": {"Key": "  "}}), environ={}
    )

    assert settings.secret_origin is SecretOrigin.DEVELOPMENT_FALLBACK


def test_issuer_and_audience_come_from_configuration_only():
    """There is no environment override for issuer or audience."""
    settings = resolve_token_trust_settings(
        ConfigurationStore.from_mapping(CONFIG),
        environ={
            "JWT_SECRET": "primary-secret",
            "JWT_ISSUER": "env-issuer",
            "USERMGMT_JWT__ISSUER": "env-issuer",
            "USERMGMT_JWT__AUDIENCE": "env-audience",
        },
    )

    assert settings.issuer == "user-api"
    assert settings.audience == "user-clients"


def test_fallback_outside_development_logs_warning():
    with capture_logs() as logs:
        resolve_token_trust_settings(ConfigurationStore(), environment="production", environ={})

    warnings = [entry for entry in logs if entry["log_level"] == "warning"]
    assert len(warnings) == 1
    assert warnings[0]["environment"] == "production"


def test_fallback_in_development_does_not_warn():
    with capture_logs() as logs:
        resolve_token_trust_settings(ConfigurationStore(), environment="development", environ={})

    assert not [entry for entry in logs if entry["log_level"] == "warning"]


def test_secret_is_never_logged():
    with capture_logs() as logs:
        resolve_token_trust_settings(
            ConfigurationStore(), environ={"JWT_SECRET": "super-secret-signing-value"}
        )

    assert "super-secret-signing-value" not in repr(logs)


def test_settings_are_immutable():
    settings = TokenTrustSettings(signing_secret=b"k" * 32)

    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.issuer = "changed"


def test_secret_hidden_from_repr():
    settings = TokenTrustSettings(signing_secret=b"do-not-print-me")

    assert "do-not-print-me" not in repr(settings)


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenTrustSettings(signing_secret=b"")
