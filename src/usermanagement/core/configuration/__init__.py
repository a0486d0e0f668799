"""Layered configuration store."""

from usermanagement.core.configuration.configuration_store import (
    ConfigurationError,
    ConfigurationStore,
    JsonFileSource,
    MappingSource,
    SecretsDirectorySource,
    build_configuration_store,
)

__all__ = [
    "ConfigurationError",
    "ConfigurationStore",
    "JsonFileSource",
    "MappingSource",
    "SecretsDirectorySource",
    "build_configuration_store",
]
