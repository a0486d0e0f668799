"""Layered configuration store.

Values are looked up by dotted path (``jwt.key``) across an ordered list of
sources. Later sources override earlier ones, so a secrets directory placed
last wins over the JSON settings files. Key matching is case-insensitive so
``Jwt.Key`` and ``jwt.key`` address the same value.
"""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from usermanagement.core.logging import get_logger

logger = get_logger(__name__)


class ConfigurationError(Exception):
    """Raised when a configuration source exists but cannot be read."""

    pass


def _lookup(tree: Mapping[str, Any], path: str) -> Any | None:
    """Walk a nested mapping along a dotted path, ignoring key case."""
    node: Any = tree
    for segment in path.split("."):
        if not isinstance(node, Mapping):
            return None
        lowered = segment.lower()
        match = next((k for k in node if str(k).lower() == lowered), None)
        if match is None:
            return None
        node = node[match]
    return node


class JsonFileSource:
    """Configuration source backed by a JSON document on disk."""

    def __init__(self, path: str | Path, optional: bool = True) -> None:
        self.path = Path(path)
        self.optional = optional
        self._data: dict[str, Any] | None = None

    def load(self) -> dict[str, Any]:
        if self._data is None:
            if not self.path.is_file():
                if not self.optional:
                    raise ConfigurationError(f"Configuration file not found: {self.path}")
                self._data = {}
            else:
                try:
                    self._data = json.loads(self.path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise ConfigurationError(
                        f"Could not read configuration file {self.path}"
                    ) from e
                logger.debug("Configuration file loaded", path=str(self.path))
        return self._data

    def get(self, path: str) -> Any | None:
        return _lookup(self.load(), path)


class SecretsDirectorySource:
    """Configuration source backed by a directory of secret files.

    Each file name is a dotted key (``jwt.key``) and its stripped contents are
    the value, the layout used by mounted container secrets and vault agents.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self, path: str) -> Any | None:
        if not self.path.is_dir():
            return None
        lowered = path.lower()
        for candidate in self.path.iterdir():
            if candidate.is_file() and candidate.name.lower() == lowered:
                return candidate.read_text(encoding="utf-8").strip()
        return None


class MappingSource:
    """Configuration source over an in-memory nested mapping."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = data

    def get(self, path: str) -> Any | None:
        return _lookup(self.data, path)


class ConfigurationStore:
    """Ordered stack of configuration sources queried by dotted path."""

    def __init__(self, sources: Sequence[Any] | None = None) -> None:
        self._sources = list(sources or [])

    def add_source(self, source: Any) -> "ConfigurationStore":
        """Append a source with higher precedence than all existing ones."""
        self._sources.append(source)
        return self

    def get(self, path: str, default: Any | None = None) -> Any | None:
        """Return the value from the highest-precedence source that defines it."""
        for source in reversed(self._sources):
            value = source.get(path)
            if value is not None:
                return value
        return default

    def get_str(self, path: str) -> str | None:
        """Return a non-blank string value, or None."""
        value = self.get(path)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConfigurationStore":
        return cls([MappingSource(data)])


def build_configuration_store(settings: Any) -> ConfigurationStore:
    """Build the store from the configured directories.

    Precedence, lowest first: parent ``appsettings.json``, ``appsettings.json``,
    ``appsettings.{environment}.json``, then the secrets directory if set.

    Args:
        settings: Application settings.

    Returns:
        ConfigurationStore: The layered store.
    """
    config_dir = Path(settings.config_dir).resolve()
    store = ConfigurationStore(
        [
            JsonFileSource(config_dir.parent / "appsettings.json"),
            JsonFileSource(config_dir / "appsettings.json"),
            JsonFileSource(config_dir / f"appsettings.{settings.environment}.json"),
        ]
    )
    if settings.secrets_dir:
        store.add_source(SecretsDirectorySource(settings.secrets_dir))
        logger.info("Secrets directory registered", path=settings.secrets_dir)
    return store
