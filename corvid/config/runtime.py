"""
Runtime Configuration Access.

ConfigProxy exposes one TOML table as attributes. Reads come from an
in-memory copy loaded at construction; writes are validated against the
schema and flushed to the file immediately.
"""

import copy
import threading
from pathlib import Path
from typing import Any

from corvid.config.schema import ConfigField, generate_default_config, validate_config
from corvid.config.toml_handler import read_toml, write_toml


class RuntimeConfigError(Exception):
    """Raised when the config file cannot be loaded or flushed."""

    pass


# Serializes read-modify-write cycles of every proxy sharing a file
_file_locks: dict[Path, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(config_file: Path) -> threading.Lock:
    key = config_file.resolve()
    with _file_locks_guard:
        if key not in _file_locks:
            _file_locks[key] = threading.Lock()
        return _file_locks[key]


class ConfigProxy:
    """
    Proxy object for runtime configuration access.

    Example:
        cfg = ConfigProxy('updatecenter', schema, config_file)
        value = cfg.url       # Read
        cfg.activate = False  # Write (auto-flushes to file)
    """

    def __init__(
        self,
        section: str,
        schema: dict[str, ConfigField],
        config_file: Path,
    ):
        # Use object.__setattr__ to avoid triggering our custom __setattr__
        object.__setattr__(self, "_section", section)
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_config_file", config_file)
        object.__setattr__(self, "_lock", _lock_for(config_file))
        object.__setattr__(self, "_cache", {})

        self._load_config()

    def _load_config(self) -> None:
        """Load the section from file, filling absent fields with defaults."""
        values = copy.deepcopy(generate_default_config(self._schema))
        try:
            if self._config_file.exists():
                data = read_toml(self._config_file)
                section_data = data.get(self._section, {})
                validate_config(section_data, self._schema)
                values.update(section_data)
        except Exception as e:
            raise RuntimeConfigError(
                f"Failed to load config section [{self._section}]: {e}"
            ) from e

        object.__setattr__(self, "_cache", values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)

        if name not in self._schema:
            raise AttributeError(
                f"Configuration field '{name}' not found in schema for {self._section}"
            )

        return copy.copy(self._cache[name])

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        self.update(**{name: value})

    def update(self, **values: Any) -> None:
        """
        Set several fields at once with a single flush.

        Raises:
            AttributeError: If a field doesn't exist in schema
            ValidationError: If a value fails validation
        """
        for name, value in values.items():
            if name not in self._schema:
                raise AttributeError(
                    f"Configuration field '{name}' not found in schema for {self._section}"
                )
            self._schema[name].validate(value)

        with self._lock:
            self._cache.update(copy.deepcopy(values))
            self._flush()

    def reload(self) -> None:
        """Re-read the section from file."""
        with self._lock:
            self._load_config()

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._cache)

    def _flush(self) -> None:
        """Write the section back, leaving other sections untouched."""
        try:
            data = read_toml(self._config_file) if self._config_file.exists() else {}
            data[self._section] = copy.deepcopy(self._cache)
            write_toml(self._config_file, data)
        except Exception as e:
            raise RuntimeConfigError(f"Failed to flush config to file: {e}") from e

    def __repr__(self) -> str:
        return f"ConfigProxy({self._section}, {self._cache})"
