"""
Corvid Configuration System - TOML-based configuration management.

This module provides:
- Schema declaration and validation
- Runtime typed access with auto-flush
- Default config file generation from schemas

The platform's own sections ([updatecenter], [plugins], [database], [log],
[edition]) are declared in corvid.config.sections; extensions may declare
additional sections with declare().

Example usage:
    import corvid.config

    cfg = corvid.config.get('updatecenter')
    print(cfg.url)        # Read
    cfg.activate = False  # Write (auto-flushes)
"""

import os
from pathlib import Path
from typing import Any

from corvid.config.runtime import ConfigProxy
from corvid.config.schema import ConfigField
from corvid.config.sections import BUILTIN_SECTIONS
from corvid.config.toml_handler import generate_toml_from_schema

CONFIG_ENV_VAR = "CORVID_CONFIG"

# Sections declared at runtime (built-in sections are kept separately)
_schemas: dict[str, dict[str, ConfigField]] = {}

# Default config file path
_config_file = Path(os.environ.get(CONFIG_ENV_VAR, "config/corvid.toml"))


class ConfigError(Exception):
    """Base exception for config API errors."""

    pass


def field(
    type_: type,
    default: Any,
    description: str = "",
    min: Any = None,
    max: Any = None,
    choices: list[Any] | None = None,
) -> ConfigField:
    """
    Helper function to create a ConfigField.

    Example:
        field(float, 30.0, "HTTP timeout in seconds", min=1.0, max=300.0)
    """
    return ConfigField(
        type_=type_,
        default=default,
        description=description,
        min=min,
        max=max,
        choices=choices,
    )


def declare(section: str, schema: dict[str, ConfigField]) -> None:
    """
    Declare configuration schema for a section.

    Args:
        section: Section name (TOML table)
        schema: Schema dictionary (field_name -> ConfigField)

    Raises:
        ConfigError: If the section already has a schema declared
    """
    if section in _schemas or section in BUILTIN_SECTIONS:
        raise ConfigError(f"Schema for section '{section}' already declared")

    _schemas[section] = schema


def get(section: str) -> ConfigProxy:
    """
    Get runtime configuration accessor for a section.

    Args:
        section: Section name

    Returns:
        ConfigProxy instance bound to the current config file

    Raises:
        ConfigError: If the section schema is not declared
    """
    schema = _schemas.get(section) or BUILTIN_SECTIONS.get(section)
    if schema is None:
        raise ConfigError(
            f"Schema for section '{section}' not declared. Call declare() first."
        )

    return ConfigProxy(section, schema, _config_file)


def set_config_file(path: Path | str) -> None:
    """Point the configuration API at another TOML file."""
    global _config_file
    _config_file = Path(path)


def get_config_file() -> Path:
    return _config_file


def generate_default_config(target: Path | None = None) -> Path:
    """
    Write a commented default configuration file.

    Every known section is rendered with its field descriptions and
    constraints. An existing file is overwritten.

    Returns:
        Path of the written file
    """
    target = Path(target) if target is not None else _config_file
    sections = {**BUILTIN_SECTIONS, **_schemas}

    chunks = [
        generate_toml_from_schema(name, schema, {})
        for name, schema in sections.items()
    ]

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("\n".join(chunks), encoding="utf-8")
    return target


__all__ = [
    "field",
    "declare",
    "get",
    "set_config_file",
    "get_config_file",
    "generate_default_config",
    "ConfigError",
]
