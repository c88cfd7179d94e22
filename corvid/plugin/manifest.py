"""
Plugin Manifest.

This module parses and validates the manifest.json shipped in every
installed plugin directory.

Key features:
- Required key/version validation
- License and organization metadata (used for edition management)
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

MANIFEST_FILE = "manifest.json"


class ManifestError(Exception):
    """Base exception for manifest-related errors."""

    pass


class ValidationError(ManifestError):
    """Raised when manifest validation fails."""

    pass


@dataclass
class Manifest:
    """
    Represents a plugin manifest.

    Attributes:
        key: Plugin key (unique identifier)
        version: Plugin version
        name: Human-readable plugin name
        description: Plugin description
        license: License type (e.g. "Commercial", "LGPL 3")
        organization: Name of the organization publishing the plugin
        raw_data: Raw manifest data
    """

    key: str
    version: str
    name: str
    description: str
    license: str | None
    organization: str | None
    raw_data: dict[str, Any]


def parse_manifest(manifest_path: Path) -> Manifest:
    """
    Parse a manifest.json file.

    Args:
        manifest_path: Path to manifest.json

    Returns:
        Manifest object

    Raises:
        ManifestError: If file cannot be read or parsed
        ValidationError: If manifest is invalid
    """
    try:
        with open(manifest_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest file not found: {manifest_path}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Failed to parse manifest JSON: {e}") from e
    except Exception as e:
        raise ManifestError(f"Failed to read manifest file: {e}") from e

    if not isinstance(data, dict):
        raise ValidationError("Manifest must be a JSON object")

    validate_manifest_structure(data)

    return Manifest(
        key=data["key"],
        version=data["version"],
        name=data.get("name", data["key"]),
        description=data.get("description", ""),
        license=data.get("license"),
        organization=data.get("organization"),
        raw_data=data,
    )


def validate_manifest_structure(data: dict[str, Any]) -> None:
    """
    Validate manifest structure and required fields.

    Args:
        data: Parsed manifest data

    Raises:
        ValidationError: If manifest structure is invalid
    """
    for field in ("key", "version"):
        if field not in data:
            raise ValidationError(f"Missing required field: {field}")

    # Plugin keys are lowercase alphanumerics, dashes allowed
    key = data["key"]
    if not isinstance(key, str) or not re.match(r"^[a-z0-9][a-z0-9-]*$", key):
        raise ValidationError(
            f"Invalid plugin key: {key}. "
            f"Must be lowercase alphanumeric with hyphens only."
        )

    version = data["version"]
    if not isinstance(version, str) or not re.match(r"^\d+\.\d+(\.\d+)*$", version):
        raise ValidationError(
            f"Invalid version: {version}. Must be dotted numbers (e.g., '1.0.0')"
        )

    for field in ("name", "description", "license", "organization"):
        if field in data and data[field] is not None and not isinstance(data[field], str):
            raise ValidationError(f"'{field}' field must be a string")
