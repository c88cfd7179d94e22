"""
TOML File I/O Handler.

Reading goes through tomllib; writing and generation go through tomlkit so
that hand-written comments and layout survive a flush.
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Raises:
        TOMLError: If file cannot be read or parsed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def write_toml(file_path: Path, data: dict[str, Any]) -> None:
    """
    Write data to a TOML file.

    When the file already exists its document is updated in place, so
    comments attached to untouched keys are preserved.

    Raises:
        TOMLError: If file cannot be written
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if file_path.exists():
            doc = tomlkit.parse(file_path.read_text(encoding="utf-8"))
            for section, values in data.items():
                if section in doc and isinstance(values, dict):
                    for key, value in values.items():
                        doc[section][key] = value
                else:
                    doc[section] = values
        else:
            doc = data

        with open(file_path, "w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)
    except Exception as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e


def generate_toml_from_schema(
    section: str, schema: dict[str, Any], config_data: dict[str, Any]
) -> str:
    """
    Render one section as TOML with descriptive comments.

    Args:
        section: Section name (used as table header)
        schema: Schema dictionary (field_name -> ConfigField)
        config_data: Values to render; absent fields use their defaults

    Returns:
        TOML string with comments
    """
    doc = tomlkit.document()
    table = tomlkit.table()

    for field_name, field in schema.items():
        if field.description:
            table.add(tomlkit.comment(field.description))

        constraints = []
        if field.min is not None:
            constraints.append(f"min: {field.min}")
        if field.max is not None:
            constraints.append(f"max: {field.max}")
        if field.choices is not None:
            constraints.append(f"choices: {field.choices}")
        if constraints:
            table.add(tomlkit.comment(f"Constraints: {', '.join(constraints)}"))

        table.add(field_name, config_data.get(field_name, field.default))
        table.add(tomlkit.nl())

    doc.add(section, table)

    return tomlkit.dumps(doc)
