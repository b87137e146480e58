"""
Source and character loader module for the Z-Wolf rules core.

Hosts that keep their compendium as YAML can load it here. Source files hold
a top-level ``sources`` list; character files hold a top-level ``character``
mapping whose ``sources`` list is inline.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from zwolf.config import get_settings
from zwolf.models.character import Character, Source

logger = structlog.get_logger(__name__)


class SourceLoadError(Exception):
    """Raised when a source or character file cannot be read or parsed."""

    pass


class SourceValidationError(Exception):
    """Raised when a record in a file fails validation."""

    pass


def load_yaml_file(file_path: Path, key: str) -> Any:
    """
    Read a YAML file and return the value under its top-level key.

    Args:
        file_path: Path to the YAML file
        key: Required top-level key

    Returns:
        The value stored under ``key``

    Raises:
        SourceLoadError: If the file is missing, unparsable, empty, or has
            no ``key``
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise SourceLoadError(f"File not found: {file_path}") from e
    except yaml.YAMLError as e:
        raise SourceLoadError(f"YAML parsing error in {file_path}: {e}") from e
    except OSError as e:
        raise SourceLoadError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise SourceLoadError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict) or key not in data:
        raise SourceLoadError(f"Missing '{key}' key in {file_path}")

    return data[key]


def create_source_from_data(source_data: Any, file_path: Path) -> Source:
    """
    Build a Source from one YAML record.

    Raises:
        SourceValidationError: If the record is not a mapping or fails
            model validation
    """
    if not isinstance(source_data, dict):
        raise SourceValidationError(f"Source entries in {file_path} must be mappings")

    try:
        return Source.model_validate(source_data)
    except ValidationError as e:
        name = source_data.get("name", "unknown")
        raise SourceValidationError(
            f"Failed to create source '{name}' from {file_path}: {e}"
        ) from e


def load_sources(file_path: Path) -> list[Source]:
    """
    Load every source defined in a YAML file.

    Args:
        file_path: Path to a file with a top-level ``sources`` list

    Returns:
        Sources in file order

    Raises:
        SourceLoadError: If the file cannot be loaded
        SourceValidationError: If a source is invalid or an id repeats
    """
    records = load_yaml_file(file_path, "sources")
    if not isinstance(records, list):
        raise SourceLoadError(f"'sources' must be a list in {file_path}")

    sources: list[Source] = []
    seen_ids: set[str] = set()
    for record in records:
        source = create_source_from_data(record, file_path)
        if source.id in seen_ids:
            raise SourceValidationError(f"Duplicate source id '{source.id}' in {file_path}")
        seen_ids.add(source.id)
        sources.append(source)

    logger.info("sources_loaded", path=str(file_path), count=len(sources))
    return sources


def load_sources_from_directory(directory: Path | None = None) -> dict[str, Source]:
    """
    Load all source files in a directory, keyed by source id.

    Args:
        directory: Directory of ``*.yaml``/``*.yml`` files. Defaults to the
            configured sources directory.

    Raises:
        SourceLoadError: If the directory is missing or holds no YAML files
        SourceValidationError: If a source is invalid or an id repeats
    """
    if directory is None:
        directory = get_settings().sources_dir

    if not directory.is_dir():
        raise SourceLoadError(f"Not a directory: {directory}")

    yaml_files = sorted(list(directory.glob("*.yaml")) + list(directory.glob("*.yml")))
    if not yaml_files:
        raise SourceLoadError(f"No YAML files found in {directory}")

    sources: dict[str, Source] = {}
    for yaml_file in yaml_files:
        for source in load_sources(yaml_file):
            if source.id in sources:
                raise SourceValidationError(
                    f"Duplicate source id '{source.id}' found in {yaml_file}"
                )
            sources[source.id] = source

    return sources


def load_character(file_path: Path) -> Character:
    """
    Load a character snapshot from a YAML file.

    Args:
        file_path: Path to a file with a top-level ``character`` mapping

    Raises:
        SourceLoadError: If the file cannot be loaded
        SourceValidationError: If the character or one of its sources is invalid
    """
    record = load_yaml_file(file_path, "character")
    if not isinstance(record, dict):
        raise SourceLoadError(f"'character' must be a mapping in {file_path}")

    try:
        character = Character.model_validate(record)
    except ValidationError as e:
        name = record.get("name", "unknown")
        raise SourceValidationError(
            f"Failed to create character '{name}' from {file_path}: {e}"
        ) from e

    logger.info(
        "character_loaded",
        path=str(file_path),
        character=character.name,
        sources=len(character.sources),
    )
    return character
