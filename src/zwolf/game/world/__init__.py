"""World data - YAML compendium loading and virtual default sources."""

from .defaults import DEFAULT_VIRTUAL_SOURCES, SLAM_STRIKE
from .source_loader import (
    SourceLoadError,
    SourceValidationError,
    load_character,
    load_sources,
    load_sources_from_directory,
)

__all__ = [
    "DEFAULT_VIRTUAL_SOURCES",
    "SLAM_STRIKE",
    "SourceLoadError",
    "SourceValidationError",
    "load_character",
    "load_sources",
    "load_sources_from_directory",
]
