"""Data records consumed and produced by the rules core."""

from .character import (
    ATTRIBUTE_NAMES,
    SKILL_NAMES,
    Character,
    Source,
    TierData,
    split_tags,
)
from .effects import (
    AbilityEntry,
    BulkCapacityBoost,
    CharacterTag,
    EffectEntry,
    ProficiencyGrant,
    ProgressionOverride,
    Resistance,
    SizeModifier,
    VisionRadius,
    Vulnerability,
    parse_finite,
)
from .enums import (
    ActivityKind,
    Placement,
    Progression,
    SizeTier,
    SourceKind,
    StatKind,
    VisionKind,
)

__all__ = [
    "ATTRIBUTE_NAMES",
    "SKILL_NAMES",
    "AbilityEntry",
    "ActivityKind",
    "BulkCapacityBoost",
    "Character",
    "CharacterTag",
    "EffectEntry",
    "Placement",
    "ProficiencyGrant",
    "Progression",
    "ProgressionOverride",
    "Resistance",
    "SizeModifier",
    "SizeTier",
    "Source",
    "SourceKind",
    "StatKind",
    "TierData",
    "VisionKind",
    "VisionRadius",
    "Vulnerability",
    "parse_finite",
    "split_tags",
]
