"""
Effect and ability records carried by sources.

Each effect is one variant of a tagged union discriminated by ``kind``. Numeric
fields never reject bad input: anything that does not parse to a finite number
becomes ``None`` and is treated as "no contribution" by the aggregator.
"""

import math
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .enums import Progression, StatKind, VisionKind

DEFAULT_ABILITY_DESCRIPTION = "No description provided."


def parse_finite(value: Any) -> float | None:
    """
    Parse a loosely-typed numeric value.

    Args:
        value: Raw value from a document (number, numeric string, None, ...)

    Returns:
        The value as a finite float, or None when missing, non-numeric,
        NaN or infinite.

    Examples:
        >>> parse_finite("2.5")
        2.5
        >>> parse_finite("") is None
        True
        >>> parse_finite(float("nan")) is None
        True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_finite_int(value: Any) -> int | None:
    """Like :func:`parse_finite`, truncating toward zero."""
    number = parse_finite(value)
    if number is None:
        return None
    return int(number)


class _Effect(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProficiencyGrant(_Effect):
    """Grants a named proficiency."""

    kind: Literal["proficiency"] = "proficiency"
    value: str


class ProgressionOverride(_Effect):
    """Raises the progression tier used for speed or a target number."""

    kind: Literal["progression"] = "progression"
    stat: StatKind
    tier: Progression | None = None

    @field_validator("tier", mode="before")
    @classmethod
    def _blank_or_unknown_tier(cls, value: Any) -> Progression | None:
        if value is None or isinstance(value, Progression):
            return value
        try:
            return Progression(str(value).strip().lower())
        except ValueError:
            return None


class VisionRadius(_Effect):
    """Grants nightsight or darkvision out to a radius in meters."""

    kind: Literal["vision"] = "vision"
    vision: VisionKind
    meters: float | None = None

    @field_validator("meters", mode="before")
    @classmethod
    def _finite_meters(cls, value: Any) -> float | None:
        return parse_finite(value)


class BulkCapacityBoost(_Effect):
    """Adds to maximum carried bulk."""

    kind: Literal["bulk"] = "bulk"
    amount: int | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _finite_amount(cls, value: Any) -> int | None:
        return parse_finite_int(value)


class SizeModifier(_Effect):
    """Shifts effective size up or down the size ladder."""

    kind: Literal["size"] = "size"
    steps: int | None = None

    @field_validator("steps", mode="before")
    @classmethod
    def _finite_steps(cls, value: Any) -> int | None:
        return parse_finite_int(value)


class Resistance(_Effect):
    """Resistance to a damage tag."""

    kind: Literal["resistance"] = "resistance"
    tag: str


class Vulnerability(_Effect):
    """Vulnerability to a damage tag."""

    kind: Literal["vulnerability"] = "vulnerability"
    tag: str


class CharacterTag(_Effect):
    """A creature tag such as "Undead" or "Construct"."""

    kind: Literal["character_tag"] = "character_tag"
    tag: str


EffectEntry = Annotated[
    Union[
        ProficiencyGrant,
        ProgressionOverride,
        VisionRadius,
        BulkCapacityBoost,
        SizeModifier,
        Resistance,
        Vulnerability,
        CharacterTag,
    ],
    Field(discriminator="kind"),
]


class AbilityEntry(BaseModel):
    """
    An ability granted by a source.

    ``activity_kind`` stays a raw string here; the ability catalog decides
    which bucket it belongs to and drops kinds it does not recognise.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    activity_kind: str = Field(
        default="", validation_alias=AliasChoices("activity_kind", "type")
    )
    tags: str = ""
    description: str = DEFAULT_ABILITY_DESCRIPTION

    @field_validator("tags", mode="before")
    @classmethod
    def _join_tag_list(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(tag).strip() for tag in value if str(tag).strip())
        return str(value)

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> str:
        if not value:
            return DEFAULT_ABILITY_DESCRIPTION
        return str(value)
