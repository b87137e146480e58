"""Closed vocabularies used by sources, effects and abilities."""

from enum import IntEnum, StrEnum


class SourceKind(StrEnum):
    """Kinds of assignable game elements that can carry entries."""

    ANCESTRY = "ancestry"
    FOUNDATION = "foundation"
    TRACK = "track"
    TALENT = "talent"
    KNACK = "knack"
    EQUIPMENT = "equipment"
    UNIVERSAL = "universal"


class Progression(StrEnum):
    """Progression tiers, ordered from worst to best."""

    MEDIOCRE = "mediocre"
    MODERATE = "moderate"
    SPECIALTY = "specialty"
    AWESOME = "awesome"

    @property
    def rank(self) -> int:
        """Rank used for max-wins comparisons and build point costs (1-4)."""
        return _PROGRESSION_RANKS[self]


_PROGRESSION_RANKS = {
    Progression.MEDIOCRE: 1,
    Progression.MODERATE: 2,
    Progression.SPECIALTY: 3,
    Progression.AWESOME: 4,
}


class SizeTier(IntEnum):
    """Creature sizes in ascending order."""

    DIMINUTIVE = 0
    TINY = 1
    SMALL = 2
    MEDIUM = 3
    LARGE = 4
    HUGE = 5
    GARGANTUAN = 6
    COLOSSAL = 7
    TITANIC = 8

    @classmethod
    def parse(cls, value: "str | int | SizeTier") -> "SizeTier":
        """Accept a tier, its index, or its lowercase name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        return cls[str(value).strip().upper()]

    @property
    def label(self) -> str:
        """Lowercase name as stored on documents."""
        return self.name.lower()


class StatKind(StrEnum):
    """Stats whose progression can be overridden by effects."""

    SPEED = "speed"
    TOUGHNESS_TN = "toughnessTN"
    DESTINY_TN = "destinyTN"


class VisionKind(StrEnum):
    """Vision senses with a radius."""

    NIGHT = "night"
    DARK = "dark"


class Placement(StrEnum):
    """Where a carried item currently sits."""

    WIELDED = "wielded"
    WORN = "worn"
    READILY_AVAILABLE = "readily_available"
    STOWED = "stowed"
    NOT_CARRIED = "not_carried"


# Placements that count toward carried value, weight and bulk
CARRIED_PLACEMENTS = (
    Placement.WIELDED,
    Placement.WORN,
    Placement.READILY_AVAILABLE,
    Placement.STOWED,
)


class ActivityKind(StrEnum):
    """Buckets that granted abilities are sorted into."""

    PASSIVE = "passive"
    EXOTIC_SENSE = "exoticSense"
    DOMINANT_ACTION = "dominantAction"
    SWIFT_ACTION = "swiftAction"
    REACTION = "reaction"
    FREE = "free"
    STRIKE = "strike"
    JOURNEY = "journey"
    MISCELLANEOUS = "miscellaneous"

    @classmethod
    def parse(cls, value: str) -> "ActivityKind | None":
        """Resolve a raw kind string (including legacy spellings) or return None."""
        raw = (value or "").strip()
        raw = ACTIVITY_KIND_ALIASES.get(raw, raw)
        try:
            return cls(raw)
        except ValueError:
            return None


# Older documents used plural/suffixed bucket names
ACTIVITY_KIND_ALIASES = {
    "exoticSenses": "exoticSense",
    "freeAction": "free",
}
