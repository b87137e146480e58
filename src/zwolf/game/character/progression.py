"""Progression bonuses, target numbers and build point costs.

Every attribute, skill and a few derived stats sit on one of four progression
tiers. The bonus for a tier grows with level at a different rate, and build
points are spent to move stats between tiers.
"""

import math
from dataclasses import dataclass, field

from zwolf.models.character import ATTRIBUTE_NAMES, SKILL_NAMES, Character
from zwolf.models.enums import Progression

# Flat build point cost of each attribute tier
ATTRIBUTE_BP_COSTS = {
    Progression.MEDIOCRE: -5,
    Progression.MODERATE: 0,
    Progression.SPECIALTY: 4,
    Progression.AWESOME: 8,
}

# Base build point cost of each skill tier, before the governing-attribute excess
SKILL_BP_BASE_COSTS = {
    Progression.MEDIOCRE: 0,
    Progression.MODERATE: 1,
    Progression.SPECIALTY: 2,
    Progression.AWESOME: 3,
}

# Skill -> attributes whose best rank sets the skill's cost floor
SKILL_GOVERNING_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "acumen": ("willpower",),
    "athletics": ("agility", "fortitude"),
    "brawn": ("fortitude",),
    "dexterity": ("agility",),
    "influence": ("willpower",),
    "insight": ("perception",),
    "stealth": ("agility",),
}

# Skill -> skill whose rank it mirrors instead of an attribute
SKILL_MIRRORS = {
    "glibness": "insight",
}

TARGET_NUMBER_BASE = 6


@dataclass(frozen=True)
class BonusTable:
    """Bonus granted by each progression tier at a given level."""

    mediocre: int
    moderate: int
    specialty: int
    awesome: int

    def __getitem__(self, tier: Progression | str) -> int:
        return getattr(self, Progression(tier).value)

    def as_dict(self) -> dict[str, int]:
        """Tier name -> bonus."""
        return {tier.value: self[tier] for tier in Progression}


@dataclass(frozen=True)
class TargetNumbers:
    """Target numbers others must meet to affect the character."""

    toughness: int
    destiny: int
    improvised: int
    healing: int
    challenge: int


@dataclass(frozen=True)
class BuildPointSummary:
    """Build points spent on attributes and skills against the budget."""

    attributes: int
    skills: int
    total: int
    max: int

    @property
    def remaining(self) -> int:
        """Unspent build points (negative when overspent)."""
        return self.max - self.total


@dataclass(frozen=True)
class ProgressionStat:
    """A stat listed under its progression tier."""

    name: str
    stat_type: str  # attribute, skill or speed
    key: str
    value: int


@dataclass(frozen=True)
class ProgressionGroup:
    """All stats on one tier together with that tier's bonus."""

    tier: Progression
    bonus: int
    stats: tuple[ProgressionStat, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        """Display name of the tier."""
        return self.tier.value.capitalize()


def bonus_table(level: int, has_progression_boost: bool = False) -> BonusTable:
    """
    Calculate the progression bonus for each tier.

    Args:
        level: Character level
        has_progression_boost: Whether the character has one extra
            progression-only level

    Returns:
        BonusTable computed from ``total = level + (1 if boosted else 0)``:
        - mediocre: floor(0.6 * total - 0.3)
        - moderate: floor(0.8 * total)
        - specialty: floor(1.0 * total)
        - awesome: floor(1.2 * total + 0.8001)

    Examples:
        >>> bonus_table(5)
        BonusTable(mediocre=2, moderate=4, specialty=5, awesome=6)
        >>> bonus_table(0).mediocre
        -1
    """
    total = level + (1 if has_progression_boost else 0)
    return BonusTable(
        mediocre=math.floor(0.6 * total - 0.3),
        moderate=math.floor(0.8 * total),
        specialty=math.floor(1 * total),
        awesome=math.floor(1.2 * total + 0.8001),
    )


def character_bonus_table(character: Character) -> BonusTable:
    """Bonus table for a character, honouring its progression-only level."""
    return bonus_table(character.level, character.progression_only_level > 0)


def target_number(tier: Progression | str, bonuses: BonusTable) -> int:
    """Target number for a tier: 6 + the tier's bonus."""
    return TARGET_NUMBER_BASE + bonuses[tier]


def calculate_target_numbers(
    bonuses: BonusTable,
    toughness_tier: Progression,
    destiny_tier: Progression,
) -> TargetNumbers:
    """
    Calculate the full set of target numbers.

    Toughness and destiny follow the character's (possibly overridden)
    progressions; improvised, healing and challenge use fixed tiers.
    """
    return TargetNumbers(
        toughness=target_number(toughness_tier, bonuses),
        destiny=target_number(destiny_tier, bonuses),
        improvised=target_number(Progression.MEDIOCRE, bonuses),
        healing=target_number(Progression.MODERATE, bonuses),
        challenge=target_number(Progression.SPECIALTY, bonuses),
    )


def attribute_cost(tier: Progression) -> int:
    """Build point cost of one attribute at a tier."""
    return ATTRIBUTE_BP_COSTS[tier]


def governing_rank(
    skill: str, attributes: dict[str, Progression], skills: dict[str, Progression]
) -> int:
    """
    Rank (1-4) a skill can reach before it costs extra build points.

    Most skills are governed by one attribute, athletics by the better of two,
    and glibness mirrors the insight skill.
    """
    if skill in SKILL_MIRRORS:
        return skills[SKILL_MIRRORS[skill]].rank
    return max(attributes[name].rank for name in SKILL_GOVERNING_ATTRIBUTES[skill])


def skill_cost(tier: Progression, governing: int) -> int:
    """
    Build point cost of one skill.

    Args:
        tier: The skill's progression tier
        governing: Rank of the governing attribute (or mirrored skill)

    Returns:
        Base cost plus one point per rank above the governing rank

    Examples:
        >>> skill_cost(Progression.AWESOME, Progression.MODERATE.rank)
        5
        >>> skill_cost(Progression.MODERATE, Progression.SPECIALTY.rank)
        1
    """
    return SKILL_BP_BASE_COSTS[tier] + max(0, tier.rank - governing)


def attribute_build_points(attributes: dict[str, Progression]) -> int:
    """Total build points spent on the four attributes."""
    return sum(attribute_cost(attributes[name]) for name in ATTRIBUTE_NAMES)


def skill_build_points(
    skills: dict[str, Progression], attributes: dict[str, Progression]
) -> int:
    """Total build points spent on the eight skills."""
    return sum(
        skill_cost(skills[name], governing_rank(name, attributes, skills))
        for name in SKILL_NAMES
    )


def build_point_summary(character: Character) -> BuildPointSummary:
    """
    Summarise build point spending for a character.

    The budget is the sum of the build points granted by the ancestry and
    the foundation.
    """
    attribute_bp = attribute_build_points(character.attributes)
    skill_bp = skill_build_points(character.skills, character.attributes)

    budget = 0
    for source in (character.ancestry, character.foundation):
        if source is not None:
            budget += source.build_points

    return BuildPointSummary(
        attributes=attribute_bp,
        skills=skill_bp,
        total=attribute_bp + skill_bp,
        max=budget,
    )


def organize_by_progression(
    character: Character,
    bonuses: BonusTable,
    speed_tier: Progression | None = None,
) -> dict[Progression, ProgressionGroup]:
    """
    Group attributes, skills and speed under their progression tiers.

    Speed only appears when an effect has given it a progression.
    """
    grouped: dict[Progression, list[ProgressionStat]] = {tier: [] for tier in Progression}

    for name in ATTRIBUTE_NAMES:
        tier = character.attributes[name]
        grouped[tier].append(
            ProgressionStat(
                name=name.capitalize(), stat_type="attribute", key=name, value=bonuses[tier]
            )
        )

    for name in SKILL_NAMES:
        tier = character.skills[name]
        grouped[tier].append(
            ProgressionStat(
                name=name.capitalize(), stat_type="skill", key=name, value=bonuses[tier]
            )
        )

    if speed_tier is not None:
        grouped[speed_tier].append(
            ProgressionStat(name="Speed", stat_type="speed", key="speed", value=bonuses[speed_tier])
        )

    return {
        tier: ProgressionGroup(tier=tier, bonus=bonuses[tier], stats=tuple(stats))
        for tier, stats in grouped.items()
    }
