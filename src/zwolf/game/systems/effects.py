"""
Merge active effect entries into a character's derived stats.

Each effect kind has exactly one merge policy:

- vision: highest radius per vision kind, never below the default floor
- size: steps are summed and the result clamped to the size ladder
- progression: highest tier per stat
- bulk: amounts are summed onto the base carrying capacity
- proficiency, resistance, vulnerability, character_tag: set union

The merge is a fold over an immutable accumulator. Max-wins ties between
sources go to the lexicographically smallest label, so neither the values nor
the reported sources depend on the order sources were assigned in.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace
from functools import reduce

import structlog

from zwolf.config import Settings, get_settings
from zwolf.game.character.progression import (
    BonusTable,
    character_bonus_table,
    target_number,
)
from zwolf.models.character import Character
from zwolf.models.effects import (
    BulkCapacityBoost,
    CharacterTag,
    EffectEntry,
    ProficiencyGrant,
    ProgressionOverride,
    Resistance,
    SizeModifier,
    VisionRadius,
    Vulnerability,
)
from zwolf.models.enums import Progression, SizeTier, StatKind, VisionKind

from .source_gate import ActiveEntry, active_effects_and_abilities

logger = structlog.get_logger(__name__)

DEFAULT_SOURCE = "default"
DEFAULT_CHARACTER_TAGS = ("Humanoid",)

DEFAULT_PROGRESSIONS: dict[StatKind, Progression | None] = {
    StatKind.SPEED: None,
    StatKind.TOUGHNESS_TN: Progression.MEDIOCRE,
    StatKind.DESTINY_TN: Progression.MODERATE,
}

# Carrying capacity shift for each effective size
SIZE_BULK_MODIFIERS = {
    SizeTier.DIMINUTIVE: -12,
    SizeTier.TINY: -8,
    SizeTier.SMALL: -4,
    SizeTier.MEDIUM: 0,
    SizeTier.LARGE: 4,
    SizeTier.HUGE: 8,
    SizeTier.GARGANTUAN: 12,
    SizeTier.COLOSSAL: 16,
    SizeTier.TITANIC: 20,
}

# Carrying capacity bonus for the brawn skill's tier
BRAWN_BULK_BONUS = {
    Progression.MEDIOCRE: 0,
    Progression.MODERATE: 3,
    Progression.SPECIALTY: 6,
    Progression.AWESOME: 9,
}

MIN_BULK_CAPACITY = 1


@dataclass(frozen=True)
class Best:
    """Current winner of a max-wins field and the label that supplied it."""

    value: float
    source: str = DEFAULT_SOURCE

    def challenge(self, value: float, source: str) -> "Best":
        """
        Return the winner between this record and a new candidate.

        Defaults are only replaced when strictly exceeded. Equal candidates
        from real sources resolve to the smallest label.
        """
        if value > self.value:
            return Best(value, source)
        if value == self.value and self.source != DEFAULT_SOURCE and source < self.source:
            return Best(value, source)
        return self


@dataclass(frozen=True)
class _Accumulator:
    nightsight: Best
    darkvision: Best
    speed: Best
    toughness: Best
    destiny: Best
    size_steps: int = 0
    bulk_boost: int = 0
    proficiencies: frozenset[str] = frozenset()
    resistances: frozenset[str] = frozenset()
    vulnerabilities: frozenset[str] = frozenset()
    character_tags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class DerivedStats:
    """
    Final stats computed from a character's active sources.

    Attributes:
        bonuses: Progression bonus table for the character's level
        nightsight: Nightsight radius in meters
        darkvision: Darkvision radius in meters
        speed_progression: Speed tier, None unless an effect sets one
        toughness_progression: Tier used for the toughness target number
        destiny_progression: Tier used for the destiny target number
        toughness_tn: 6 + bonus of the toughness tier
        destiny_tn: 6 + bonus of the destiny tier
        size_steps: Net size steps from all size effects
        effective_size: Base size shifted by size_steps, clamped
        bulk_boost: Sum of bulk capacity boosts
        bulk_capacity: Maximum carried bulk (at least 1)
        sources: Field name -> label of the winning source for max-wins fields
    """

    bonuses: BonusTable
    nightsight: float
    darkvision: float
    speed_progression: Progression | None
    toughness_progression: Progression
    destiny_progression: Progression
    toughness_tn: int
    destiny_tn: int
    size_steps: int
    effective_size: SizeTier
    bulk_boost: int
    bulk_capacity: int
    proficiencies: tuple[str, ...]
    resistances: tuple[str, ...]
    vulnerabilities: tuple[str, ...]
    character_tags: tuple[str, ...]
    sources: dict[str, str]


def _rank(tier: Progression | None) -> int:
    return tier.rank if tier is not None else 0


_RANKED = {tier.rank: tier for tier in Progression}

_PROGRESSION_FIELDS = {
    StatKind.SPEED: "speed",
    StatKind.TOUGHNESS_TN: "toughness",
    StatKind.DESTINY_TN: "destiny",
}

_VISION_FIELDS = {
    VisionKind.NIGHT: "nightsight",
    VisionKind.DARK: "darkvision",
}


def _fold_vision(acc: _Accumulator, effect: VisionRadius, label: str) -> _Accumulator:
    if effect.meters is None:
        return acc
    name = _VISION_FIELDS[effect.vision]
    return replace(acc, **{name: getattr(acc, name).challenge(effect.meters, label)})


def _fold_progression(
    acc: _Accumulator, effect: ProgressionOverride, label: str
) -> _Accumulator:
    if effect.tier is None:
        return acc
    name = _PROGRESSION_FIELDS[effect.stat]
    return replace(acc, **{name: getattr(acc, name).challenge(effect.tier.rank, label)})


def _fold_size(acc: _Accumulator, effect: SizeModifier, label: str) -> _Accumulator:
    if effect.steps is None:
        return acc
    return replace(acc, size_steps=acc.size_steps + effect.steps)


def _fold_bulk(acc: _Accumulator, effect: BulkCapacityBoost, label: str) -> _Accumulator:
    if effect.amount is None:
        return acc
    return replace(acc, bulk_boost=acc.bulk_boost + effect.amount)


def _union(acc: _Accumulator, field_name: str, value: str) -> _Accumulator:
    cleaned = value.strip()
    if not cleaned:
        return acc
    return replace(acc, **{field_name: getattr(acc, field_name) | {cleaned}})


def _fold_proficiency(acc: _Accumulator, effect: ProficiencyGrant, label: str) -> _Accumulator:
    return _union(acc, "proficiencies", effect.value)


def _fold_resistance(acc: _Accumulator, effect: Resistance, label: str) -> _Accumulator:
    return _union(acc, "resistances", effect.tag)


def _fold_vulnerability(acc: _Accumulator, effect: Vulnerability, label: str) -> _Accumulator:
    return _union(acc, "vulnerabilities", effect.tag)


def _fold_character_tag(acc: _Accumulator, effect: CharacterTag, label: str) -> _Accumulator:
    return _union(acc, "character_tags", effect.tag)


# One merge policy per effect kind
_FOLDERS: dict[str, Callable[[_Accumulator, EffectEntry, str], _Accumulator]] = {
    "vision": _fold_vision,
    "progression": _fold_progression,
    "size": _fold_size,
    "bulk": _fold_bulk,
    "proficiency": _fold_proficiency,
    "resistance": _fold_resistance,
    "vulnerability": _fold_vulnerability,
    "character_tag": _fold_character_tag,
}


def _fold_entry(acc: _Accumulator, active: ActiveEntry) -> _Accumulator:
    entry = active.entry
    folder = _FOLDERS.get(getattr(entry, "kind", ""))
    if folder is None:
        # Abilities travel with the same stream; they are catalogued elsewhere
        return acc
    return folder(acc, entry, active.source_label)


def _initial_accumulator(settings: Settings) -> _Accumulator:
    return _Accumulator(
        nightsight=Best(settings.default_nightsight),
        darkvision=Best(settings.default_darkvision),
        speed=Best(_rank(DEFAULT_PROGRESSIONS[StatKind.SPEED])),
        toughness=Best(_rank(DEFAULT_PROGRESSIONS[StatKind.TOUGHNESS_TN])),
        destiny=Best(_rank(DEFAULT_PROGRESSIONS[StatKind.DESTINY_TN])),
    )


def effective_size(base: SizeTier, steps: int) -> SizeTier:
    """
    Shift a size along the size ladder, clamping at both ends.

    Examples:
        >>> effective_size(SizeTier.MEDIUM, 2)
        <SizeTier.HUGE: 5>
        >>> effective_size(SizeTier.TINY, -5)
        <SizeTier.DIMINUTIVE: 0>
    """
    index = max(min(SizeTier), min(max(SizeTier), base + steps))
    return SizeTier(index)


def bulk_capacity(
    size: SizeTier, brawn: Progression, boost: int = 0, base: int | None = None
) -> int:
    """
    Maximum carried bulk.

    Args:
        size: Effective size
        brawn: Tier of the brawn skill
        boost: Sum of bulk capacity boosts from active sources
        base: Capacity before modifiers (defaults to the configured base)

    Returns:
        ``base + size modifier + brawn bonus + boost``, at least 1
    """
    if base is None:
        base = get_settings().base_bulk_capacity
    total = base + SIZE_BULK_MODIFIERS[size] + BRAWN_BULK_BONUS[brawn] + boost
    return max(MIN_BULK_CAPACITY, total)


def _sorted_set(values: frozenset[str]) -> tuple[str, ...]:
    return tuple(sorted(values, key=lambda value: (value.casefold(), value)))


def derive_stats(character: Character, settings: Settings | None = None) -> DerivedStats:
    """
    Compute derived stats from every active effect on a character.

    Args:
        character: Character snapshot to read
        settings: Settings supplying default vision floors and base bulk

    Returns:
        A fresh DerivedStats snapshot; the character is not modified
    """
    if settings is None:
        settings = get_settings()

    entries = active_effects_and_abilities(character)
    acc = reduce(_fold_entry, entries, _initial_accumulator(settings))

    bonuses = character_bonus_table(character)
    speed = _RANKED.get(int(acc.speed.value))
    toughness = _RANKED[int(acc.toughness.value)]
    destiny = _RANKED[int(acc.destiny.value)]
    size = effective_size(character.base_size, acc.size_steps)

    stats = DerivedStats(
        bonuses=bonuses,
        nightsight=acc.nightsight.value,
        darkvision=acc.darkvision.value,
        speed_progression=speed,
        toughness_progression=toughness,
        destiny_progression=destiny,
        toughness_tn=target_number(toughness, bonuses),
        destiny_tn=target_number(destiny, bonuses),
        size_steps=acc.size_steps,
        effective_size=size,
        bulk_boost=acc.bulk_boost,
        bulk_capacity=bulk_capacity(
            size, character.skills["brawn"], acc.bulk_boost, settings.base_bulk_capacity
        ),
        proficiencies=_sorted_set(acc.proficiencies),
        resistances=_sorted_set(acc.resistances),
        vulnerabilities=_sorted_set(acc.vulnerabilities),
        character_tags=_sorted_set(acc.character_tags) or DEFAULT_CHARACTER_TAGS,
        sources={
            "nightsight": acc.nightsight.source,
            "darkvision": acc.darkvision.source,
            "speed": acc.speed.source,
            "toughness": acc.toughness.source,
            "destiny": acc.destiny.source,
        },
    )

    logger.debug(
        "derived_stats_computed",
        character=character.name,
        entries=len(entries),
        effective_size=size.label,
        toughness=toughness.value,
        destiny=destiny.value,
    )
    return stats
