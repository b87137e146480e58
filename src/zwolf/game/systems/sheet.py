"""Assemble a full character sheet from one character snapshot."""

from dataclasses import dataclass, field

import structlog

from zwolf.config import Settings
from zwolf.game.character.formulas import (
    DEFAULT_STAMINA,
    calculate_coast_number,
    calculate_max_vitality,
)
from zwolf.game.character.progression import (
    BuildPointSummary,
    ProgressionGroup,
    TargetNumbers,
    build_point_summary,
    calculate_target_numbers,
    organize_by_progression,
)
from zwolf.models.character import Character
from zwolf.models.enums import ActivityKind, Placement, Progression

from .abilities import CatalogedAbility, categorize
from .effects import DerivedStats, derive_stats
from .inventory import InventoryItem, InventoryTotals, calculate_totals, group_by_placement
from .slots import Slot, TalentSlot, knack_slots, language_limit, talent_slots, track_slots

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CharacterSheet:
    """
    Everything the host needs to render a character.

    Attributes:
        character: The snapshot the sheet was computed from
        derived: Merged effect results
        abilities: Granted abilities by activity kind
        build_points: Build point spending
        progressions: Attributes, skills and speed grouped by tier
        target_numbers: Toughness, destiny and fixed target numbers
        max_vitality: Maximum vitality points
        coast_number: Coast number
        max_stamina: Maximum stamina points
        track_slots: Track slots and their tracks
        talent_slots: Talent slots with associated track numbers
        knack_slots: Knack slots and their knacks
        language_limit: Number of languages the character may know
        inventory: Equipment grouped by placement
        inventory_totals: Carried value, weight and bulk
        warnings: Problems found while computing the sheet
    """

    character: Character
    derived: DerivedStats
    abilities: dict[ActivityKind, list[CatalogedAbility]]
    build_points: BuildPointSummary
    progressions: dict[Progression, ProgressionGroup]
    target_numbers: TargetNumbers
    max_vitality: int
    coast_number: int
    max_stamina: int
    track_slots: list[Slot]
    talent_slots: list[TalentSlot]
    knack_slots: list[Slot]
    language_limit: int
    inventory: dict[Placement, list[InventoryItem]]
    inventory_totals: InventoryTotals
    warnings: list[str] = field(default_factory=list)


def build_character_sheet(
    character: Character, settings: Settings | None = None
) -> CharacterSheet:
    """
    Compute a complete character sheet.

    Recomputation is pure: the same snapshot always yields the same sheet,
    and bad user-authored formulas or unknown ability kinds become warnings
    rather than errors.

    Args:
        character: Character snapshot to read
        settings: Settings for derived-stat defaults

    Returns:
        A fresh CharacterSheet
    """
    warnings: list[str] = []

    derived = derive_stats(character, settings)
    bonuses = derived.bonuses

    vitality = calculate_max_vitality(character, bonuses)
    coast = calculate_coast_number(character, bonuses)
    for outcome in (vitality, coast):
        if outcome.warning:
            warnings.append(outcome.warning)

    abilities = categorize(character, warnings)

    inventory = group_by_placement(character)

    sheet = CharacterSheet(
        character=character,
        derived=derived,
        abilities=abilities,
        build_points=build_point_summary(character),
        progressions=organize_by_progression(character, bonuses, derived.speed_progression),
        target_numbers=calculate_target_numbers(
            bonuses, derived.toughness_progression, derived.destiny_progression
        ),
        max_vitality=vitality.value,
        coast_number=coast.value,
        max_stamina=DEFAULT_STAMINA,
        track_slots=track_slots(character),
        talent_slots=talent_slots(character),
        knack_slots=knack_slots(character),
        language_limit=language_limit(character),
        inventory=inventory,
        inventory_totals=calculate_totals(inventory, derived.bulk_capacity),
        warnings=warnings,
    )

    logger.debug(
        "character_sheet_built",
        character=character.name,
        level=character.level,
        warnings=len(warnings),
    )
    return sheet

