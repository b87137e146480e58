"""Decide which sources, and which of their entries, are currently active.

Tracks unlock their tiers on a staggered level ladder so that no two track
slots unlock a tier on the same level. Equipment only contributes while it
sits in its required placement. Every other kind of source is active for as
long as it is assigned.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from zwolf.models.character import TIER_NUMBERS, Character, Source
from zwolf.models.effects import AbilityEntry, CharacterTag, EffectEntry
from zwolf.models.enums import SourceKind

logger = structlog.get_logger(__name__)

LEVELS_PER_TIER = 4


@dataclass(frozen=True)
class ActiveContribution:
    """
    Everything one active source (or one unlocked tier of a track) grants.

    Attributes:
        source: The contributing source
        label: Source name, suffixed with "(Tier N)" for tier entries
        tier: Tier number, or None for a source's own entries
        effects: Effect entries in document order
        abilities: Granted abilities in document order
        tags: Character tags in document order
        knacks_provided: Knack slots granted by this contribution
    """

    source: Source
    label: str
    tier: int | None = None
    effects: tuple[EffectEntry, ...] = field(default_factory=tuple)
    abilities: tuple[AbilityEntry, ...] = field(default_factory=tuple)
    tags: tuple[str, ...] = field(default_factory=tuple)
    knacks_provided: int = 0


@dataclass(frozen=True)
class ActiveEntry:
    """A single active effect or ability with its traceability label."""

    source_id: str
    source_label: str
    tier: int | None
    entry: EffectEntry | AbilityEntry


def tier_unlock_level(slot_index: int, tier: int) -> int:
    """
    Level at which a track tier unlocks.

    Examples:
        >>> tier_unlock_level(0, 1)
        1
        >>> tier_unlock_level(2, 3)
        11
    """
    return slot_index + 1 + (tier - 1) * LEVELS_PER_TIER


def is_tier_unlocked(slot_index: int, tier: int, level: int) -> bool:
    """Whether tier ``tier`` of a track in ``slot_index`` is unlocked at ``level``."""
    return level >= tier_unlock_level(slot_index, tier)


def unlocked_tiers(slot_index: int, level: int) -> list[int]:
    """
    All unlocked tier numbers for a track slot at a level.

    Args:
        slot_index: 0-based track slot
        level: Character level

    Returns:
        Ascending tier numbers (possibly empty)

    Examples:
        >>> unlocked_tiers(0, 5)
        [1, 2]
        >>> unlocked_tiers(3, 3)
        []
    """
    return [tier for tier in TIER_NUMBERS if is_tier_unlocked(slot_index, tier, level)]


def is_equipment_active(source: Source) -> bool:
    """Equipment is active when it has no required placement or sits in it."""
    if source.required_placement is None:
        return True
    return source.required_placement == source.placement


def is_source_active(source: Source) -> bool:
    """Only equipment is gated at source level; tracks are gated per tier."""
    if source.kind == SourceKind.EQUIPMENT:
        return is_equipment_active(source)
    return True


def _base_contribution(source: Source) -> ActiveContribution:
    return ActiveContribution(
        source=source,
        label=source.name,
        effects=tuple(source.effects),
        abilities=tuple(source.granted_abilities),
        tags=tuple(source.character_tags),
        knacks_provided=source.knacks_provided,
    )


def _track_tier_contributions(
    character: Character, track: Source, slot_index: int
) -> Iterator[ActiveContribution]:
    tiers = unlocked_tiers(slot_index, character.level)
    logger.debug(
        "track_tiers_unlocked",
        track=track.name,
        slot_index=slot_index,
        level=character.level,
        tiers=tiers,
    )
    for tier in tiers:
        data = track.tiers.get(tier)
        if data is None:
            continue
        yield ActiveContribution(
            source=track,
            label=f"{track.name} (Tier {tier})",
            tier=tier,
            effects=tuple(data.effects),
            abilities=tuple(data.granted_abilities),
            tags=tuple(data.tag_list),
            knacks_provided=data.knacks_provided,
        )


def active_contributions(character: Character) -> list[ActiveContribution]:
    """
    Collect the contributions of every active source, in assignment order.

    A track yields its own entries first and then one contribution per
    unlocked tier that carries data. A source id assigned more than once
    contributes only at its first occurrence.
    """
    slot_map = character.track_slot_map()
    contributions: list[ActiveContribution] = []
    seen: set[str] = set()
    for source in character.sources:
        if source.id in seen:
            logger.debug("duplicate_source_skipped", source=source.name, source_id=source.id)
            continue
        seen.add(source.id)
        if not is_source_active(source):
            logger.debug(
                "source_inactive",
                source=source.name,
                placement=source.placement,
                required_placement=source.required_placement,
            )
            continue
        contributions.append(_base_contribution(source))
        if source.kind == SourceKind.TRACK:
            contributions.extend(
                _track_tier_contributions(character, source, slot_map[source.id])
            )
    return contributions


def active_effects_and_abilities(character: Character) -> list[ActiveEntry]:
    """
    Flatten active contributions into labelled entries.

    Character tags are emitted as ``character_tag`` effects so consumers
    handle a single closed set of entry kinds.
    """
    entries: list[ActiveEntry] = []
    for contribution in active_contributions(character):
        context = (contribution.source.id, contribution.label, contribution.tier)
        for effect in contribution.effects:
            entries.append(ActiveEntry(*context, effect))
        for tag in contribution.tags:
            entries.append(ActiveEntry(*context, CharacterTag(tag=tag)))
        for ability in contribution.abilities:
            entries.append(ActiveEntry(*context, ability))
    return entries
