"""Sort granted abilities into activity-kind buckets for display and use."""

from dataclasses import dataclass

import structlog

from zwolf.game.world.defaults import DEFAULT_VIRTUAL_SOURCES
from zwolf.models.character import Character, Source
from zwolf.models.enums import ActivityKind

from .source_gate import ActiveContribution, active_contributions, is_source_active

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CatalogedAbility:
    """
    An ability together with where it came from.

    Attributes:
        name: Ability name
        activity_kind: Bucket the ability was sorted into
        tags: Comma-separated ability tags
        description: Rules text
        source_label: Source name, suffixed with "(Tier N)" for track tiers
        source_id: Identity of the granting source
        tier: Track tier that granted the ability, if any
        is_virtual: Whether the granting source is a virtual default
    """

    name: str
    activity_kind: ActivityKind
    tags: str
    description: str
    source_label: str
    source_id: str
    tier: int | None = None
    is_virtual: bool = False


def empty_catalog() -> dict[ActivityKind, list[CatalogedAbility]]:
    """A catalog with every bucket present and empty."""
    return {kind: [] for kind in ActivityKind}


def categorize(
    character: Character,
    warnings: list[str] | None = None,
    include_virtual: bool = True,
    virtual_sources: list[Source] | None = None,
) -> dict[ActivityKind, list[CatalogedAbility]]:
    """
    Bucket every active granted ability by its activity kind.

    Args:
        character: Character snapshot to read
        warnings: Optional list that receives a message for every ability
            dropped because of an unknown activity kind
        include_virtual: Whether to add the default virtual sources
        virtual_sources: Override the default virtual sources

    Returns:
        Every ActivityKind mapped to its abilities. Each source is emitted
        once even if it appears twice on the character, and abilities from
        virtual sources sort after all others.
    """
    catalog = empty_catalog()

    # Assigned sources arrive de-duplicated by id
    contributions = active_contributions(character)
    if include_virtual:
        if virtual_sources is None:
            virtual_sources = DEFAULT_VIRTUAL_SOURCES
        seen = {contribution.source.id for contribution in contributions}
        for source in virtual_sources:
            if source.id in seen or not is_source_active(source):
                continue
            seen.add(source.id)
            contributions.append(
                ActiveContribution(
                    source=source, label=source.name, abilities=tuple(source.granted_abilities)
                )
            )

    for contribution in contributions:
        source = contribution.source
        for ability in contribution.abilities:
            if not ability.name or not ability.activity_kind:
                continue

            kind = ActivityKind.parse(ability.activity_kind)
            if kind is None:
                logger.warning(
                    "unknown_ability_kind",
                    ability=ability.name,
                    activity_kind=ability.activity_kind,
                    source=contribution.label,
                )
                if warnings is not None:
                    warnings.append(
                        f'Unknown activity kind "{ability.activity_kind}" for ability '
                        f'"{ability.name}" from {contribution.label}; ability ignored.'
                    )
                continue

            catalog[kind].append(
                CatalogedAbility(
                    name=ability.name,
                    activity_kind=kind,
                    tags=ability.tags,
                    description=ability.description,
                    source_label=contribution.label,
                    source_id=source.id,
                    tier=contribution.tier,
                    is_virtual=source.is_virtual,
                )
            )

    for kind in catalog:
        # Stable sort keeps document order within each group
        catalog[kind].sort(key=lambda ability: ability.is_virtual)

    return catalog
