"""Equipment grouping by placement and carried totals."""

from dataclasses import dataclass

from zwolf.models.character import Character, Source
from zwolf.models.enums import CARRIED_PLACEMENTS, Placement, SourceKind

from .source_gate import is_equipment_active

CLOTHING_TAG = "clothing"
CLOTHING_BULK_REDUCTION = 1


@dataclass(frozen=True)
class InventoryItem:
    """An equipment source as shown in its placement group."""

    source: Source
    placement: Placement
    placement_valid: bool


@dataclass(frozen=True)
class InventoryTotals:
    """Value, weight and bulk of everything carried, against capacity."""

    value: float
    weight: float
    bulk: float
    max_bulk: int

    @property
    def over_capacity(self) -> bool:
        """Whether carried bulk exceeds the maximum."""
        return self.bulk > self.max_bulk


def group_by_placement(character: Character) -> dict[Placement, list[InventoryItem]]:
    """
    Group equipment by placement, in assignment order.

    Equipment without a placement is treated as not carried.
    """
    groups: dict[Placement, list[InventoryItem]] = {placement: [] for placement in Placement}
    for source in character.sources_of_kind(SourceKind.EQUIPMENT):
        placement = source.placement or Placement.NOT_CARRIED
        groups[placement].append(
            InventoryItem(
                source=source,
                placement=placement,
                placement_valid=is_equipment_active(source),
            )
        )
    return groups


def item_bulk(source: Source, placement: Placement) -> float:
    """
    Bulk of a stack of items.

    Worn clothing is one bulk lighter per unit, never below zero.

    Examples:
        >>> cloak = Source(name="Cloak", kind="equipment", bulk=1, tags=["clothing"])
        >>> item_bulk(cloak, Placement.WORN)
        0
    """
    bulk = source.bulk * source.quantity
    if placement == Placement.WORN and source.has_tag(CLOTHING_TAG):
        bulk = max(0, bulk - CLOTHING_BULK_REDUCTION * source.quantity)
    return bulk


def calculate_totals(
    groups: dict[Placement, list[InventoryItem]], max_bulk: int
) -> InventoryTotals:
    """
    Sum value, weight and bulk over carried placements.

    Args:
        groups: Output of :func:`group_by_placement`
        max_bulk: Carrying capacity from the derived stats

    Returns:
        InventoryTotals for the wielded, worn, readily available and stowed groups
    """
    value = 0.0
    weight = 0.0
    bulk = 0.0
    for placement in CARRIED_PLACEMENTS:
        for item in groups.get(placement, []):
            value += item.source.value * item.source.quantity
            weight += item.source.weight * item.source.quantity
            bulk += item_bulk(item.source, placement)
    return InventoryTotals(value=value, weight=weight, bulk=bulk, max_bulk=max_bulk)
