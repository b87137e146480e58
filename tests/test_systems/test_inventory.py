"""Tests for equipment grouping and carried totals."""

from zwolf.game.systems.inventory import calculate_totals, group_by_placement, item_bulk
from zwolf.models import Placement


def _equipment(make_source, name, placement=None, **kwargs):
    return make_source(name, kind="equipment", placement=placement, **kwargs)


class TestGroupByPlacement:
    """Tests for sorting equipment into placement groups."""

    def test_groups_in_assignment_order(self, make_source, make_character):
        """Test items land in their placement group, keeping order."""
        items = [
            _equipment(make_source, "Sword", "wielded"),
            _equipment(make_source, "Dagger", "wielded"),
            _equipment(make_source, "Rope", "stowed"),
        ]
        groups = group_by_placement(make_character(sources=items))
        assert [i.source.name for i in groups[Placement.WIELDED]] == ["Sword", "Dagger"]
        assert [i.source.name for i in groups[Placement.STOWED]] == ["Rope"]
        assert set(groups) == set(Placement)

    def test_missing_placement_not_carried(self, make_source, make_character):
        """Test equipment without a placement is treated as not carried."""
        groups = group_by_placement(make_character(sources=[_equipment(make_source, "Chest")]))
        assert [i.source.name for i in groups[Placement.NOT_CARRIED]] == ["Chest"]

    def test_other_kinds_excluded(self, make_source, make_character):
        """Test only equipment appears in the inventory."""
        knack = make_source("Keen", kind="knack", placement="worn")
        groups = group_by_placement(make_character(sources=[knack]))
        assert all(items == [] for items in groups.values())

    def test_placement_validity(self, make_source, make_character):
        """Test items outside their required placement are flagged."""
        ring = _equipment(make_source, "Ring", "stowed", required_placement="worn")
        boots = _equipment(make_source, "Boots", "worn", required_placement="worn")
        groups = group_by_placement(make_character(sources=[ring, boots]))
        assert groups[Placement.STOWED][0].placement_valid is False
        assert groups[Placement.WORN][0].placement_valid is True


class TestTotals:
    """Tests for carried value, weight and bulk."""

    def test_sums_carried_placements(self, make_source, make_character):
        """Test totals cover carried items and skip not-carried ones."""
        items = [
            _equipment(make_source, "Sword", "wielded", value=10, weight=3, bulk=2),
            _equipment(
                make_source, "Cloak", "worn", value=5, weight=1, bulk=1, tags="clothing"
            ),
            _equipment(make_source, "Rope", "stowed", value=1, weight=1, bulk=1, quantity=3),
            _equipment(make_source, "Chest", "not_carried", value=50, weight=20, bulk=10),
        ]
        totals = calculate_totals(group_by_placement(make_character(sources=items)), 10)
        assert totals.value == 18
        assert totals.weight == 7
        assert totals.bulk == 5
        assert not totals.over_capacity

    def test_over_capacity(self, make_source, make_character):
        """Test bulk beyond capacity is flagged."""
        anvil = _equipment(make_source, "Anvil", "stowed", bulk=6)
        totals = calculate_totals(group_by_placement(make_character(sources=[anvil])), 5)
        assert totals.over_capacity

    def test_worn_clothing_lighter(self, make_source):
        """Test worn clothing loses one bulk per unit but not below zero."""
        robes = _equipment(make_source, "Robes", bulk=0.5, quantity=2, tags=["Clothing"])
        assert item_bulk(robes, Placement.WORN) == 0
        assert item_bulk(robes, Placement.STOWED) == 1

    def test_clothing_only_lighter_when_worn(self, make_source):
        """Test the clothing reduction needs both the tag and the worn placement."""
        coat = _equipment(make_source, "Coat", bulk=2, tags="clothing")
        shield = _equipment(make_source, "Shield", bulk=2)
        assert item_bulk(coat, Placement.WORN) == 1
        assert item_bulk(shield, Placement.WORN) == 2
