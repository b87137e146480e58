"""Tests for merging active effects into derived stats."""

import itertools
import random

import pytest

from zwolf.config import Settings
from zwolf.game.systems.effects import (
    DEFAULT_CHARACTER_TAGS,
    bulk_capacity,
    derive_stats,
    effective_size,
)
from zwolf.models import Character, Progression, SizeTier


def vision(kind, meters):
    return {"kind": "vision", "vision": kind, "meters": meters}


def progression(stat, tier):
    return {"kind": "progression", "stat": stat, "tier": tier}


class TestVision:
    """Tests for max-wins vision radii."""

    def test_defaults(self, make_character):
        """Test the default nightsight and darkvision floors."""
        stats = derive_stats(make_character())
        assert stats.nightsight == 1.0
        assert stats.darkvision == 0.2
        assert stats.sources["nightsight"] == "default"

    def test_end_to_end_track_tier_beats_ancestry(self, make_source, make_track, make_character):
        """Test a level 5 track's tier 2 vision beats the ancestry's."""
        ancestry = make_source("Owlkin", kind="ancestry", effects=[vision("night", 1.0)])
        track = make_track("Scout", slot_index=0, tiers={2: {"effects": [vision("night", 2.0)]}})
        stats = derive_stats(make_character(level=5, sources=[ancestry, track]))
        assert stats.nightsight == 2.0
        assert stats.sources["nightsight"] == "Scout (Tier 2)"

    def test_locked_tier_does_not_contribute(self, make_track, make_character):
        """Test vision on a locked tier is ignored."""
        track = make_track("Scout", slot_index=0, tiers={3: {"effects": [vision("night", 9)]}})
        assert derive_stats(make_character(level=5, sources=[track])).nightsight == 1.0

    def test_inactive_equipment_contributes_nothing(self, make_source, make_character):
        """Test equipment in the wrong placement leaves stats untouched."""
        goggles = make_source(
            "Goggles",
            kind="equipment",
            placement="stowed",
            required_placement="worn",
            effects=[vision("dark", 30), {"kind": "bulk", "amount": 5}],
        )
        stats = derive_stats(make_character(sources=[goggles]))
        assert stats.darkvision == 0.2
        assert stats.bulk_boost == 0

    def test_lower_value_never_overrides_default(self, make_source, make_character):
        """Test a smaller radius does not replace the default floor."""
        source = make_source("Dim", effects=[vision("night", 0.5)])
        stats = derive_stats(make_character(sources=[source]))
        assert stats.nightsight == 1.0
        assert stats.sources["nightsight"] == "default"

    def test_equal_value_keeps_default(self, make_source, make_character):
        """Test defaults survive unless strictly exceeded."""
        source = make_source("Same", effects=[vision("night", 1.0)])
        assert derive_stats(make_character(sources=[source])).sources["nightsight"] == "default"

    @pytest.mark.parametrize("meters", [None, "", "far", float("nan"), float("inf")])
    def test_malformed_radius_is_absent(self, make_source, make_character, meters):
        """Test malformed radii contribute nothing instead of zeroing the field."""
        good = make_source("Good", effects=[vision("dark", 6)])
        bad = make_source("Bad", effects=[vision("dark", meters)])
        stats = derive_stats(make_character(sources=[good, bad]))
        assert stats.darkvision == 6

    def test_settings_floor(self, make_character):
        """Test vision floors come from settings."""
        settings = Settings(_env_file=None, default_nightsight=3.0)
        assert derive_stats(make_character(), settings).nightsight == 3.0


class TestProgressionOverrides:
    """Tests for max-wins progression overrides."""

    def test_defaults(self, make_character):
        """Test default toughness, destiny and speed progressions."""
        stats = derive_stats(make_character(level=5))
        assert stats.toughness_progression == Progression.MEDIOCRE
        assert stats.destiny_progression == Progression.MODERATE
        assert stats.speed_progression is None
        assert stats.toughness_tn == 8
        assert stats.destiny_tn == 10

    def test_highest_tier_wins(self, make_source, make_character):
        """Test the best override per stat is used."""
        sources = [
            make_source("A", effects=[progression("toughnessTN", "specialty")]),
            make_source("B", effects=[progression("toughnessTN", "moderate")]),
            make_source("C", effects=[progression("speed", "awesome")]),
        ]
        stats = derive_stats(make_character(level=5, sources=sources))
        assert stats.toughness_progression == Progression.SPECIALTY
        assert stats.toughness_tn == 11
        assert stats.speed_progression == Progression.AWESOME
        assert stats.sources["toughness"] == "A"

    def test_lower_override_does_not_demote(self, make_source, make_character):
        """Test an override below the default leaves the default in place."""
        source = make_source("Frail", effects=[progression("destinyTN", "mediocre")])
        stats = derive_stats(make_character(sources=[source]))
        assert stats.destiny_progression == Progression.MODERATE

    def test_blank_tier_ignored(self, make_source, make_character):
        """Test a blank tier is treated as absent."""
        source = make_source("Blank", effects=[progression("speed", "")])
        assert derive_stats(make_character(sources=[source])).speed_progression is None

    def test_all_unlocked_tiers_are_candidates(self, make_track, make_character):
        """Test a lower tier's override still counts after a later tier unlocks."""
        track = make_track(
            "Guardian",
            slot_index=0,
            tiers={
                1: {"effects": [progression("toughnessTN", "awesome")]},
                2: {"effects": [progression("toughnessTN", "specialty")]},
            },
        )
        stats = derive_stats(make_character(level=5, sources=[track]))
        assert stats.toughness_progression == Progression.AWESOME
        assert stats.sources["toughness"] == "Guardian (Tier 1)"


class TestSize:
    """Tests for summed size steps."""

    def test_steps_sum(self, make_source, make_character):
        """Test size steps from several sources add up."""
        sources = [
            make_source("Grow", effects=[{"kind": "size", "steps": 2}]),
            make_source("Shrink", effects=[{"kind": "size", "steps": -1}]),
        ]
        stats = derive_stats(make_character(sources=sources))
        assert stats.size_steps == 1
        assert stats.effective_size == SizeTier.LARGE

    def test_clamped_to_ladder(self):
        """Test effective size never leaves the size ladder."""
        assert effective_size(SizeTier.HUGE, 10) == SizeTier.TITANIC
        assert effective_size(SizeTier.SMALL, -10) == SizeTier.DIMINUTIVE

    def test_uses_base_size(self, make_character):
        """Test the character's base size is the starting point."""
        stats = derive_stats(make_character(base_size="small"))
        assert stats.effective_size == SizeTier.SMALL


class TestBulkCapacity:
    """Tests for carrying capacity."""

    def test_default_medium_mediocre(self, make_character):
        """Test the base capacity for a medium character with mediocre brawn."""
        assert derive_stats(make_character()).bulk_capacity == 10

    def test_size_brawn_and_boosts(self, make_source, make_character):
        """Test size, brawn and boosts all add to capacity."""
        sources = [
            make_source("Pack", kind="equipment", effects=[{"kind": "bulk", "amount": 3}]),
            make_source("Giant Blood", effects=[{"kind": "size", "steps": 1}]),
        ]
        character = make_character(sources=sources, skills={"brawn": "specialty"})
        stats = derive_stats(character)
        assert stats.bulk_capacity == 10 + 4 + 6 + 3

    def test_minimum_of_one(self):
        """Test capacity never drops below one."""
        assert bulk_capacity(SizeTier.DIMINUTIVE, Progression.MEDIOCRE, 0, 10) == 1

    def test_duplicate_source_counted_once(self, make_source, make_character):
        """Test a source listed twice adds its size and bulk only once."""
        giant = make_source(
            "Giant Blood",
            effects=[{"kind": "size", "steps": 1}, {"kind": "bulk", "amount": 2}],
        )
        copy = giant.model_copy()
        stats = derive_stats(make_character(sources=[giant, giant, copy]))
        assert stats.size_steps == 1
        assert stats.bulk_boost == 2
        assert stats.bulk_capacity == 10 + 4 + 2

    def test_malformed_amount_ignored(self, make_source, make_character):
        """Test a non-numeric boost contributes nothing."""
        source = make_source("Odd", effects=[{"kind": "bulk", "amount": "lots"}])
        assert derive_stats(make_character(sources=[source])).bulk_boost == 0


class TestSetUnions:
    """Tests for union-merged fields."""

    def test_default_character_tag(self, make_character):
        """Test characters without tags are Humanoid."""
        assert derive_stats(make_character()).character_tags == DEFAULT_CHARACTER_TAGS

    def test_tags_deduplicated_and_sorted(self, make_source, make_track, make_character):
        """Test tags from sources and tiers merge into one sorted set."""
        ancestry = make_source("Wight", kind="ancestry", character_tags="Undead")
        track = make_track("Grave", slot_index=0, tiers={1: {"tag_list": "Undead, Construct"}})
        stats = derive_stats(make_character(level=1, sources=[ancestry, track]))
        assert stats.character_tags == ("Construct", "Undead")

    def test_resistances_vulnerabilities_proficiencies(self, make_source, make_character):
        """Test each union field collects its own entries."""
        source = make_source(
            "Salamander",
            effects=[
                {"kind": "resistance", "tag": "Fire"},
                {"kind": "resistance", "tag": "Fire"},
                {"kind": "vulnerability", "tag": "Cold"},
                {"kind": "proficiency", "value": "Spears"},
                {"kind": "proficiency", "value": "axes"},
            ],
        )
        stats = derive_stats(make_character(sources=[source]))
        assert stats.resistances == ("Fire",)
        assert stats.vulnerabilities == ("Cold",)
        assert stats.proficiencies == ("axes", "Spears")


class TestOrderIndependence:
    """Tests that source order never changes the result."""

    def test_shuffled_sources_give_identical_stats(self, make_source, make_track):
        """Test every permutation of sources yields the same derived stats."""
        sources = [
            make_source("Alpha", effects=[vision("night", 4), progression("speed", "moderate")]),
            make_source("Beta", effects=[vision("night", 4), {"kind": "size", "steps": 1}]),
            make_source("Gamma", effects=[progression("speed", "moderate"), vision("dark", 2)]),
            make_track(
                "Delta",
                slot_index=0,
                tiers={1: {"effects": [{"kind": "size", "steps": -2}, vision("dark", 2)]}},
            ),
        ]
        baseline = derive_stats(Character(level=3, sources=sources))
        for permutation in itertools.permutations(sources):
            assert derive_stats(Character(level=3, sources=list(permutation))) == baseline

        assert baseline.sources["nightsight"] == "Alpha"
        assert baseline.sources["speed"] == "Alpha"
        assert baseline.sources["darkvision"] == "Delta (Tier 1)"

    def test_random_shuffles(self, make_source):
        """Test random orderings of many sources agree."""
        rng = random.Random(7)
        sources = [
            make_source(
                f"S{i}",
                effects=[
                    vision(rng.choice(["night", "dark"]), rng.randint(0, 20)),
                    {"kind": "size", "steps": rng.randint(-2, 2)},
                    progression(
                        rng.choice(["speed", "toughnessTN", "destinyTN"]),
                        rng.choice(list(Progression)).value,
                    ),
                ],
            )
            for i in range(12)
        ]
        baseline = derive_stats(Character(level=7, sources=sources))
        for _ in range(20):
            shuffled = sources[:]
            rng.shuffle(shuffled)
            assert derive_stats(Character(level=7, sources=shuffled)) == baseline
