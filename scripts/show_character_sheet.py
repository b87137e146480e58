#!/usr/bin/env python3
"""
Print a computed character sheet for a character YAML file.

Usage:
    python scripts/show_character_sheet.py [path/to/character.yaml]
"""

import sys
from pathlib import Path

from zwolf.game.systems.sheet import build_character_sheet
from zwolf.game.world import load_character
from zwolf.logging_config import configure_logging

DEFAULT_CHARACTER = Path(__file__).resolve().parent.parent / "data" / "characters" / "wren.yaml"


def main():
    """Load the character and print its sheet."""
    configure_logging()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_CHARACTER

    character = load_character(path)
    sheet = build_character_sheet(character)
    derived = sheet.derived

    print("=" * 70)
    print(f"{character.name} (level {character.level})")
    print("=" * 70)

    print("\nVitals:")
    print(f"   Max vitality: {sheet.max_vitality}")
    print(f"   Max stamina:  {sheet.max_stamina}")
    print(f"   Coast number: {sheet.coast_number}")

    print("\nTarget numbers:")
    tns = sheet.target_numbers
    print(f"   Toughness {tns.toughness}  Destiny {tns.destiny}")
    print(f"   Improvised {tns.improvised}  Healing {tns.healing}  Challenge {tns.challenge}")

    print("\nProgressions:")
    for group in sheet.progressions.values():
        names = ", ".join(stat.name for stat in group.stats) or "-"
        print(f"   {group.name:10} +{group.bonus:<3} {names}")

    print("\nSenses and size:")
    print(f"   Nightsight {derived.nightsight}m ({derived.sources['nightsight']})")
    print(f"   Darkvision {derived.darkvision}m ({derived.sources['darkvision']})")
    print(f"   Size {derived.effective_size.label}, tags: {', '.join(derived.character_tags)}")

    print("\nAbilities:")
    for kind, abilities in sheet.abilities.items():
        for ability in abilities:
            print(f"   [{kind.value}] {ability.name} - {ability.source_label}")

    print("\nSlots:")
    for slot in sheet.track_slots:
        print(f"   Track {slot.index + 1}: {slot.source.name if slot.source else '(empty)'}")
    for slot in sheet.knack_slots:
        print(f"   Knack {slot.index + 1}: {slot.source.name if slot.source else '(empty)'}")
    print(f"   Languages: {sheet.language_limit}")

    totals = sheet.inventory_totals
    print("\nInventory:")
    for placement, items in sheet.inventory.items():
        for item in items:
            flag = "" if item.placement_valid else " (inactive)"
            print(f"   {placement.value:18} {item.source.name}{flag}")
    print(f"   Bulk {totals.bulk}/{totals.max_bulk}  Weight {totals.weight}  Value {totals.value}")

    bp = sheet.build_points
    print(f"\nBuild points: {bp.total}/{bp.max} ({bp.remaining} remaining)")

    if sheet.warnings:
        print("\nWarnings:")
        for warning in sheet.warnings:
            print(f"   - {warning}")


if __name__ == "__main__":
    main()
