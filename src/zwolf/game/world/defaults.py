"""Virtual sources every character has without owning them."""

from zwolf.models.character import Source
from zwolf.models.effects import AbilityEntry
from zwolf.models.enums import SourceKind

SLAM_STRIKE_ID = "ZWVirtualSlam000"

# Basic unarmed attack available to all characters
SLAM_STRIKE = Source(
    id=SLAM_STRIKE_ID,
    name="Slam",
    kind=SourceKind.UNIVERSAL,
    granted_abilities=[
        AbilityEntry(
            name="Slam",
            activity_kind="strike",
            tags="Attack",
            description="<Unarmed> weapon; range Melee 0m; Damage Type Bludgeoning.",
        )
    ],
    is_virtual=True,
)

DEFAULT_VIRTUAL_SOURCES: list[Source] = [SLAM_STRIKE]
