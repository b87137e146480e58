"""Character and source records handed to the rules core by the host."""

import uuid
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .effects import AbilityEntry, EffectEntry
from .enums import Placement, Progression, SizeTier, SourceKind

ATTRIBUTE_NAMES = ("agility", "fortitude", "perception", "willpower")
SKILL_NAMES = (
    "acumen",
    "athletics",
    "brawn",
    "dexterity",
    "glibness",
    "influence",
    "insight",
    "stealth",
)

DEFAULT_ATTRIBUTE_PROGRESSION = Progression.MODERATE
DEFAULT_SKILL_PROGRESSION = Progression.MEDIOCRE

TIER_NUMBERS = (1, 2, 3, 4, 5)
MAX_TRACK_SLOTS = 4

# Assigning a source with this name grants one progression-only level
PROGRESSION_ENHANCEMENT_NAME = "Progression Enhancement"


def split_tags(value: Any) -> list[str]:
    """
    Normalise a tag field to a list of non-blank strings.

    Accepts a comma-separated string or a list; order and case are preserved.

    Examples:
        >>> split_tags("Undead, Construct,")
        ['Undead', 'Construct']
    """
    if not value:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        parts = [str(part) for part in value if part is not None]
    else:
        return []
    return [part.strip() for part in parts if part.strip()]


def _ability_list(value: Any) -> Any:
    # Legacy documents keyed granted abilities by random id
    if isinstance(value, dict):
        return [ability for ability in value.values() if ability]
    if value is None:
        return []
    return value


class TierData(BaseModel):
    """Entries that a track grants once one of its tiers unlocks."""

    effects: list[EffectEntry] = Field(default_factory=list)
    granted_abilities: list[AbilityEntry] = Field(default_factory=list)
    tag_list: list[str] = Field(default_factory=list)
    knacks_provided: int = Field(default=0, ge=0)

    @field_validator("tag_list", mode="before")
    @classmethod
    def _split_tag_list(cls, value: Any) -> list[str]:
        return split_tags(value)

    @field_validator("granted_abilities", mode="before")
    @classmethod
    def _abilities_as_list(cls, value: Any) -> Any:
        return _ability_list(value)


class Source(BaseModel):
    """
    Any assignable game element that can carry effect or ability entries.

    Attributes:
        id: Stable identity used for de-duplication (defaults to a random hex id)
        name: Display name, used as the traceability label
        kind: What sort of element this is
        slot_index: 0-based slot for tracks and talents
        tiers: Track tier data keyed 1-5
        placement: Where a piece of equipment currently sits
        required_placement: Placement the equipment must be in to be active
        effects: Modifier entries granted while the source is active
        granted_abilities: Abilities granted while the source is active
        character_tags: Creature tags granted (e.g. "Undead")
        tags: Item tags (e.g. "clothing") that affect inventory handling
        knacks_provided: Knack slots granted
        build_points: Build point budget granted (ancestry/foundation)
        vitality_function: Named or custom vitality formula (foundation)
        coast_function: Named or custom coast-number formula (foundation)
        is_virtual: Virtual sources exist for every character and sort last
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    kind: SourceKind
    slot_index: int | None = Field(default=None, ge=0)
    tiers: dict[int, TierData] = Field(default_factory=dict)
    placement: Placement | None = None
    required_placement: Placement | None = None
    effects: list[EffectEntry] = Field(default_factory=list)
    granted_abilities: list[AbilityEntry] = Field(default_factory=list)
    character_tags: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    knacks_provided: int = Field(default=0, ge=0)
    build_points: int = Field(default=0, ge=0)
    vitality_function: str = ""
    coast_function: str = ""
    price: int = Field(default=0, ge=0)
    bulk: float = Field(default=0, ge=0)
    weight: float = Field(default=0, ge=0)
    value: float = Field(default=0, ge=0)
    quantity: int = Field(default=1, ge=1)
    is_virtual: bool = False

    @field_validator("tiers", mode="before")
    @classmethod
    def _normalise_tier_keys(cls, value: Any) -> Any:
        if not value:
            return {}
        if not isinstance(value, dict):
            return value
        tiers: dict[int, Any] = {}
        for key, data in value.items():
            number = int(str(key).removeprefix("tier"))
            if number not in TIER_NUMBERS:
                raise ValueError(f"Tier number must be between 1 and 5, got {key}")
            tiers[number] = data if data is not None else {}
        return tiers

    @field_validator("placement", "required_placement", mode="before")
    @classmethod
    def _blank_placement(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("character_tags", "tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str]:
        return split_tags(value)

    @field_validator("granted_abilities", mode="before")
    @classmethod
    def _abilities_as_list(cls, value: Any) -> Any:
        return _ability_list(value)

    def has_tag(self, tag: str) -> bool:
        """Check item tags case-insensitively."""
        wanted = tag.strip().lower()
        return any(existing.lower() == wanted for existing in self.tags)


class Character(BaseModel):
    """
    A character snapshot: level, progressions, wealth and assigned sources.

    The host owns this record; the rules core only reads it.
    """

    name: str = "Unnamed"
    level: int = Field(default=0, ge=0)
    progression_boost: bool = False
    currency_score: int = Field(default=0, ge=0)
    base_size: SizeTier = SizeTier.MEDIUM
    attributes: dict[str, Progression] = Field(default_factory=dict, validate_default=True)
    skills: dict[str, Progression] = Field(default_factory=dict, validate_default=True)
    vitality_boost_count: int = Field(default=0, ge=0)
    sources: list[Source] = Field(default_factory=list)

    @field_validator("base_size", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> SizeTier:
        return SizeTier.parse(value)

    @field_validator("attributes", mode="after")
    @classmethod
    def _fill_attributes(cls, value: dict[str, Progression]) -> dict[str, Progression]:
        return {
            name: value.get(name, DEFAULT_ATTRIBUTE_PROGRESSION) for name in ATTRIBUTE_NAMES
        } | value

    @field_validator("skills", mode="after")
    @classmethod
    def _fill_skills(cls, value: dict[str, Progression]) -> dict[str, Progression]:
        return {name: value.get(name, DEFAULT_SKILL_PROGRESSION) for name in SKILL_NAMES} | value

    @property
    def progression_only_level(self) -> int:
        """Extra level that counts for progression bonuses only (0 or 1)."""
        if self.progression_boost:
            return 1
        return int(any(source.name == PROGRESSION_ENHANCEMENT_NAME for source in self.sources))

    @property
    def ancestry(self) -> Source | None:
        """The assigned ancestry, if any."""
        return next(self.sources_of_kind(SourceKind.ANCESTRY), None)

    @property
    def foundation(self) -> Source | None:
        """The assigned foundation (base template), if any."""
        return next(self.sources_of_kind(SourceKind.FOUNDATION), None)

    def sources_of_kind(self, kind: SourceKind):
        """Iterate assigned sources of one kind in assignment order, each id once."""
        seen: set[str] = set()
        for source in self.sources:
            if source.kind == kind and source.id not in seen:
                seen.add(source.id)
                yield source

    def track_slot_map(self) -> dict[str, int]:
        """
        Track id -> 0-based slot, shared by tier unlocking and slot display.

        A stored slot index below four wins when that slot is still free.
        Every other track takes the first free slot in assignment order, and
        tracks beyond the fourth continue past the last slot.

        Examples:
            >>> a = Source(name="A", kind="track")
            >>> b = Source(name="B", kind="track", slot_index=0)
            >>> slots = Character(sources=[a, b]).track_slot_map()
            >>> slots[b.id], slots[a.id]
            (0, 1)
        """
        slots: dict[str, int] = {}
        taken: set[int] = set()
        pending: list[Source] = []
        for track in self.sources_of_kind(SourceKind.TRACK):
            index = track.slot_index
            if index is not None and index < MAX_TRACK_SLOTS and index not in taken:
                slots[track.id] = index
                taken.add(index)
            else:
                pending.append(track)

        index = 0
        for track in pending:
            while index in taken:
                index += 1
            slots[track.id] = index
            taken.add(index)
        return slots
