"""Track, talent and knack slots, and the language limit."""

from dataclasses import dataclass

from zwolf.models.character import MAX_TRACK_SLOTS, Character, Source
from zwolf.models.enums import SourceKind

from .source_gate import unlocked_tiers

BASE_LANGUAGES = 2
LANGUAGES_PER_LINGUIST = 2
LINGUIST_KNACK = "linguist"


@dataclass(frozen=True)
class Slot:
    """A numbered slot and the source occupying it, if any."""

    index: int
    source: Source | None = None


@dataclass(frozen=True)
class TalentSlot(Slot):
    """
    A talent slot and the track it is associated with.

    Talent n belongs to track ((n - 1) mod 4) + 1, so talents cycle through
    the four track slots as the character levels.
    """

    track_number: int = 1
    track_name: str | None = None

    @property
    def talent_number(self) -> int:
        """1-based talent number."""
        return self.index + 1


def track_slot_count(level: int) -> int:
    """One track slot per level, up to four."""
    return min(MAX_TRACK_SLOTS, level)


def talent_slot_count(level: int) -> int:
    """One talent slot per level."""
    return level


def talent_track_number(talent_number: int) -> int:
    """
    Track (1-4) associated with a 1-based talent number.

    Examples:
        >>> [talent_track_number(n) for n in range(1, 7)]
        [1, 2, 3, 4, 1, 2]
    """
    return (talent_number - 1) % MAX_TRACK_SLOTS + 1


def _fill(sources: list[Source], count: int) -> list[Source | None]:
    # Stored slot indexes win; the rest take the first free slot in order
    filled: list[Source | None] = [None] * count
    pending: list[Source] = []
    for source in sources:
        index = source.slot_index
        if index is not None and index < count and filled[index] is None:
            filled[index] = source
        else:
            pending.append(source)
    for source in pending:
        for index in range(count):
            if filled[index] is None:
                filled[index] = source
                break
    return filled


def track_slots(character: Character) -> list[Slot]:
    """
    Track slots for the character's level, filled with its tracks.

    Placement comes from :meth:`Character.track_slot_map`, the same map that
    decides when each track's tiers unlock. A track placed in a slot the
    character has not reached yet is not listed.
    """
    slot_map = character.track_slot_map()
    by_slot = {slot_map[track.id]: track for track in character.sources_of_kind(SourceKind.TRACK)}
    return [
        Slot(index=index, source=by_slot.get(index))
        for index in range(track_slot_count(character.level))
    ]


def talent_slots(character: Character) -> list[TalentSlot]:
    """Talent slots for the character's level, with their associated track names."""
    slot_map = character.track_slot_map()
    tracks_by_number = {}
    for track in character.sources_of_kind(SourceKind.TRACK):
        slot_index = slot_map[track.id]
        if slot_index < MAX_TRACK_SLOTS:
            tracks_by_number.setdefault(slot_index + 1, track)

    talents = list(character.sources_of_kind(SourceKind.TALENT))
    filled = _fill(talents, talent_slot_count(character.level))

    slots = []
    for index, source in enumerate(filled):
        track_number = talent_track_number(index + 1)
        track = tracks_by_number.get(track_number)
        slots.append(
            TalentSlot(
                index=index,
                source=source,
                track_number=track_number,
                track_name=track.name if track is not None else None,
            )
        )
    return slots


def knacks_provided(character: Character) -> int:
    """
    Total knack slots granted to a character.

    Counts the ancestry, the foundation, every talent, and every unlocked
    tier of every track.
    """
    total = 0
    for source in (character.ancestry, character.foundation):
        if source is not None:
            total += source.knacks_provided

    for talent in character.sources_of_kind(SourceKind.TALENT):
        total += talent.knacks_provided

    slot_map = character.track_slot_map()
    for track in character.sources_of_kind(SourceKind.TRACK):
        for tier in unlocked_tiers(slot_map[track.id], character.level):
            data = track.tiers.get(tier)
            if data is not None:
                total += data.knacks_provided

    return total


def knack_slots(character: Character) -> list[Slot]:
    """Knack slots filled in assignment order."""
    knacks = list(character.sources_of_kind(SourceKind.KNACK))
    return [
        Slot(index=index, source=knacks[index] if index < len(knacks) else None)
        for index in range(knacks_provided(character))
    ]


def language_limit(character: Character) -> int:
    """Languages known: 2, plus 2 for each Linguist knack."""
    linguists = sum(
        1
        for knack in character.sources_of_kind(SourceKind.KNACK)
        if knack.name.strip().lower() == LINGUIST_KNACK
    )
    return BASE_LANGUAGES + LANGUAGES_PER_LINGUIST * linguists
