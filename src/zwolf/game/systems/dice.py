"""
Key-die dice engine.

A check rolls 3 d12 plus one extra die per net boost or jinx, sorts them, and
reads a single "key die" from the sorted pool:

- net boosts > 0: the second-highest die
- net boosts < 0: the second-lowest die
- otherwise: the median

The die just above the key die showing 12 signals a critical success chance;
the die just below showing 1 signals a critical failure chance.
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from zwolf.game.character.progression import BonusTable, character_bonus_table
from zwolf.models.character import ATTRIBUTE_NAMES, SKILL_NAMES, Character
from zwolf.models.enums import Progression

logger = structlog.get_logger(__name__)

BASE_DICE_COUNT = 3
DIE_SIDES = 12
MIN_BOOSTS = -10
MAX_BOOSTS = 10
CRIT_SUCCESS_VALUE = 12
CRIT_FAILURE_VALUE = 1

DEFAULT_FLAVOR = "Z-Wolf Epic Roll"
SPEED_FLAVOR = "Speed Check"


class KeyDiePosition(StrEnum):
    """Which order statistic was read as the key die."""

    SECOND_HIGHEST = "second-highest"
    SECOND_LOWEST = "second-lowest"
    MEDIAN = "median"


@dataclass(frozen=True)
class RollResult:
    """
    Outcome of one key-die check.

    Attributes:
        dice: Faces in the order they were rolled
        dice_sorted: Faces in ascending order
        key_die_index: Index of the key die within dice_sorted
        key_die_value: Face of the key die
        key_die_position: Which order statistic the key die is
        net_boosts: Net boosts after clamping
        modifier: Flat modifier added to the key die
        total: key_die_value + modifier
        crit_success_chance: The next-higher die is a 12
        crit_failure_chance: The next-lower die is a 1
        flavor: Label shown with the roll
        target_number: Number to meet, if any
        success: total >= target_number, or None without a target
    """

    dice: tuple[int, ...]
    dice_sorted: tuple[int, ...]
    key_die_index: int
    key_die_value: int
    key_die_position: KeyDiePosition
    net_boosts: int
    modifier: int
    total: int
    crit_success_chance: bool
    crit_failure_chance: bool
    flavor: str = DEFAULT_FLAVOR
    target_number: int | None = None
    success: bool | None = None


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0


def clamp_net_boosts(value: Any) -> int:
    """
    Parse net boosts and clamp them to [-10, 10].

    Anything that is not a number counts as zero.

    Examples:
        >>> clamp_net_boosts(14)
        10
        >>> clamp_net_boosts("-3")
        -3
        >>> clamp_net_boosts("lots")
        0
    """
    return max(MIN_BOOSTS, min(MAX_BOOSTS, _parse_int(value)))


def dice_count(net_boosts: int) -> int:
    """Number of dice rolled: three plus one per net boost or jinx."""
    return BASE_DICE_COUNT + abs(net_boosts)


def key_die_index(pool_size: int, net_boosts: int) -> tuple[int, KeyDiePosition]:
    """
    Index of the key die in a sorted pool.

    Examples:
        >>> key_die_index(3, 0)
        (1, <KeyDiePosition.MEDIAN: 'median'>)
        >>> key_die_index(5, 2)[0]
        3
    """
    if net_boosts > 0:
        return pool_size - 2, KeyDiePosition.SECOND_HIGHEST
    if net_boosts < 0:
        return 1, KeyDiePosition.SECOND_LOWEST
    return pool_size // 2, KeyDiePosition.MEDIAN


def resolve_key_die(
    faces: Sequence[int],
    net_boosts: int,
    modifier: int = 0,
    flavor: str = "",
    target_number: int | None = None,
) -> RollResult:
    """
    Resolve already-rolled faces into a RollResult.

    Args:
        faces: Rolled faces, in roll order
        net_boosts: Net boosts (clamped here as well)
        modifier: Flat modifier added to the key die
        flavor: Label for the roll
        target_number: Number the total must meet for success

    Returns:
        The resolved RollResult

    Raises:
        ValueError: If the number of faces does not match the boosts
    """
    net_boosts = clamp_net_boosts(net_boosts)
    expected = dice_count(net_boosts)
    if len(faces) != expected:
        raise ValueError(f"Expected {expected} dice for {net_boosts} net boosts, got {len(faces)}")

    dice_sorted = tuple(sorted(faces))
    index, position = key_die_index(len(dice_sorted), net_boosts)
    key = dice_sorted[index]
    total = key + modifier

    crit_success = index < len(dice_sorted) - 1 and dice_sorted[index + 1] == CRIT_SUCCESS_VALUE
    crit_failure = index > 0 and dice_sorted[index - 1] == CRIT_FAILURE_VALUE

    return RollResult(
        dice=tuple(faces),
        dice_sorted=dice_sorted,
        key_die_index=index,
        key_die_value=key,
        key_die_position=position,
        net_boosts=net_boosts,
        modifier=modifier,
        total=total,
        crit_success_chance=crit_success,
        crit_failure_chance=crit_failure,
        flavor=flavor or DEFAULT_FLAVOR,
        target_number=target_number,
        success=total >= target_number if target_number is not None else None,
    )


class DiceEngine:
    """
    Rolls key-die checks from an injected random number generator.

    Boosts are always passed per roll; the engine holds no roll state
    besides its generator.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng if rng is not None else random.Random()

    def roll_faces(self, count: int) -> list[int]:
        """Roll ``count`` independent d12 faces."""
        return [self.rng.randint(1, DIE_SIDES) for _ in range(count)]

    def roll(
        self,
        net_boosts: Any = 0,
        modifier: Any = 0,
        flavor: str = "",
        target_number: int | None = None,
    ) -> RollResult:
        """
        Roll a check.

        Args:
            net_boosts: Net boosts (positive) or jinxes (negative); clamped
            modifier: Flat modifier; non-numeric values count as zero
            flavor: Label for the roll
            target_number: Number the total must meet for success

        Returns:
            The resolved RollResult
        """
        net_boosts = clamp_net_boosts(net_boosts)
        faces = self.roll_faces(dice_count(net_boosts))
        result = resolve_key_die(faces, net_boosts, _parse_int(modifier), flavor, target_number)

        logger.debug(
            "dice_rolled",
            flavor=result.flavor,
            dice=result.dice_sorted,
            key_die=result.key_die_value,
            total=result.total,
            success=result.success,
        )
        return result

    def roll_progression(
        self,
        tier: Progression,
        bonuses: BonusTable,
        net_boosts: Any = 0,
        target_number: int | None = None,
    ) -> RollResult:
        """Roll with the bonus of a progression tier, e.g. "Specialty Progression Check"."""
        tier = Progression(tier)
        return self.roll(
            net_boosts,
            bonuses[tier],
            f"{tier.value.capitalize()} Progression Check",
            target_number,
        )

    def roll_skill(
        self,
        character: Character,
        skill: str,
        net_boosts: Any = 0,
        target_number: int | None = None,
    ) -> RollResult:
        """
        Roll a skill check using the skill's progression bonus.

        Raises:
            ValueError: If ``skill`` is not a known skill name
        """
        if skill not in SKILL_NAMES:
            raise ValueError(f"Unknown skill: {skill}")
        return self._roll_stat(character, skill, character.skills[skill], net_boosts, target_number)

    def roll_attribute(
        self,
        character: Character,
        attribute: str,
        net_boosts: Any = 0,
        target_number: int | None = None,
    ) -> RollResult:
        """
        Roll an attribute check using the attribute's progression bonus.

        Raises:
            ValueError: If ``attribute`` is not a known attribute name
        """
        if attribute not in ATTRIBUTE_NAMES:
            raise ValueError(f"Unknown attribute: {attribute}")
        return self._roll_stat(
            character, attribute, character.attributes[attribute], net_boosts, target_number
        )

    def roll_speed(
        self,
        character: Character,
        speed_tier: Progression | None,
        net_boosts: Any = 0,
        target_number: int | None = None,
    ) -> RollResult:
        """Roll a speed check; without a speed progression the modifier is +0."""
        modifier = character_bonus_table(character)[speed_tier] if speed_tier else 0
        return self.roll(net_boosts, modifier, SPEED_FLAVOR, target_number)

    def _roll_stat(
        self,
        character: Character,
        name: str,
        tier: Progression,
        net_boosts: Any,
        target_number: int | None,
    ) -> RollResult:
        modifier = character_bonus_table(character)[tier]
        flavor = f"{name.capitalize()} ({tier.value.capitalize()})"
        return self.roll(net_boosts, modifier, flavor, target_number)
