"""
Dice-driven wealth economy.

A character's wealth is a score, and every transaction rolls one d12 per point
of wealth. Each die showing 8 or more is a success and absorbs one point of
the price (or of a gain or loss):

- Purchase / loss: wealth drops by max(0, value - successes); the transaction
  fails, changing nothing, when that exceeds current wealth.
- Gain: wealth rises by max(0, value - successes).

Pure resolution lives in :func:`resolve_transaction`. :class:`WealthLedger`
owns a running score, awaits dice from an injected die source, and serialises
every transaction through a single commit path.
"""

import asyncio
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

import structlog

from zwolf.config import Settings, get_settings
from zwolf.models.character import Character

from .fair_roll import FairRollSequencer, is_success

logger = structlog.get_logger(__name__)

DIE_SIDES = 12


class TransactionDirection(StrEnum):
    """Which way a transaction moves wealth."""

    PURCHASE = "purchase"
    GAIN = "gain"
    LOSS = "loss"


@dataclass(frozen=True)
class WealthRollResult:
    """
    Outcome of one wealth transaction, reported whether or not it succeeded.

    Attributes:
        direction: Purchase, gain or loss
        score: Wealth before the transaction
        value: Price, inflow or outflow
        dice: Faces rolled (one per point of wealth; empty for value 0)
        successes: Dice showing 8 or more
        delta: max(0, value - successes)
        new_score: Wealth after the transaction (unchanged on failure)
        succeeded: False when a purchase or loss was unaffordable
        label: What the transaction was for
    """

    direction: TransactionDirection
    score: int
    value: int
    dice: tuple[int, ...]
    successes: int
    delta: int
    new_score: int
    succeeded: bool
    label: str = ""

    @property
    def cost(self) -> int:
        """Wealth spent (purchases and losses) or gained."""
        return self.delta

    @property
    def shortfall(self) -> int:
        """Additional wealth that would have been needed."""
        if self.direction == TransactionDirection.GAIN:
            return 0
        return max(0, self.delta - self.score)


def resolve_transaction(
    score: int,
    value: int,
    faces: Sequence[int],
    direction: TransactionDirection = TransactionDirection.PURCHASE,
    label: str = "",
) -> WealthRollResult:
    """
    Resolve a transaction from already-rolled faces.

    Args:
        score: Current wealth
        value: Price, inflow or outflow
        faces: One face per point of wealth (ignored when value is 0)
        direction: Purchase, gain or loss
        label: What the transaction was for

    Returns:
        The WealthRollResult

    Raises:
        ValueError: If score or value is negative, or the number of faces
            does not match the score

    Examples:
        >>> resolve_transaction(3, 4, [8, 2, 12]).new_score
        1
        >>> resolve_transaction(0, 5, []).succeeded
        False
    """
    if score < 0:
        raise ValueError(f"Wealth cannot be negative, got {score}")
    if value < 0:
        raise ValueError(f"Transaction value cannot be negative, got {value}")

    direction = TransactionDirection(direction)

    if value == 0:
        return WealthRollResult(
            direction=direction,
            score=score,
            value=0,
            dice=(),
            successes=0,
            delta=0,
            new_score=score,
            succeeded=True,
            label=label,
        )

    if len(faces) != score:
        raise ValueError(f"Expected {score} wealth dice, got {len(faces)}")

    successes = sum(1 for face in faces if is_success(face))
    delta = max(0, value - successes)

    if direction == TransactionDirection.GAIN:
        new_score = score + delta
        succeeded = True
    elif delta > score:
        new_score = score
        succeeded = False
    else:
        new_score = score - delta
        succeeded = True

    return WealthRollResult(
        direction=direction,
        score=score,
        value=value,
        dice=tuple(faces),
        successes=successes,
        delta=delta,
        new_score=new_score,
        succeeded=succeeded,
        label=label,
    )


def purchase(score: int, price: int, faces: Sequence[int], label: str = "") -> WealthRollResult:
    """Resolve a purchase; see :func:`resolve_transaction`."""
    return resolve_transaction(score, price, faces, TransactionDirection.PURCHASE, label)


class DieSource(Protocol):
    """Asynchronous supplier of d12 faces."""

    async def roll(self, count: int) -> list[int]: ...


class Notifier(Protocol):
    """Receives every wealth result, including failures."""

    async def notify(self, result: WealthRollResult) -> None: ...


class RandomDieSource:
    """Uniform d12 faces from a random number generator."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng if rng is not None else random.Random()

    async def roll(self, count: int) -> list[int]:
        return [self.rng.randint(1, DIE_SIDES) for _ in range(count)]


class FairDieSource:
    """Faces from a deterministic fair-roll sequence."""

    def __init__(self, sequencer: FairRollSequencer | None = None):
        self.sequencer = sequencer if sequencer is not None else FairRollSequencer()

    async def roll(self, count: int) -> list[int]:
        return self.sequencer.roll(count)


class LogNotifier:
    """Reports wealth results through structlog."""

    async def notify(self, result: WealthRollResult) -> None:
        event = "wealth_transaction_committed" if result.succeeded else "wealth_transaction_failed"
        logger.info(
            event,
            direction=result.direction.value,
            label=result.label,
            value=result.value,
            dice=len(result.dice),
            successes=result.successes,
            delta=result.delta,
            old_score=result.score,
            new_score=result.new_score,
        )


def default_die_source(settings: Settings | None = None) -> DieSource:
    """Fair rolls when enabled in settings, otherwise (optionally seeded) random dice."""
    if settings is None:
        settings = get_settings()
    if settings.fair_wealth_rolls:
        return FairDieSource()
    return RandomDieSource(random.Random(settings.rng_seed))


@dataclass(frozen=True)
class ShoppingItem:
    """A line on a shopping list."""

    name: str
    price: int
    quantity: int = 1

    def __post_init__(self) -> None:
        """Validate shopping list entry."""
        if self.price < 0:
            raise ValueError(f"price must be >= 0, got {self.price}")
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")


@dataclass
class BatchPurchaseResult:
    """
    Outcome of buying a whole shopping list.

    Attributes:
        starting_score: Wealth before the batch
        final_score: Wealth after the batch
        results: Every unit's transaction, in the order it was attempted
        purchased: Item name -> units bought
        failed: Item name -> units not bought
    """

    starting_score: int
    final_score: int = 0
    results: list[WealthRollResult] = field(default_factory=list)
    purchased: dict[str, int] = field(default_factory=dict)
    failed: dict[str, int] = field(default_factory=dict)

    @property
    def spent(self) -> int:
        """Total wealth spent on the batch."""
        return self.starting_score - self.final_score

    @property
    def purchased_count(self) -> int:
        """Units bought."""
        return sum(self.purchased.values())

    @property
    def failed_count(self) -> int:
        """Units that could not be afforded."""
        return sum(self.failed.values())


class WealthLedger:
    """
    Running wealth score for one character.

    All operations on a ledger run one at a time. Every change to the score
    goes through :meth:`_commit`.
    """

    def __init__(
        self,
        score: int = 0,
        die_source: DieSource | None = None,
        notifier: Notifier | None = None,
    ):
        if score < 0:
            raise ValueError(f"Wealth cannot be negative, got {score}")
        self._score = score
        self.die_source = die_source if die_source is not None else default_die_source()
        self.notifier = notifier if notifier is not None else LogNotifier()
        self._lock = asyncio.Lock()

    @classmethod
    def for_character(
        cls,
        character: Character,
        die_source: DieSource | None = None,
        notifier: Notifier | None = None,
    ) -> "WealthLedger":
        """Create a ledger starting from a character's wealth."""
        return cls(character.currency_score, die_source, notifier)

    @property
    def score(self) -> int:
        """Current wealth."""
        return self._score

    def apply_to(self, character: Character) -> Character:
        """Return a copy of ``character`` carrying this ledger's wealth."""
        return character.model_copy(update={"currency_score": self._score})

    async def purchase(self, price: int, label: str = "") -> WealthRollResult:
        """Attempt to buy something at ``price``."""
        async with self._lock:
            return await self._transact(price, TransactionDirection.PURCHASE, label)

    async def gain(self, value: int, label: str = "") -> WealthRollResult:
        """Gain wealth from treasure, sales or gifts worth ``value``."""
        async with self._lock:
            return await self._transact(value, TransactionDirection.GAIN, label)

    async def lose(self, value: int, label: str = "") -> WealthRollResult:
        """Lose wealth worth ``value`` (theft, fines, upkeep)."""
        async with self._lock:
            return await self._transact(value, TransactionDirection.LOSS, label)

    async def purchase_all(self, items: Iterable[ShoppingItem]) -> BatchPurchaseResult:
        """
        Buy a shopping list, cheapest items first.

        Items are sorted by price (ties keep list order) and bought one unit
        at a time against the running score, so each roll uses the wealth
        left by the previous one. When a unit cannot be afforded, the rest
        of that item is marked failed and the batch moves on to the next item.

        Args:
            items: Shopping list entries

        Returns:
            BatchPurchaseResult with every unit's result
        """
        ordered = sorted(items, key=lambda item: item.price)

        async with self._lock:
            batch = BatchPurchaseResult(starting_score=self._score)
            for item in ordered:
                for unit in range(item.quantity):
                    result = await self._transact(
                        item.price, TransactionDirection.PURCHASE, item.name
                    )
                    batch.results.append(result)
                    if not result.succeeded:
                        remaining = item.quantity - unit
                        batch.failed[item.name] = batch.failed.get(item.name, 0) + remaining
                        break
                    batch.purchased[item.name] = batch.purchased.get(item.name, 0) + 1
            batch.final_score = self._score

        logger.info(
            "wealth_batch_completed",
            items=len(ordered),
            purchased=batch.purchased_count,
            failed=batch.failed_count,
            spent=batch.spent,
            final_score=batch.final_score,
        )
        return batch

    async def _transact(
        self, value: int, direction: TransactionDirection, label: str
    ) -> WealthRollResult:
        # Caller holds the lock
        faces: list[int] = []
        if value > 0:
            faces = await self.die_source.roll(self._score)
        result = resolve_transaction(self._score, value, faces, direction, label)
        self._commit(result)
        await self.notifier.notify(result)
        return result

    def _commit(self, result: WealthRollResult) -> None:
        if result.succeeded:
            self._score = result.new_score
