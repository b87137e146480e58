"""
Deterministic "fair roll" face sequence.

Instead of rolling, each step emits either a success face (12) or a failure
face (1), whichever brings the running success rate closer to 5/12, the
chance of rolling 8 or more on a d12. The realised rate converges on the true
probability without any variance, which keeps the wealth economy auditable.
"""

from collections.abc import Sequence
from fractions import Fraction

SUCCESS_FACE = 12
FAILURE_FACE = 1
SUCCESS_THRESHOLD = 8
TARGET_FRACTION = Fraction(5, 12)


def is_success(face: int) -> bool:
    """Whether a face counts as a success (8 or more)."""
    return face >= SUCCESS_THRESHOLD


def _choose_face(successes: int, length: int, target: Fraction) -> int:
    # Exact comparison; a tie goes to the failure face
    if_success = abs(Fraction(successes + 1, length + 1) - target)
    if_failure = abs(Fraction(successes, length + 1) - target)
    return SUCCESS_FACE if if_success < if_failure else FAILURE_FACE


def next_fair_face(
    history: Sequence[int], target: Fraction = TARGET_FRACTION
) -> tuple[int, tuple[int, ...]]:
    """
    Choose the next face for a history of emitted faces.

    Args:
        history: Faces emitted so far
        target: Success fraction to converge on

    Returns:
        The chosen face (12 or 1) and the extended history

    Examples:
        >>> next_fair_face([])
        (1, (1,))
        >>> next_fair_face([1])
        (12, (1, 12))
    """
    successes = sum(1 for face in history if is_success(face))
    face = _choose_face(successes, len(history), target)
    return face, (*history, face)


class FairRollSequencer:
    """
    Running fair-roll sequence for one actor.

    Only the success and roll counts are needed to pick the next face, so
    each step is constant time. The full history is kept for auditing.
    """

    def __init__(self, history: Sequence[int] = (), target: Fraction = TARGET_FRACTION):
        self.target = target
        self._history: list[int] = list(history)
        self._successes = sum(1 for face in self._history if is_success(face))

    @property
    def history(self) -> tuple[int, ...]:
        """Every face emitted so far, oldest first."""
        return tuple(self._history)

    @property
    def successes(self) -> int:
        """Number of success faces emitted."""
        return self._successes

    @property
    def success_fraction(self) -> Fraction:
        """Realised success rate (0 before the first face)."""
        if not self._history:
            return Fraction(0)
        return Fraction(self._successes, len(self._history))

    def next_face(self) -> int:
        """Emit the next face."""
        face = _choose_face(self._successes, len(self._history), self.target)
        self._history.append(face)
        if is_success(face):
            self._successes += 1
        return face

    def roll(self, count: int) -> list[int]:
        """Emit ``count`` faces in sequence."""
        return [self.next_face() for _ in range(count)]

    def __len__(self) -> int:
        return len(self._history)
