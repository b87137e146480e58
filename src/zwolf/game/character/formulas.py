"""Vitality and coast-number formulas.

Foundations name a built-in formula ("standard", "hardy", "cunning") or carry
a short user-authored arithmetic expression. Expressions are parsed with
:mod:`ast` and evaluated against a whitelist of node types; nothing else in
the Python language is reachable from them.
"""

import ast
import math
import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass

import structlog

from zwolf.models.character import ATTRIBUTE_NAMES, SKILL_NAMES, Character

from .progression import BonusTable

logger = structlog.get_logger(__name__)

DEFAULT_VITALITY = 12
DEFAULT_COAST = 4
DEFAULT_STAMINA = 4

# Levels at which the cunning coast number increases
CUNNING_COAST_LEVELS = (7, 11, 16)

MAX_FORMULA_LENGTH = 200
MAX_EXPONENT = 16
MAX_MAGNITUDE = 10**12


class FormulaError(ValueError):
    """Raised when a formula is malformed, unsafe or yields a non-finite value."""

    pass


VITALITY_FUNCTIONS: dict[str, Callable[[int, int], float]] = {
    "standard": lambda level, boosts: 4 * (level + boosts),
    "hardy": lambda level, boosts: 5 * (level + boosts + 1),
}

COAST_FUNCTIONS: dict[str, Callable[[int], float]] = {
    "standard": lambda level: 4,
    "cunning": lambda level: 5 + len([x for x in CUNNING_COAST_LEVELS if x <= level]),
}

_BINARY_OPERATORS: dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: dict[type, Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_COMPARISONS: dict[type, Callable[[float, float], bool]] = {
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
}

_FUNCTIONS: dict[str, Callable[..., float]] = {
    "min": min,
    "max": max,
    "floor": math.floor,
    "ceil": math.ceil,
    "abs": abs,
}


@dataclass(frozen=True)
class FormulaOutcome:
    """Result of evaluating a vitality or coast formula."""

    value: int
    used_default: bool = False
    warning: str | None = None


def formula_context(character: Character, bonuses: BonusTable) -> dict[str, float]:
    """
    Names available to user-authored formulas.

    Attribute and skill names resolve to the bonus of their current tier.
    """
    context: dict[str, float] = {
        "level": character.level,
        "boostCount": character.vitality_boost_count,
        "vitalityBoostCount": character.vitality_boost_count,
    }
    for name in ATTRIBUTE_NAMES:
        context[name] = bonuses[character.attributes[name]]
    for name in SKILL_NAMES:
        context[name] = bonuses[character.skills[name]]
    return context


def evaluate_formula(expression: str, context: Mapping[str, float]) -> float:
    """
    Evaluate a restricted arithmetic expression.

    Args:
        expression: Expression such as ``"4 * (level + boostCount)"``
        context: Values for the names the expression may use

    Returns:
        The numeric result

    Raises:
        FormulaError: On syntax the sandbox does not allow, unknown names,
            arithmetic errors, or a non-finite result

    Examples:
        >>> evaluate_formula("5 + (level >= 7) + (level >= 11)", {"level": 12})
        7
    """
    if len(expression) > MAX_FORMULA_LENGTH:
        raise FormulaError(f"Formula longer than {MAX_FORMULA_LENGTH} characters")

    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise FormulaError(f"Invalid formula syntax: {e.msg}") from e

    try:
        result = _evaluate_node(tree.body, context)
        if isinstance(result, bool):
            result = int(result)
        finite = isinstance(result, (int, float)) and math.isfinite(result)
        if finite:
            result = _bounded(result)
    except (ArithmeticError, TypeError) as e:
        raise FormulaError(f"Formula could not be evaluated: {e}") from e

    if not finite:
        raise FormulaError(f"Formula produced a non-finite value: {result!r}")
    return result


def _bounded(value: float) -> float:
    # Every intermediate result stays small enough to convert to a float
    if isinstance(value, (int, float)) and abs(value) > MAX_MAGNITUDE:
        raise FormulaError(f"Intermediate result exceeds {MAX_MAGNITUDE:.0e}")
    return value


def _evaluate_node(node: ast.AST, context: Mapping[str, float]) -> float:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(f"Unsupported literal: {node.value!r}")
        return node.value

    if isinstance(node, ast.Name):
        if node.id not in context:
            raise FormulaError(f"Unknown name in formula: {node.id}")
        return context[node.id]

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand, context))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left, context)
        right = _evaluate_node(node.right, context)
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise FormulaError(f"Exponent too large: {right}")
        return _bounded(_BINARY_OPERATORS[type(node.op)](left, right))

    if isinstance(node, ast.Compare):
        left = _evaluate_node(node.left, context)
        for op, comparator in zip(node.ops, node.comparators):
            if type(op) not in _COMPARISONS:
                raise FormulaError(f"Unsupported comparison: {type(op).__name__}")
            right = _evaluate_node(comparator, context)
            if not _COMPARISONS[type(op)](left, right):
                return 0
            left = right
        return 1

    if isinstance(node, ast.IfExp):
        if _evaluate_node(node.test, context):
            return _evaluate_node(node.body, context)
        return _evaluate_node(node.orelse, context)

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
            raise FormulaError("Only min, max, floor, ceil and abs may be called")
        if node.keywords or not node.args:
            raise FormulaError(f"Bad arguments to {node.func.id}()")
        args = [_evaluate_node(arg, context) for arg in node.args]
        return _FUNCTIONS[node.func.id](*args)

    raise FormulaError(f"Unsupported formula element: {type(node).__name__}")


def _resolve(
    label: str,
    function_key: str,
    builtin: Callable[[], float] | None,
    context: Mapping[str, float],
    default: int,
) -> FormulaOutcome:
    key = function_key.strip()
    if not key:
        return FormulaOutcome(value=default, used_default=True)

    try:
        result = builtin() if builtin is not None else evaluate_formula(key, context)
    except FormulaError as e:
        logger.warning(f"{label}_formula_failed", formula=key, error=str(e))
        return FormulaOutcome(
            value=default,
            used_default=True,
            warning=f"{label.capitalize()} formula '{key}' failed ({e}); using {default}.",
        )

    # A zero result falls back to the default as well
    value = math.floor(result)
    if not value:
        return FormulaOutcome(value=default, used_default=True)
    return FormulaOutcome(value=value)


def calculate_max_vitality(character: Character, bonuses: BonusTable) -> FormulaOutcome:
    """
    Maximum vitality points from the foundation's vitality function.

    Built-in functions:
        - standard: 4 * (level + boosts)
        - hardy: 5 * (level + boosts + 1)
    Anything else is evaluated as a sandboxed expression. Missing or failing
    formulas yield the default of 12.
    """
    foundation = character.foundation
    key = foundation.vitality_function if foundation is not None else ""
    builtin = None
    if key.strip() in VITALITY_FUNCTIONS:
        function = VITALITY_FUNCTIONS[key.strip()]

        def builtin() -> float:
            return function(character.level, character.vitality_boost_count)

    return _resolve(
        "vitality", key, builtin, formula_context(character, bonuses), DEFAULT_VITALITY
    )


def calculate_coast_number(character: Character, bonuses: BonusTable) -> FormulaOutcome:
    """
    Coast number from the foundation's coast function.

    Built-in functions:
        - standard: 4
        - cunning: 5, plus one at each of levels 7, 11 and 16
    Missing or failing formulas yield the default of 4.
    """
    foundation = character.foundation
    key = foundation.coast_function if foundation is not None else ""
    builtin = None
    if key.strip() in COAST_FUNCTIONS:
        function = COAST_FUNCTIONS[key.strip()]

        def builtin() -> float:
            return function(character.level)

    return _resolve("coast", key, builtin, formula_context(character, bonuses), DEFAULT_COAST)
