"""Tests for vitality and coast-number formulas."""

import pytest

from zwolf.game.character.formulas import (
    DEFAULT_COAST,
    DEFAULT_VITALITY,
    FormulaError,
    calculate_coast_number,
    calculate_max_vitality,
    evaluate_formula,
    formula_context,
)
from zwolf.game.character.progression import bonus_table
from zwolf.models import Character


def _character(make_source, level=5, vitality="", coast="", boosts=0, **kwargs):
    foundation = make_source(
        "Fundament", kind="foundation", vitality_function=vitality, coast_function=coast
    )
    return Character(level=level, vitality_boost_count=boosts, sources=[foundation], **kwargs)


class TestEvaluateFormula:
    """Tests for the sandboxed expression evaluator."""

    def test_arithmetic(self):
        """Test basic arithmetic with names."""
        assert evaluate_formula("4 * (level + boostCount)", {"level": 3, "boostCount": 1}) == 16

    def test_comparisons_count_as_numbers(self):
        """Test comparisons evaluate to 1 or 0."""
        expression = "5 + (level >= 7) + (level >= 11) + (level >= 16)"
        assert evaluate_formula(expression, {"level": 12}) == 7

    def test_chained_comparison(self):
        """Test chained comparisons."""
        assert evaluate_formula("1 < level < 5", {"level": 3}) == 1
        assert evaluate_formula("1 < level < 5", {"level": 6}) == 0

    def test_conditional_expression(self):
        """Test a conditional expression picks a branch."""
        assert evaluate_formula("20 if level > 10 else 10", {"level": 11}) == 20

    def test_allowed_functions(self):
        """Test min, max, floor, ceil and abs are callable."""
        assert evaluate_formula("max(3, min(level, 10))", {"level": 12}) == 10
        assert evaluate_formula("floor(level / 2) + ceil(0.1) + abs(-1)", {"level": 5}) == 4

    @pytest.mark.parametrize(
        "expression",
        [
            "__import__('os')",
            "level.__class__",
            "[1, 2]",
            "lambda: 1",
            "open('x')",
            "'text'",
            "x := 1",
        ],
    )
    def test_rejects_unsafe_syntax(self, expression):
        """Test anything outside the arithmetic grammar is rejected."""
        with pytest.raises(FormulaError):
            evaluate_formula(expression, {"level": 1})

    def test_unknown_name(self):
        """Test unknown names are rejected."""
        with pytest.raises(FormulaError, match="Unknown name"):
            evaluate_formula("strength * 2", {"level": 1})

    def test_division_by_zero(self):
        """Test arithmetic errors become FormulaError."""
        with pytest.raises(FormulaError):
            evaluate_formula("level / 0", {"level": 1})

    def test_syntax_error(self):
        """Test malformed input is rejected."""
        with pytest.raises(FormulaError, match="syntax"):
            evaluate_formula("4 *", {})

    def test_huge_exponent_rejected(self):
        """Test large exponents are refused."""
        with pytest.raises(FormulaError):
            evaluate_formula("9 ** 999999", {})

    @pytest.mark.parametrize(
        "expression",
        ["((9**16)**16)**16", "9**16", "1e300 * 1e300", "10**12 * 10", "1e300"],
    )
    def test_oversized_results_rejected(self, expression):
        """Test results too large for a float become FormulaError."""
        with pytest.raises(FormulaError):
            evaluate_formula(expression, {})

    def test_complex_result_rejected(self):
        """Test a fractional power of a negative number is refused."""
        with pytest.raises(FormulaError):
            evaluate_formula("(-8) ** 0.5", {})

    def test_large_but_bounded_result(self):
        """Test results within the bound still evaluate."""
        assert evaluate_formula("10 ** 12", {}) == 10**12

    def test_formula_error_is_value_error(self):
        """Test callers can catch FormulaError as ValueError."""
        assert issubclass(FormulaError, ValueError)

    def test_context_binds_stat_bonuses(self):
        """Test attribute and skill names resolve to their bonuses."""
        character = Character(level=5, attributes={"fortitude": "awesome"})
        context = formula_context(character, bonus_table(5))
        assert context["fortitude"] == 6
        assert context["stealth"] == 2
        assert context["level"] == 5


class TestMaxVitality:
    """Tests for maximum vitality."""

    def test_standard(self, make_source):
        """Test the standard vitality function."""
        character = _character(make_source, level=5, vitality="standard", boosts=1)
        assert calculate_max_vitality(character, bonus_table(5)).value == 24

    def test_hardy(self, make_source):
        """Test the hardy vitality function."""
        character = _character(make_source, level=5, vitality="hardy")
        assert calculate_max_vitality(character, bonus_table(5)).value == 30

    def test_custom_expression(self, make_source):
        """Test a user-authored expression."""
        character = _character(
            make_source,
            level=4,
            vitality="3 * level + fortitude",
            attributes={"fortitude": "awesome"},
        )
        outcome = calculate_max_vitality(character, bonus_table(4))
        assert outcome.value == 12 + bonus_table(4).awesome
        assert outcome.warning is None

    def test_missing_foundation_uses_default(self):
        """Test a character without a foundation gets the default."""
        outcome = calculate_max_vitality(Character(level=3), bonus_table(3))
        assert outcome.value == DEFAULT_VITALITY
        assert outcome.used_default

    def test_zero_result_uses_default(self, make_source):
        """Test a zero result falls back to the default."""
        character = _character(make_source, level=0, vitality="standard")
        assert calculate_max_vitality(character, bonus_table(0)).value == DEFAULT_VITALITY

    def test_bad_formula_warns_and_defaults(self, make_source):
        """Test a failing formula yields the default and a warning."""
        character = _character(make_source, vitality="level / 0")
        outcome = calculate_max_vitality(character, bonus_table(5))
        assert outcome.value == DEFAULT_VITALITY
        assert "Vitality formula" in outcome.warning

    def test_nested_power_warns_and_defaults(self, make_source):
        """Test a power tower too big for a float falls back to 12 with a warning."""
        character = _character(make_source, level=3, vitality="((9**16)**16)**16")
        outcome = calculate_max_vitality(character, bonus_table(3))
        assert outcome.value == DEFAULT_VITALITY
        assert outcome.used_default
        assert "Vitality formula" in outcome.warning

    def test_fractional_result_floors(self, make_source):
        """Test fractional results are floored."""
        character = _character(make_source, level=5, vitality="level * 2.5")
        assert calculate_max_vitality(character, bonus_table(5)).value == 12


class TestCoastNumber:
    """Tests for the coast number."""

    def test_standard(self, make_source):
        """Test the standard coast function."""
        character = _character(make_source, coast="standard")
        assert calculate_coast_number(character, bonus_table(5)).value == 4

    @pytest.mark.parametrize("level,expected", [(1, 5), (7, 6), (11, 7), (16, 8), (20, 8)])
    def test_cunning(self, make_source, level, expected):
        """Test the cunning coast function steps up at 7, 11 and 16."""
        character = _character(make_source, level=level, coast="cunning")
        assert calculate_coast_number(character, bonus_table(level)).value == expected

    def test_bad_formula_warns_and_defaults(self, make_source):
        """Test an unsafe formula yields the default and a warning."""
        character = _character(make_source, coast="__import__('os').system('x')")
        outcome = calculate_coast_number(character, bonus_table(5))
        assert outcome.value == DEFAULT_COAST
        assert outcome.warning is not None
