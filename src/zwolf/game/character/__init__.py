"""Character progression, build points and derived formulas."""

from .formulas import (
    COAST_FUNCTIONS,
    DEFAULT_COAST,
    DEFAULT_STAMINA,
    DEFAULT_VITALITY,
    VITALITY_FUNCTIONS,
    FormulaError,
    FormulaOutcome,
    calculate_coast_number,
    calculate_max_vitality,
    evaluate_formula,
)
from .progression import (
    BonusTable,
    BuildPointSummary,
    ProgressionGroup,
    TargetNumbers,
    bonus_table,
    build_point_summary,
    calculate_target_numbers,
    character_bonus_table,
    organize_by_progression,
    skill_cost,
    target_number,
)

__all__ = [
    "BonusTable",
    "BuildPointSummary",
    "COAST_FUNCTIONS",
    "DEFAULT_COAST",
    "DEFAULT_STAMINA",
    "DEFAULT_VITALITY",
    "FormulaError",
    "FormulaOutcome",
    "ProgressionGroup",
    "TargetNumbers",
    "VITALITY_FUNCTIONS",
    "bonus_table",
    "build_point_summary",
    "calculate_coast_number",
    "calculate_max_vitality",
    "calculate_target_numbers",
    "character_bonus_table",
    "evaluate_formula",
    "organize_by_progression",
    "skill_cost",
    "target_number",
]
