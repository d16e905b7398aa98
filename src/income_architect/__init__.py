"""Income Architect - Take-home income and expense estimation."""

__version__ = "0.1.0"

from .cadence import from_annual, to_annual
from .calculator import TakeHomeCalculator, compute, restate_result
from .expenses import (
    add_expense,
    annual_value,
    create_expense,
    flatten_expenses,
    remove_expense,
    update_expense,
)
from .models import Cadence, CalculationResult, ExpenseNode, IncomeSpec, PersistedState
from .tax import federal_tax, state_tax

__all__ = [
    "TakeHomeCalculator",
    "compute",
    "restate_result",
    "Cadence",
    "CalculationResult",
    "ExpenseNode",
    "IncomeSpec",
    "PersistedState",
    "to_annual",
    "from_annual",
    "federal_tax",
    "state_tax",
    "annual_value",
    "flatten_expenses",
    "add_expense",
    "create_expense",
    "remove_expense",
    "update_expense",
]
