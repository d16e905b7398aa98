"""Take-home income calculation.

The calculator annualizes the declared income, applies federal bracket
tax and flat state tax when the income is gross, subtracts the annual
value of the expense forest, and restates what is left at shorter
cadences.

Each call is a pure function of its inputs. Steps are recorded in an
audit log on the result and emitted through structlog so an estimate
can be explained after the fact.
"""

from decimal import Decimal
from typing import Any, Iterable, Optional, Union

import structlog

from .cadence import MONTHS_PER_YEAR, WEEKS_PER_YEAR, from_annual, parse_cadence, to_annual
from .expenses import flatten_expenses
from .models import (
    DEFAULT_DAYS_PER_WEEK,
    DEFAULT_HOURS_PER_DAY,
    NO_STATE_TAX,
    AuditEntry,
    Cadence,
    CalculationResult,
    ExpenseNode,
    IncomeSpec,
    PeriodBreakdown,
    to_decimal,
)
from .tax import federal_tax, state_tax
from .tax_tables import TaxTables, get_default_tax_tables

logger = structlog.get_logger()

ZERO = Decimal("0")

IncomeInput = Union[IncomeSpec, dict[str, Any]]
ExpenseInput = Iterable[Union[ExpenseNode, dict[str, Any]]]


class TakeHomeCalculator:
    """
    Estimate tax, net income and take-home income.

    Income entered as net is taken verbatim: no tax is reported and no
    gross figure is inferred from it.
    """

    def __init__(self, tables: Optional[TaxTables] = None):
        """
        Initialize calculator with tax tables.

        Args:
            tables: Bracket and state rate tables (default: built-in)
        """
        self.tables = tables or get_default_tax_tables()

    def _log_step(
        self,
        audit_log: list[AuditEntry],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        audit_log.append(AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        ))
        logger.debug(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    @staticmethod
    def _schedule(income: IncomeSpec, warnings: list[str]) -> tuple[Decimal, Decimal]:
        """Work schedule safe to divide by; zeros fall back to 8h x 5d."""
        hours = income.hours_per_day
        days = income.days_per_week
        if hours <= 0:
            hours = DEFAULT_HOURS_PER_DAY
            warnings.append(
                f"Hours per day is zero; using {DEFAULT_HOURS_PER_DAY} for the per-hour breakdown."
            )
        if days <= 0:
            days = DEFAULT_DAYS_PER_WEEK
            warnings.append(
                f"Days per week is zero; using {DEFAULT_DAYS_PER_WEEK} for the per-day breakdown."
            )
        return hours, days

    def calculate(self, income: IncomeInput, expenses: ExpenseInput = ()) -> CalculationResult:
        """
        Calculate annual tax, net income and take-home income.

        Args:
            income: Income declaration (model or persisted dict)
            expenses: Root expense nodes (models or persisted dicts)

        Returns:
            CalculationResult with annual figures, per-root expense totals,
            period breakdown and audit trail
        """
        income = IncomeSpec.model_validate(income)
        forest = tuple(ExpenseNode.model_validate(node) for node in expenses)
        audit_log: list[AuditEntry] = []
        warnings: list[str] = []

        # Step 1: Annualize income
        gross_annual = to_annual(
            income.amount, income.cadence, income.hours_per_day, income.days_per_week
        )
        self._log_step(
            audit_log,
            step="annual_income",
            input_value=(
                f"{income.amount}/{getattr(income.cadence, 'value', income.cadence)}, "
                f"{income.hours_per_day}h x {income.days_per_week}d"
            ),
            output_value=str(gross_annual),
            source="User provided",
            notes="gross" if income.is_gross else "net (post-tax)",
        )
        if parse_cadence(income.cadence) is None:
            warnings.append(f"Unknown income cadence {income.cadence!r}; income counted as zero.")

        # Step 2: Taxes
        if income.is_gross:
            federal_tax_annual = federal_tax(gross_annual, self.tables.brackets)
            self._log_step(
                audit_log,
                step="federal_tax",
                input_value=str(gross_annual),
                output_value=str(federal_tax_annual),
                source=f"Federal brackets {self.tables.version}",
            )

            state_tax_annual = state_tax(gross_annual, income.jurisdiction, self.tables)
            self._log_step(
                audit_log,
                step="state_tax",
                input_value=f"{gross_annual} x {self.tables.rate_for(income.jurisdiction)}",
                output_value=str(state_tax_annual),
                source=f"Flat rate for {self.tables.name_for(income.jurisdiction)}",
            )
            if income.jurisdiction != NO_STATE_TAX and not self.tables.knows(income.jurisdiction):
                warnings.append(
                    f"Unknown jurisdiction {income.jurisdiction!r}; no state tax applied."
                )

            net_annual = gross_annual - federal_tax_annual - state_tax_annual
        else:
            federal_tax_annual = ZERO
            state_tax_annual = ZERO
            net_annual = gross_annual

        total_tax_annual = federal_tax_annual + state_tax_annual
        self._log_step(
            audit_log,
            step="net_income",
            input_value=f"{gross_annual} - {total_tax_annual}",
            output_value=str(net_annual),
            source="Calculated",
        )

        # Step 3: Expenses
        expense_breakdown = flatten_expenses(forest)
        expenses_annual = sum((s.annual_value for s in expense_breakdown), ZERO)
        self._log_step(
            audit_log,
            step="total_expenses",
            input_value=f"{len(forest)} root expenses",
            output_value=str(expenses_annual),
            source="Expense forest",
        )

        # Step 4: Take-home, floored at zero
        remainder = net_annual - expenses_annual
        take_home_annual = max(ZERO, remainder)
        deficit_annual = max(ZERO, -remainder)
        self._log_step(
            audit_log,
            step="take_home",
            input_value=f"{net_annual} - {expenses_annual}",
            output_value=str(take_home_annual),
            source="Calculated",
            notes=f"deficit {deficit_annual}" if deficit_annual else None,
        )

        # Step 5: Period breakdown
        hours, days = self._schedule(income, warnings)
        period_breakdown = PeriodBreakdown(
            monthly=take_home_annual / MONTHS_PER_YEAR,
            weekly=take_home_annual / WEEKS_PER_YEAR,
            daily=take_home_annual / (days * WEEKS_PER_YEAR),
            hourly=take_home_annual / (hours * days * WEEKS_PER_YEAR),
        )

        if deficit_annual > 0:
            warnings.append(
                f"Expenses exceed net income by {deficit_annual} per year; "
                "take-home is shown as zero."
            )
        if gross_annual == 0:
            warnings.append("Income is zero; enter an amount to estimate take-home pay.")

        logger.info(
            "take_home_calculated",
            gross_annual=str(gross_annual),
            take_home_annual=str(take_home_annual),
            expenses=len(expense_breakdown),
        )

        return CalculationResult(
            gross_annual=gross_annual,
            net_annual=net_annual,
            federal_tax_annual=federal_tax_annual,
            state_tax_annual=state_tax_annual,
            total_tax_annual=total_tax_annual,
            expenses_annual=expenses_annual,
            take_home_annual=take_home_annual,
            deficit_annual=deficit_annual,
            expense_breakdown=expense_breakdown,
            period_breakdown=period_breakdown,
            tax_table_version=self.tables.version,
            audit_log=audit_log,
            warnings=warnings,
        )


def compute(
    income: IncomeInput,
    expenses: ExpenseInput = (),
    tables: Optional[TaxTables] = None,
) -> CalculationResult:
    """Calculate a result with a throwaway calculator."""
    return TakeHomeCalculator(tables).calculate(income, expenses)


def restate_result(
    result: CalculationResult,
    cadence: Union[Cadence, str],
    hours_per_day: Any = DEFAULT_HOURS_PER_DAY,
    days_per_week: Any = DEFAULT_DAYS_PER_WEEK,
) -> dict[str, Any]:
    """Headline figures of a result per `cadence` period, for display.

    Zero schedule parameters fall back to the 8h x 5d default.
    """
    hours = to_decimal(hours_per_day)
    days = to_decimal(days_per_week)
    if hours is None or hours <= 0:
        hours = DEFAULT_HOURS_PER_DAY
    if days is None or days <= 0:
        days = DEFAULT_DAYS_PER_WEEK

    def per(value: Decimal) -> Decimal:
        return from_annual(value, cadence, hours, days)

    return {
        "gross": per(result.gross_annual),
        "federal_tax": per(result.federal_tax_annual),
        "state_tax": per(result.state_tax_annual),
        "expenses": per(result.expenses_annual),
        "take_home": per(result.take_home_annual),
        "expense_breakdown": [
            {"name": s.name, "value": per(s.annual_value), "color": s.color}
            for s in result.expense_breakdown
        ],
    }
