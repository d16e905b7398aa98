#!/usr/bin/env python3
"""
Take-Home Estimate Demonstration

This script demonstrates the estimation workflow:
1. Build an income declaration and an expense forest
2. Calculate tax, net income and take-home income
3. Save and reload the state through a file store

Run: python examples/take_home_demo.py
"""

from decimal import Decimal

from income_architect import (
    Cadence,
    IncomeSpec,
    PersistedState,
    TakeHomeCalculator,
    create_expense,
    restate_result,
)
from income_architect.config import IncomeArchitectConfig, configure_logging
from income_architect.expenses import display_total, iter_expenses
from income_architect.persistence import JsonFileStore
from income_architect.tax import effective_tax_rate
from income_architect.tax_tables import get_state_name


def build_expenses():
    """Create a small expense forest with a container category."""
    forest = ()

    # Housing is a pure container: amount 0, cost comes from sub-items
    forest, housing = create_expense(forest, "Housing")
    forest, _ = create_expense(forest, "Rent", Decimal("1650"), parent_id=housing.id)
    forest, _ = create_expense(forest, "Utilities", Decimal("180"), parent_id=housing.id)

    forest, _ = create_expense(forest, "Groceries", Decimal("125"), Cadence.WEEKLY)
    forest, car = create_expense(forest, "Car", Decimal("320"))
    forest, _ = create_expense(forest, "Insurance", Decimal("95"), parent_id=car.id)
    forest, _ = create_expense(forest, "Streaming", Decimal("18"))
    return forest


def main():
    config = IncomeArchitectConfig()
    configure_logging(config.log_level)

    print("=" * 70)
    print("INCOME ARCHITECT - TAKE-HOME ESTIMATE")
    print("=" * 70)

    income = IncomeSpec(
        amount=Decimal("38.5"),
        cadence=Cadence.HOURLY,
        is_gross=True,
        hours_per_day=8,
        days_per_week=5,
        jurisdiction="CO",
    )
    expenses = build_expenses()

    print()
    print(f"Income: ${income.amount}/{income.cadence.value} (gross), "
          f"{income.hours_per_day}h x {income.days_per_week}d, {get_state_name(income.jurisdiction)}")
    print()
    print("Expenses:")
    for depth, node in iter_expenses(expenses):
        indent = "  " * (depth + 1)
        kind = "container" if node.is_container else node.cadence.value
        print(f"{indent}- {node.label:<20} ${display_total(node):>10,.2f}  ({kind})")

    calculator = TakeHomeCalculator(config.load_tax_tables())
    result = calculator.calculate(income, expenses)

    print()
    print("-" * 70)
    print(f"  Gross income:      ${result.gross_annual:>12,.2f}")
    print(f"  Federal tax:       ${result.federal_tax_annual:>12,.2f}")
    print(f"  State tax:         ${result.state_tax_annual:>12,.2f}")
    print(f"  Effective rate:    {effective_tax_rate(result.total_tax_annual, result.gross_annual):>12.1%}")
    print(f"  Net income:        ${result.net_annual:>12,.2f}")
    print(f"  Expenses:          ${result.expenses_annual:>12,.2f}")
    print(f"  Take-home:         ${result.take_home_annual:>12,.2f}")
    print()
    print("  Per period:")
    print(f"    Monthly  ${result.period_breakdown.monthly:>10,.2f}")
    print(f"    Weekly   ${result.period_breakdown.weekly:>10,.2f}")
    print(f"    Daily    ${result.period_breakdown.daily:>10,.2f}")
    print(f"    Hourly   ${result.period_breakdown.hourly:>10,.2f}")

    print()
    print("  Monthly view of expenses:")
    monthly = restate_result(result, Cadence.MONTHLY, income.hours_per_day, income.days_per_week)
    for item in monthly["expense_breakdown"]:
        print(f"    {item['name']:<20} ${item['value']:>10,.2f}")

    for warning in result.warnings:
        print(f"  ! {warning}")

    store = JsonFileStore(config.state_path)
    store.save(PersistedState(income=income, expenses=expenses))
    reloaded = store.load()
    assert reloaded is not None
    assert calculator.calculate(reloaded.income, reloaded.expenses) == result

    print()
    print(f"State saved to {config.state_path}")
    print("=" * 70)


if __name__ == "__main__":
    main()
