"""Shared fixtures for the Income Architect test suite."""

from decimal import Decimal

import pytest

from income_architect.models import Cadence, ExpenseNode, IncomeSpec


@pytest.fixture
def three_level_tree() -> ExpenseNode:
    """Container A > B (1200/yr) > C (100/mo)."""
    grandchild = ExpenseNode(
        id="c", label="C", amount=Decimal("100"), cadence=Cadence.MONTHLY, color="#00f"
    )
    child = ExpenseNode(
        id="b",
        label="B",
        amount=Decimal("1200"),
        cadence=Cadence.YEARLY,
        color="#0f0",
        children=(grandchild,),
    )
    return ExpenseNode(
        id="a", label="A", amount=Decimal("0"), cadence=Cadence.MONTHLY, color="#f00",
        children=(child,),
    )


@pytest.fixture
def household_forest(three_level_tree: ExpenseNode) -> tuple[ExpenseNode, ...]:
    """A forest with a nested category, a flat expense and an empty container."""
    return (
        three_level_tree,
        ExpenseNode(id="rent", label="Rent", amount=Decimal("1500"), cadence=Cadence.MONTHLY),
        ExpenseNode(id="misc", label="Misc", amount=Decimal("0"), cadence=Cadence.MONTHLY),
    )


@pytest.fixture
def hourly_gross_income() -> IncomeSpec:
    """$30/hour gross, 8h x 5d, California."""
    return IncomeSpec(
        amount=Decimal("30"),
        cadence=Cadence.HOURLY,
        is_gross=True,
        hours_per_day=Decimal("8"),
        days_per_week=Decimal("5"),
        jurisdiction="CA",
    )
