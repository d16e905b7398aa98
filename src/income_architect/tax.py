"""Federal and state income tax estimates on an annual gross figure."""

from decimal import Decimal
from typing import Any, Iterable, Optional

from .models import TaxBracket, to_decimal
from .tax_tables import TaxTables, get_default_tax_tables

ZERO = Decimal("0")


def federal_tax(
    annual_gross: Any,
    brackets: Optional[Iterable[TaxBracket]] = None,
) -> Decimal:
    """Calculate federal income tax with a progressive bracket table.

    Each bracket taxes only the slice of income between the previous
    bracket's limit and its own. Income exactly at a limit is taxed
    entirely in the lower bracket.

    EXAMPLE (default table):
    - Gross: $62,400
    - $11,600 at 10% = $1,160
    - $35,550 ($11,600 -> $47,150) at 12% = $4,266
    - $15,250 ($47,150 -> $62,400) at 22% = $3,355
    - Total: $8,781

    Args:
        annual_gross: Annual gross income. Non-positive or invalid values
            owe nothing.
        brackets: Bracket rows ascending by limit, last one unbounded.
            Defaults to the built-in table.

    Returns:
        The annual federal tax.
    """
    remaining = to_decimal(annual_gross)
    if remaining is None or remaining <= 0:
        return ZERO
    if brackets is None:
        brackets = get_default_tax_tables().brackets

    tax = ZERO
    previous_limit = ZERO
    for bracket in brackets:
        if bracket.limit is None:
            taxable = remaining
        else:
            taxable = min(remaining, bracket.limit - previous_limit)
        if taxable <= 0:
            break

        tax += taxable * bracket.rate
        remaining -= taxable
        if bracket.limit is None:
            break
        previous_limit = bracket.limit

    return tax


def marginal_rate(
    annual_gross: Any,
    brackets: Optional[Iterable[TaxBracket]] = None,
) -> Decimal:
    """Rate of the bracket the last dollar of income falls in."""
    gross = to_decimal(annual_gross) or ZERO
    if brackets is None:
        brackets = get_default_tax_tables().brackets
    brackets = list(brackets)
    if not brackets:
        return ZERO
    for bracket in brackets:
        if bracket.limit is None or gross <= bracket.limit:
            return bracket.rate
    return brackets[-1].rate


def state_tax(
    annual_gross: Any,
    jurisdiction: Optional[str],
    tables: Optional[TaxTables] = None,
) -> Decimal:
    """Flat-rate state tax: gross times the jurisdiction's rate.

    Unknown jurisdictions and the no-state-tax sentinel have rate 0.
    """
    gross = to_decimal(annual_gross)
    if gross is None or gross <= 0:
        return ZERO
    tables = tables or get_default_tax_tables()
    return gross * tables.rate_for(jurisdiction)


def effective_tax_rate(total_tax: Decimal, annual_gross: Decimal) -> Decimal:
    """Share of gross income paid in tax; 0 when there is no income."""
    if not annual_gross or annual_gross <= 0:
        return ZERO
    return total_tax / annual_gross
