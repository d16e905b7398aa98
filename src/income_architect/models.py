"""Core data models for income and expense estimation.

This module defines the inputs and outputs of the calculation engine:
the income declaration, the forest of recurring expenses, the tax
bracket rows, and the calculation result.

Input models are frozen so that an expense forest snapshot can be shared
between callers without copying. Monetary values are Decimals; ints,
floats and numeric strings are coerced on the way in, and anything that
cannot be read as a finite number becomes zero rather than an error.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Cadence(str, Enum):
    """Pay or expense recurrence frequency.

    Values are the strings stored by the persistence layer.
    """
    HOURLY = "Hourly"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    BI_WEEKLY = "Bi-Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


# Unknown cadence strings are kept verbatim instead of failing validation;
# the converter treats them as contributing nothing.
CadenceField = Annotated[Union[Cadence, str], Field(union_mode="left_to_right")]

NO_STATE_TAX = "NONE"

DEFAULT_HOURS_PER_DAY = Decimal("8")
DEFAULT_DAYS_PER_WEEK = Decimal("5")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_decimal(value: Any) -> Optional[Decimal]:
    """Read a value as a finite Decimal, or None if it is not one.

    Booleans are rejected even though they are ints.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return None
    if not result.is_finite():
        return None
    return result


def coerce_amount(value: Any) -> Decimal:
    """Coerce a user-entered amount, mapping absent or invalid input to 0."""
    result = to_decimal(value)
    return Decimal("0") if result is None else result


def json_number(value: Decimal) -> Union[int, float]:
    """Plain JSON number for a Decimal: int when integral, else float."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal that is written to JSON as a number rather than a string.
JsonDecimal = Annotated[Decimal, PlainSerializer(json_number, when_used="json")]


# =============================================================================
# INCOME MODELS
# =============================================================================

class IncomeSpec(BaseModel):
    """The user's income declaration.

    `amount` is the figure as entered at `cadence`. When `is_gross` is
    False the amount is taken as already post-tax. `hours_per_day` is
    only used for hourly pay; `days_per_week` for hourly and daily pay.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    amount: JsonDecimal = Field(default=Decimal("0"))
    cadence: CadenceField = Field(
        default=Cadence.HOURLY,
        validation_alias=AliasChoices("cadence", "timeFrame"),
    )
    is_gross: bool = Field(
        default=True,
        validation_alias=AliasChoices("is_gross", "isGross"),
        serialization_alias="isGross",
    )
    hours_per_day: JsonDecimal = Field(
        default=DEFAULT_HOURS_PER_DAY,
        validation_alias=AliasChoices("hours_per_day", "hoursPerDay"),
        serialization_alias="hoursPerDay",
    )
    days_per_week: JsonDecimal = Field(
        default=DEFAULT_DAYS_PER_WEEK,
        validation_alias=AliasChoices("days_per_week", "daysPerWeek"),
        serialization_alias="daysPerWeek",
    )
    jurisdiction: str = Field(
        default=NO_STATE_TAX,
        validation_alias=AliasChoices("jurisdiction", "stateCode"),
    )

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        """Invalid or negative amounts become 0."""
        amount = coerce_amount(v)
        return amount if amount > 0 else Decimal("0")

    @field_validator("hours_per_day", mode="before")
    @classmethod
    def validate_hours(cls, v: Any) -> Decimal:
        hours = to_decimal(v)
        if hours is None or hours < 0:
            return DEFAULT_HOURS_PER_DAY
        return hours

    @field_validator("days_per_week", mode="before")
    @classmethod
    def validate_days(cls, v: Any) -> Decimal:
        days = to_decimal(v)
        if days is None or days < 0:
            return DEFAULT_DAYS_PER_WEEK
        return days

    @field_validator("jurisdiction", mode="before")
    @classmethod
    def normalize_jurisdiction(cls, v: Any) -> str:
        """Upper-case the code; blank means no state tax."""
        if v is None:
            return NO_STATE_TAX
        code = str(v).strip().upper()
        return code or NO_STATE_TAX


# =============================================================================
# EXPENSE MODELS
# =============================================================================

class ExpenseNode(BaseModel):
    """One recurring expense, possibly grouping sub-items.

    An amount of 0 marks a pure container: it costs nothing itself but
    its children still roll up into it. A non-zero amount and children
    are independent and both count.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    label: str = ""
    amount: JsonDecimal = Field(default=Decimal("0"))
    cadence: CadenceField = Field(
        default=Cadence.MONTHLY,
        validation_alias=AliasChoices("cadence", "frequency"),
    )
    color: str = ""
    children: tuple["ExpenseNode", ...] = Field(
        default=(),
        validation_alias=AliasChoices("children", "subItems"),
    )

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator("children", mode="before")
    @classmethod
    def validate_children(cls, v: Any) -> Any:
        """A null sub-item list is an empty one."""
        return () if v is None else v

    @property
    def is_container(self) -> bool:
        """True when the node exists only to group its children."""
        return self.amount == 0


ExpenseNode.model_rebuild()


# =============================================================================
# TAX TABLE MODELS
# =============================================================================

class TaxBracket(BaseModel):
    """One row of a progressive bracket table.

    `limit` is the cumulative income ceiling taxed at `rate`; None marks
    the unbounded top bracket.
    """

    model_config = ConfigDict(frozen=True)

    limit: Optional[Decimal] = None
    rate: Decimal = Field(ge=0, lt=1)

    @property
    def is_unbounded(self) -> bool:
        return self.limit is None


# =============================================================================
# CALCULATION RESULTS
# =============================================================================

class ExpenseSlice(BaseModel):
    """Annual total of one root expense, including its whole subtree."""
    name: str
    annual_value: Decimal
    color: str = ""


class PeriodBreakdown(BaseModel):
    """Take-home restated at shorter cadences."""
    monthly: Decimal = Decimal("0")
    weekly: Decimal = Decimal("0")
    daily: Decimal = Decimal("0")
    hourly: Decimal = Decimal("0")


class AuditEntry(BaseModel):
    """A single step of a calculation, kept for explaining the estimate."""
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class CalculationResult(BaseModel):
    """Engine output. All money figures are annual.

    `take_home_annual` is floored at zero; `deficit_annual` carries the
    shortfall the floor discards.
    """
    gross_annual: Decimal
    net_annual: Decimal
    federal_tax_annual: Decimal
    state_tax_annual: Decimal
    total_tax_annual: Decimal
    expenses_annual: Decimal
    take_home_annual: Decimal
    deficit_annual: Decimal = Decimal("0")
    expense_breakdown: list[ExpenseSlice] = Field(default_factory=list)
    period_breakdown: PeriodBreakdown = Field(default_factory=PeriodBreakdown)
    tax_table_version: str = ""
    audit_log: list[AuditEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# PERSISTENCE
# =============================================================================

class PersistedState(BaseModel):
    """Everything a store saves between sessions."""

    model_config = ConfigDict(frozen=True)

    income: IncomeSpec = Field(default_factory=IncomeSpec)
    expenses: tuple[ExpenseNode, ...] = ()
