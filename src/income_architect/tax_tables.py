"""Federal bracket and state rate tables used by the tax calculators.

These tables are illustrative approximations for estimating take-home
pay, not authoritative tax data: the federal brackets are the 2024
single-filer ordinary income brackets with no deductions, and each
state is reduced to one flat rate.

The tables are data, not logic. A replacement set can be loaded from a
JSON file with the same shape:

    {
        "version": "2025-custom",
        "brackets": [{"limit": 11925, "rate": 0.10}, ..., {"limit": null, "rate": 0.37}],
        "stateRates": {"NONE": 0, "CA": 0.08, ...},
        "stateNames": {"CA": "California", ...}
    }
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .models import NO_STATE_TAX, TaxBracket

logger = structlog.get_logger()


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_TABLE_VERSION = "2024-illustrative"


def get_tax_table_version() -> str:
    """Return the version of the built-in tables."""
    return TAX_TABLE_VERSION


# =============================================================================
# FEDERAL BRACKETS
# =============================================================================
# Ordered ascending by cumulative limit. The last bracket is unbounded.

FEDERAL_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(limit=Decimal("11600"), rate=Decimal("0.10")),
    TaxBracket(limit=Decimal("47150"), rate=Decimal("0.12")),
    TaxBracket(limit=Decimal("100525"), rate=Decimal("0.22")),
    TaxBracket(limit=Decimal("191950"), rate=Decimal("0.24")),
    TaxBracket(limit=Decimal("243725"), rate=Decimal("0.32")),
    TaxBracket(limit=Decimal("609350"), rate=Decimal("0.35")),
    TaxBracket(limit=None, rate=Decimal("0.37")),
)


# =============================================================================
# STATE RATES
# =============================================================================
# Simplified flat rates keyed by postal code.

STATE_TAX_RATES: dict[str, Decimal] = {
    NO_STATE_TAX: Decimal("0"),
    "AL": Decimal("0.05"), "AK": Decimal("0"), "AZ": Decimal("0.025"),
    "AR": Decimal("0.049"), "CA": Decimal("0.08"), "CO": Decimal("0.044"),
    "CT": Decimal("0.05"), "DE": Decimal("0.06"), "FL": Decimal("0"),
    "GA": Decimal("0.057"), "HI": Decimal("0.08"), "ID": Decimal("0.058"),
    "IL": Decimal("0.049"), "IN": Decimal("0.032"), "IA": Decimal("0.06"),
    "KS": Decimal("0.057"), "KY": Decimal("0.05"), "LA": Decimal("0.04"),
    "ME": Decimal("0.07"), "MD": Decimal("0.05"), "MA": Decimal("0.05"),
    "MI": Decimal("0.04"), "MN": Decimal("0.07"), "MS": Decimal("0.05"),
    "MO": Decimal("0.05"), "MT": Decimal("0.06"), "NE": Decimal("0.06"),
    "NV": Decimal("0"), "NH": Decimal("0"), "NJ": Decimal("0.06"),
    "NM": Decimal("0.05"), "NY": Decimal("0.06"), "NC": Decimal("0.047"),
    "ND": Decimal("0.02"), "OH": Decimal("0.03"), "OK": Decimal("0.04"),
    "OR": Decimal("0.09"), "PA": Decimal("0.03"), "RI": Decimal("0.05"),
    "SC": Decimal("0.07"), "SD": Decimal("0"), "TN": Decimal("0"),
    "TX": Decimal("0"), "UT": Decimal("0.048"), "VT": Decimal("0.06"),
    "VA": Decimal("0.05"), "WA": Decimal("0"), "WV": Decimal("0.06"),
    "WI": Decimal("0.05"), "WY": Decimal("0"),
}

STATE_NAMES: dict[str, str] = {
    NO_STATE_TAX: "No State Tax / Federal Only",
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut",
    "DE": "Delaware", "FL": "Florida", "GA": "Georgia", "HI": "Hawaii",
    "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine",
    "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan",
    "MN": "Minnesota", "MS": "Mississippi", "MO": "Missouri",
    "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico",
    "NY": "New York", "NC": "North Carolina", "ND": "North Dakota",
    "OH": "Ohio", "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania",
    "RI": "Rhode Island", "SC": "South Carolina", "SD": "South Dakota",
    "TN": "Tennessee", "TX": "Texas", "UT": "Utah", "VT": "Vermont",
    "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming",
}


# =============================================================================
# TABLE BUNDLE
# =============================================================================

class TaxTables(BaseModel):
    """A bracket table and a jurisdiction rate table that belong together."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str = TAX_TABLE_VERSION
    brackets: tuple[TaxBracket, ...] = FEDERAL_TAX_BRACKETS
    state_rates: dict[str, Decimal] = Field(
        default_factory=lambda: dict(STATE_TAX_RATES),
        validation_alias=AliasChoices("state_rates", "stateRates"),
    )
    state_names: dict[str, str] = Field(
        default_factory=lambda: dict(STATE_NAMES),
        validation_alias=AliasChoices("state_names", "stateNames"),
    )

    def rate_for(self, jurisdiction: Optional[str]) -> Decimal:
        """Flat rate for a jurisdiction code; unknown codes pay nothing."""
        if not jurisdiction:
            return Decimal("0")
        return self.state_rates.get(jurisdiction.strip().upper(), Decimal("0"))

    def knows(self, jurisdiction: Optional[str]) -> bool:
        return bool(jurisdiction) and jurisdiction.strip().upper() in self.state_rates

    def name_for(self, jurisdiction: Optional[str]) -> str:
        """Display name for a jurisdiction, falling back to the code."""
        code = (jurisdiction or NO_STATE_TAX).strip().upper()
        return self.state_names.get(code, code)


def validate_tax_tables(tables: TaxTables) -> TaxTables:
    """Check the structural rules the bracket walk relies on.

    Raises:
        ConfigurationError: If brackets are empty, out of order, have an
            unbounded bracket anywhere but last, or any rate is outside
            [0, 1).
    """
    brackets = tables.brackets
    if not brackets:
        raise ConfigurationError(
            "Bracket table is empty",
            config_key="brackets",
            expected="At least one bracket",
        )

    previous: Optional[Decimal] = None
    for i, bracket in enumerate(brackets):
        is_last = i == len(brackets) - 1
        if bracket.limit is None:
            if not is_last:
                raise ConfigurationError(
                    "Only the last bracket may be unbounded",
                    config_key=f"brackets[{i}].limit",
                    expected="A finite limit",
                )
            continue
        if bracket.limit <= 0 or (previous is not None and bracket.limit <= previous):
            raise ConfigurationError(
                "Bracket limits must be positive and strictly ascending",
                config_key=f"brackets[{i}].limit",
                expected=f"> {previous if previous is not None else 0}",
                actual=str(bracket.limit),
            )
        previous = bracket.limit

    for code, rate in tables.state_rates.items():
        if rate < 0 or rate >= 1:
            raise ConfigurationError(
                "State rate must be in [0, 1)",
                config_key=f"state_rates.{code}",
                actual=str(rate),
            )
    if tables.state_rates.get(NO_STATE_TAX, Decimal("0")) != 0:
        raise ConfigurationError(
            "The no-state-tax sentinel must have rate 0",
            config_key=f"state_rates.{NO_STATE_TAX}",
            actual=str(tables.state_rates[NO_STATE_TAX]),
        )
    return tables


def parse_tax_tables(data: dict[str, Any]) -> TaxTables:
    """Build and validate TaxTables from decoded JSON.

    State codes are upper-cased and the no-state-tax sentinel is added
    when missing.
    """
    try:
        tables = TaxTables.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            "Malformed tax table",
            details={"errors": e.errors(include_url=False)},
        ) from e

    rates = {code.strip().upper(): rate for code, rate in tables.state_rates.items()}
    rates.setdefault(NO_STATE_TAX, Decimal("0"))
    names = {code.strip().upper(): name for code, name in tables.state_names.items()}
    names.setdefault(NO_STATE_TAX, STATE_NAMES[NO_STATE_TAX])
    tables = tables.model_copy(update={"state_rates": rates, "state_names": names})
    return validate_tax_tables(tables)


def load_tax_tables(path: Union[str, Path]) -> TaxTables:
    """Load replacement tables from a JSON file.

    Raises:
        ConfigurationError: If the file cannot be read, is not JSON, or
            fails validation.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read tax table file: {e}",
            config_key="tax_table_file",
            actual=str(path),
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Tax table file must contain a JSON object",
            config_key="tax_table_file",
            actual=str(path),
        )

    tables = parse_tax_tables(data)
    logger.info(
        "tax_tables_loaded",
        path=str(path),
        version=tables.version,
        brackets=len(tables.brackets),
        jurisdictions=len(tables.state_rates),
    )
    return tables


_DEFAULT_TABLES = validate_tax_tables(TaxTables())


def get_default_tax_tables() -> TaxTables:
    """Return the built-in tables."""
    return _DEFAULT_TABLES


def get_state_tax_rate(jurisdiction: Optional[str]) -> Decimal:
    """Flat rate for a jurisdiction in the built-in table."""
    return _DEFAULT_TABLES.rate_for(jurisdiction)


def get_state_name(jurisdiction: Optional[str]) -> str:
    """Display name for a jurisdiction in the built-in table."""
    return _DEFAULT_TABLES.name_for(jurisdiction)


def list_jurisdictions() -> list[tuple[str, str]]:
    """(code, name) pairs with the no-state-tax option first."""
    codes = sorted(code for code in STATE_NAMES if code != NO_STATE_TAX)
    return [(NO_STATE_TAX, STATE_NAMES[NO_STATE_TAX])] + [(c, STATE_NAMES[c]) for c in codes]
