"""Storage port for the income declaration and the expense forest.

The engine never touches storage. Hosts inject a StateStore and call
`load()` once at startup and `save()` after every change. Loading is
forgiving: a missing or malformed income record becomes the default
declaration and a malformed expense list becomes empty, so a corrupt
file never prevents the estimator from starting.
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

import structlog
from pydantic import ValidationError as PydanticValidationError

from .exceptions import PersistenceError
from .models import ExpenseNode, IncomeSpec, PersistedState

logger = structlog.get_logger()

STORAGE_KEY = "income-architect-v1"

# Each persisted income field, with the older key it may be stored under.
REQUIRED_INCOME_KEYS: tuple[tuple[str, ...], ...] = (
    ("amount",),
    ("cadence", "timeFrame"),
    ("isGross",),
    ("hoursPerDay",),
    ("daysPerWeek",),
    ("jurisdiction", "stateCode"),
)


@runtime_checkable
class StateStore(Protocol):
    """Anything that can load and save a PersistedState."""

    def load(self) -> Optional[PersistedState]:
        """Return the saved state, or None if nothing was saved."""
        ...

    def save(self, state: PersistedState) -> None:
        """Persist `state`, replacing what was there."""
        ...


def dump_state(state: PersistedState) -> dict[str, Any]:
    """JSON-ready form of a state, using the persisted field names."""
    return state.model_dump(mode="json", by_alias=True)


def parse_income(raw: Any) -> IncomeSpec:
    """Read an income record, falling back to defaults if it is incomplete."""
    if not isinstance(raw, dict):
        logger.warning("income_record_malformed", reason="not an object")
        return IncomeSpec()

    missing = [keys[0] for keys in REQUIRED_INCOME_KEYS if not any(k in raw for k in keys)]
    if missing:
        logger.warning("income_record_malformed", reason="missing fields", fields=missing)
        return IncomeSpec()

    try:
        return IncomeSpec.model_validate(raw)
    except PydanticValidationError as e:
        logger.warning("income_record_malformed", reason="invalid", error=str(e))
        return IncomeSpec()


def parse_expenses(raw: Any) -> tuple[ExpenseNode, ...]:
    """Read an expense forest, falling back to an empty one if it is malformed."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        logger.warning("expense_forest_malformed", reason="not a list")
        return ()
    try:
        return tuple(ExpenseNode.model_validate(node) for node in raw)
    except PydanticValidationError as e:
        logger.warning("expense_forest_malformed", reason="invalid", error=str(e))
        return ()


def parse_state(raw: Any) -> PersistedState:
    """Build a PersistedState from decoded JSON, defaulting what is broken."""
    if not isinstance(raw, dict):
        logger.warning("state_malformed", reason="not an object")
        return PersistedState()
    income = parse_income(raw["income"]) if "income" in raw else IncomeSpec()
    return PersistedState(income=income, expenses=parse_expenses(raw.get("expenses")))


class InMemoryStore:
    """Store that keeps the last saved state in memory.

    States are kept in their persisted form, so a load goes through the
    same parsing as a file store.
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: Optional[dict[str, Any]] = copy.deepcopy(initial) if initial else None

    def load(self) -> Optional[PersistedState]:
        if self._data is None:
            return None
        return parse_state(self._data)

    def save(self, state: PersistedState) -> None:
        self._data = dump_state(state)


class JsonFileStore:
    """Store backed by a single JSON file.

    The file holds one object keyed by STORAGE_KEY. Writes go to a
    temporary file in the same directory which then replaces the target.
    """

    def __init__(self, path: Union[str, Path], key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def load(self) -> Optional[PersistedState]:
        if not self.path.exists():
            return None

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("state_load_failed", path=str(self.path), error=str(e))
            return None

        if not isinstance(document, dict) or self.key not in document:
            logger.warning("state_key_missing", path=str(self.path), key=self.key)
            return None

        state = parse_state(document[self.key])
        logger.info(
            "state_loaded",
            path=str(self.path),
            expenses=len(state.expenses),
        )
        return state

    def save(self, state: PersistedState) -> None:
        payload = json.dumps({self.key: dump_state(state)}, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(
                f"Failed to save state: {e}",
                location=str(self.path),
                operation="save",
            ) from e
        logger.debug("state_saved", path=str(self.path))
