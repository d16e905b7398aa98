"""Custom exceptions for Income Architect.

The calculation engine itself never raises for degraded numeric input:
missing amounts, unknown cadences and zero work schedules are all
defaulted silently. These exceptions cover the edges of the package
instead: editing an expense forest, loading tax tables and settings,
and talking to a persistence store.

All exceptions inherit from IncomeArchitectError.

Example:
    try:
        forest = remove_expense(forest, expense_id)
    except ExpenseNotFoundError as e:
        logger.warning("expense_missing", **e.details)
    except IncomeArchitectError as e:
        logger.error(f"Edit failed: {e}")
"""

from typing import Any, Optional


class IncomeArchitectError(Exception):
    """Base exception for all Income Architect errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(IncomeArchitectError):
    """Error raised when an edit request is malformed.

    Attributes:
        field: The field that failed validation.
        value: The rejected value.
        constraint: The rule that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Cannot update expense field",
        ...     field="id",
        ...     constraint="Must be one of: amount, cadence, color, label",
        ... )
        ValidationError: Cannot update expense field
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ExpenseNotFoundError(ValidationError):
    """Error raised when an edit addresses an expense id that is not in the forest."""

    def __init__(
        self,
        expense_id: str,
        *,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"No expense with id {expense_id!r}",
            field="id",
            value=expense_id,
            details=details,
        )
        self.expense_id = expense_id
        self.operation = operation
        if operation:
            self.details["operation"] = operation


class ConfigurationError(IncomeArchitectError):
    """Error raised when configuration or a tax table is invalid.

    Configuration errors are fatal by default and raised at load time.

    Attributes:
        config_key: The configuration key or table entry that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Bracket limits must ascend",
        ...     config_key="brackets[2].limit",
        ...     expected="> 47150",
        ...     actual="40000",
        ... )
        ConfigurationError: Bracket limits must ascend
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class PersistenceError(IncomeArchitectError):
    """Error raised when a state store cannot be written.

    Read failures are not raised: a store that cannot be read falls back
    to default state instead.

    Attributes:
        location: Path or identifier of the store.
        operation: The operation being attempted (e.g., "save").
    """

    def __init__(
        self,
        message: str,
        *,
        location: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.location = location
        self.operation = operation

        if location:
            self.details["location"] = location
        if operation:
            self.details["operation"] = operation


__all__ = [
    "IncomeArchitectError",
    "ValidationError",
    "ExpenseNotFoundError",
    "ConfigurationError",
    "PersistenceError",
]
