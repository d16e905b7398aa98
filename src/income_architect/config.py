"""Configuration system for Income Architect.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults.

Usage:
    from income_architect.config import IncomeArchitectConfig

    # Load from environment variables and .env file
    config = IncomeArchitectConfig()

    store = JsonFileStore(config.state_path)
    calculator = TakeHomeCalculator(config.load_tax_tables())
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import NO_STATE_TAX, IncomeSpec
from .tax_tables import TaxTables, get_default_tax_tables, load_tax_tables


class IncomeArchitectConfig(BaseSettings):
    """Root configuration for Income Architect.

    Environment Variables:
        INCOME_ARCHITECT_ENV: Environment name (development, staging, production, test)
        INCOME_ARCHITECT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        INCOME_ARCHITECT_DATA_DIR: Directory for the saved state file
        INCOME_ARCHITECT_STATE_FILE: File name of the saved state
        INCOME_ARCHITECT_TAX_TABLE_FILE: Optional JSON file replacing the built-in tax tables
        INCOME_ARCHITECT_DEFAULT_JURISDICTION: State code for a fresh income declaration
        INCOME_ARCHITECT_HOURS_PER_DAY: Default hours worked per day (1-24)
        INCOME_ARCHITECT_DAYS_PER_WEEK: Default days worked per week (1-7)
    """

    model_config = SettingsConfigDict(
        env_prefix="INCOME_ARCHITECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    data_dir: str = Field(
        default="./data",
        description="Directory for the saved state file",
    )
    state_file: str = Field(
        default="income-architect.json",
        description="File name of the saved state",
    )
    tax_table_file: Optional[str] = Field(
        default=None,
        description="JSON file replacing the built-in tax tables",
    )
    default_jurisdiction: str = Field(
        default=NO_STATE_TAX,
        description="State code for a fresh income declaration",
    )
    hours_per_day: Decimal = Field(
        default=Decimal("8"),
        gt=0,
        le=24,
        description="Default hours worked per day",
    )
    days_per_week: Decimal = Field(
        default=Decimal("5"),
        gt=0,
        le=7,
        description="Default days worked per week",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @field_validator("default_jurisdiction")
    @classmethod
    def validate_jurisdiction(cls, v: str) -> str:
        return v.strip().upper() or NO_STATE_TAX

    @property
    def state_path(self) -> Path:
        """Full path of the saved state file."""
        return Path(self.data_dir) / self.state_file

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"

    def load_tax_tables(self) -> TaxTables:
        """Tables from `tax_table_file`, or the built-in tables.

        Raises:
            ConfigurationError: If the configured file is unreadable or invalid.
        """
        if self.tax_table_file:
            return load_tax_tables(self.tax_table_file)
        return get_default_tax_tables()

    def default_income(self) -> IncomeSpec:
        """A fresh income declaration using the configured schedule and state."""
        return IncomeSpec(
            hours_per_day=self.hours_per_day,
            days_per_week=self.days_per_week,
            jurisdiction=self.default_jurisdiction,
        )


def configure_logging(level: str = "INFO") -> None:
    """Filter structlog output below `level`."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )
