"""Tests for the configuration system."""

import json
from decimal import Decimal
from pathlib import Path

import pytest
import structlog
from structlog.testing import capture_logs

from income_architect.config import IncomeArchitectConfig, configure_logging
from income_architect.exceptions import ConfigurationError
from income_architect.models import Cadence
from income_architect.tax_tables import get_tax_table_version


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep local .env files and exported settings out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "ENV", "LOG_LEVEL", "DATA_DIR", "STATE_FILE", "TAX_TABLE_FILE",
        "DEFAULT_JURISDICTION", "HOURS_PER_DAY", "DAYS_PER_WEEK",
    ):
        monkeypatch.delenv(f"INCOME_ARCHITECT_{name}", raising=False)


class TestIncomeArchitectConfig:
    """Test suite for IncomeArchitectConfig."""

    def test_default_values(self):
        """IncomeArchitectConfig should have sensible defaults."""
        config = IncomeArchitectConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.data_dir == "./data"
        assert config.state_file == "income-architect.json"
        assert config.tax_table_file is None
        assert config.default_jurisdiction == "NONE"
        assert config.hours_per_day == Decimal("8")
        assert config.days_per_week == Decimal("5")
        assert config.is_production is False
        assert config.is_debug is False

    def test_from_environment(self, monkeypatch):
        """Config should load from environment variables."""
        monkeypatch.setenv("INCOME_ARCHITECT_ENV", "Production")
        monkeypatch.setenv("INCOME_ARCHITECT_LOG_LEVEL", "debug")
        monkeypatch.setenv("INCOME_ARCHITECT_DEFAULT_JURISDICTION", "ca")
        monkeypatch.setenv("INCOME_ARCHITECT_HOURS_PER_DAY", "6")

        config = IncomeArchitectConfig()

        assert config.env == "production"
        assert config.is_production is True
        assert config.log_level == "DEBUG"
        assert config.is_debug is True
        assert config.default_jurisdiction == "CA"
        assert config.hours_per_day == Decimal("6")

    def test_from_env_file(self, tmp_path):
        """A .env file in the working directory is read."""
        (tmp_path / ".env").write_text("INCOME_ARCHITECT_DATA_DIR=/srv/income\n")
        assert IncomeArchitectConfig().data_dir == "/srv/income"

    def test_env_validation(self):
        """Environment must be one of the known names."""
        IncomeArchitectConfig(env="test")

        with pytest.raises(ValueError):
            IncomeArchitectConfig(env="qa")

    def test_log_level_validation(self):
        with pytest.raises(ValueError):
            IncomeArchitectConfig(log_level="VERBOSE")

    def test_schedule_bounds(self):
        """Hours must be in (0, 24] and days in (0, 7]."""
        IncomeArchitectConfig(hours_per_day=24, days_per_week=7)

        with pytest.raises(ValueError):
            IncomeArchitectConfig(hours_per_day=0)

        with pytest.raises(ValueError):
            IncomeArchitectConfig(hours_per_day=25)

        with pytest.raises(ValueError):
            IncomeArchitectConfig(days_per_week=8)

    def test_state_path(self):
        config = IncomeArchitectConfig(data_dir="/var/lib/ia", state_file="me.json")
        assert config.state_path == Path("/var/lib/ia/me.json")

    def test_default_income(self):
        """A fresh declaration picks up the configured schedule and state."""
        config = IncomeArchitectConfig(
            hours_per_day=Decimal("7.5"), days_per_week=4, default_jurisdiction="ny",
        )
        income = config.default_income()

        assert income.amount == 0
        assert income.cadence == Cadence.HOURLY
        assert income.hours_per_day == Decimal("7.5")
        assert income.days_per_week == Decimal("4")
        assert income.jurisdiction == "NY"

    def test_built_in_tax_tables(self):
        assert IncomeArchitectConfig().load_tax_tables().version == get_tax_table_version()

    def test_tax_table_file(self, tmp_path):
        path = tmp_path / "tables.json"
        path.write_text(json.dumps({
            "version": "custom",
            "brackets": [{"limit": None, "rate": 0.2}],
            "stateRates": {"WA": 0},
        }))

        tables = IncomeArchitectConfig(tax_table_file=str(path)).load_tax_tables()

        assert tables.version == "custom"
        assert tables.knows("WA")

    def test_invalid_tax_table_file(self, tmp_path):
        path = tmp_path / "tables.json"
        path.write_text(json.dumps({"brackets": []}))

        with pytest.raises(ConfigurationError):
            IncomeArchitectConfig(tax_table_file=str(path)).load_tax_tables()


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_filters_below_level(self):
        """Debug events are dropped once the level is WARNING."""
        configure_logging("warning")
        try:
            logger = structlog.get_logger()
            with capture_logs() as logs:
                logger.debug("calculation_step")
                logger.info("state_loaded")
                logger.warning("state_load_failed")
            assert [entry["event"] for entry in logs] == ["state_load_failed"]
        finally:
            structlog.reset_defaults()
