"""
Tests for configuration loading.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from folio_tracker.config import (
    ConfigurationError,
    TrackerSettings,
    get_twelvedata_api_key,
    load_allocation_plan,
    load_api_keys,
    load_tracker_settings,
    parse_allocation_plan,
    write_allocation_plan,
)


def _write_yaml(path: Path, data: dict) -> Path:
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def raw_plan() -> dict:
    return {
        "plan_id": "TEST001",
        "initial_amount": 32500.00,
        "start_date": "2013-03-20",
        "assets": [
            {"symbol": "aapl", "portion": 0.2},
            {"symbol": "GOOG", "portion": 0.5},
            {"symbol": "MSFT", "portion": 0.3},
        ],
    }


class TestParseAllocationPlan:
    """Tests for parse_allocation_plan."""

    def test_valid_plan(self, raw_plan):
        plan = parse_allocation_plan(raw_plan)

        assert plan.plan_id == "TEST001"
        assert plan.initial_amount == Decimal("32500.0")
        assert plan.start_date == date(2013, 3, 20)
        assert plan.symbols == ["AAPL", "GOOG", "MSFT"]
        assert plan.total_portion == Decimal("1.0")

    def test_iso_timestamp_start_date(self, raw_plan):
        raw_plan["start_date"] = "2013-03-20T00:00:00.000Z"

        assert parse_allocation_plan(raw_plan).start_date == date(2013, 3, 20)

    def test_default_plan_id(self, raw_plan):
        del raw_plan["plan_id"]

        assert parse_allocation_plan(raw_plan).plan_id == "default"

    @pytest.mark.parametrize("field", ["initial_amount", "start_date", "assets"])
    def test_missing_required_field(self, raw_plan, field):
        del raw_plan[field]

        with pytest.raises(ConfigurationError) as exc_info:
            parse_allocation_plan(raw_plan)

        assert field in str(exc_info.value)

    @pytest.mark.parametrize("amount", [0, -100, "lots", True])
    def test_invalid_initial_amount(self, raw_plan, amount):
        raw_plan["initial_amount"] = amount

        with pytest.raises(ConfigurationError):
            parse_allocation_plan(raw_plan)

    def test_invalid_start_date(self, raw_plan):
        raw_plan["start_date"] = "20/03/2013"

        with pytest.raises(ConfigurationError):
            parse_allocation_plan(raw_plan)

    @pytest.mark.parametrize("portion", [-0.1, 1.5, "half"])
    def test_invalid_portion(self, raw_plan, portion):
        raw_plan["assets"][0]["portion"] = portion

        with pytest.raises(ConfigurationError):
            parse_allocation_plan(raw_plan)

    def test_duplicate_symbols(self, raw_plan):
        raw_plan["assets"][1]["symbol"] = "AAPL"

        with pytest.raises(ConfigurationError) as exc_info:
            parse_allocation_plan(raw_plan)

        assert "Duplicate" in str(exc_info.value)

    def test_empty_assets(self, raw_plan):
        raw_plan["assets"] = []

        with pytest.raises(ConfigurationError):
            parse_allocation_plan(raw_plan)

    def test_over_allocation_is_not_a_config_error(self, raw_plan):
        raw_plan["assets"][0]["portion"] = 0.9

        plan = parse_allocation_plan(raw_plan)

        assert plan.total_portion > Decimal("1")


class TestLoadAllocationPlan:
    """Tests for loading plans from YAML files."""

    def test_load_sample_plan(self, sample_plan_path):
        plan = load_allocation_plan(sample_plan_path)

        assert plan.plan_id == "sample"
        assert plan.symbols == ["AAPL", "GOOG", "MSFT"]
        assert plan.start_date == date(2023, 1, 1)

    def test_file_not_found(self, temp_output_dir):
        with pytest.raises(ConfigurationError):
            load_allocation_plan(temp_output_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "bad.yaml"
        path.write_text("assets: [unclosed")

        with pytest.raises(ConfigurationError):
            load_allocation_plan(path)

    def test_write_then_load(self, raw_plan, temp_output_dir):
        plan = parse_allocation_plan(raw_plan)
        path = temp_output_dir / "nested" / "plan.yaml"

        write_allocation_plan(plan, path)

        assert load_allocation_plan(path) == plan


class TestLoadTrackerSettings:
    """Tests for load_tracker_settings."""

    def test_defaults_without_file(self):
        assert load_tracker_settings() == TrackerSettings()

    def test_defaults_without_settings_block(self, raw_plan, temp_output_dir):
        path = _write_yaml(temp_output_dir / "plan.yaml", raw_plan)

        assert load_tracker_settings(path) == TrackerSettings()

    def test_settings_block(self, raw_plan, temp_output_dir):
        raw_plan["settings"] = {
            "series_type": "line",
            "total_series_name": "Portfolio",
            "display_precision": 3,
            "allow_over_allocation": False,
            "interval": "1day",
        }
        path = _write_yaml(temp_output_dir / "plan.yaml", raw_plan)

        settings = load_tracker_settings(path)

        assert settings == TrackerSettings(
            series_type="line",
            total_series_name="Portfolio",
            display_precision=3,
            allow_over_allocation=False,
            interval="1day",
        )

    @pytest.mark.parametrize(
        "settings",
        [
            {"display_precision": -1},
            {"display_precision": "two"},
            {"allow_over_allocation": "maybe"},
            {"interval": "5min"},
        ],
    )
    def test_invalid_settings(self, raw_plan, temp_output_dir, settings):
        raw_plan["settings"] = settings
        path = _write_yaml(temp_output_dir / "plan.yaml", raw_plan)

        with pytest.raises(ConfigurationError):
            load_tracker_settings(path)


class TestApiKeys:
    """Tests for API key resolution."""

    def test_environment_variable(self, monkeypatch, temp_output_dir):
        monkeypatch.setenv("TWELVEDATA_API_KEY", "env-key")

        keys = load_api_keys(
            env_file=temp_output_dir / ".env",
            api_keys_file=temp_output_dir / "api_keys.yaml",
        )

        assert keys["twelvedata_api_key"] == "env-key"

    def test_env_file_overrides_yaml(self, monkeypatch, temp_output_dir):
        monkeypatch.delenv("TWELVEDATA_API_KEY", raising=False)
        env_file = temp_output_dir / ".env"
        env_file.write_text('TWELVEDATA_API_KEY="dotenv-key"\n')
        yaml_file = _write_yaml(
            temp_output_dir / "api_keys.yaml", {"twelvedata_api_key": "yaml-key"}
        )

        keys = load_api_keys(env_file=env_file, api_keys_file=yaml_file)

        assert keys["twelvedata_api_key"] == "dotenv-key"

    def test_yaml_file(self, monkeypatch, temp_output_dir):
        monkeypatch.delenv("TWELVEDATA_API_KEY", raising=False)
        yaml_file = _write_yaml(
            temp_output_dir / "api_keys.yaml", {"twelvedata_api_key": "yaml-key"}
        )

        keys = load_api_keys(env_file=temp_output_dir / ".env", api_keys_file=yaml_file)

        assert keys == {"twelvedata_api_key": "yaml-key"}

    def test_missing_key_raises(self, monkeypatch):
        monkeypatch.delenv("TWELVEDATA_API_KEY", raising=False)
        monkeypatch.setattr("folio_tracker.config.load_api_keys", lambda: {})

        with pytest.raises(ConfigurationError) as exc_info:
            get_twelvedata_api_key()

        assert "TWELVEDATA_API_KEY" in str(exc_info.value)
