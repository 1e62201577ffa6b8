"""
Configuration loading and management for the portfolio tracker.

This module handles loading allocation plans and tracker settings from YAML
files, API key management, and validation of configuration parameters.
"""

import os
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import dotenv_values

from folio_tracker.errors import TrackerError
from folio_tracker.models import AllocationPlan, PlanAsset


# Default paths for configuration files
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
DEFAULT_API_KEYS_FILE = PROJECT_ROOT / "config" / "api_keys.yaml"

VALID_INTERVALS = ("1day", "1week", "1month")


class ConfigurationError(TrackerError):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


@dataclass
class TrackerSettings:
    """
    Presentation and allocation settings.

    Attributes:
        series_type: Chart type label attached to every output series
        total_series_name: Name of the synthetic total series
        display_precision: Decimal places used at the output boundary
        allow_over_allocation: Treat portions summing above 1 as a warning
            instead of an error
        interval: Quote interval requested from the provider
    """
    series_type: str = "area"
    total_series_name: str = "Total"
    display_precision: int = 2
    allow_over_allocation: bool = True
    interval: str = "1month"


def load_api_keys(
    env_file: str | Path | None = None,
    api_keys_file: str | Path | None = None,
) -> dict[str, str]:
    """
    Load API keys from multiple sources with priority.

    Sources are checked in this order (later sources override earlier):
    1. config/api_keys.yaml file
    2. .env file in project root
    3. Environment variables

    Args:
        env_file: Path to .env file (defaults to project root .env)
        api_keys_file: Path to api_keys.yaml (defaults to config/api_keys.yaml)

    Returns:
        Dictionary with API keys:
        - twelvedata_api_key: Twelve Data API key (if available)
    """
    api_keys: dict[str, str] = {}

    yaml_path = Path(api_keys_file) if api_keys_file else DEFAULT_API_KEYS_FILE
    if yaml_path.exists():
        try:
            with open(yaml_path, "r") as f:
                yaml_config = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            raise ConfigurationError(f"Could not read {yaml_path}: {e}")
        if isinstance(yaml_config, dict) and yaml_config.get("twelvedata_api_key"):
            api_keys["twelvedata_api_key"] = str(yaml_config["twelvedata_api_key"])

    env_path = Path(env_file) if env_file else DEFAULT_ENV_FILE
    if env_path.exists():
        env_values = dotenv_values(env_path)
        if env_values.get("TWELVEDATA_API_KEY"):
            api_keys["twelvedata_api_key"] = str(env_values["TWELVEDATA_API_KEY"])

    # Environment variables have the highest priority
    if os.environ.get("TWELVEDATA_API_KEY"):
        api_keys["twelvedata_api_key"] = os.environ["TWELVEDATA_API_KEY"]

    return api_keys


def get_twelvedata_api_key() -> str:
    """
    Get the Twelve Data API key from available configuration sources.

    Returns:
        The Twelve Data API key

    Raises:
        ConfigurationError: If TWELVEDATA_API_KEY is not configured
    """
    api_keys = load_api_keys()
    if not api_keys.get("twelvedata_api_key"):
        raise ConfigurationError(
            "Twelve Data API key is not configured. Please set it using one of:\n"
            "  1. Environment variable: export TWELVEDATA_API_KEY=your-key\n"
            "  2. .env file: TWELVEDATA_API_KEY=your-key\n"
            "  3. config/api_keys.yaml: twelvedata_api_key: your-key"
        )
    return api_keys["twelvedata_api_key"]


def _read_yaml(config_path: str | Path) -> dict[str, Any]:
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping: {config_path}"
        )
    return raw


def load_allocation_plan(config_path: str | Path) -> AllocationPlan:
    """
    Load an allocation plan from a YAML file.

    Expected layout:

        plan_id: sample
        initial_amount: 32500.00
        start_date: 2013-03-20
        assets:
          - symbol: AAPL
            portion: 0.20

    Args:
        config_path: Path to the YAML file

    Returns:
        Validated AllocationPlan

    Raises:
        ConfigurationError: If the file cannot be loaded or is invalid
    """
    return parse_allocation_plan(_read_yaml(config_path))


def parse_allocation_plan(raw: dict[str, Any]) -> AllocationPlan:
    """
    Parse and validate a raw dictionary into an AllocationPlan.

    Portions are checked individually (0-1) and symbols must be unique. The
    portion total is not checked here; over-allocation is an allocation-time
    policy (see TrackerSettings.allow_over_allocation).

    Raises:
        ConfigurationError: If required fields are missing or invalid
    """
    for required in ("initial_amount", "start_date", "assets"):
        if required not in raw:
            raise ConfigurationError(f"Missing required configuration field: {required}")

    plan_id = str(raw.get("plan_id", "default"))
    if not plan_id:
        raise ConfigurationError("plan_id cannot be empty")

    initial_amount = _parse_decimal(
        raw["initial_amount"], "initial_amount", min_val=Decimal("0")
    )
    if initial_amount == 0:
        raise ConfigurationError("initial_amount must be positive")

    start_date = _parse_date(raw["start_date"], "start_date")

    raw_assets = raw["assets"]
    if not isinstance(raw_assets, list) or not raw_assets:
        raise ConfigurationError("assets must be a non-empty list")

    assets = []
    seen = set()
    for index, item in enumerate(raw_assets):
        if not isinstance(item, dict) or "symbol" not in item or "portion" not in item:
            raise ConfigurationError(
                f"assets[{index}] must have 'symbol' and 'portion' fields"
            )
        symbol = str(item["symbol"]).upper().strip()
        if not symbol:
            raise ConfigurationError(f"assets[{index}] has an empty symbol")
        if symbol in seen:
            raise ConfigurationError(f"Duplicate symbol in assets: {symbol}")
        seen.add(symbol)

        portion = _parse_decimal(
            item["portion"],
            f"assets[{index}].portion",
            min_val=Decimal("0"),
            max_val=Decimal("1"),
        )
        assets.append(PlanAsset(symbol=symbol, portion=portion))

    return AllocationPlan(
        initial_amount=initial_amount,
        start_date=start_date,
        assets=assets,
        plan_id=plan_id,
    )


def load_tracker_settings(config_path: Optional[str | Path] = None) -> TrackerSettings:
    """
    Load tracker settings from the optional 'settings' block of a YAML file.

    Args:
        config_path: YAML file to read; None returns the defaults

    Returns:
        TrackerSettings with defaults for anything not specified
    """
    if config_path is None:
        return TrackerSettings()

    raw = _read_yaml(config_path).get("settings") or {}
    if not isinstance(raw, dict):
        raise ConfigurationError("settings must be a mapping")

    defaults = TrackerSettings()

    precision = raw.get("display_precision", defaults.display_precision)
    if not isinstance(precision, int) or isinstance(precision, bool) or precision < 0:
        raise ConfigurationError(
            f"display_precision must be a non-negative integer, got {precision!r}"
        )

    allow_over = raw.get("allow_over_allocation", defaults.allow_over_allocation)
    if not isinstance(allow_over, bool):
        raise ConfigurationError(
            f"allow_over_allocation must be true or false, got {allow_over!r}"
        )

    interval = str(raw.get("interval", defaults.interval))
    if interval not in VALID_INTERVALS:
        raise ConfigurationError(
            f"interval must be one of {', '.join(VALID_INTERVALS)}, got {interval}"
        )

    return TrackerSettings(
        series_type=str(raw.get("series_type", defaults.series_type)),
        total_series_name=str(raw.get("total_series_name", defaults.total_series_name)),
        display_precision=precision,
        allow_over_allocation=allow_over,
        interval=interval,
    )


def _parse_date(value: Any, field_name: str) -> date:
    """
    Parse a date value from various formats.

    Raises:
        ConfigurationError: If the date cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            pass

        try:
            # Accepts "2013-03-20T00:00:00.000Z" style timestamps
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            pass

    raise ConfigurationError(
        f"Invalid date format for {field_name}: {value}. Expected YYYY-MM-DD"
    )


def _parse_decimal(
    value: Any,
    field_name: str,
    min_val: Decimal | None = None,
    max_val: Decimal | None = None,
) -> Decimal:
    """
    Parse a decimal value with optional range validation.

    Raises:
        ConfigurationError: If the value is invalid or out of range
    """
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid decimal value for {field_name}: {value}")

    try:
        decimal_value = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ConfigurationError(f"Invalid decimal value for {field_name}: {value}")

    if not decimal_value.is_finite():
        raise ConfigurationError(f"Invalid decimal value for {field_name}: {value}")

    if min_val is not None and decimal_value < min_val:
        raise ConfigurationError(
            f"{field_name} must be >= {min_val}, got {decimal_value}"
        )

    if max_val is not None and decimal_value > max_val:
        raise ConfigurationError(
            f"{field_name} must be <= {max_val}, got {decimal_value}"
        )

    return decimal_value


def write_allocation_plan(plan: AllocationPlan, output_path: str | Path) -> None:
    """
    Write an AllocationPlan to a YAML file.

    Args:
        plan: The plan to write
        output_path: Path to write the YAML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    plan_dict = {
        "plan_id": plan.plan_id,
        "initial_amount": str(plan.initial_amount),
        "start_date": plan.start_date.isoformat(),
        "assets": [
            {"symbol": asset.symbol, "portion": str(asset.portion)}
            for asset in plan.assets
        ],
    }

    with open(output_path, "w") as f:
        yaml.dump(plan_dict, f, default_flow_style=False, sort_keys=False)
