"""
Command-line interface for the portfolio tracker.

Provides commands for:
- chart: Compute the per-symbol and total value series as chart JSON
- summary: Print the portfolio's final value per holding
- validate-plan: Check an allocation plan file
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from folio_tracker.config import (
    ConfigurationError,
    load_allocation_plan,
    load_tracker_settings,
)
from folio_tracker.data.loaders import save_chart_payload
from folio_tracker.data.providers import SampleDataProvider, get_twelvedata_provider
from folio_tracker.errors import TrackerError, user_message_for
from folio_tracker.logging import get_logger
from folio_tracker.pipeline import ChartResult, fetch_and_build_chart
from folio_tracker.portfolio import check_plan, validate_plan
from folio_tracker.reporting import format_value, to_chart_payload


@click.group()
@click.version_option(version="0.1.0", prog_name="folio-tracker")
@click.option("--verbose", "-v", is_flag=True, help="Show progress and warnings")
def main(verbose: bool):
    """
    Portfolio Tracker.

    Values a lump-sum stock portfolio over time from an allocation plan and
    price quotes.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _run(
    plan_path: str,
    quotes: Optional[str],
    fetch: bool,
    log_dir: Optional[str],
) -> ChartResult:
    """Load plan and settings, pick a provider and run the pipeline, exiting on error."""
    if bool(quotes) == fetch:
        click.echo("Specify exactly one of --quotes or --fetch.", err=True)
        sys.exit(2)

    decision_logger = get_logger(Path(log_dir) / "decision_log.jsonl") if log_dir else None

    try:
        plan = load_allocation_plan(plan_path)
        settings = load_tracker_settings(plan_path)
        if decision_logger:
            decision_logger.log_plan_loaded(plan, plan_path)

        if fetch:
            provider = get_twelvedata_provider(interval=settings.interval)
        else:
            provider = SampleDataProvider(quotes)

        return fetch_and_build_chart(
            plan, provider, settings=settings, decision_logger=decision_logger
        )
    except TrackerError as e:
        message = user_message_for(e)
        click.echo(message.message, err=True)
        if message.hint:
            click.echo(message.hint, err=True)
        click.echo(f"  ({type(e).__name__}: {e})", err=True)
        sys.exit(1)


_plan_option = click.option(
    "--plan", "-p",
    "plan_path",
    required=True,
    type=click.Path(exists=True),
    help="Path to allocation plan YAML file",
)
_quotes_option = click.option(
    "--quotes", "-q",
    type=click.Path(exists=True),
    default=None,
    help="Path to saved quote data (JSON provider response or CSV)",
)
_fetch_option = click.option(
    "--fetch",
    is_flag=True,
    help="Fetch quotes from Twelve Data (requires TWELVEDATA_API_KEY)",
)
_log_dir_option = click.option(
    "--log-dir",
    type=click.Path(),
    default=None,
    help="Directory for the decision log",
)


@main.command()
@_plan_option
@_quotes_option
@_fetch_option
@_log_dir_option
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write chart JSON to this file instead of stdout",
)
def chart(
    plan_path: str,
    quotes: Optional[str],
    fetch: bool,
    log_dir: Optional[str],
    output: Optional[str],
):
    """
    Compute the portfolio value chart.

    Emits one series per symbol plus a Total series, each a list of
    {x: date, y: value} points.
    """
    result = _run(plan_path, quotes, fetch, log_dir)

    if output:
        try:
            save_chart_payload(result.series, output)
        except OSError as e:
            click.echo(f"Error writing chart: {e}", err=True)
            sys.exit(1)
        click.echo(f"Chart saved: {output}")
    else:
        click.echo(json.dumps(to_chart_payload(result.series), indent=2))


@main.command()
@_plan_option
@_quotes_option
@_fetch_option
@_log_dir_option
def summary(
    plan_path: str,
    quotes: Optional[str],
    fetch: bool,
    log_dir: Optional[str],
):
    """
    Print the portfolio's value on the last quoted date.
    """
    result = _run(plan_path, quotes, fetch, log_dir)

    if result.summary is None:
        click.echo("No quote data available.")
        return

    s = result.summary
    click.echo(f"Your portfolio's value on {s.as_of}:")
    click.echo(f"  Total: ${format_value(s.final_total)} ({s.total_return:.2%})")
    for symbol, value in s.final_by_symbol.items():
        holding = result.shares.holdings[symbol]
        click.echo(
            f"  {symbol}: ${format_value(value)} "
            f"(bought {holding.purchase_date} at ${format_value(holding.purchase_price)})"
        )


@main.command(name="validate-plan")
@click.argument("plan_path", type=click.Path(exists=True))
def validate_plan_command(plan_path: str):
    """
    Validate an allocation plan file.
    """
    try:
        plan = load_allocation_plan(plan_path)
    except ConfigurationError as e:
        click.echo(f"Invalid plan: {e}", err=True)
        sys.exit(1)

    errors = validate_plan(plan)
    for error in errors:
        click.echo(f"ERROR: {error}", err=True)
    for warning in check_plan(plan):
        click.echo(f"WARNING: {warning}")

    if errors:
        sys.exit(1)

    click.echo(
        f"Plan {plan.plan_id}: ${format_value(plan.initial_amount)} across "
        f"{len(plan.assets)} symbols from {plan.start_date} "
        f"({plan.total_portion:.2%} allocated)"
    )


if __name__ == "__main__":
    main()
