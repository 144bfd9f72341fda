"""CLI entry point for mixpanel_agent.

Provides the ``mp-agent`` command for running the agent by hand, outside
the host framework's scheduler. Checks run as dry runs: the event payload
is printed instead of being emitted.

Usage:
    mp-agent [OPTIONS] COMMAND [ARGS]...

Examples:
    mp-agent check --event-name "Page Visit" --property Page --value home
    mp-agent check --event-name Signup --time 7 --interval day --format table
    mp-agent export-count --event-name Signup --property Paid --value true
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Annotated, Literal

import typer

import mixpanel_agent
from mixpanel_agent.cli.utils import (
    ExitCode,
    build_agent,
    err_console,
    handle_errors,
    output_result,
)
from mixpanel_agent.exceptions import ValidationError

app = typer.Typer(
    name="mp-agent",
    help="Mixpanel agent CLI - count events the way the scheduled agent does.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

OutputFormat = Literal["json", "table"]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        print(f"mp-agent version {mixpanel_agent.__version__}")
        raise typer.Exit()


def _handle_interrupt(_signum: int, _frame: object) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    err_console.print("\n[yellow]Interrupted[/yellow]")
    sys.exit(ExitCode.INTERRUPTED)


signal.signal(signal.SIGINT, _handle_interrupt)


@app.callback()
def main(
    ctx: typer.Context,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Mixpanel API key.", envvar="MIXPANEL_API_KEY"),
    ] = None,
    secret_key: Annotated[
        str | None,
        typer.Option(
            "--secret-key",
            help="Mixpanel API secret.",
            envvar="MIXPANEL_SECRET_KEY",
        ),
    ] = None,
    region: Annotated[
        str | None,
        typer.Option(
            "--region",
            help="Data residency region: us, eu, in.",
            envvar="MIXPANEL_REGION",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug output."),
    ] = False,
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Mixpanel agent CLI - count events the way the scheduled agent does."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["secret_key"] = secret_key
    ctx.obj["region"] = region


@app.command("check")
@handle_errors
def check(
    ctx: typer.Context,
    event_name: Annotated[
        str,
        typer.Option("--event-name", "-e", help="Event to count."),
    ],
    property_name: Annotated[
        str | None,
        typer.Option("--property", "-p", help="Property to filter on."),
    ] = None,
    value: Annotated[
        str | None,
        typer.Option("--value", help="Property value to match."),
    ] = None,
    time: Annotated[
        int,
        typer.Option("--time", "-t", help="Lookback window, in intervals."),
    ] = 24,
    interval: Annotated[
        str,
        typer.Option(
            "--interval", "-i", help="Time unit: minute, hour, day, month, year."
        ),
    ] = "hour",
    count_type: Annotated[
        str,
        typer.Option("--type", help="Counting method: general, unique, average."),
    ] = "general",
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: json, table."),
    ] = "json",
) -> None:
    """Run one dry-run check and print the event it would emit.

    Examples:

        mp-agent check -e "Page Visit" -p Page --value home
        mp-agent check -e Signup --time 7 --interval day
    """
    agent = build_agent(
        ctx,
        {
            "event_name": event_name,
            "property": property_name,
            "value": value,
            "time": time,
            "interval": interval,
            "type": count_type,
        },
    )
    with agent:
        event = agent.dry_run()
    output_result(event.to_dict(), format=format)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValidationError(f"value must be true or false, got '{value}'")


@app.command("export-count")
@handle_errors
def export_count(
    ctx: typer.Context,
    event_name: Annotated[
        str,
        typer.Option("--event-name", "-e", help="Event to count."),
    ],
    property_name: Annotated[
        str,
        typer.Option("--property", "-p", help="Boolean property to filter on."),
    ],
    value: Annotated[
        str,
        typer.Option("--value", help="true or false."),
    ],
    days: Annotated[
        int,
        typer.Option("--days", "-d", help="Days to look back from today."),
    ] = 30,
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format: json, table."),
    ] = "json",
) -> None:
    """Count events with a boolean property value using the export API.

    Examples:

        mp-agent export-count -e Signup -p Paid --value true
        mp-agent export-count -e Signup -p Paid --value false --days 7
    """
    flag = _parse_bool(value)
    agent = build_agent(ctx, {"event_name": event_name})
    with agent:
        count = agent.number_for_event_using_export(
            event_name, property_name, flag, num_days=days
        )
    output_result(
        {
            "count": count,
            "event_name": event_name,
            "property": property_name,
            "value": flag,
            "days": days,
        },
        format=format,
    )


if __name__ == "__main__":
    app()
