"""CLI utility functions and error handling.

- ExitCode enum for standardized exit codes
- handle_errors decorator for exception-to-exit-code mapping
- Console instances for stdout/stderr separation
- build_agent helper for constructing the agent from command options
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from enum import IntEnum
from typing import Any, TypeVar

import typer
from rich.console import Console

from mixpanel_agent.agent import MixpanelAgent
from mixpanel_agent.exceptions import (
    AuthenticationError,
    ConfigError,
    InvalidTypeError,
    MalformedResponseError,
    MixpanelAgentError,
    QueryError,
    RateLimitError,
    UnsupportedValueError,
    ValidationError,
)

# Data output goes to stdout; progress/errors go to stderr
console = Console()
err_console = Console(stderr=True, no_color=bool(os.environ.get("NO_COLOR")))


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands.

    - 0: Success
    - 1-5: Application-specific errors
    - 130: Interrupted by SIGINT (Ctrl+C)
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    INVALID_ARGS = 3
    RATE_LIMIT = 5
    INTERRUPTED = 130


F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """Decorator to convert agent exceptions to CLI exit codes.

    Maps MixpanelAgentError subclasses to exit codes and prints a formatted
    message to stderr.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            err_console.print("[red]Invalid options:[/red]")
            for problem in e.errors:
                err_console.print(f"  - {problem}")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except InvalidTypeError as e:
            err_console.print(f"[red]Invalid type:[/red] {e.type_name}")
            err_console.print("Use one of: unique, general, average.")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except UnsupportedValueError as e:
            err_console.print(f"[red]Unsupported value:[/red] {e.message}")
            err_console.print(
                "[yellow]Tip:[/yellow] Use 'mp-agent export-count' for boolean values."
            )
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except AuthenticationError as e:
            err_console.print(f"[red]Authentication error:[/red] {e.message}")
            raise typer.Exit(ExitCode.AUTH_ERROR) from None
        except RateLimitError as e:
            err_console.print(f"[yellow]Rate limited:[/yellow] {e.message}")
            raise typer.Exit(ExitCode.RATE_LIMIT) from None
        except QueryError as e:
            err_console.print(f"[red]Query error:[/red] {e.message}")
            if e.request_params:
                for key, value in e.request_params.items():
                    if key not in ("api_key", "project_id"):
                        err_console.print(f"  [dim]{key}:[/dim] {value}")
            raise typer.Exit(ExitCode.INVALID_ARGS) from None
        except MalformedResponseError as e:
            err_console.print(f"[red]Unexpected response:[/red] {e.message}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None
        except ConfigError as e:
            err_console.print(f"[red]Configuration error:[/red] {e.message}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None
        except MixpanelAgentError as e:
            err_console.print(f"[red]Error:[/red] {e.message}")
            raise typer.Exit(ExitCode.GENERAL_ERROR) from None

    return wrapper  # type: ignore[return-value]


def build_agent(ctx: typer.Context, options: dict[str, Any]) -> MixpanelAgent:
    """Create an agent from command options plus global credentials.

    Credentials given on the command line are merged into the options; the
    agent falls back to the environment for anything still missing.

    Args:
        ctx: Typer context with global options in obj dict.
        options: Agent options collected from the command.

    Returns:
        Configured MixpanelAgent.
    """
    merged = {key: value for key, value in options.items() if value is not None}
    obj = ctx.obj or {}
    for key in ("api_key", "secret_key", "region"):
        if obj.get(key) is not None:
            merged[key] = obj[key]
    return MixpanelAgent(merged)


def output_result(data: dict[str, Any] | list[Any], *, format: str = "json") -> None:
    """Print data in the requested format (json or table)."""
    from mixpanel_agent.cli.formatters import format_json, format_table

    if format == "table":
        console.print(format_table(data))
    else:
        console.print(format_json(data), highlight=False)
