"""Output formatters for CLI commands.

- JSON: Pretty-printed JSON
- Table: Rich ASCII table with one row per record
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from rich.table import Table


def _json_serializer(obj: Any) -> str:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, datetime | date):
        return obj.isoformat()
    return str(obj)


def format_json(data: dict[str, Any] | list[Any]) -> str:
    """Format data as pretty-printed JSON.

    Args:
        data: Data to format (dict or list).

    Returns:
        Pretty-printed JSON string with 2-space indentation.
    """
    return json.dumps(data, indent=2, default=_json_serializer, ensure_ascii=False)


def format_table(data: dict[str, Any] | list[dict[str, Any]]) -> Table:
    """Format data as a Rich ASCII table.

    Args:
        data: A dict (one row) or list of dicts.

    Returns:
        Rich Table object ready for printing.
    """
    table = Table(show_header=True, header_style="bold")

    rows = [data] if isinstance(data, dict) else data
    if not rows:
        return table

    columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col.upper().replace("_", " "))
    for row in rows:
        table.add_row(*[_format_cell(row.get(col)) for col in columns])

    return table


def _format_cell(value: Any) -> str:
    """Format a single cell value for table display."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | dict):
        return json.dumps(value, default=_json_serializer, ensure_ascii=False)
    return str(value)
