"""Output formatting for the did-envelope CLI.

Supports three output formats:
- json: Machine-readable JSON (default, for piping)
- pretty: Indented JSON for human reading
- table: Rich tables for list data
"""

import json
import sys
from enum import Enum
from typing import Any, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from did_envelope.envelope import EnvelopeError, to_error_detail


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    pretty = "pretty"
    table = "table"


def output_json(data: Any, pretty: bool = False) -> None:
    indent = 2 if pretty else None
    print(json.dumps(data, indent=indent, default=str))


def output_table(
    data: Sequence[dict[str, Any]],
    columns: Optional[list[str]] = None,
    title: Optional[str] = None,
) -> None:
    """Output a list of rows as a rich table."""
    if not data:
        typer.echo("No data to display.", err=True)
        return

    if columns is None:
        columns = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(col)
    for row in data:
        table.add_row(*[str(row.get(col, "")) for col in columns])

    Console().print(table)


def output(
    data: Any,
    format: OutputFormat = OutputFormat.json,
    table_columns: Optional[list[str]] = None,
    table_title: Optional[str] = None,
) -> None:
    """Output data in the specified format.

    Table format renders lists row by row and dicts as key/value pairs.
    """
    if format == OutputFormat.json:
        output_json(data, pretty=False)
    elif format == OutputFormat.pretty:
        output_json(data, pretty=True)
    elif isinstance(data, list):
        output_table(data, columns=table_columns, title=table_title)
    else:
        items = [{"key": k, "value": str(v)} for k, v in data.items()]
        output_table(items, columns=["key", "value"], title=table_title)


def output_error(
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    exit_code: int = 1,
) -> None:
    """Write an error as JSON to stderr and exit."""
    error_data: dict[str, Any] = {
        "error": True,
        "code": code,
        "message": message,
    }
    if details:
        error_data["details"] = details

    print(json.dumps(error_data), file=sys.stderr)
    raise typer.Exit(exit_code)


def output_envelope_error(exc: EnvelopeError, exit_code: int) -> None:
    """Report an EnvelopeError, including its wrapped reason, and exit."""
    detail = to_error_detail(exc)
    output_error(
        code=detail.code.value,
        message=detail.message,
        details=detail.model_dump(mode="json", exclude={"code", "message"}),
        exit_code=exit_code,
    )
