"""Shared utilities for the did-envelope CLI.

This module provides common functionality for:
- Reading input from stdin, files, or arguments
- Exit codes
"""

import sys
from pathlib import Path
from typing import Union

import typer

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_PARSE_ERROR = 2
EXIT_IO_ERROR = 3


def read_input(source: str, binary: bool = False) -> Union[str, bytes]:
    """Read input from stdin, file, or argument.

    Args:
        source: "-" for stdin, a file path, or a literal value
        binary: If True, return bytes exactly as read

    Returns:
        Content as string or bytes depending on binary flag

    Raises:
        typer.Exit: On I/O errors with EXIT_IO_ERROR
    """
    try:
        if source == "-":
            if binary:
                return sys.stdin.buffer.read()
            return sys.stdin.read()

        # Inline JSON can exceed the OS file name limit, so never stat it
        if source.lstrip().startswith("{"):
            return source.encode("utf-8") if binary else source

        path = Path(source)
        if path.is_file():
            if binary:
                return path.read_bytes()
            return path.read_text(encoding="utf-8")

    except OSError as e:
        typer.echo(f"Error reading input: {e}", err=True)
        raise typer.Exit(EXIT_IO_ERROR) from e

    # Treat as literal value (inline JSON, DID strings, etc.)
    return source.encode("utf-8") if binary else source
