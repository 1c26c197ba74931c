"""did-envelope CLI - Main entry point with subcommand registration.

This module defines the main typer app and registers all subcommands.
"""

import typer

from did_envelope import __version__
from did_envelope.cli import did, document, instruction, key
from did_envelope.cli.verify import verify_cmd
from did_envelope.logging_config import configure_logging

app = typer.Typer(
    name="did-envelope",
    help="Parse ledger DID documents and verify their signing instructions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"did-envelope version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log parse and verification steps to stderr.",
    ),
) -> None:
    """did-envelope - ledger DID document and instruction tools.

    All commands accept '-' to read an input from stdin.
    Output is JSON by default for easy piping between commands.
    """
    if verbose:
        configure_logging("DEBUG")


app.add_typer(did.app, name="did", help="Parse and validate ledger DIDs")
app.add_typer(document.app, name="document", help="Parse and inspect DID documents")
app.add_typer(instruction.app, name="instruction", help="Parse and inspect signing instructions")
app.add_typer(key.app, name="key", help="Encode and decode public key fields")
app.command("verify")(verify_cmd)


if __name__ == "__main__":
    app()
