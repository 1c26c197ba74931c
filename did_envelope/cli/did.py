"""Ledger DID commands.

Commands:
    did-envelope did parse <did>    Parse and validate a ledger DID
"""

import typer

from did_envelope.cli.output import OutputFormat, output, output_envelope_error
from did_envelope.cli.utils import EXIT_PARSE_ERROR
from did_envelope.envelope import IdentifierError, parse_did

app = typer.Typer(
    name="did",
    help="Parse and validate ledger DIDs.",
    no_args_is_help=True,
)


@app.command("parse")
def parse_cmd(
    did: str = typer.Argument(..., help="DID, e.g. did:corda:tcn:<uuid>"),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Parse a ledger DID and show its network and UUID.

    Examples:
        did-envelope did parse did:corda:tcn:a609bcc0-a3a8-11e9-b949-fb002eb572a5
    """
    try:
        parsed = parse_did(did.strip())
    except IdentifierError as e:
        output_envelope_error(e, EXIT_PARSE_ERROR)
        return

    output(
        {
            "did": parsed.to_external_form(),
            "network": parsed.network,
            "uuid": str(parsed.uuid),
        },
        format,
    )
