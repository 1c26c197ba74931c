"""Envelope verification command.

Commands:
    did-envelope verify <did> --document <src> --instruction <src> --action <kind>
"""

from typing import Optional

import typer

from did_envelope.cli.output import OutputFormat, output, output_envelope_error
from did_envelope.cli.utils import EXIT_PARSE_ERROR, EXIT_VALIDATION_FAILURE, read_input
from did_envelope.envelope import (
    ActionKind,
    EnvelopeError,
    VerificationError,
    build_report,
    verify_envelope,
)


def verify_cmd(
    did: str = typer.Argument(..., help="DID the envelope must be for"),
    document: str = typer.Option(
        ...,
        "--document",
        "-d",
        help="Document JSON, file path, or '-' for stdin",
    ),
    instruction: str = typer.Option(
        ...,
        "--instruction",
        "-i",
        help="Instruction JSON, file path, or '-' for stdin",
    ),
    action: ActionKind = typer.Option(
        ...,
        "--action",
        "-a",
        help="Action being performed",
    ),
    precursor: Optional[str] = typer.Option(
        None,
        "--precursor",
        "-p",
        help="Currently stored document, for update",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Verify that an instruction's signatures authorize a DID document.

    Prints a verification report. Exit code 1 if the envelope does not
    verify, 2 if an input cannot be parsed.

    Examples:
        did-envelope verify did:corda:tcn:<uuid> -d doc.json -i instr.json -a create
        did-envelope verify did:corda:tcn:<uuid> -d new.json -p old.json -i instr.json -a update
    """
    document_raw = read_input(document, binary=True)
    instruction_raw = read_input(instruction, binary=True)
    precursor_raw = read_input(precursor, binary=True) if precursor is not None else None

    try:
        verified = verify_envelope(
            document_raw,
            instruction_raw,
            did.strip(),
            action,
            precursor_raw=precursor_raw,
        )
    except VerificationError as e:
        report = build_report(did, action.value, error=e)
        output(report.model_dump(mode="json"), format)
        raise typer.Exit(EXIT_VALIDATION_FAILURE)
    except EnvelopeError as e:
        output_envelope_error(e, EXIT_PARSE_ERROR)
        return

    report = build_report(did, action.value, verified_key_ids=verified)
    output(report.model_dump(mode="json"), format)
