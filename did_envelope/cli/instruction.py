"""Instruction commands.

Commands:
    did-envelope instruction inspect <source>    Parse an instruction and list its signatures
"""

import typer

from did_envelope.cli.output import OutputFormat, output, output_envelope_error
from did_envelope.cli.utils import EXIT_PARSE_ERROR, read_input
from did_envelope.envelope import InstructionError, parse_instruction

app = typer.Typer(
    name="instruction",
    help="Parse and inspect signing instructions.",
    no_args_is_help=True,
)


@app.command("inspect")
def inspect_cmd(
    source: str = typer.Argument(
        ...,
        help="Instruction JSON, file path, or '-' for stdin",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Parse an instruction and display its action and signatures."""
    raw = read_input(source, binary=True)

    try:
        instruction = parse_instruction(raw)
    except InstructionError as e:
        output_envelope_error(e, EXIT_PARSE_ERROR)
        return

    signatures = [
        {
            "id": s.target_key_id,
            "type": s.suite_hint,
            "encoding": s.encoding.value,
            "length": len(s.signature_bytes),
        }
        for s in instruction.signatures
    ]

    if format == OutputFormat.table:
        output(signatures, format, table_title=instruction.action.value)
    else:
        output({"action": instruction.action.value, "signatures": signatures}, format)
