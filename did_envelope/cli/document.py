"""DID document commands.

Commands:
    did-envelope document inspect <source>    Parse a DID document and list its keys
"""

from typing import Any

import typer

from did_envelope.cli.output import OutputFormat, output, output_envelope_error
from did_envelope.cli.utils import EXIT_PARSE_ERROR, read_input
from did_envelope.envelope import DidDocument, DocumentError, parse_document

app = typer.Typer(
    name="document",
    help="Parse and inspect DID documents.",
    no_args_is_help=True,
)


def document_to_dict(document: DidDocument) -> dict[str, Any]:
    return {
        "id": str(document.document_id) if document.document_id else None,
        "context": document.context,
        "created": document.created.isoformat() if document.created else None,
        "updated": document.updated.isoformat() if document.updated else None,
        "size": len(document.raw_bytes),
        "keys": [
            {
                "id": key.key_id,
                "type": key.key_type,
                "controller": key.controller,
                "suite": key.suite.value,
                "encoding": key.encoding.value,
                "multibase": key.multibase_base.label if key.multibase_base else None,
                "length": len(key.raw_bytes),
                "hex": key.raw_bytes.hex(),
            }
            for key in document.keys.values()
        ],
    }


@app.command("inspect")
def inspect_cmd(
    source: str = typer.Argument(
        ...,
        help="Document JSON, file path, or '-' for stdin",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Parse a DID document and display its identifier and keys.

    Examples:
        did-envelope document inspect document.json
        cat document.json | did-envelope document inspect - -f table
    """
    raw = read_input(source, binary=True)

    try:
        document = parse_document(raw)
    except DocumentError as e:
        output_envelope_error(e, EXIT_PARSE_ERROR)
        return

    result = document_to_dict(document)
    if format == OutputFormat.table:
        output(
            result["keys"],
            format,
            table_columns=["id", "type", "suite", "encoding", "length"],
            table_title=result["id"],
        )
    else:
        output(result, format)
