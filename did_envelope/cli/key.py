"""Public key encoding commands.

Commands:
    did-envelope key encode <hex> --encoding <field>     Encode raw key bytes
    did-envelope key decode <value> --encoding <field>   Decode a key field value
"""

from typing import Optional

import typer

from did_envelope.cli.output import OutputFormat, output, output_envelope_error, output_error
from did_envelope.cli.utils import EXIT_PARSE_ERROR, read_input
from did_envelope.envelope import EncodingError, KeyEncoding, MultibaseBase
from did_envelope.envelope.encoding import KeyField, MultibaseError, decode_key_field, encode_key_field

app = typer.Typer(
    name="key",
    help="Encode and decode public key fields.",
    no_args_is_help=True,
)


@app.command("encode")
def encode_cmd(
    key_hex: str = typer.Argument(..., help="Raw key bytes as hex"),
    encoding: KeyEncoding = typer.Option(
        ...,
        "--encoding",
        "-e",
        help="Target field",
    ),
    base: Optional[str] = typer.Option(
        None,
        "--base",
        "-b",
        help="Multibase name for publicKeyMultibase (default base58btc)",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Encode raw key bytes into a publicKey* field value.

    Examples:
        did-envelope key encode 302a3005... --encoding publicKeyMultibase --base base32
    """
    try:
        raw = bytes.fromhex(key_hex.strip())
    except ValueError as e:
        output_error(code="INVALID_HEX", message=str(e), exit_code=EXIT_PARSE_ERROR)
        return

    multibase_base = None
    if base is not None:
        try:
            multibase_base = MultibaseBase.from_label(base)
        except MultibaseError as e:
            output_error(code="UNKNOWN_MULTIBASE", message=str(e), exit_code=EXIT_PARSE_ERROR)
            return

    field = encode_key_field(encoding, raw, multibase_base)
    output({"encoding": field.encoding.value, "value": field.value}, format)


@app.command("decode")
def decode_cmd(
    value: str = typer.Argument(..., help="Field value, file path, or '-' for stdin"),
    encoding: KeyEncoding = typer.Option(
        ...,
        "--encoding",
        "-e",
        help="Field the value comes from",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Decode a publicKey* field value to raw bytes."""
    text = read_input(value, binary=False)
    if encoding is not KeyEncoding.PEM:
        text = text.strip()

    try:
        decoded = decode_key_field(KeyField(encoding=encoding, value=text))
    except EncodingError as e:
        output_envelope_error(e, EXIT_PARSE_ERROR)
        return

    output(
        {
            "encoding": decoded.encoding.value,
            "multibase": decoded.multibase_base.label if decoded.multibase_base else None,
            "length": len(decoded.raw_bytes),
            "hex": decoded.raw_bytes.hex(),
        },
        format,
    )
