"""Instruction parser.

An instruction names the action being authorized and carries one
signature per endorsing key:

    {
      "action": "create",
      "signatures": [
        {"id": "did:corda:tcn:...#key-1",
         "type": "Ed25519Signature2018",
         "signatureBase58": "..."}
      ]
    }
"""

import logging
from typing import Any, Union

from did_envelope.core import config

from .encoding import SignatureEncoding, decode_signature_value
from .encoding.keys import SIGNATURE_FIELD_PREFIX
from .exceptions import EncodingError, InstructionError
from .models import ActionKind, Instruction, SignatureEntry
from .strict_json import as_bytes, load_object

log = logging.getLogger(__name__)

_VALUE_FIELDS = frozenset(e.value for e in SignatureEncoding)


def _require_string(entry: dict, index: int, name: str) -> str:
    value = entry.get(name)
    if not isinstance(value, str) or not value:
        raise InstructionError.invalid_signature_entry(index, f"has no {name}")
    return value


def _parse_signature_entry(index: int, entry: Any) -> SignatureEntry:
    if not isinstance(entry, dict):
        raise InstructionError.invalid_signature_entry(index, "is not a JSON object")

    for name in entry:
        if name.startswith(SIGNATURE_FIELD_PREFIX) and name not in _VALUE_FIELDS:
            raise InstructionError.invalid_signature_entry(
                index, f"has unrecognized field '{name}'"
            )

    target = _require_string(entry, index, "id")
    suite_hint = _require_string(entry, index, "type")

    present = [e for e in SignatureEncoding if e.value in entry]
    if not present:
        raise InstructionError.missing_signature_value(index)
    if len(present) > 1:
        raise InstructionError.multiple_signature_values(index)

    encoding = present[0]
    value = entry[encoding.value]
    if value is None or value == "":
        raise InstructionError.missing_signature_value(index)

    try:
        signature = decode_signature_value(encoding, value)
    except EncodingError as e:
        raise InstructionError.invalid_signature_encoding(index, e.message)
    if not signature:
        raise InstructionError.missing_signature_value(index)

    return SignatureEntry(
        target_key_id=target,
        suite_hint=suite_hint,
        signature_bytes=signature,
        encoding=encoding,
    )


def parse_instruction(raw: Union[bytes, str]) -> Instruction:
    """Parse an instruction.

    Args:
        raw: Instruction bytes (str is taken as UTF-8).

    Returns:
        Instruction with its action and decoded signature entries.

    Raises:
        InstructionError: First failed check.
    """
    raw = as_bytes(raw)
    if not raw:
        raise InstructionError.empty()
    if len(raw) > config.MAX_INSTRUCTION_SIZE_BYTES:
        raise InstructionError.too_large(len(raw), config.MAX_INSTRUCTION_SIZE_BYTES)

    try:
        data = load_object(raw)
    except ValueError as e:
        raise InstructionError.invalid_json(str(e))

    action = data.get("action")
    if action is None:
        raise InstructionError.missing_action()
    try:
        kind = ActionKind(action)
    except ValueError:
        raise InstructionError.unsupported_action(action)

    entries = data.get("signatures")
    if not entries:
        raise InstructionError.missing_signatures()
    if not isinstance(entries, list):
        raise InstructionError.invalid_signature_list(entries)

    signatures = [_parse_signature_entry(i, entry) for i, entry in enumerate(entries)]

    seen = set()
    for signature in signatures:
        if signature.target_key_id in seen:
            raise InstructionError.duplicate_target(signature.target_key_id)
        seen.add(signature.target_key_id)

    log.debug(
        f"Parsed {kind.value} instruction with {len(signatures)} signature(s)",
        extra={"action": kind.value},
    )

    return Instruction(action=kind, signatures=tuple(signatures))
