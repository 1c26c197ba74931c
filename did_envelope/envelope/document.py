"""DID document parser.

Turns the raw bytes of a DID document into a DidDocument. The bytes are
kept as received: instruction signatures cover exactly these bytes, so the
document is never re-serialized.

Checks run in a fixed order and the first failure is raised:

1. size limit
2. JSON shape (UTF-8 object, no repeated member names)
3. @context (when config.REQUIRE_DID_CONTEXT)
4. id, created, updated
5. publicKey list, then each entry in document order
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Union

from did_envelope.core import config

from .encoding import decode_public_key
from .exceptions import DocumentError, EncodingError, IdentifierError
from .identifier import LedgerDid, parse_did
from .models import DidDocument, PublicKeyMaterial
from .strict_json import as_bytes, load_object
from .suites import DEFAULT_SUITES, KeyMaterialError, SuiteRegistry, load_public_key

log = logging.getLogger(__name__)


def _check_context(data: Dict[str, Any]) -> None:
    if "@context" not in data:
        raise DocumentError.missing_context()

    context = data["@context"]
    if isinstance(context, str):
        declared = [context]
    elif isinstance(context, list):
        declared = [c for c in context if isinstance(c, str)]
    else:
        declared = []

    if not any(c in config.DID_CONTEXTS for c in declared):
        raise DocumentError.invalid_context(context)


def _parse_document_id(data: Dict[str, Any]) -> Optional[LedgerDid]:
    if "id" not in data:
        return None
    try:
        return parse_did(data["id"])
    except IdentifierError as e:
        raise DocumentError.invalid_document_id(e)


def _parse_timestamp(data: Dict[str, Any], field: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp member; it must carry a UTC offset or Z."""
    if field not in data:
        return None
    value = data[field]
    if not isinstance(value, str):
        raise DocumentError.invalid_timestamp(field, value)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise DocumentError.invalid_timestamp(field, value)
    if parsed.tzinfo is None:
        raise DocumentError.invalid_timestamp(field, value)
    return parsed


def _parse_key_entry(index: int, entry: Any, suites: SuiteRegistry, seen) -> PublicKeyMaterial:
    if not isinstance(entry, dict):
        raise DocumentError.invalid_public_key_entry(index, "is not a JSON object")

    key_id = entry.get("id")
    if not isinstance(key_id, str) or not key_id:
        raise DocumentError.invalid_public_key_entry(index, "has no id")
    _, sep, fragment = key_id.partition("#")
    if not sep or not fragment:
        raise DocumentError.invalid_public_key_entry(index, f"id '{key_id}' has no #fragment")

    key_type = entry.get("type")
    if not isinstance(key_type, str) or not key_type:
        raise DocumentError.invalid_public_key_entry(index, "has no type")

    if key_id in seen:
        raise DocumentError.duplicate_key_id(key_id)

    try:
        decoded = decode_public_key(entry)
    except EncodingError as e:
        raise DocumentError.invalid_key_encoding(key_id, e)

    suite = suites.suite_for_key_type(key_type)
    if suite is None:
        raise DocumentError.unsupported_key_type(key_id, key_type)

    try:
        load_public_key(suite, decoded.raw_bytes)
    except KeyMaterialError as e:
        raise DocumentError.invalid_key_material(key_id, str(e))

    return PublicKeyMaterial(
        key_id=key_id,
        key_type=key_type,
        controller=entry.get("controller"),
        suite=suite,
        encoding=decoded.encoding,
        raw_bytes=decoded.raw_bytes,
        multibase_base=decoded.multibase_base,
    )


def parse_document(
    raw: Union[bytes, str],
    suites: SuiteRegistry = DEFAULT_SUITES,
) -> DidDocument:
    """Parse a DID document.

    Args:
        raw: Document bytes (str is taken as UTF-8).
        suites: Registry used to resolve key types.

    Returns:
        DidDocument holding the decoded keys and the exact input bytes.

    Raises:
        DocumentError: First failed check; wrapped identifier and encoding
            errors are available as ``reason``.
    """
    raw = as_bytes(raw)
    if len(raw) > config.MAX_DOCUMENT_SIZE_BYTES:
        raise DocumentError.too_large(len(raw), config.MAX_DOCUMENT_SIZE_BYTES)

    try:
        data = load_object(raw)
    except ValueError as e:
        raise DocumentError.invalid_json(str(e))

    if config.REQUIRE_DID_CONTEXT:
        _check_context(data)

    document_id = _parse_document_id(data)
    created = _parse_timestamp(data, "created")
    updated = _parse_timestamp(data, "updated")

    entries = data.get("publicKey")
    if not entries:
        raise DocumentError.missing_public_key()
    if not isinstance(entries, list):
        raise DocumentError.invalid_public_key_list(entries)

    keys: Dict[str, PublicKeyMaterial] = {}
    for index, entry in enumerate(entries):
        key = _parse_key_entry(index, entry, suites, keys)
        keys[key.key_id] = key

    log.debug(
        f"Parsed DID document with {len(keys)} key(s): {list(keys)}",
        extra={"did": str(document_id) if document_id else None},
    )

    return DidDocument(
        document_id=document_id,
        keys=keys,
        raw_bytes=raw,
        context=data.get("@context"),
        created=created,
        updated=updated,
    )
