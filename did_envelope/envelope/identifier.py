"""
Ledger DID parser.

External form: ``did:corda:<network>:<uuid>``

- scheme is exactly ``did``
- ``<network>`` is one or more lowercase letter groups, hyphen-joined
- ``<uuid>`` is the canonical lowercase 8-4-4-4-12 form

Parsing is purely syntactic; whether the network exists is decided by the
caller.
"""

import re
import uuid
from dataclasses import dataclass

from did_envelope.core import config

from .exceptions import IdentifierError

_DID_RE = re.compile(
    rf"{config.DID_SCHEME}:{config.DID_METHOD}:({config.NETWORK_PATTERN}):({config.UUID_PATTERN})"
)


@dataclass(frozen=True)
class LedgerDid:
    """Parsed ledger DID.

    Build instances with parse_did(); the fields are assumed consistent.
    """
    did: str
    network: str
    uuid: uuid.UUID

    def to_external_form(self) -> str:
        return self.did

    def __str__(self) -> str:
        return self.did


def parse_did(external: str) -> LedgerDid:
    """Parse the external form of a ledger DID.

    Args:
        external: DID string, e.g. ``did:corda:tcn:a609bcc0-a3a8-11e9-b949-fb002eb572a5``.

    Returns:
        LedgerDid with network and UUID extracted.

    Raises:
        IdentifierError: INVALID_DID_SCHEME, MALFORMED_DID or INVALID_DID_UUID.
    """
    if not isinstance(external, str):
        raise IdentifierError.invalid_scheme("")

    scheme, sep, _ = external.partition(":")
    if not sep or scheme != config.DID_SCHEME:
        raise IdentifierError.invalid_scheme(scheme if sep else "")

    match = _DID_RE.fullmatch(external)
    if match is None:
        raise IdentifierError.malformed(external)

    network, raw_uuid = match.groups()

    # The pattern already pins the shape; this guards the value itself.
    try:
        parsed = uuid.UUID(raw_uuid)
    except ValueError:
        raise IdentifierError.invalid_uuid(raw_uuid)
    if str(parsed) != raw_uuid:
        raise IdentifierError.invalid_uuid(raw_uuid)

    return LedgerDid(did=external, network=network, uuid=parsed)
