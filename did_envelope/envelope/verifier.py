"""Envelope verification.

Decides whether an instruction's signatures authorize the exact bytes of a
DID document. Structural gates run first, in order, and the first failure
is raised:

1. identifier   document (and precursor) id equals the expected DID
2. action       instruction action equals the expected action
3. temporal     an update is newer than its precursor
4. coverage     every signature targets a known key
5. suite        every signature type is valid for its key's suite

Only then is any signature checked. Every signature is checked, so a
failure reports both the failed and the verified key ids.

Coverage is permissive: document keys without a signature are allowed.
An update is checked against the keys of both the new document and its
precursor, so the outgoing key can endorse its replacement.
"""

import logging
from typing import Dict, FrozenSet, Optional, Union

from .document import parse_document
from .exceptions import SignatureInvalidError, VerificationError
from .identifier import LedgerDid, parse_did
from .instruction import parse_instruction
from .models import ActionKind, DidDocument, Envelope, PublicKeyMaterial
from .suites import DEFAULT_SUITES, KeyMaterialError, SuiteRegistry

log = logging.getLogger(__name__)


def _check_identifier(document: DidDocument, expected: str) -> None:
    if document.document_id is None:
        raise VerificationError.missing_document_id()
    if str(document.document_id) != expected:
        raise VerificationError.identifier_mismatch(str(document.document_id), expected)


def _check_temporal(document: DidDocument, precursor: DidDocument) -> None:
    if document.updated is None:
        raise VerificationError.invalid_temporal_relation(
            "Updated document must declare an 'updated' timestamp"
        )

    previous = precursor.updated or precursor.created
    if previous is None:
        raise VerificationError.invalid_temporal_relation(
            "Precursor document declares neither 'created' nor 'updated'"
        )
    if document.updated <= previous:
        raise VerificationError.invalid_temporal_relation(
            f"Document 'updated' {document.updated.isoformat()} is not later than "
            f"precursor {previous.isoformat()}"
        )


def _candidate_keys(
    document: DidDocument,
    precursor: Optional[DidDocument],
) -> Dict[str, PublicKeyMaterial]:
    # The document's own key wins when both declare the same id
    keys: Dict[str, PublicKeyMaterial] = {}
    if precursor is not None:
        keys.update(precursor.keys)
    keys.update(document.keys)
    return keys


def verify(
    envelope: Envelope,
    expected_identifier: Union[LedgerDid, str],
    expected_action: Union[ActionKind, str],
    *,
    precursor: Optional[DidDocument] = None,
    suites: SuiteRegistry = DEFAULT_SUITES,
) -> FrozenSet[str]:
    """Verify an envelope against the expected DID and action.

    Args:
        envelope: Parsed instruction and document.
        expected_identifier: DID the caller is acting on.
        expected_action: Action the caller is performing.
        precursor: Currently stored document, for updates.
        suites: Suite registry to verify with.

    Returns:
        Frozenset of key ids whose signatures verified.

    Raises:
        VerificationError: A structural gate failed.
        SignatureInvalidError: One or more signatures did not verify.
        ValueError: ``expected_action`` is not an ActionKind value.
    """
    document = envelope.document
    instruction = envelope.instruction
    expected_did = str(expected_identifier)
    action = ActionKind(expected_action)

    _check_identifier(document, expected_did)
    if precursor is not None:
        _check_identifier(precursor, expected_did)

    if instruction.action is not action:
        raise VerificationError.action_mismatch(instruction.action.value, action.value)

    if action is ActionKind.UPDATE and precursor is not None:
        _check_temporal(document, precursor)

    keys = _candidate_keys(document, precursor)
    for signature in instruction.signatures:
        if signature.target_key_id not in keys:
            raise VerificationError.unknown_target_key(signature.target_key_id)

    checks = []
    for signature in instruction.signatures:
        key = keys[signature.target_key_id]
        scheme = suites.scheme_for(key.suite, signature.suite_hint)
        if scheme is None:
            raise VerificationError.suite_mismatch(
                key.key_id, signature.suite_hint, key.suite.value
            )
        checks.append((signature, key, scheme))

    verified = set()
    failed = set()
    for signature, key, scheme in checks:
        try:
            ok = suites.verify(
                key.suite, scheme, key.raw_bytes, signature.signature_bytes, document.raw_bytes
            )
        except KeyMaterialError as e:
            log.debug(f"Key {key.key_id} is not usable for {scheme.value}: {e}")
            ok = False
        log.debug(
            f"Signature by {key.key_id} ({scheme.value}): {'verified' if ok else 'FAILED'}",
            extra={"did": expected_did, "action": action.value, "key_id": key.key_id},
        )
        (verified if ok else failed).add(key.key_id)

    if failed:
        raise SignatureInvalidError(failed, verified)

    return frozenset(verified)


def parse_envelope(
    document_raw: Union[bytes, str],
    instruction_raw: Union[bytes, str],
    suites: SuiteRegistry = DEFAULT_SUITES,
) -> Envelope:
    """Parse a document and its instruction into an Envelope."""
    document = parse_document(document_raw, suites)
    instruction = parse_instruction(instruction_raw)
    return Envelope(instruction=instruction, document=document)


def verify_envelope(
    document_raw: Union[bytes, str],
    instruction_raw: Union[bytes, str],
    expected_did: Union[LedgerDid, str],
    expected_action: Union[ActionKind, str],
    *,
    precursor_raw: Optional[Union[bytes, str]] = None,
    suites: SuiteRegistry = DEFAULT_SUITES,
) -> FrozenSet[str]:
    """Parse and verify an envelope in one call.

    Parses the expected DID, the document, the optional precursor and the
    instruction, in that order, then runs verify(). Each stage raises its
    own EnvelopeError subclass.
    """
    identifier = expected_did if isinstance(expected_did, LedgerDid) else parse_did(expected_did)
    action = ActionKind(expected_action)

    document = parse_document(document_raw, suites)
    precursor = parse_document(precursor_raw, suites) if precursor_raw is not None else None
    instruction = parse_instruction(instruction_raw)

    return verify(
        Envelope(instruction=instruction, document=document),
        identifier,
        action,
        precursor=precursor,
        suites=suites,
    )
