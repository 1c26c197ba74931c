"""Parsed DID document, instruction and envelope models.

All models are frozen; a DidDocument keeps the exact bytes it was parsed
from, never a re-serialized form, since those bytes are what signatures
cover.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .encoding import KeyEncoding, MultibaseBase, SignatureEncoding
from .identifier import LedgerDid
from .suites import CryptoSuite


class ActionKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class PublicKeyMaterial:
    """One decoded publicKey entry of a DID document.

    Attributes:
        key_id: Key URI, always carrying a ``#fragment``.
        key_type: Declared ``type`` (e.g. Ed25519VerificationKey2018).
        controller: Declared ``controller``, if any.
        suite: Suite the key type maps to.
        encoding: Field the key material was read from.
        raw_bytes: Decoded key material.
        multibase_base: Sub-alphabet, for publicKeyMultibase only.
    """
    key_id: str
    key_type: str
    controller: Optional[str]
    suite: CryptoSuite
    encoding: KeyEncoding
    raw_bytes: bytes
    multibase_base: Optional[MultibaseBase] = None


@dataclass(frozen=True)
class DidDocument:
    """Parsed DID document.

    Attributes:
        document_id: Parsed ``id``, or None when the document declares none.
        keys: Read-only key_id -> PublicKeyMaterial, in document order.
        raw_bytes: Exact bytes received.
        context: ``@context`` as declared (string or list), or None.
        created: Parsed ``created`` timestamp, if present.
        updated: Parsed ``updated`` timestamp, if present.
    """
    document_id: Optional[LedgerDid]
    keys: Mapping[str, PublicKeyMaterial]
    raw_bytes: bytes = field(repr=False)
    context: object = None
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.keys, MappingProxyType):
            object.__setattr__(self, "keys", MappingProxyType(dict(self.keys)))

    def get_key(self, key_id: str) -> Optional[PublicKeyMaterial]:
        return self.keys.get(key_id)


@dataclass(frozen=True)
class SignatureEntry:
    target_key_id: str
    suite_hint: str
    signature_bytes: bytes = field(repr=False)
    encoding: SignatureEncoding = SignatureEncoding.BASE58


@dataclass(frozen=True)
class Instruction:
    action: ActionKind
    signatures: Tuple[SignatureEntry, ...]

    @property
    def target_key_ids(self) -> Tuple[str, ...]:
        return tuple(s.target_key_id for s in self.signatures)


@dataclass(frozen=True)
class Envelope:
    """An instruction paired with the document it authorizes."""
    instruction: Instruction
    document: DidDocument
