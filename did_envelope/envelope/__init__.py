"""DID envelope module.

Parses ledger DIDs, DID documents and signing instructions, and verifies
that an instruction's signatures authorize a document's exact bytes.
"""

from .api_models import (
    ErrorCategory,
    ErrorCode,
    ErrorDetail,
    VerificationReport,
    VerificationStatus,
    build_report,
    to_error_detail,
)
from .exceptions import (
    EnvelopeError,
    IdentifierError,
    EncodingError,
    DocumentError,
    InstructionError,
    VerificationError,
    SignatureInvalidError,
)
from .identifier import LedgerDid, parse_did
from .encoding import (
    KeyEncoding,
    SignatureEncoding,
    MultibaseBase,
    decode_public_key,
    encode_key_field,
)
from .suites import CryptoSuite, SignatureScheme, SuiteRegistry, DEFAULT_SUITES
from .models import (
    ActionKind,
    PublicKeyMaterial,
    DidDocument,
    SignatureEntry,
    Instruction,
    Envelope,
)
from .document import parse_document
from .instruction import parse_instruction
from .verifier import verify, verify_envelope, parse_envelope

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorCode",
    "ErrorDetail",
    "VerificationReport",
    "VerificationStatus",
    "build_report",
    "to_error_detail",
    "EnvelopeError",
    "IdentifierError",
    "EncodingError",
    "DocumentError",
    "InstructionError",
    "VerificationError",
    "SignatureInvalidError",
    # Identifier
    "LedgerDid",
    "parse_did",
    # Encoding
    "KeyEncoding",
    "SignatureEncoding",
    "MultibaseBase",
    "decode_public_key",
    "encode_key_field",
    # Suites
    "CryptoSuite",
    "SignatureScheme",
    "SuiteRegistry",
    "DEFAULT_SUITES",
    # Models
    "ActionKind",
    "PublicKeyMaterial",
    "DidDocument",
    "SignatureEntry",
    "Instruction",
    "Envelope",
    # Parsing and verification
    "parse_document",
    "parse_instruction",
    "parse_envelope",
    "verify",
    "verify_envelope",
]
