"""
DID Envelope error registry and serializable result models.

The error codes form a closed set grouped by the stage that raises them.
The pydantic models give callers (HTTP layers, the CLI) a stable JSON view
of a verification outcome; mapping codes to status codes is left to them.
"""

from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .exceptions import EnvelopeError


# =============================================================================
# Error Categories
# =============================================================================

class ErrorCategory(str, Enum):
    """Stage of the pipeline that produced an error."""
    IDENTIFIER = "identifier"
    ENCODING = "encoding"
    DOCUMENT = "document"
    INSTRUCTION = "instruction"
    VERIFICATION = "verification"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Error code registry.

    INVALID_JSON and INPUT_TOO_LARGE are shared by the document and the
    instruction parser; the exception class tells them apart.
    """
    # Identifier
    INVALID_DID_SCHEME = "INVALID_DID_SCHEME"
    MALFORMED_DID = "MALFORMED_DID"
    INVALID_DID_UUID = "INVALID_DID_UUID"

    # Key encoding
    NO_ENCODING_PRESENT = "NO_ENCODING_PRESENT"
    MULTIPLE_ENCODINGS_PRESENT = "MULTIPLE_ENCODINGS_PRESENT"
    UNRECOGNIZED_FIELD_NAME = "UNRECOGNIZED_FIELD_NAME"
    DECODE_ERROR = "DECODE_ERROR"

    # Shared by document and instruction
    INVALID_JSON = "INVALID_JSON"
    INPUT_TOO_LARGE = "INPUT_TOO_LARGE"

    # Document
    MISSING_PUBLIC_KEY = "MISSING_PUBLIC_KEY"
    DUPLICATE_KEY_ID = "DUPLICATE_KEY_ID"
    INVALID_KEY_ENCODING = "INVALID_KEY_ENCODING"
    MISSING_CONTEXT = "MISSING_CONTEXT"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    INVALID_DOCUMENT_ID = "INVALID_DOCUMENT_ID"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    INVALID_PUBLIC_KEY_ENTRY = "INVALID_PUBLIC_KEY_ENTRY"
    UNSUPPORTED_KEY_TYPE = "UNSUPPORTED_KEY_TYPE"
    INVALID_KEY_MATERIAL = "INVALID_KEY_MATERIAL"

    # Instruction
    EMPTY_INPUT = "EMPTY_INPUT"
    MISSING_ACTION = "MISSING_ACTION"
    UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"
    MISSING_SIGNATURES = "MISSING_SIGNATURES"
    INVALID_SIGNATURE_ENTRY = "INVALID_SIGNATURE_ENTRY"
    MISSING_SIGNATURE_VALUE = "MISSING_SIGNATURE_VALUE"
    MULTIPLE_SIGNATURE_VALUES = "MULTIPLE_SIGNATURE_VALUES"
    INVALID_SIGNATURE_ENCODING = "INVALID_SIGNATURE_ENCODING"
    DUPLICATE_TARGET_KEY_ID = "DUPLICATE_TARGET_KEY_ID"

    # Verification
    IDENTIFIER_MISMATCH = "IDENTIFIER_MISMATCH"
    MISSING_DOCUMENT_ID = "MISSING_DOCUMENT_ID"
    ACTION_MISMATCH = "ACTION_MISMATCH"
    INVALID_TEMPORAL_RELATION = "INVALID_TEMPORAL_RELATION"
    UNKNOWN_TARGET_KEY = "UNKNOWN_TARGET_KEY"
    SUITE_MISMATCH = "SUITE_MISMATCH"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"


# Only a failed cryptographic check is non-structural; everything else is
# decided before any signature is touched.
CRYPTOGRAPHIC_CODES: frozenset = frozenset({ErrorCode.SIGNATURE_INVALID})


# =============================================================================
# Response Models
# =============================================================================

class VerificationStatus(str, Enum):
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


class ErrorDetail(BaseModel):
    """Serializable view of an EnvelopeError."""
    code: ErrorCode
    category: ErrorCategory
    message: str
    structural: bool
    reason: Optional["ErrorDetail"] = None


ErrorDetail.model_rebuild()


class VerificationReport(BaseModel):
    """Outcome of verifying one envelope."""
    did: str
    action: str
    status: VerificationStatus
    verified_key_ids: List[str] = Field(default_factory=list)
    failed_key_ids: List[str] = Field(default_factory=list)
    error: Optional[ErrorDetail] = None


def to_error_detail(exc: "EnvelopeError") -> ErrorDetail:
    """Convert an EnvelopeError (and its wrapped reason chain) to ErrorDetail."""
    return ErrorDetail(
        code=exc.code,
        category=exc.category,
        message=exc.message,
        structural=exc.code not in CRYPTOGRAPHIC_CODES,
        reason=to_error_detail(exc.reason) if exc.reason is not None else None,
    )


def build_report(
    did: str,
    action: str,
    verified_key_ids: Iterable[str] = (),
    error: Optional["EnvelopeError"] = None,
) -> VerificationReport:
    """Build a VerificationReport from a verified key set or an error.

    A SignatureInvalidError contributes its own verified/failed key ids.
    """
    if error is None:
        return VerificationReport(
            did=did,
            action=action,
            status=VerificationStatus.VERIFIED,
            verified_key_ids=sorted(verified_key_ids),
        )

    return VerificationReport(
        did=did,
        action=action,
        status=VerificationStatus.FAILED,
        verified_key_ids=sorted(getattr(error, "verified_key_ids", ())),
        failed_key_ids=sorted(getattr(error, "failed_key_ids", ())),
        error=to_error_detail(error),
    )
