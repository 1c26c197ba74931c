"""
DID Envelope exceptions.

One exception class per pipeline stage, each carrying an ErrorCode.
Wrapping errors (INVALID_KEY_ENCODING, INVALID_DOCUMENT_ID) keep the
underlying error in ``reason`` and chain it as ``__cause__``.
The caller is responsible for converting these to ErrorDetail.
"""

from typing import Iterable, Optional

from .api_models import ErrorCategory, ErrorCode


class EnvelopeError(Exception):
    """Base exception for all DID envelope errors."""

    category: ErrorCategory

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        reason: Optional["EnvelopeError"] = None,
    ):
        self.code = code
        self.message = message
        self.reason = reason
        super().__init__(message)
        if reason is not None:
            self.__cause__ = reason

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message})"


class IdentifierError(EnvelopeError):
    """Ledger DID parsing error."""

    category = ErrorCategory.IDENTIFIER

    @classmethod
    def invalid_scheme(cls, found: str) -> "IdentifierError":
        return cls(
            code=ErrorCode.INVALID_DID_SCHEME,
            message=f'DID must use the "did" scheme. Found "{found}".',
        )

    @classmethod
    def malformed(cls, external: str) -> "IdentifierError":
        return cls(code=ErrorCode.MALFORMED_DID, message=f"Malformed ledger DID: {external!r}")

    @classmethod
    def invalid_uuid(cls, value: str) -> "IdentifierError":
        return cls(code=ErrorCode.INVALID_DID_UUID, message=f"Malformed ledger DID UUID: {value!r}")


class EncodingError(EnvelopeError):
    """Public key encoding selection or decoding error."""

    category = ErrorCategory.ENCODING

    @classmethod
    def no_encoding(cls) -> "EncodingError":
        return cls(
            code=ErrorCode.NO_ENCODING_PRESENT,
            message="Public key entry carries no recognized publicKey* field",
        )

    @classmethod
    def multiple_encodings(cls, fields: Iterable[str]) -> "EncodingError":
        return cls(
            code=ErrorCode.MULTIPLE_ENCODINGS_PRESENT,
            message=f"Public key entry carries more than one encoding: {sorted(fields)}",
        )

    @classmethod
    def unrecognized_field(cls, field: str) -> "EncodingError":
        return cls(
            code=ErrorCode.UNRECOGNIZED_FIELD_NAME,
            message=f"Unrecognized public key field '{field}'",
        )

    @classmethod
    def decode_failed(cls, encoding: str, reason: str) -> "EncodingError":
        return cls(code=ErrorCode.DECODE_ERROR, message=f"Invalid {encoding} value: {reason}")


class DocumentError(EnvelopeError):
    """DID document parsing error."""

    category = ErrorCategory.DOCUMENT

    @classmethod
    def too_large(cls, size: int, limit: int) -> "DocumentError":
        return cls(
            code=ErrorCode.INPUT_TOO_LARGE,
            message=f"Document is {size} bytes, limit is {limit}",
        )

    @classmethod
    def invalid_json(cls, reason: str) -> "DocumentError":
        return cls(code=ErrorCode.INVALID_JSON, message=f"Document is not valid JSON: {reason}")

    @classmethod
    def missing_context(cls) -> "DocumentError":
        return cls(code=ErrorCode.MISSING_CONTEXT, message="Document has no @context")

    @classmethod
    def invalid_context(cls, found) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_CONTEXT,
            message=f"Document @context names no DID context: {found!r}",
        )

    @classmethod
    def invalid_document_id(cls, error: EnvelopeError) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_DOCUMENT_ID,
            message=f"Document id is not a ledger DID: {error.message}",
            reason=error,
        )

    @classmethod
    def invalid_timestamp(cls, field: str, value) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_TIMESTAMP,
            message=f"Document '{field}' is not an ISO 8601 timestamp: {value!r}",
        )

    @classmethod
    def missing_public_key(cls) -> "DocumentError":
        return cls(
            code=ErrorCode.MISSING_PUBLIC_KEY,
            message="Document publicKey list is missing or empty",
        )

    @classmethod
    def invalid_public_key_list(cls, found) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_PUBLIC_KEY_ENTRY,
            message=f"publicKey must be a list, got {type(found).__name__}",
        )

    @classmethod
    def invalid_public_key_entry(cls, index: int, reason: str) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_PUBLIC_KEY_ENTRY,
            message=f"publicKey[{index}] {reason}",
        )

    @classmethod
    def duplicate_key_id(cls, key_id: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DUPLICATE_KEY_ID,
            message=f"Multiple public keys share the id '{key_id}'",
        )

    @classmethod
    def invalid_key_encoding(cls, key_id: str, error: EnvelopeError) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_KEY_ENCODING,
            message=f"Public key '{key_id}' has an invalid encoding: {error.message}",
            reason=error,
        )

    @classmethod
    def unsupported_key_type(cls, key_id: str, key_type: str) -> "DocumentError":
        return cls(
            code=ErrorCode.UNSUPPORTED_KEY_TYPE,
            message=f"Public key '{key_id}' has unsupported type '{key_type}'",
        )

    @classmethod
    def invalid_key_material(cls, key_id: str, reason: str) -> "DocumentError":
        return cls(
            code=ErrorCode.INVALID_KEY_MATERIAL,
            message=f"Public key '{key_id}' is not usable: {reason}",
        )


class InstructionError(EnvelopeError):
    """Instruction parsing error."""

    category = ErrorCategory.INSTRUCTION

    @classmethod
    def empty(cls) -> "InstructionError":
        return cls(code=ErrorCode.EMPTY_INPUT, message="Instruction is empty")

    @classmethod
    def too_large(cls, size: int, limit: int) -> "InstructionError":
        return cls(
            code=ErrorCode.INPUT_TOO_LARGE,
            message=f"Instruction is {size} bytes, limit is {limit}",
        )

    @classmethod
    def invalid_json(cls, reason: str) -> "InstructionError":
        return cls(code=ErrorCode.INVALID_JSON, message=f"Instruction is not valid JSON: {reason}")

    @classmethod
    def missing_action(cls) -> "InstructionError":
        return cls(code=ErrorCode.MISSING_ACTION, message="Instruction has no action")

    @classmethod
    def unsupported_action(cls, action) -> "InstructionError":
        return cls(
            code=ErrorCode.UNSUPPORTED_ACTION,
            message=f"Instruction action {action!r} is not supported",
        )

    @classmethod
    def missing_signatures(cls) -> "InstructionError":
        return cls(
            code=ErrorCode.MISSING_SIGNATURES,
            message="Instruction signatures list is missing or empty",
        )

    @classmethod
    def invalid_signature_list(cls, found) -> "InstructionError":
        return cls(
            code=ErrorCode.INVALID_SIGNATURE_ENTRY,
            message=f"signatures must be a list, got {type(found).__name__}",
        )

    @classmethod
    def invalid_signature_entry(cls, index: int, reason: str) -> "InstructionError":
        return cls(
            code=ErrorCode.INVALID_SIGNATURE_ENTRY,
            message=f"signatures[{index}] {reason}",
        )

    @classmethod
    def missing_signature_value(cls, index: int) -> "InstructionError":
        return cls(
            code=ErrorCode.MISSING_SIGNATURE_VALUE,
            message=f"signatures[{index}] carries no signature value",
        )

    @classmethod
    def multiple_signature_values(cls, index: int) -> "InstructionError":
        return cls(
            code=ErrorCode.MULTIPLE_SIGNATURE_VALUES,
            message=f"signatures[{index}] carries both signatureBase58 and signatureBase64",
        )

    @classmethod
    def invalid_signature_encoding(cls, index: int, reason: str) -> "InstructionError":
        return cls(
            code=ErrorCode.INVALID_SIGNATURE_ENCODING,
            message=f"signatures[{index}] value does not decode: {reason}",
        )

    @classmethod
    def duplicate_target(cls, key_id: str) -> "InstructionError":
        return cls(
            code=ErrorCode.DUPLICATE_TARGET_KEY_ID,
            message=f"Multiple signatures target the key '{key_id}'",
        )


class VerificationError(EnvelopeError):
    """Envelope verification failure."""

    category = ErrorCategory.VERIFICATION

    @classmethod
    def missing_document_id(cls) -> "VerificationError":
        return cls(code=ErrorCode.MISSING_DOCUMENT_ID, message="Document does not declare an id")

    @classmethod
    def identifier_mismatch(cls, found: str, expected: str) -> "VerificationError":
        return cls(
            code=ErrorCode.IDENTIFIER_MISMATCH,
            message=f"Document id '{found}' does not match '{expected}'",
        )

    @classmethod
    def action_mismatch(cls, found: str, expected: str) -> "VerificationError":
        return cls(
            code=ErrorCode.ACTION_MISMATCH,
            message=f"Instruction action '{found}' does not match '{expected}'",
        )

    @classmethod
    def invalid_temporal_relation(cls, reason: str) -> "VerificationError":
        return cls(code=ErrorCode.INVALID_TEMPORAL_RELATION, message=reason)

    @classmethod
    def unknown_target_key(cls, key_id: str) -> "VerificationError":
        return cls(
            code=ErrorCode.UNKNOWN_TARGET_KEY,
            message=f"Signature targets unknown key '{key_id}'",
        )

    @classmethod
    def suite_mismatch(cls, key_id: str, signature_type: str, suite: str) -> "VerificationError":
        return cls(
            code=ErrorCode.SUITE_MISMATCH,
            message=f"Signature type '{signature_type}' cannot be used with {suite} key '{key_id}'",
        )


class SignatureInvalidError(VerificationError):
    """One or more signatures failed cryptographic verification.

    Carries both the key ids whose signatures failed and those that
    verified, since every entry is checked before this is raised.
    """

    def __init__(self, failed_key_ids: Iterable[str], verified_key_ids: Iterable[str] = ()):
        self.failed_key_ids = frozenset(failed_key_ids)
        self.verified_key_ids = frozenset(verified_key_ids)
        super().__init__(
            ErrorCode.SIGNATURE_INVALID,
            f"Signature verification failed for {sorted(self.failed_key_ids)}",
        )
