"""
Wire field codecs for public keys and signatures.

A public key entry carries its key material in exactly one of six fields:

    publicKeyBase58      Bitcoin-alphabet base58
    publicKeyBase64      standard base64, padding optional
    publicKeyHex         hex, either case
    publicKeyMultibase   self-describing prefix + payload (see multibase.py)
    publicKeyPem         -----BEGIN PUBLIC KEY----- base64 -----END PUBLIC KEY-----
    publicKeyJwk         octet-sequence JWK ({"kty": "oct", "k": ...}),
                         as a JSON object or a string holding one

A signature entry carries its value in signatureBase58 or signatureBase64.

Any other ``publicKey*`` member on a key entry is rejected rather than
ignored; a misspelled field must not silently drop a key.
"""

import base64
import binascii
import re
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import base58
from jwcrypto import jwk
from jwcrypto.common import JWException, base64url_decode, base64url_encode

from ..exceptions import EncodingError
from . import multibase
from .multibase import MultibaseBase, MultibaseError

KEY_FIELD_PREFIX = "publicKey"
SIGNATURE_FIELD_PREFIX = "signature"

_PEM_RE = re.compile(
    r"\s*-----BEGIN PUBLIC KEY-----(.*?)-----END PUBLIC KEY-----\s*",
    re.DOTALL,
)
_HEX_DIGITS = frozenset(string.hexdigits)


class KeyEncoding(str, Enum):
    """Recognized public key fields; the value is the wire field name."""
    BASE58 = "publicKeyBase58"
    BASE64 = "publicKeyBase64"
    HEX = "publicKeyHex"
    MULTIBASE = "publicKeyMultibase"
    PEM = "publicKeyPem"
    JWK = "publicKeyJwk"


class SignatureEncoding(str, Enum):
    """Recognized signature value fields."""
    BASE58 = "signatureBase58"
    BASE64 = "signatureBase64"


@dataclass(frozen=True)
class KeyField:
    """The single encoded field selected from a key entry."""
    encoding: KeyEncoding
    value: Any


@dataclass(frozen=True)
class DecodedKey:
    """Raw public key bytes recovered from a key field.

    Attributes:
        raw_bytes: Decoded key material.
        encoding: Field the bytes came from.
        suite_hint: The entry's declared ``type``, if any.
        multibase_base: Sub-alphabet used, for publicKeyMultibase only.
    """
    raw_bytes: bytes
    encoding: KeyEncoding
    suite_hint: Optional[str] = None
    multibase_base: Optional[MultibaseBase] = None


# =============================================================================
# Primitive codecs
# =============================================================================

def _decode_base58(value: str) -> bytes:
    data = base58.b58decode(value)
    if base58.b58encode(data).decode("ascii") != value:
        raise ValueError("non-canonical base58")
    return data


def _decode_base64(value: str) -> bytes:
    body = value.rstrip("=")
    data = base64.b64decode(body + "=" * (-len(body) % 4), validate=True)
    canonical = base64.b64encode(data).decode("ascii")
    if value not in (canonical, canonical.rstrip("=")):
        raise ValueError("non-canonical base64")
    return data


def _decode_hex(value: str) -> bytes:
    if not _HEX_DIGITS.issuperset(value):
        raise ValueError("non-hex character")
    return bytes.fromhex(value)


def _decode_pem(value: str) -> bytes:
    match = _PEM_RE.fullmatch(value)
    if match is None:
        raise ValueError("missing or malformed BEGIN/END PUBLIC KEY delimiters")
    body = "".join(match.group(1).split())
    if not body:
        raise ValueError("empty PEM body")
    return _decode_base64(body)


def _decode_jwk(value: Any) -> bytes:
    try:
        if isinstance(value, str):
            key = jwk.JWK.from_json(value)
        elif isinstance(value, dict):
            key = jwk.JWK(**value)
        else:
            raise ValueError(f"expected JSON object or string, got {type(value).__name__}")
    except (JWException, TypeError) as e:
        raise ValueError(f"invalid JWK: {e}") from e

    if key.get("kty") != "oct":
        raise ValueError(f"only octet-sequence (kty=oct) keys are supported, got {key.get('kty')!r}")
    return base64url_decode(key.get("k"))


_TEXT_DECODERS = {
    KeyEncoding.BASE58: _decode_base58,
    KeyEncoding.BASE64: _decode_base64,
    KeyEncoding.HEX: _decode_hex,
    KeyEncoding.PEM: _decode_pem,
}


# =============================================================================
# Key fields
# =============================================================================

def select_key_field(entry: Mapping[str, Any]) -> KeyField:
    """Select the one encoded field of a public key entry.

    Raises:
        EncodingError: UNRECOGNIZED_FIELD_NAME for any unknown ``publicKey*``
            member, NO_ENCODING_PRESENT or MULTIPLE_ENCODINGS_PRESENT.
    """
    recognized = {e.value: e for e in KeyEncoding}
    present = []
    for name in entry:
        if not name.startswith(KEY_FIELD_PREFIX):
            continue
        if name not in recognized:
            raise EncodingError.unrecognized_field(name)
        present.append(recognized[name])

    if not present:
        raise EncodingError.no_encoding()
    if len(present) > 1:
        raise EncodingError.multiple_encodings(e.value for e in present)

    encoding = present[0]
    return KeyField(encoding=encoding, value=entry[encoding.value])


def decode_key_field(field: KeyField, suite_hint: Optional[str] = None) -> DecodedKey:
    """Decode a selected key field to raw bytes.

    Raises:
        EncodingError: DECODE_ERROR if the value is not valid for its encoding.
    """
    encoding = field.encoding
    value = field.value

    if encoding is not KeyEncoding.JWK and not isinstance(value, str):
        raise EncodingError.decode_failed(
            encoding.value, f"expected string, got {type(value).__name__}"
        )
    if isinstance(value, str) and not value:
        raise EncodingError.decode_failed(encoding.value, "empty value")

    try:
        if encoding is KeyEncoding.MULTIBASE:
            base, raw = multibase.decode(value)
            return DecodedKey(raw, encoding, suite_hint, multibase_base=base)
        if encoding is KeyEncoding.JWK:
            raw = _decode_jwk(value)
        else:
            raw = _TEXT_DECODERS[encoding](value)
    except (MultibaseError, ValueError, binascii.Error) as e:
        raise EncodingError.decode_failed(encoding.value, str(e)) from e

    return DecodedKey(raw, encoding, suite_hint)


def decode_public_key(entry: Mapping[str, Any]) -> DecodedKey:
    """Select and decode the key material of a public key entry.

    The entry's ``type`` member is passed through as the suite hint.
    """
    field = select_key_field(entry)
    suite_hint = entry.get("type")
    return decode_key_field(field, suite_hint if isinstance(suite_hint, str) else None)


def encode_key_field(
    encoding: KeyEncoding,
    raw: bytes,
    base: Optional[MultibaseBase] = None,
) -> KeyField:
    """Encode raw key bytes into the given field encoding.

    ``base`` selects the multibase sub-alphabet (default base58btc).
    JWK values are produced as JSON strings.
    """
    raw = bytes(raw)
    if encoding is KeyEncoding.BASE58:
        value = base58.b58encode(raw).decode("ascii")
    elif encoding is KeyEncoding.BASE64:
        value = base64.b64encode(raw).decode("ascii")
    elif encoding is KeyEncoding.HEX:
        value = raw.hex()
    elif encoding is KeyEncoding.MULTIBASE:
        value = multibase.encode(base or MultibaseBase.BASE58_BTC, raw)
    elif encoding is KeyEncoding.PEM:
        body = base64.b64encode(raw).decode("ascii")
        lines = [body[i:i + 64] for i in range(0, len(body), 64)]
        value = "-----BEGIN PUBLIC KEY-----\n" + "\n".join(lines) + "\n-----END PUBLIC KEY-----"
    else:
        value = jwk.JWK(kty="oct", k=base64url_encode(raw)).export_symmetric()
    return KeyField(encoding=encoding, value=value)


# =============================================================================
# Signature values
# =============================================================================

def decode_signature_value(encoding: SignatureEncoding, value: str) -> bytes:
    """Decode a signatureBase58 / signatureBase64 value.

    Raises:
        EncodingError: DECODE_ERROR if the value is not valid for its encoding.
    """
    if not isinstance(value, str):
        raise EncodingError.decode_failed(
            encoding.value, f"expected string, got {type(value).__name__}"
        )
    try:
        if encoding is SignatureEncoding.BASE58:
            return _decode_base58(value)
        return _decode_base64(value)
    except (ValueError, binascii.Error) as e:
        raise EncodingError.decode_failed(encoding.value, str(e)) from e


def encode_signature_value(encoding: SignatureEncoding, signature: bytes) -> str:
    if encoding is SignatureEncoding.BASE58:
        return base58.b58encode(bytes(signature)).decode("ascii")
    return base64.b64encode(bytes(signature)).decode("ascii")
