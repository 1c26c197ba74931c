"""Public key and signature field codecs."""

from .keys import (
    KeyEncoding,
    SignatureEncoding,
    KeyField,
    DecodedKey,
    select_key_field,
    decode_key_field,
    decode_public_key,
    encode_key_field,
    decode_signature_value,
    encode_signature_value,
)
from .multibase import MultibaseBase, MultibaseError

__all__ = [
    "KeyEncoding",
    "SignatureEncoding",
    "KeyField",
    "DecodedKey",
    "select_key_field",
    "decode_key_field",
    "decode_public_key",
    "encode_key_field",
    "decode_signature_value",
    "encode_signature_value",
    "MultibaseBase",
    "MultibaseError",
]
