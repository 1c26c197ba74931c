"""
Multibase codec.

A multibase string is a single prefix character selecting the base,
followed by the payload in that base's alphabet. Supported bases:

    0 base2            7 base8              9 base10
    f base16           F base16upper
    b base32           B base32upper        c base32pad     C base32padupper
    v base32hex        V base32hexupper     t base32hexpad  T base32hexpadupper
    z base58btc        Z base58flickr
    m base64           M base64pad          u base64url     U base64urlpad

base2 and base8 pack bits RFC 4648 style (zero-filled tail); base10 and the
base58 variants are big-integer encodings that keep each leading zero byte
as a leading zero digit.

Decoding is strict: the payload must use only the base's alphabet and must
be the canonical encoding of the bytes it decodes to.
"""

import base64
import binascii
import string
from enum import Enum
from typing import Callable, Dict, Tuple

import base58

BASE58_FLICKR_ALPHABET = b"123456789abcdefghijkmnopqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ"


class MultibaseError(ValueError):
    """Multibase value cannot be decoded."""


class MultibaseBase(Enum):
    """Supported multibase sub-alphabets: (prefix, name)."""

    BASE2 = ("0", "base2")
    BASE8 = ("7", "base8")
    BASE10 = ("9", "base10")
    BASE16 = ("f", "base16")
    BASE16_UPPER = ("F", "base16upper")
    BASE32 = ("b", "base32")
    BASE32_UPPER = ("B", "base32upper")
    BASE32_PAD = ("c", "base32pad")
    BASE32_PAD_UPPER = ("C", "base32padupper")
    BASE32_HEX = ("v", "base32hex")
    BASE32_HEX_UPPER = ("V", "base32hexupper")
    BASE32_HEX_PAD = ("t", "base32hexpad")
    BASE32_HEX_PAD_UPPER = ("T", "base32hexpadupper")
    BASE58_BTC = ("z", "base58btc")
    BASE58_FLICKR = ("Z", "base58flickr")
    BASE64 = ("m", "base64")
    BASE64_PAD = ("M", "base64pad")
    BASE64_URL = ("u", "base64url")
    BASE64_URL_PAD = ("U", "base64urlpad")

    def __init__(self, prefix: str, label: str):
        self.prefix = prefix
        self.label = label

    @classmethod
    def from_prefix(cls, prefix: str) -> "MultibaseBase":
        try:
            return _BY_PREFIX[prefix]
        except KeyError:
            raise MultibaseError(f"unknown multibase prefix {prefix!r}")

    @classmethod
    def from_label(cls, label: str) -> "MultibaseBase":
        for base in cls:
            if base.label == label:
                return base
        raise MultibaseError(f"unknown multibase name {label!r}")


_BY_PREFIX: Dict[str, MultibaseBase] = {base.prefix: base for base in MultibaseBase}


# =============================================================================
# Bit-packed and big-integer helpers
# =============================================================================

def _encode_bits(data: bytes, width: int, alphabet: str) -> str:
    bits = "".join(f"{b:08b}" for b in data)
    bits += "0" * (-len(bits) % width)
    return "".join(alphabet[int(bits[i:i + width], 2)] for i in range(0, len(bits), width))


def _decode_bits(payload: str, width: int, alphabet: str) -> bytes:
    bits = "".join(f"{alphabet.index(c):0{width}b}" for c in payload)
    usable = len(bits) - len(bits) % 8
    return bytes(int(bits[i:i + 8], 2) for i in range(0, usable, 8))


def _encode_base10(data: bytes) -> str:
    stripped = data.lstrip(b"\x00")
    zeros = "0" * (len(data) - len(stripped))
    if not stripped:
        return zeros
    return zeros + str(int.from_bytes(stripped, "big"))


def _decode_base10(payload: str) -> bytes:
    stripped = payload.lstrip("0")
    zeros = b"\x00" * (len(payload) - len(stripped))
    if not stripped:
        return zeros
    value = int(stripped)
    return zeros + value.to_bytes((value.bit_length() + 7) // 8, "big")


def _pad(payload: str, block: int) -> str:
    return payload + "=" * (-len(payload) % block)


# =============================================================================
# Codec table
# =============================================================================

_B32 = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_B32_HEX = "0123456789ABCDEFGHIJKLMNOPQRSTUV"
_B64 = string.ascii_uppercase + string.ascii_lowercase + string.digits + "+/"
_B64_URL = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"

# base -> (alphabet incl. padding char, encoder, decoder)
_Codec = Tuple[str, Callable[[bytes], str], Callable[[str], bytes]]

_CODECS: Dict[MultibaseBase, _Codec] = {
    MultibaseBase.BASE2: (
        "01",
        lambda d: _encode_bits(d, 1, "01"),
        lambda p: _decode_bits(p, 1, "01"),
    ),
    MultibaseBase.BASE8: (
        "01234567",
        lambda d: _encode_bits(d, 3, "01234567"),
        lambda p: _decode_bits(p, 3, "01234567"),
    ),
    MultibaseBase.BASE10: ("0123456789", _encode_base10, _decode_base10),
    MultibaseBase.BASE16: (
        "0123456789abcdef",
        lambda d: d.hex(),
        bytes.fromhex,
    ),
    MultibaseBase.BASE16_UPPER: (
        "0123456789ABCDEF",
        lambda d: d.hex().upper(),
        bytes.fromhex,
    ),
    MultibaseBase.BASE32: (
        _B32.lower(),
        lambda d: base64.b32encode(d).decode("ascii").rstrip("=").lower(),
        lambda p: base64.b32decode(_pad(p.upper(), 8)),
    ),
    MultibaseBase.BASE32_UPPER: (
        _B32,
        lambda d: base64.b32encode(d).decode("ascii").rstrip("="),
        lambda p: base64.b32decode(_pad(p, 8)),
    ),
    MultibaseBase.BASE32_PAD: (
        _B32.lower() + "=",
        lambda d: base64.b32encode(d).decode("ascii").lower(),
        lambda p: base64.b32decode(p.upper()),
    ),
    MultibaseBase.BASE32_PAD_UPPER: (
        _B32 + "=",
        lambda d: base64.b32encode(d).decode("ascii"),
        base64.b32decode,
    ),
    MultibaseBase.BASE32_HEX: (
        _B32_HEX.lower(),
        lambda d: base64.b32hexencode(d).decode("ascii").rstrip("=").lower(),
        lambda p: base64.b32hexdecode(_pad(p.upper(), 8)),
    ),
    MultibaseBase.BASE32_HEX_UPPER: (
        _B32_HEX,
        lambda d: base64.b32hexencode(d).decode("ascii").rstrip("="),
        lambda p: base64.b32hexdecode(_pad(p, 8)),
    ),
    MultibaseBase.BASE32_HEX_PAD: (
        _B32_HEX.lower() + "=",
        lambda d: base64.b32hexencode(d).decode("ascii").lower(),
        lambda p: base64.b32hexdecode(p.upper()),
    ),
    MultibaseBase.BASE32_HEX_PAD_UPPER: (
        _B32_HEX + "=",
        lambda d: base64.b32hexencode(d).decode("ascii"),
        base64.b32hexdecode,
    ),
    MultibaseBase.BASE58_BTC: (
        base58.BITCOIN_ALPHABET.decode("ascii"),
        lambda d: base58.b58encode(d).decode("ascii"),
        lambda p: base58.b58decode(p),
    ),
    MultibaseBase.BASE58_FLICKR: (
        BASE58_FLICKR_ALPHABET.decode("ascii"),
        lambda d: base58.b58encode(d, alphabet=BASE58_FLICKR_ALPHABET).decode("ascii"),
        lambda p: base58.b58decode(p, alphabet=BASE58_FLICKR_ALPHABET),
    ),
    MultibaseBase.BASE64: (
        _B64,
        lambda d: base64.b64encode(d).decode("ascii").rstrip("="),
        lambda p: base64.b64decode(_pad(p, 4), validate=True),
    ),
    MultibaseBase.BASE64_PAD: (
        _B64 + "=",
        lambda d: base64.b64encode(d).decode("ascii"),
        lambda p: base64.b64decode(p, validate=True),
    ),
    MultibaseBase.BASE64_URL: (
        _B64_URL,
        lambda d: base64.urlsafe_b64encode(d).decode("ascii").rstrip("="),
        lambda p: base64.urlsafe_b64decode(_pad(p, 4)),
    ),
    MultibaseBase.BASE64_URL_PAD: (
        _B64_URL + "=",
        lambda d: base64.urlsafe_b64encode(d).decode("ascii"),
        base64.urlsafe_b64decode,
    ),
}


def encode(base: MultibaseBase, data: bytes) -> str:
    """Encode bytes as a multibase string using ``base``."""
    _, encoder, _ = _CODECS[base]
    return base.prefix + encoder(bytes(data))


def decode_payload(base: MultibaseBase, payload: str) -> bytes:
    """Decode a payload (without prefix) in the given base.

    Raises:
        MultibaseError: Character outside the alphabet, bad length or
            padding, or a non-canonical payload.
    """
    alphabet, encoder, decoder = _CODECS[base]

    for ch in payload:
        if ch not in alphabet:
            raise MultibaseError(f"character {ch!r} is not in the {base.label} alphabet")

    try:
        data = decoder(payload)
    except (ValueError, binascii.Error) as e:
        raise MultibaseError(f"invalid {base.label} payload: {e}") from e

    if encoder(data) != payload:
        raise MultibaseError(f"non-canonical {base.label} payload")

    return data


def decode(value: str) -> Tuple[MultibaseBase, bytes]:
    """Decode a multibase string.

    Returns:
        Tuple of (base selected by the prefix, decoded bytes).

    Raises:
        MultibaseError: Empty value, unknown prefix or invalid payload.
    """
    if not value:
        raise MultibaseError("empty multibase value")

    base = MultibaseBase.from_prefix(value[0])
    return base, decode_payload(base, value[1:])
