"""Crypto suite registry.

Maps a public key's declared ``type`` to a CryptoSuite, and a signature's
declared ``type`` to the (suite, scheme) pair it is valid for:

    Ed25519VerificationKey2018/2020       -> Ed25519
    RsaVerificationKey2018                -> RSA
    EcdsaVerificationKeySecp256k1,
    EcdsaSecp256k1VerificationKey2019     -> EcdsaSecp256k1

    Ed25519Signature2018/2020             -> Ed25519, EdDSA
    RsaSignature2018                      -> RSA, PKCS#1 v1.5 / SHA-256
    RsaSsaPssSignature2018                -> RSA, PSS / SHA-256
    EcdsaSignatureSecp256k1,
    EcdsaSecp256k1Signature2019           -> EcdsaSecp256k1, ECDSA / SHA-256

Key material is carried as DER SubjectPublicKeyInfo in every encoding; bare
forms (32-byte Ed25519, PKCS#1 RSA, SEC1 points) are accepted as well.

Note: pysodium is imported lazily inside the Ed25519 verifier so that the
parsers stay importable where libsodium is not installed.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from did_envelope.core import config

ED25519_KEY_SIZE = 32
ECDSA_RAW_SIGNATURE_SIZE = 64
_SEC1_PREFIXES = (0x02, 0x03, 0x04)


class CryptoSuite(str, Enum):
    ED25519 = "Ed25519"
    RSA = "RSA"
    ECDSA_SECP256K1 = "EcdsaSecp256k1"


class SignatureScheme(str, Enum):
    EDDSA = "EdDSA"
    RSA_PKCS1V15_SHA256 = "RSA_PKCS1V15_SHA256"
    RSA_PSS_SHA256 = "RSA_PSS_SHA256"
    ECDSA_SHA256 = "ECDSA_SHA256"


class KeyMaterialError(ValueError):
    """Decoded bytes are not a usable public key for the suite."""


# (loaded public key, signature, message) -> verified?
Verifier = Callable[[Any, bytes, bytes], bool]


# =============================================================================
# Key loading
# =============================================================================

def _load_der(raw: bytes):
    try:
        return serialization.load_der_public_key(raw)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyMaterialError(f"not a DER public key: {e}") from e


def _load_ed25519(raw: bytes) -> bytes:
    if len(raw) == ED25519_KEY_SIZE:
        return raw
    key = _load_der(raw)
    if not isinstance(key, ed25519.Ed25519PublicKey):
        raise KeyMaterialError(f"expected an Ed25519 key, got {type(key).__name__}")
    return key.public_bytes(serialization.Encoding.Raw, serialization.PublicFormat.Raw)


def _load_rsa(raw: bytes) -> rsa.RSAPublicKey:
    # load_der_public_key accepts both SubjectPublicKeyInfo and PKCS#1
    key = _load_der(raw)
    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyMaterialError(f"expected an RSA key, got {type(key).__name__}")
    if key.key_size < config.RSA_MIN_KEY_SIZE_BITS:
        raise KeyMaterialError(
            f"RSA modulus is {key.key_size} bits, minimum is {config.RSA_MIN_KEY_SIZE_BITS}"
        )
    return key


def _load_secp256k1(raw: bytes) -> ec.EllipticCurvePublicKey:
    # DER SubjectPublicKeyInfo starts with 0x30; SEC1 points with 0x02-0x04
    if raw and raw[0] in _SEC1_PREFIXES:
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw)
        except ValueError as e:
            raise KeyMaterialError(f"not a secp256k1 point: {e}") from e
    key = _load_der(raw)
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise KeyMaterialError(f"expected an EC key, got {type(key).__name__}")
    if not isinstance(key.curve, ec.SECP256K1):
        raise KeyMaterialError(f"expected curve secp256k1, got {key.curve.name}")
    return key


_LOADERS = {
    CryptoSuite.ED25519: _load_ed25519,
    CryptoSuite.RSA: _load_rsa,
    CryptoSuite.ECDSA_SECP256K1: _load_secp256k1,
}


def load_public_key(suite: CryptoSuite, raw: bytes):
    """Load raw key bytes as a public key of ``suite``.

    Returns:
        Raw 32-byte key for Ed25519, otherwise a ``cryptography`` public key.

    Raises:
        KeyMaterialError: Bytes are not a public key of the suite.
    """
    return _LOADERS[suite](bytes(raw))


# =============================================================================
# Signature schemes
# =============================================================================

def _verify_eddsa(public_key: bytes, signature: bytes, message: bytes) -> bool:
    import pysodium
    try:
        # pysodium.crypto_sign_verify_detached raises ValueError if invalid
        pysodium.crypto_sign_verify_detached(signature, message, public_key)
    except ValueError:
        return False
    return True


def _verify_rsa_pkcs1v15(public_key: rsa.RSAPublicKey, signature: bytes, message: bytes) -> bool:
    try:
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True


def _verify_rsa_pss(public_key: rsa.RSAPublicKey, signature: bytes, message: bytes) -> bool:
    pss = padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO)
    try:
        public_key.verify(signature, message, pss, hashes.SHA256())
    except InvalidSignature:
        return False
    return True


def _verify_ecdsa(public_key: ec.EllipticCurvePublicKey, signature: bytes, message: bytes) -> bool:
    candidates = [signature]
    if len(signature) == ECDSA_RAW_SIGNATURE_SIZE:
        half = ECDSA_RAW_SIGNATURE_SIZE // 2
        r = int.from_bytes(signature[:half], "big")
        s = int.from_bytes(signature[half:], "big")
        candidates.append(encode_dss_signature(r, s))

    for candidate in candidates:
        try:
            public_key.verify(candidate, message, ec.ECDSA(hashes.SHA256()))
            return True
        except InvalidSignature:
            continue
    return False


# =============================================================================
# Registry
# =============================================================================

@dataclass(frozen=True)
class SuiteRegistry:
    """Immutable key-type, signature-type and verifier tables.

    Attributes:
        key_types: Key ``type`` -> suite.
        signature_types: Signature ``type`` -> (suite, scheme).
        verifiers: Scheme -> verifier callable.
    """
    key_types: Mapping[str, CryptoSuite]
    signature_types: Mapping[str, Tuple[CryptoSuite, SignatureScheme]]
    verifiers: Mapping[SignatureScheme, Verifier]

    def __post_init__(self):
        object.__setattr__(self, "key_types", MappingProxyType(dict(self.key_types)))
        object.__setattr__(self, "signature_types", MappingProxyType(dict(self.signature_types)))
        object.__setattr__(self, "verifiers", MappingProxyType(dict(self.verifiers)))

    def suite_for_key_type(self, key_type: str) -> Optional[CryptoSuite]:
        return self.key_types.get(key_type)

    def scheme_for(self, suite: CryptoSuite, signature_type: str) -> Optional[SignatureScheme]:
        """Scheme for a signature type used with a key of ``suite``, or None if incompatible."""
        entry = self.signature_types.get(signature_type)
        if entry is None or entry[0] is not suite:
            return None
        return entry[1]

    def verify(
        self,
        suite: CryptoSuite,
        scheme: SignatureScheme,
        raw_key: bytes,
        signature: bytes,
        message: bytes,
    ) -> bool:
        """Check one signature over ``message``.

        Returns False on a bad signature; KeyMaterialError propagates if
        ``raw_key`` is not a key of ``suite``.
        """
        public_key = load_public_key(suite, raw_key)
        return self.verifiers[scheme](public_key, signature, message)


DEFAULT_SUITES = SuiteRegistry(
    key_types={
        "Ed25519VerificationKey2018": CryptoSuite.ED25519,
        "Ed25519VerificationKey2020": CryptoSuite.ED25519,
        "RsaVerificationKey2018": CryptoSuite.RSA,
        "EcdsaVerificationKeySecp256k1": CryptoSuite.ECDSA_SECP256K1,
        "EcdsaSecp256k1VerificationKey2019": CryptoSuite.ECDSA_SECP256K1,
    },
    signature_types={
        "Ed25519Signature2018": (CryptoSuite.ED25519, SignatureScheme.EDDSA),
        "Ed25519Signature2020": (CryptoSuite.ED25519, SignatureScheme.EDDSA),
        "RsaSignature2018": (CryptoSuite.RSA, SignatureScheme.RSA_PKCS1V15_SHA256),
        "RsaSsaPssSignature2018": (CryptoSuite.RSA, SignatureScheme.RSA_PSS_SHA256),
        "EcdsaSignatureSecp256k1": (CryptoSuite.ECDSA_SECP256K1, SignatureScheme.ECDSA_SHA256),
        "EcdsaSecp256k1Signature2019": (CryptoSuite.ECDSA_SECP256K1, SignatureScheme.ECDSA_SHA256),
    },
    verifiers={
        SignatureScheme.EDDSA: _verify_eddsa,
        SignatureScheme.RSA_PKCS1V15_SHA256: _verify_rsa_pkcs1v15,
        SignatureScheme.RSA_PSS_SHA256: _verify_rsa_pss,
        SignatureScheme.ECDSA_SHA256: _verify_ecdsa,
    },
)
