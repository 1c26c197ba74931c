"""Key, document and instruction builders shared by the envelope tests."""

import json
from dataclasses import dataclass
from typing import Callable, Optional

import pysodium
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from did_envelope.envelope.encoding import (
    KeyEncoding,
    MultibaseBase,
    SignatureEncoding,
    encode_key_field,
    encode_signature_value,
)

DID = "did:corda:tcn:a609bcc0-a3a8-11e9-b949-fb002eb572a5"
OTHER_DID = "did:corda:tcn:00000000-0000-4000-8000-000000000001"
DID_CONTEXT = "https://w3id.org/did/v1"

_SPKI = dict(
    encoding=serialization.Encoding.DER,
    format=serialization.PublicFormat.SubjectPublicKeyInfo,
)


@dataclass
class SigningKey:
    """A key pair plus the document/instruction types it is declared with."""
    key_type: str
    signature_type: str
    public_der: bytes
    sign: Callable[[bytes], bytes]
    raw_public: Optional[bytes] = None

    def entry(
        self,
        key_id: str,
        encoding: KeyEncoding = KeyEncoding.BASE58,
        base: Optional[MultibaseBase] = None,
        material: Optional[bytes] = None,
    ) -> dict:
        """Public key entry for a document."""
        value = encode_key_field(
            encoding,
            self.public_der if material is None else material,
            base,
        ).value
        return {
            "id": key_id,
            "type": self.key_type,
            "controller": key_id.split("#")[0],
            encoding.value: value,
        }

    def signature(
        self,
        key_id: str,
        message: bytes,
        encoding: SignatureEncoding = SignatureEncoding.BASE58,
        signature_type: Optional[str] = None,
    ) -> dict:
        """Signature entry for an instruction."""
        return {
            "id": key_id,
            "type": signature_type or self.signature_type,
            encoding.value: encode_signature_value(encoding, self.sign(message)),
        }


def ed25519_key() -> SigningKey:
    pk, sk = pysodium.crypto_sign_keypair()
    spki = ed25519.Ed25519PublicKey.from_public_bytes(pk).public_bytes(**_SPKI)
    return SigningKey(
        key_type="Ed25519VerificationKey2018",
        signature_type="Ed25519Signature2018",
        public_der=spki,
        sign=lambda message: pysodium.crypto_sign_detached(message, sk),
        raw_public=pk,
    )


def rsa_key(private_key: rsa.RSAPrivateKey, pss: bool = False) -> SigningKey:
    if pss:
        pad = padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH)
        signature_type = "RsaSsaPssSignature2018"
    else:
        pad = padding.PKCS1v15()
        signature_type = "RsaSignature2018"
    return SigningKey(
        key_type="RsaVerificationKey2018",
        signature_type=signature_type,
        public_der=private_key.public_key().public_bytes(**_SPKI),
        sign=lambda message: private_key.sign(message, pad, hashes.SHA256()),
    )


def secp256k1_key(raw_signatures: bool = False) -> SigningKey:
    private_key = ec.generate_private_key(ec.SECP256K1())

    def sign(message: bytes) -> bytes:
        der = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
        if not raw_signatures:
            return der
        r, s = decode_dss_signature(der)
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    return SigningKey(
        key_type="EcdsaVerificationKeySecp256k1",
        signature_type="EcdsaSignatureSecp256k1",
        public_der=private_key.public_key().public_bytes(**_SPKI),
        sign=sign,
        raw_public=private_key.public_key().public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.CompressedPoint,
        ),
    )


def make_document(
    keys: list,
    did: Optional[str] = DID,
    context=DID_CONTEXT,
    **members,
) -> bytes:
    """Serialize a DID document; ``None`` omits id / @context."""
    doc = {}
    if context is not None:
        doc["@context"] = context
    if did is not None:
        doc["id"] = did
    doc.update(members)
    doc["publicKey"] = keys
    return json.dumps(doc, indent=2).encode("utf-8")


def make_instruction(action: str, signatures: list) -> bytes:
    return json.dumps({"action": action, "signatures": signatures}).encode("utf-8")
