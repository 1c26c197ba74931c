"""
Unit tests for DID document parsing.

Covers:
- Valid documents in every key encoding and suite
- Raw byte preservation
- Check order: size, JSON, @context, id, timestamps, publicKey entries
- Wrapped encoding errors (INVALID_KEY_ENCODING reason chain)
- Key material validation per suite
"""

import json
from datetime import datetime, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from did_envelope.core import config
from did_envelope.envelope.api_models import ErrorCode
from did_envelope.envelope.document import parse_document
from did_envelope.envelope.encoding import KeyEncoding, MultibaseBase
from did_envelope.envelope.exceptions import DocumentError
from did_envelope.envelope.suites import CryptoSuite

from .helpers import DID, make_document

KEY_1 = f"{DID}#keys-1"
KEY_2 = f"{DID}#keys-2"


def parse_error(raw) -> DocumentError:
    with pytest.raises(DocumentError) as exc:
        parse_document(raw)
    return exc.value


# =============================================================================
# Valid documents
# =============================================================================

class TestValidDocument:

    def test_single_ed25519_key(self, ed_key):
        raw = make_document([ed_key.entry(KEY_1)])
        document = parse_document(raw)

        assert str(document.document_id) == DID
        assert list(document.keys) == [KEY_1]
        key = document.keys[KEY_1]
        assert key.suite is CryptoSuite.ED25519
        assert key.key_type == "Ed25519VerificationKey2018"
        assert key.controller == DID
        assert key.encoding is KeyEncoding.BASE58
        assert key.raw_bytes == ed_key.public_der

    def test_raw_bytes_preserved_exactly(self, ed_key):
        # Unusual whitespace and member order must survive untouched
        entry = json.dumps(ed_key.entry(KEY_1))
        raw = (
            '{ "publicKey" : [ ' + entry + ' ],\n\t"id":"' + DID + '",'
            '  "@context":"https://w3id.org/did/v1"   }\n'
        ).encode("utf-8")
        assert parse_document(raw).raw_bytes == raw

    def test_str_input_is_utf8(self, ed_key):
        raw = make_document([ed_key.entry(KEY_1)])
        assert parse_document(raw.decode("utf-8")).raw_bytes == raw

    @pytest.mark.parametrize("encoding,base", [
        (KeyEncoding.BASE58, None),
        (KeyEncoding.BASE64, None),
        (KeyEncoding.HEX, None),
        (KeyEncoding.MULTIBASE, None),
        (KeyEncoding.MULTIBASE, MultibaseBase.BASE32_PAD_UPPER),
        (KeyEncoding.PEM, None),
        (KeyEncoding.JWK, None),
    ])
    def test_every_encoding(self, ed_key, encoding, base):
        document = parse_document(make_document([ed_key.entry(KEY_1, encoding, base)]))
        key = document.keys[KEY_1]
        assert key.encoding is encoding
        assert key.raw_bytes == ed_key.public_der
        if encoding is KeyEncoding.MULTIBASE:
            assert key.multibase_base is (base or MultibaseBase.BASE58_BTC)
        else:
            assert key.multibase_base is None

    def test_upper_case_hex(self, ed_key):
        entry = {"id": KEY_1, "type": ed_key.key_type, "publicKeyHex": ed_key.public_der.hex().upper()}
        assert parse_document(make_document([entry])).keys[KEY_1].raw_bytes == ed_key.public_der

    def test_bare_ed25519_key(self, ed_key):
        document = parse_document(make_document([ed_key.entry(KEY_1, material=ed_key.raw_public)]))
        assert document.keys[KEY_1].raw_bytes == ed_key.raw_public

    def test_all_suites_in_one_document(self, ed_key, rsa_pkcs1_key, ecdsa_key):
        raw = make_document([
            ed_key.entry(KEY_1),
            rsa_pkcs1_key.entry(KEY_2, KeyEncoding.PEM),
            ecdsa_key.entry(f"{DID}#keys-3", KeyEncoding.HEX),
        ])
        document = parse_document(raw)
        assert [k.suite for k in document.keys.values()] == [
            CryptoSuite.ED25519, CryptoSuite.RSA, CryptoSuite.ECDSA_SECP256K1,
        ]

    def test_rsa_pkcs1_der(self, rsa_pkcs1_key, rsa_private_key):
        pkcs1 = rsa_private_key.public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1,
        )
        document = parse_document(make_document([rsa_pkcs1_key.entry(KEY_1, material=pkcs1)]))
        assert document.keys[KEY_1].suite is CryptoSuite.RSA

    def test_secp256k1_compressed_point(self, ecdsa_key):
        document = parse_document(make_document([ecdsa_key.entry(KEY_1, material=ecdsa_key.raw_public)]))
        assert document.keys[KEY_1].raw_bytes == ecdsa_key.raw_public

    def test_2019_secp256k1_key_type(self, ecdsa_key):
        entry = ecdsa_key.entry(KEY_1)
        entry["type"] = "EcdsaSecp256k1VerificationKey2019"
        assert parse_document(make_document([entry])).keys[KEY_1].suite is CryptoSuite.ECDSA_SECP256K1

    def test_keys_in_document_order(self, ed_key, other_ed_key):
        raw = make_document([other_ed_key.entry(KEY_2), ed_key.entry(KEY_1)])
        assert list(parse_document(raw).keys) == [KEY_2, KEY_1]

    def test_keys_are_read_only(self, ed_key):
        document = parse_document(make_document([ed_key.entry(KEY_1)]))
        with pytest.raises(TypeError):
            document.keys["x"] = None

    def test_absent_id(self, ed_key):
        assert parse_document(make_document([ed_key.entry(KEY_1)], did=None)).document_id is None

    def test_timestamps(self, ed_key):
        raw = make_document(
            [ed_key.entry(KEY_1)],
            created="2019-07-11T10:27:27.326Z",
            updated="2019-07-12T00:00:00+02:00",
        )
        document = parse_document(raw)
        assert document.created == datetime(2019, 7, 11, 10, 27, 27, 326000, tzinfo=timezone.utc)
        assert document.updated == datetime(2019, 7, 11, 22, 0, tzinfo=timezone.utc)

    def test_context_list(self, ed_key):
        raw = make_document(
            [ed_key.entry(KEY_1)],
            context=["https://example.com/extra", "https://www.w3.org/ns/did/v1"],
        )
        assert parse_document(raw).context[1] == "https://www.w3.org/ns/did/v1"


# =============================================================================
# Size and JSON shape
# =============================================================================

class TestInputShape:

    def test_too_large(self, ed_key, monkeypatch):
        """Above MAX_DOCUMENT_SIZE_BYTES → INPUT_TOO_LARGE."""
        monkeypatch.setattr(config, "MAX_DOCUMENT_SIZE_BYTES", 64)
        assert parse_error(make_document([ed_key.entry(KEY_1)])).code == ErrorCode.INPUT_TOO_LARGE

    @pytest.mark.parametrize("raw", [
        b"",
        b"{",
        b"not json",
        b"[]",
        b'"string"',
        b"\xff\xfe{}",
        b'{"id": 1, "id": 2}',
        b'{"publicKey": [{"id": "a", "id": "b"}]}',
    ])
    def test_invalid_json(self, raw):
        """Malformed, non-object, or repeated member → INVALID_JSON."""
        assert parse_error(raw).code == ErrorCode.INVALID_JSON


# =============================================================================
# @context, id, timestamps
# =============================================================================

class TestContext:

    def test_missing(self, ed_key):
        """No @context → MISSING_CONTEXT."""
        assert parse_error(make_document([ed_key.entry(KEY_1)], context=None)).code == ErrorCode.MISSING_CONTEXT

    @pytest.mark.parametrize("context", ["https://example.com", [], ["https://example.com"], {"@vocab": "x"}, 1])
    def test_invalid(self, ed_key, context):
        """@context naming no DID context → INVALID_CONTEXT."""
        assert parse_error(make_document([ed_key.entry(KEY_1)], context=context)).code == ErrorCode.INVALID_CONTEXT

    def test_not_required_when_disabled(self, ed_key, monkeypatch):
        monkeypatch.setattr(config, "REQUIRE_DID_CONTEXT", False)
        document = parse_document(make_document([ed_key.entry(KEY_1)], context=None))
        assert document.context is None


class TestDocumentId:

    def test_invalid(self, ed_key):
        """id that is not a ledger DID → INVALID_DOCUMENT_ID wrapping the identifier error."""
        error = parse_error(make_document([ed_key.entry(KEY_1)], did="did:web:example.com"))
        assert error.code == ErrorCode.INVALID_DOCUMENT_ID
        assert error.reason.code == ErrorCode.MALFORMED_DID
        assert error.__cause__ is error.reason

    def test_null(self, ed_key):
        """id: null → INVALID_DOCUMENT_ID."""
        raw = json.dumps({
            "@context": "https://w3id.org/did/v1",
            "id": None,
            "publicKey": [ed_key.entry(KEY_1)],
        }).encode()
        assert parse_error(raw).code == ErrorCode.INVALID_DOCUMENT_ID


class TestTimestamps:

    @pytest.mark.parametrize("field", ["created", "updated"])
    @pytest.mark.parametrize("value", ["yesterday", "2019-13-01T00:00:00Z", "2019-07-11T10:27:27", 1562840847])
    def test_invalid(self, ed_key, field, value):
        """Unparseable or offset-less timestamp → INVALID_TIMESTAMP."""
        error = parse_error(make_document([ed_key.entry(KEY_1)], **{field: value}))
        assert error.code == ErrorCode.INVALID_TIMESTAMP
        assert field in error.message


# =============================================================================
# publicKey list and entries
# =============================================================================

class TestPublicKeyList:

    @pytest.mark.parametrize("keys", [[], None, {}])
    def test_missing_or_empty(self, keys):
        """publicKey absent, null or empty → MISSING_PUBLIC_KEY."""
        assert parse_error(make_document(keys)).code == ErrorCode.MISSING_PUBLIC_KEY

    def test_absent(self):
        """No publicKey member → MISSING_PUBLIC_KEY."""
        raw = json.dumps({"@context": "https://w3id.org/did/v1", "id": DID}).encode()
        assert parse_error(raw).code == ErrorCode.MISSING_PUBLIC_KEY

    @pytest.mark.parametrize("keys", [{"id": KEY_1}, "keys-1", 7])
    def test_not_a_list(self, keys):
        """publicKey that is not a list → INVALID_PUBLIC_KEY_ENTRY."""
        assert parse_error(make_document(keys)).code == ErrorCode.INVALID_PUBLIC_KEY_ENTRY


class TestPublicKeyEntry:

    @pytest.mark.parametrize("mutate", [
        lambda e: "not an object",
        lambda e: {k: v for k, v in e.items() if k != "id"},
        lambda e: {**e, "id": ""},
        lambda e: {**e, "id": 5},
        lambda e: {**e, "id": DID},
        lambda e: {**e, "id": DID + "#"},
        lambda e: {k: v for k, v in e.items() if k != "type"},
        lambda e: {**e, "type": None},
    ], ids=["not-object", "no-id", "empty-id", "int-id", "no-fragment", "empty-fragment", "no-type", "null-type"])
    def test_invalid_entry(self, ed_key, mutate):
        """Entry without object shape, #fragment id or type → INVALID_PUBLIC_KEY_ENTRY."""
        raw = make_document([mutate(ed_key.entry(KEY_1))])
        error = parse_error(raw)
        assert error.code == ErrorCode.INVALID_PUBLIC_KEY_ENTRY
        assert "publicKey[0]" in error.message

    def test_duplicate_key_id(self, ed_key, other_ed_key):
        """Two entries with one id → DUPLICATE_KEY_ID."""
        raw = make_document([ed_key.entry(KEY_1), other_ed_key.entry(KEY_1)])
        error = parse_error(raw)
        assert error.code == ErrorCode.DUPLICATE_KEY_ID
        assert KEY_1 in error.message

    def test_duplicate_checked_before_decoding(self, ed_key):
        """Duplicate id with a broken encoding → still DUPLICATE_KEY_ID."""
        broken = {"id": KEY_1, "type": ed_key.key_type, "publicKeyHex": "zz"}
        raw = make_document([ed_key.entry(KEY_1), broken])
        assert parse_error(raw).code == ErrorCode.DUPLICATE_KEY_ID

    def test_unsupported_key_type(self, ed_key):
        """Unknown key type → UNSUPPORTED_KEY_TYPE."""
        entry = ed_key.entry(KEY_1)
        entry["type"] = "X25519KeyAgreementKey2019"
        assert parse_error(make_document([entry])).code == ErrorCode.UNSUPPORTED_KEY_TYPE


class TestInvalidKeyEncoding:

    def test_multiple_encodings(self, ed_key):
        """publicKeyBase58 and publicKeyHex → INVALID_KEY_ENCODING(MULTIPLE_ENCODINGS_PRESENT)."""
        entry = ed_key.entry(KEY_1)
        entry["publicKeyHex"] = ed_key.public_der.hex()
        error = parse_error(make_document([entry]))
        assert error.code == ErrorCode.INVALID_KEY_ENCODING
        assert error.reason.code == ErrorCode.MULTIPLE_ENCODINGS_PRESENT
        assert error.__cause__ is error.reason

    def test_misspelled_field(self, ed_key):
        """publicKeyJwT → INVALID_KEY_ENCODING(UNRECOGNIZED_FIELD_NAME)."""
        entry = ed_key.entry(KEY_1, KeyEncoding.JWK)
        entry["publicKeyJwT"] = entry.pop("publicKeyJwk")
        error = parse_error(make_document([entry]))
        assert error.code == ErrorCode.INVALID_KEY_ENCODING
        assert error.reason.code == ErrorCode.UNRECOGNIZED_FIELD_NAME

    def test_mismatching_encoding(self, ed_key):
        """JWK content in the PEM field → INVALID_KEY_ENCODING(DECODE_ERROR)."""
        entry = ed_key.entry(KEY_1, KeyEncoding.JWK)
        entry["publicKeyPem"] = entry.pop("publicKeyJwk")
        error = parse_error(make_document([entry]))
        assert error.code == ErrorCode.INVALID_KEY_ENCODING
        assert error.reason.code == ErrorCode.DECODE_ERROR

    def test_no_encoding(self, ed_key):
        """Entry without key material → INVALID_KEY_ENCODING(NO_ENCODING_PRESENT)."""
        entry = {"id": KEY_1, "type": ed_key.key_type}
        error = parse_error(make_document([entry]))
        assert error.code == ErrorCode.INVALID_KEY_ENCODING
        assert error.reason.code == ErrorCode.NO_ENCODING_PRESENT

    def test_second_entry_reported(self, ed_key, other_ed_key):
        entry = other_ed_key.entry(KEY_2)
        entry["publicKeyBase58"] = "0OIl"
        error = parse_error(make_document([ed_key.entry(KEY_1), entry]))
        assert error.code == ErrorCode.INVALID_KEY_ENCODING
        assert KEY_2 in error.message


class TestInvalidKeyMaterial:

    def test_ed25519_type_with_rsa_key(self, ed_key, rsa_pkcs1_key):
        """RSA key declared as Ed25519 → INVALID_KEY_MATERIAL."""
        entry = ed_key.entry(KEY_1, material=rsa_pkcs1_key.public_der)
        assert parse_error(make_document([entry])).code == ErrorCode.INVALID_KEY_MATERIAL

    def test_ed25519_wrong_length(self, ed_key):
        """31 raw bytes for Ed25519 → INVALID_KEY_MATERIAL."""
        entry = ed_key.entry(KEY_1, material=ed_key.raw_public[:31])
        assert parse_error(make_document([entry])).code == ErrorCode.INVALID_KEY_MATERIAL

    def test_rsa_below_minimum_size(self, rsa_pkcs1_key, monkeypatch):
        """Modulus below RSA_MIN_KEY_SIZE_BITS → INVALID_KEY_MATERIAL."""
        monkeypatch.setattr(config, "RSA_MIN_KEY_SIZE_BITS", 4096)
        error = parse_error(make_document([rsa_pkcs1_key.entry(KEY_1)]))
        assert error.code == ErrorCode.INVALID_KEY_MATERIAL
        assert "2048" in error.message

    def test_secp256k1_type_with_p256_key(self, ecdsa_key):
        """P-256 key declared as secp256k1 → INVALID_KEY_MATERIAL."""
        p256 = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        entry = ecdsa_key.entry(KEY_1, material=p256)
        assert parse_error(make_document([entry])).code == ErrorCode.INVALID_KEY_MATERIAL

    def test_secp256k1_bad_point(self, ecdsa_key):
        """SEC1 prefix with a truncated point → INVALID_KEY_MATERIAL."""
        entry = ecdsa_key.entry(KEY_1, material=b"\x04" + bytes(10))
        assert parse_error(make_document([entry])).code == ErrorCode.INVALID_KEY_MATERIAL
