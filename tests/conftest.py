"""Pytest fixtures for DID envelope tests."""

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from .helpers import SigningKey, ed25519_key, rsa_key, secp256k1_key


@pytest.fixture
def ed_key() -> SigningKey:
    """Fresh Ed25519 key pair (pysodium)."""
    return ed25519_key()


@pytest.fixture
def other_ed_key() -> SigningKey:
    """Second, unrelated Ed25519 key pair."""
    return ed25519_key()


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    # RSA generation is slow; share one 2048-bit key across the session
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def rsa_pkcs1_key(rsa_private_key) -> SigningKey:
    return rsa_key(rsa_private_key)


@pytest.fixture
def rsa_pss_key(rsa_private_key) -> SigningKey:
    return rsa_key(rsa_private_key, pss=True)


@pytest.fixture
def ecdsa_key() -> SigningKey:
    return secp256k1_key()
