"""
DID Envelope configuration constants.

Constants are organized into:
- NORMATIVE: Fixed by the identifier and document wire formats
- CONFIGURABLE: Defaults that a deployment may override via environment
- OPERATIONAL: Resource limits (env vars)

Modules read these through the module object (``config.NAME``) at call
time, so tests may monkeypatch individual values.
"""

import os

# =============================================================================
# NORMATIVE CONSTANTS (fixed by the wire format)
# =============================================================================

# URI scheme every ledger DID must use
DID_SCHEME: str = "did"

# DID method name for ledger-scoped identifiers: did:corda:<network>:<uuid>
DID_METHOD: str = "corda"

# Network token: lowercase letter groups, optionally hyphen-joined
NETWORK_PATTERN: str = r"[a-z]+(?:-[a-z]+)*"

# Canonical 8-4-4-4-12 lowercase UUID
UUID_PATTERN: str = (
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
)

# JSON-LD contexts accepted in a document's @context member
DID_CONTEXTS: frozenset[str] = frozenset({
    "https://w3id.org/did/v1",
    "https://www.w3.org/ns/did/v1",
})

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

# Reject documents without a recognized @context.
# True (default): MISSING_CONTEXT / INVALID_CONTEXT on parse
# False: @context is not inspected
REQUIRE_DID_CONTEXT: bool = os.getenv(
    "DID_ENVELOPE_REQUIRE_CONTEXT", "true"
).lower() == "true"

# Smallest RSA modulus accepted for RsaVerificationKey2018 keys
RSA_MIN_KEY_SIZE_BITS: int = int(os.getenv("DID_ENVELOPE_RSA_MIN_KEY_BITS", "2048"))

# =============================================================================
# OPERATIONAL SETTINGS
# =============================================================================

# Upper bounds on the raw buffers handed to the parsers
MAX_DOCUMENT_SIZE_BYTES: int = int(
    os.getenv("DID_ENVELOPE_MAX_DOCUMENT_BYTES", "1048576")  # 1 MB
)
MAX_INSTRUCTION_SIZE_BYTES: int = int(
    os.getenv("DID_ENVELOPE_MAX_INSTRUCTION_BYTES", "262144")  # 256 KB
)
