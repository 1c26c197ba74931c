"""Ledger DID envelope parsing and signature verification."""

__version__ = "0.1.0"
