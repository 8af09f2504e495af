"""
Ledger addresses.

An Address is a lowercase ``0x`` string followed by 40 hex characters. The
host supplies authenticated caller identities; this module only validates
and normalizes them, and derives addresses from Ed25519 public keys for
hosts (and tests) that key identities that way.

Copyright (c) 2026 Momentum. All rights reserved.
"""

from __future__ import annotations

import hashlib
import re
from typing import Any, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from orden.errors import InvalidArgument

Address = str

ADDRESS_PATTERN = re.compile(r'^0x[a-f0-9]{40}$')
ZERO_ADDRESS: Address = "0x" + "0" * 40


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value.strip().lower()))


def normalize_address(value: Any, field: str = "address") -> Address:
    """Validate an address and return its canonical lowercase form."""
    if not isinstance(value, str):
        raise InvalidArgument(field, f"expected address string, got {type(value).__name__}", value)
    lower = value.strip().lower()
    if not ADDRESS_PATTERN.match(lower):
        raise InvalidArgument(field, "must be 0x followed by 40 hex characters", value)
    return lower


def is_zero_address(address: Address) -> bool:
    return address == ZERO_ADDRESS


def address_from_public_key(public_key: Union[Ed25519PublicKey, bytes]) -> Address:
    """Derive an address from an Ed25519 public key.

    The address is the last 20 bytes of SHA-256 over the raw 32-byte key.
    """
    if isinstance(public_key, Ed25519PublicKey):
        raw = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    else:
        raw = bytes(public_key)
    if len(raw) != 32:
        raise InvalidArgument("public_key", f"expected 32 raw bytes, got {len(raw)}")
    return "0x" + hashlib.sha256(raw).digest()[-20:].hex()


def generate_address() -> Address:
    """Create a fresh key-derived address (the private key is discarded)."""
    return address_from_public_key(Ed25519PrivateKey.generate().public_key())
