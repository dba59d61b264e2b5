"""
Hashing Utilities
Hash primitives shared by the blob accumulator, the account tree and the
bank hash.

This module provides:
- 32-byte digests over raw bytes for each supported algorithm
- Multi-part hashing (digest of the concatenation of several buffers)
- Canonical hashing for objects (via canonical_bytes)
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as given; no length prefixes are added
- Every supported algorithm yields a 32-byte digest
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
from typing import Any, Iterable

from anchor_core.schemas.canonical import canonical_bytes

HASH_BYTES = 32

SUPPORTED_HASH_ALGORITHMS: frozenset[str] = frozenset({"sha256", "sha3_256", "blake2s"})


def _new_hasher(algorithm: str):
    if algorithm not in SUPPORTED_HASH_ALGORITHMS:
        raise ValueError(
            f"Unsupported hash algorithm: {algorithm!r}. "
            f"Supported: {sorted(SUPPORTED_HASH_ALGORITHMS)}"
        )
    return hashlib.new(algorithm)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_bytes(data: bytes, algorithm: str = "sha256") -> bytes:
    """
    Compute the 32-byte digest of raw bytes.

    Args:
        data: Raw bytes to hash
        algorithm: One of SUPPORTED_HASH_ALGORITHMS

    Returns:
        32-byte digest

    Raises:
        ValueError: If the algorithm is not supported
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.digest()


def hashv(parts: Iterable[bytes], algorithm: str = "sha256") -> bytes:
    """
    Hash the concatenation of several byte buffers.

    Equivalent to hash_bytes(b"".join(parts)) without building the joined
    buffer. Used for Merkle parents (the ordered children of a group) and for
    the bank hash preimage.

    Args:
        parts: Byte buffers, hashed in order
        algorithm: One of SUPPORTED_HASH_ALGORITHMS

    Returns:
        32-byte digest
    """
    hasher = _new_hasher(algorithm)
    for part in parts:
        hasher.update(part)
    return hasher.digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: sha256(canonical_bytes(obj))

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    return sha256(canonical_bytes(obj))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def is_hash(value: Any) -> bool:
    """True if value is a 32-byte bytes object."""
    return isinstance(value, bytes) and len(value) == HASH_BYTES


__all__ = [
    "HASH_BYTES",
    "SUPPORTED_HASH_ALGORITHMS",
    "sha256",
    "hash_bytes",
    "hashv",
    "hash_canonical",
    "to_hex",
    "from_hex",
    "is_hash",
]
