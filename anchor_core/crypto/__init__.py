"""
Core cryptographic utilities.

Hash primitives used by every proof stage.
"""
from .hashing import (
    HASH_BYTES,
    SUPPORTED_HASH_ALGORITHMS,
    sha256,
    hash_bytes,
    hashv,
    hash_canonical,
    to_hex,
    from_hex,
    is_hash,
)

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
