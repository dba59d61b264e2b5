"""
Test fixtures package for anchor_core tests.

This package provides factory functions for creating test objects.

Usage:
    from fixtures import make_tree, make_compound_inclusion

    def test_something():
        tree = make_tree(17)
        proof, anchor = make_compound_inclusion([b"data"])
"""

from .common import (
    BLOCKHASH,
    TrustedAnchor,
    blob_addresses,
    flip_bit,
    make_address,
    make_above,
    make_bank_hash_proof,
    make_below,
    make_between,
    make_blob,
    make_compound_completeness,
    make_compound_inclusion,
    make_history,
    make_leaf,
    make_sorted_leaves,
    make_tree,
)

__all__ = [
    "BLOCKHASH",
    "TrustedAnchor",
    "blob_addresses",
    "flip_bit",
    "make_address",
    "make_above",
    "make_bank_hash_proof",
    "make_below",
    "make_between",
    "make_blob",
    "make_compound_completeness",
    "make_compound_inclusion",
    "make_history",
    "make_leaf",
    "make_sorted_leaves",
    "make_tree",
]
