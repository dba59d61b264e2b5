"""
Account tree utilities.

Provides:
- AccountMerkleTree / build_tree: sorted k-ary tree over account leaves
- InclusionProof / verify_inclusion: leaf membership
- Exclusion proofs / verify_exclusion: leaf absence
"""
from .nodes import LEAF_GROUP_TAG, NODE_GROUP_TAG, group_tag, hash_group, pad_group
from .inclusion import InclusionProof, InclusionProofLevel, verify_inclusion
from .exclusion import (
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionProof,
    ExclusionRightProof,
    verify_exclusion,
)
from .account_tree import AccountMerkleTree, build_tree

__all__ = [
    "LEAF_GROUP_TAG",
    "NODE_GROUP_TAG",
    "group_tag",
    "hash_group",
    "pad_group",
    "InclusionProof",
    "InclusionProofLevel",
    "verify_inclusion",
    "ExclusionEmptyProof",
    "ExclusionInnerProof",
    "ExclusionLeftProof",
    "ExclusionProof",
    "ExclusionRightProof",
    "verify_exclusion",
    "AccountMerkleTree",
    "build_tree",
]
