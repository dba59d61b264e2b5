"""
Account Merkle Tree

Deterministic k-ary Merkle tree over the sorted leaf hashes of one slot's
account updates. Its root is the accounts-delta hash that feeds the bank hash.

Commitment Rules:
1. Leaves are 32-byte hashes in strictly ascending byte order
2. Parent = H(tag ++ child_0 ++ ... ++ child_{k-1}) for each group of `fanout`
   nodes; tag is 0x00 for groups of leaves and 0x01 above them
3. Under-full groups are padded with `empty_child` unless the config disables
   padding (chain-compatible mode)
4. Empty tree: root = H(b"")
5. Single leaf: root = H(0x00 ++ leaf ++ padding); there is always at least
   one hashing level above the leaves
6. In padded mode no leaf may equal the padding sentinel

The tree is immutable once built and safe to share across threads.
"""
from __future__ import annotations

import logging
from bisect import bisect_left
from typing import Iterable, Sequence, Union

from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, is_hash, to_hex
from anchor_core.merkle.exclusion import (
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionProof,
    ExclusionRightProof,
)
from anchor_core.merkle.inclusion import InclusionProof, build_path
from anchor_core.merkle.nodes import hash_group
from anchor_core.schemas.errors import StructuralException

logger = logging.getLogger(__name__)


def _validate_leaves(leaves: Sequence[bytes], config: ProofConfig) -> None:
    for i, leaf in enumerate(leaves):
        if not is_hash(leaf):
            raise StructuralException(
                f"Leaf {i} is not a {HASH_BYTES}-byte hash",
                details={"index": i},
            )
        if config.pad_partial_groups and leaf == config.empty_child:
            raise StructuralException(
                f"Leaf {i} equals the padding sentinel",
                details={"index": i},
            )
        if i == 0:
            continue
        previous = leaves[i - 1]
        if leaf == previous:
            raise StructuralException(
                f"Duplicate leaf at index {i}",
                details={"index": i, "leaf": to_hex(leaf)},
            )
        if leaf < previous:
            raise StructuralException(
                f"Leaves are not sorted: index {i} sorts before index {i - 1}",
                details={"index": i},
            )


class AccountMerkleTree:
    """
    Sorted account tree with inclusion and exclusion proving.

    Example:
        >>> tree = build_tree(sorted(leaves))
        >>> tree.prove_inclusion(leaves[0]).verify(tree.root).ok
        True
    """

    def __init__(self, leaves: Sequence[bytes], config: ProofConfig | None = None) -> None:
        self.config = resolve_config(config)
        leaves = tuple(leaves)
        _validate_leaves(leaves, self.config)

        levels: list[tuple[bytes, ...]] = [leaves]
        if leaves:
            fanout = self.config.fanout
            current = leaves
            while True:
                height = len(levels) - 1
                current = tuple(
                    hash_group(current[i:i + fanout], self.config, height)
                    for i in range(0, len(current), fanout)
                )
                levels.append(current)
                if len(current) == 1:
                    break
        self._levels: tuple[tuple[bytes, ...], ...] = tuple(levels)

        logger.debug(f"Built account tree: {len(leaves)} leaves, depth {self.depth}")

    @classmethod
    def from_account_hashes(
        cls,
        hashes: Iterable[bytes],
        config: ProofConfig | None = None,
    ) -> "AccountMerkleTree":
        """Build from unsorted leaf hashes. Duplicates are still rejected."""
        return cls(sorted(hashes), config=config)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self._levels[0]

    @property
    def levels(self) -> tuple[tuple[bytes, ...], ...]:
        """All stored layers, leaves first and root last."""
        return self._levels

    @property
    def depth(self) -> int:
        """Number of hashing levels above the leaves (0 for an empty tree)."""
        return len(self._levels) - 1

    @property
    def root(self) -> bytes:
        if not self.leaves:
            return self.config.empty_root
        return self._levels[-1][0]

    def __len__(self) -> int:
        return len(self.leaves)

    def __contains__(self, leaf: object) -> bool:
        if not isinstance(leaf, bytes):
            return False
        position = bisect_left(self.leaves, leaf)
        return position < len(self.leaves) and self.leaves[position] == leaf

    def index_of(self, leaf: bytes) -> int:
        """Position of leaf among the sorted leaves. Raises ValueError if absent."""
        position = bisect_left(self.leaves, leaf)
        if position < len(self.leaves) and self.leaves[position] == leaf:
            return position
        raise ValueError(f"Leaf {to_hex(leaf)} is not in the tree")

    def _path(self, index: int) -> InclusionProof:
        return InclusionProof(
            leaf=self.leaves[index],
            levels=tuple(build_path(self._levels, index, self.config.fanout)),
        )

    def prove_inclusion(self, leaf: bytes) -> InclusionProof:
        """
        Build the inclusion path for a leaf.

        Raises:
            ValueError: If leaf is not in the tree.
        """
        return self._path(self.index_of(leaf))

    def prove_exclusion(self, candidate: bytes) -> ExclusionProof:
        """
        Build the exclusion proof for a hash that is not a leaf.

        Raises:
            ValueError: If candidate is malformed or present in the tree.
        """
        if not is_hash(candidate):
            raise ValueError(f"Candidate must be {HASH_BYTES} bytes, got {len(candidate)}")
        if not self.leaves:
            return ExclusionEmptyProof()

        position = bisect_left(self.leaves, candidate)
        if position < len(self.leaves) and self.leaves[position] == candidate:
            raise ValueError(f"Candidate {to_hex(candidate)} is present in the tree")
        if position == 0:
            return ExclusionLeftProof(path=self._path(0))
        if position == len(self.leaves):
            return ExclusionRightProof(path=self._path(len(self.leaves) - 1))
        return ExclusionInnerProof(
            left=self._path(position - 1),
            right=self._path(position),
        )

    def prove(self, candidate: bytes) -> Union[InclusionProof, ExclusionProof]:
        """Inclusion proof if candidate is a leaf, otherwise an exclusion proof."""
        if candidate in self:
            return self.prove_inclusion(candidate)
        return self.prove_exclusion(candidate)


def build_tree(leaves: Sequence[bytes], config: ProofConfig | None = None) -> AccountMerkleTree:
    """
    Build an account tree from strictly ascending 32-byte leaves.

    Raises:
        StructuralException: If a leaf is malformed, duplicated or out of order.
    """
    return AccountMerkleTree(leaves, config=config)
