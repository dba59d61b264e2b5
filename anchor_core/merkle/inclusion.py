"""
Account Tree Inclusion Proofs

An inclusion proof is the leaf plus one level per tree layer, leaf to root.
Each level lists the node's real siblings in group order and the node's
position among them; the verifier re-inserts the running hash at that
position, re-pads the group and hashes upward. The first level is hashed
with the leaf group tag and every later level with the node group tag, so a
path only reaches the root from a genuine leaf at the tree's real depth.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, is_hash, to_hex
from anchor_core.merkle.nodes import hash_group
from anchor_core.schemas.errors import ErrorCodes, Stages
from anchor_core.schemas.verification import CheckResult, VerificationResult

CHECK_ACCOUNT_INCLUSION = "account_inclusion"


@dataclass(frozen=True)
class InclusionProofLevel:
    """
    One layer of an inclusion path.

    Attributes:
        siblings: The other members of the node's group, in order
        index: Position of the node within its group
    """
    siblings: tuple[bytes, ...]
    index: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "siblings", tuple(self.siblings))
        if self.index < 0:
            raise ValueError(f"Level index must be non-negative, got {self.index}")

    def children(self, node: bytes) -> list[bytes]:
        """The full ordered group with node placed at its index."""
        return [*self.siblings[:self.index], node, *self.siblings[self.index:]]

    def parent(self, node: bytes, config: ProofConfig, height: int) -> bytes:
        """Hash of this level's group with node at its index."""
        return hash_group(self.children(node), config, height)


@dataclass(frozen=True)
class InclusionProof:
    """A leaf and its path to the account tree root."""
    leaf: bytes
    levels: tuple[InclusionProofLevel, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "levels", tuple(self.levels))

    @property
    def depth(self) -> int:
        return len(self.levels)

    def shape_error(self, config: ProofConfig | None = None) -> str | None:
        """Describe the first structural defect of the path, or None if well formed."""
        config = resolve_config(config)
        if not is_hash(self.leaf):
            return f"Leaf must be a {HASH_BYTES}-byte hash"
        if config.pad_partial_groups and self.leaf == config.empty_child:
            return "Leaf is the padding sentinel, not an account"
        if not self.levels:
            return "Inclusion path has no levels"
        for height, level in enumerate(self.levels):
            if len(level.siblings) > config.fanout - 1:
                return (
                    f"Level {height} has {len(level.siblings)} siblings, "
                    f"at most {config.fanout - 1} allowed"
                )
            if level.index > len(level.siblings):
                return (
                    f"Level {height} index {level.index} exceeds its "
                    f"{len(level.siblings)} siblings"
                )
            if not all(is_hash(sibling) for sibling in level.siblings):
                return f"Level {height} has a sibling that is not {HASH_BYTES} bytes"
        return None

    def compute_root(self, config: ProofConfig | None = None) -> bytes:
        """
        Recompute the root this path commits to.

        The path must be well formed (see shape_error).
        """
        config = resolve_config(config)
        node = self.leaf
        for height, level in enumerate(self.levels):
            node = level.parent(node, config, height)
        return node

    def verify(self, expected_root: bytes, config: ProofConfig | None = None) -> VerificationResult:
        return verify_inclusion(self, expected_root, config=config)


def verify_inclusion(
    proof: InclusionProof,
    expected_root: bytes,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify that proof.leaf is a leaf of the tree with expected_root.

    Fails at stage account_membership with INVALID_PROOF_SHAPE for a
    malformed path, or HASH_MISMATCH when the recomputed root differs.
    """
    config = resolve_config(config)

    shape_error = proof.shape_error(config)
    if shape_error is not None:
        return VerificationResult.failure(
            stage=Stages.ACCOUNT_MEMBERSHIP,
            code=ErrorCodes.INVALID_PROOF_SHAPE,
            message=shape_error,
            check_id=CHECK_ACCOUNT_INCLUSION,
        )

    root = proof.compute_root(config)
    if root != expected_root:
        return VerificationResult.failure(
            stage=Stages.ACCOUNT_MEMBERSHIP,
            code=ErrorCodes.HASH_MISMATCH,
            message="Recomputed account root does not match the expected root",
            details={"expected": to_hex(expected_root), "actual": to_hex(root)},
            check_id=CHECK_ACCOUNT_INCLUSION,
        )

    return VerificationResult.success([
        CheckResult.passed(
            CHECK_ACCOUNT_INCLUSION,
            stage=Stages.ACCOUNT_MEMBERSHIP,
            message="Leaf is included under the expected root",
            details={"leaf": to_hex(proof.leaf), "depth": proof.depth},
        )
    ])


def build_path(levels: Sequence[Sequence[bytes]], index: int, fanout: int) -> list[InclusionProofLevel]:
    """
    Collect the inclusion path for the node at index from stored tree levels.

    levels[0] are the leaves and levels[-1] holds only the root.
    """
    path: list[InclusionProofLevel] = []
    for nodes in levels[:-1]:
        start = (index // fanout) * fanout
        group = nodes[start:start + fanout]
        position = index - start
        path.append(InclusionProofLevel(
            siblings=tuple(group[:position]) + tuple(group[position + 1:]),
            index=position,
        ))
        index //= fanout
    return path
