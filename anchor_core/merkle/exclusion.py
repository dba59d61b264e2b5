"""
Account Tree Exclusion Proofs

Proves a candidate hash is NOT a leaf of a sorted account tree. Because the
leaves are strictly ascending, absence is shown by one of:

- Empty: the tree has no leaves at all
- Left: the leftmost leaf is greater than the candidate
- Right: the rightmost leaf is less than the candidate
- Inner: two leaves that are adjacent in the tree bracket the candidate

Adjacency for Inner is checked structurally on the two paths. Walking from
the leaves upward, the left node must be the last child and the right node
the first child of neighbouring groups until the level where the two paths
meet in one group at consecutive positions. Above that level both paths
must be identical.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, is_hash, to_hex
from anchor_core.merkle.inclusion import InclusionProof
from anchor_core.schemas.errors import ErrorCodes, Stages
from anchor_core.schemas.verification import CheckResult, VerificationResult

CHECK_ACCOUNT_EXCLUSION = "account_exclusion"

# Inner adjacency walk states
BELOW_MERGE = "below_merge"
MERGED = "merged"


@dataclass(frozen=True)
class ExclusionEmptyProof:
    """The tree has no leaves."""
    kind: ClassVar[str] = "empty"

    def verify(
        self,
        candidate: bytes,
        expected_root: bytes,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_exclusion(self, candidate, expected_root, config=config)


@dataclass(frozen=True)
class ExclusionLeftProof:
    """Path of the leftmost leaf, which sorts after the candidate."""
    kind: ClassVar[str] = "left"
    path: InclusionProof

    def verify(
        self,
        candidate: bytes,
        expected_root: bytes,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_exclusion(self, candidate, expected_root, config=config)


@dataclass(frozen=True)
class ExclusionRightProof:
    """Path of the rightmost leaf, which sorts before the candidate."""
    kind: ClassVar[str] = "right"
    path: InclusionProof

    def verify(
        self,
        candidate: bytes,
        expected_root: bytes,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_exclusion(self, candidate, expected_root, config=config)


@dataclass(frozen=True)
class ExclusionInnerProof:
    """Paths of two adjacent leaves that bracket the candidate."""
    kind: ClassVar[str] = "inner"
    left: InclusionProof
    right: InclusionProof

    def verify(
        self,
        candidate: bytes,
        expected_root: bytes,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_exclusion(self, candidate, expected_root, config=config)


ExclusionProof = Union[ExclusionEmptyProof, ExclusionLeftProof, ExclusionRightProof, ExclusionInnerProof]


def _fail(code: str, message: str, details: dict | None = None) -> VerificationResult:
    return VerificationResult.failure(
        stage=Stages.ACCOUNT_MEMBERSHIP,
        code=code,
        message=message,
        details=details,
        check_id=CHECK_ACCOUNT_EXCLUSION,
    )


def _check_root(path: InclusionProof, expected_root: bytes, config: ProofConfig) -> VerificationResult | None:
    root = path.compute_root(config)
    if root != expected_root:
        return _fail(
            ErrorCodes.HASH_MISMATCH,
            "Recomputed account root does not match the expected root",
            {"expected": to_hex(expected_root), "actual": to_hex(root), "leaf": to_hex(path.leaf)},
        )
    return None


def _check_shape(path: InclusionProof, config: ProofConfig, side: str) -> VerificationResult | None:
    shape_error = path.shape_error(config)
    if shape_error is not None:
        return _fail(ErrorCodes.INVALID_PROOF_SHAPE, f"{side} path: {shape_error}")
    return None


def _is_last_in_group(path: InclusionProof, height: int, config: ProofConfig) -> bool:
    level = path.levels[height]
    trailing = level.siblings[level.index:]
    if config.pad_partial_groups:
        return all(sibling == config.empty_child for sibling in trailing)
    return not trailing


def _verify_empty(expected_root: bytes, config: ProofConfig) -> VerificationResult | None:
    if expected_root != config.empty_root:
        return _fail(
            ErrorCodes.HASH_MISMATCH,
            "Expected root is not the empty-tree root",
            {"expected": to_hex(expected_root), "empty_root": to_hex(config.empty_root)},
        )
    return None


def _verify_left(
    proof: ExclusionLeftProof,
    candidate: bytes,
    expected_root: bytes,
    config: ProofConfig,
) -> VerificationResult | None:
    path = proof.path
    failure = _check_shape(path, config, "Left")
    if failure is not None:
        return failure
    for height, level in enumerate(path.levels):
        if level.index != 0:
            return _fail(
                ErrorCodes.INVALID_PROOF_SHAPE,
                f"Left path is not leftmost: level {height} has index {level.index}",
                {"height": height},
            )
    if not path.leaf > candidate:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            "Leftmost leaf does not sort after the candidate",
            {"leaf": to_hex(path.leaf), "candidate": to_hex(candidate)},
        )
    return _check_root(path, expected_root, config)


def _verify_right(
    proof: ExclusionRightProof,
    candidate: bytes,
    expected_root: bytes,
    config: ProofConfig,
) -> VerificationResult | None:
    path = proof.path
    failure = _check_shape(path, config, "Right")
    if failure is not None:
        return failure
    for height in range(path.depth):
        if not _is_last_in_group(path, height, config):
            return _fail(
                ErrorCodes.INVALID_PROOF_SHAPE,
                f"Right path is not rightmost: level {height} has a node after it",
                {"height": height},
            )
    if not path.leaf < candidate:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            "Rightmost leaf does not sort before the candidate",
            {"leaf": to_hex(path.leaf), "candidate": to_hex(candidate)},
        )
    return _check_root(path, expected_root, config)


def _verify_inner(
    proof: ExclusionInnerProof,
    candidate: bytes,
    expected_root: bytes,
    config: ProofConfig,
) -> VerificationResult | None:
    left, right = proof.left, proof.right
    for side, path in (("Left", left), ("Right", right)):
        failure = _check_shape(path, config, side)
        if failure is not None:
            return failure
    if left.depth != right.depth:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            f"Inner paths differ in length: {left.depth} vs {right.depth}",
        )
    if not left.leaf < candidate < right.leaf:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            "Inner leaves do not bracket the candidate",
            {
                "left": to_hex(left.leaf),
                "candidate": to_hex(candidate),
                "right": to_hex(right.leaf),
            },
        )

    state = BELOW_MERGE
    for height, (lo, hi) in enumerate(zip(left.levels, right.levels)):
        if state == BELOW_MERGE:
            if hi.index == lo.index + 1:
                state = MERGED
            elif not (lo.index == config.fanout - 1 and hi.index == 0):
                return _fail(
                    ErrorCodes.ADJACENCY_VIOLATION,
                    f"Inner leaves are not adjacent: level {height} has indices "
                    f"{lo.index} and {hi.index}",
                    {"height": height, "left_index": lo.index, "right_index": hi.index},
                )
        elif lo.index != hi.index or lo.siblings != hi.siblings:
            return _fail(
                ErrorCodes.ADJACENCY_VIOLATION,
                f"Inner paths diverge above their merge point at level {height}",
                {"height": height},
            )
    if state != MERGED:
        return _fail(
            ErrorCodes.ADJACENCY_VIOLATION,
            "Inner paths never meet in a common group",
        )

    failure = _check_root(left, expected_root, config)
    if failure is not None:
        return failure
    return _check_root(right, expected_root, config)


def verify_exclusion(
    proof: ExclusionProof,
    candidate: bytes,
    expected_root: bytes,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify that candidate is absent from the tree with expected_root.

    Fails at stage account_membership with INVALID_PROOF_SHAPE (wrong
    variant for the evidence, ordering violated, malformed path),
    ADJACENCY_VIOLATION (Inner leaves not neighbours) or HASH_MISMATCH.
    """
    config = resolve_config(config)

    if not is_hash(candidate):
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            f"Candidate must be a {HASH_BYTES}-byte hash",
        )

    if isinstance(proof, ExclusionEmptyProof):
        failure = _verify_empty(expected_root, config)
    elif isinstance(proof, ExclusionLeftProof):
        failure = _verify_left(proof, candidate, expected_root, config)
    elif isinstance(proof, ExclusionRightProof):
        failure = _verify_right(proof, candidate, expected_root, config)
    elif isinstance(proof, ExclusionInnerProof):
        failure = _verify_inner(proof, candidate, expected_root, config)
    else:
        failure = _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            f"Unknown exclusion proof type {type(proof).__name__}",
        )

    if failure is not None:
        return failure

    return VerificationResult.success([
        CheckResult.passed(
            CHECK_ACCOUNT_EXCLUSION,
            stage=Stages.ACCOUNT_MEMBERSHIP,
            message=f"Candidate is absent from the tree ({proof.kind} proof)",
            details={"candidate": to_hex(candidate), "kind": proof.kind},
        )
    ])
