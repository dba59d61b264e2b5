"""
Property-based tests for the account tree proofs and the chunk accumulator.

Properties:
- every absent hash gets an exclusion proof that verifies
- a present hash cannot be excluded and every leaf's inclusion proof verifies
- a flipped sibling bit breaks inclusion
- accumulate_digest does not depend on batch boundaries
"""
from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from anchor_core.blob.accumulator import Chunk, ChunkDigestAccumulator, accumulate_digest
from anchor_core.config.runtime import ProofConfig
from anchor_core.merkle.account_tree import AccountMerkleTree
from anchor_core.merkle.exclusion import (
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionRightProof,
    verify_exclusion,
)
from anchor_core.merkle.inclusion import InclusionProof, InclusionProofLevel, verify_inclusion

hashes = st.binary(min_size=32, max_size=32)
# The all-zero hash is the padding sentinel and never an account leaf
account_hashes = hashes.filter(lambda h: h != bytes(32))
leaf_sets = st.lists(account_hashes, min_size=0, max_size=80, unique=True)
configs = st.sampled_from([
    ProofConfig(),
    ProofConfig.chain_compatible(),
    ProofConfig(fanout=2),
    ProofConfig.chain_compatible(fanout=3),
])

_SETTINGS = settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])


class TestExclusionProperties:
    """Absent hashes are provably absent; present ones are not."""

    @given(leaves=leaf_sets, candidate=hashes, config=configs)
    @_SETTINGS
    def test_absent_candidate_verifies(self, leaves, candidate, config):
        assume(candidate not in leaves)
        tree = AccountMerkleTree.from_account_hashes(leaves, config=config)
        proof = tree.prove_exclusion(candidate)
        result = verify_exclusion(proof, candidate, tree.root, config=config)
        assert result.ok, result.error

    @given(leaves=leaf_sets.filter(bool), data=st.data(), config=configs)
    @_SETTINGS
    def test_present_candidate_not_excludable(self, leaves, data, config):
        tree = AccountMerkleTree.from_account_hashes(leaves, config=config)
        candidate = data.draw(st.sampled_from(tree.leaves))
        position = tree.index_of(candidate)

        variants = [
            ExclusionEmptyProof(),
            ExclusionLeftProof(path=tree._path(0)),
            ExclusionRightProof(path=tree._path(len(tree) - 1)),
        ]
        if position > 0:
            variants.append(ExclusionInnerProof(left=tree._path(position - 1), right=tree._path(position)))
        if position + 1 < len(tree):
            variants.append(ExclusionInnerProof(left=tree._path(position), right=tree._path(position + 1)))

        for proof in variants:
            assert not verify_exclusion(proof, candidate, tree.root, config=config).ok


class TestInclusionProperties:

    @given(leaves=leaf_sets.filter(bool), data=st.data(), config=configs)
    @_SETTINGS
    def test_every_leaf_verifies(self, leaves, data, config):
        tree = AccountMerkleTree.from_account_hashes(leaves, config=config)
        leaf = data.draw(st.sampled_from(tree.leaves))
        assert verify_inclusion(tree.prove_inclusion(leaf), tree.root, config=config).ok

    @given(leaves=st.lists(account_hashes, min_size=2, max_size=80, unique=True), data=st.data(), config=configs)
    @_SETTINGS
    def test_sibling_bit_flip_fails(self, leaves, data, config):
        tree = AccountMerkleTree.from_account_hashes(leaves, config=config)
        proof = tree.prove_inclusion(data.draw(st.sampled_from(tree.leaves)))
        heights = [h for h, level in enumerate(proof.levels) if level.siblings]
        assume(heights)
        height = data.draw(st.sampled_from(heights))
        level = proof.levels[height]
        which = data.draw(st.integers(0, len(level.siblings) - 1))
        bit = data.draw(st.integers(0, 255))

        sibling = bytearray(level.siblings[which])
        sibling[bit // 8] ^= 1 << (bit % 8)
        siblings = list(level.siblings)
        siblings[which] = bytes(sibling)
        levels = list(proof.levels)
        levels[height] = InclusionProofLevel(siblings=tuple(siblings), index=level.index)
        tampered = InclusionProof(leaf=proof.leaf, levels=tuple(levels))

        assert not verify_inclusion(tampered, tree.root, config=config).ok


class TestAccumulatorProperties:

    @given(
        payloads=st.lists(st.binary(max_size=64), min_size=1, max_size=30),
        cuts=st.lists(st.integers(0, 30), max_size=10),
    )
    @_SETTINGS
    def test_batch_size_independent(self, payloads, cuts):
        chunks = [Chunk(index=i, payload=p) for i, p in enumerate(payloads)]
        boundaries = sorted({c for c in cuts if c < len(chunks)} | {0, len(chunks)})
        acc = ChunkDigestAccumulator()
        for start, end in zip(boundaries, boundaries[1:]):
            acc.update(chunks[start:end])
        assert acc.digest() == accumulate_digest(chunks)
