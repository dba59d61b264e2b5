"""
Account Merkle Tree Unit Tests
Tests for anchor_core/merkle/account_tree.py

Required behaviour:
1. Root determinism and explicit tagged group hashing (padded and chain-compatible)
2. Boundary leaf counts 0, 1, fanout-1, fanout, fanout+1, fanout^2+1
3. Structural validation: unsorted, duplicate, malformed leaves
4. Proof selection: inclusion for leaves, the right exclusion variant otherwise
"""
import pytest

from anchor_core.config.runtime import ProofConfig
from anchor_core.crypto.hashing import sha256
from anchor_core.merkle.account_tree import AccountMerkleTree, build_tree
from anchor_core.merkle.exclusion import (
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionRightProof,
)
from anchor_core.merkle.inclusion import InclusionProof
from anchor_core.merkle.nodes import LEAF_GROUP_TAG, NODE_GROUP_TAG, group_tag, hash_group
from anchor_core.schemas.errors import ErrorCodes, StructuralException

from fixtures import make_between, make_leaf, make_sorted_leaves, make_tree

ZERO = bytes(32)
LEAF = LEAF_GROUP_TAG
NODE = NODE_GROUP_TAG
BOUNDARY_COUNTS = [1, 15, 16, 17, 257]


class TestEmptyTree:

    def test_root_is_empty_root(self, any_config):
        tree = build_tree([], config=any_config)
        assert tree.root == sha256(b"")
        assert tree.root == any_config.empty_root
        assert tree.depth == 0
        assert len(tree) == 0

    def test_prove_exclusion_is_empty_variant(self):
        assert isinstance(build_tree([]).prove_exclusion(make_leaf(0)), ExclusionEmptyProof)


class TestExplicitRoots:
    """Roots computed by hand for small trees."""

    def test_single_leaf_padded(self, config):
        leaf = make_leaf(0)
        tree = build_tree([leaf], config=config)
        assert tree.root == sha256(LEAF + leaf + ZERO * 15)
        assert tree.depth == 1

    def test_single_leaf_chain(self, chain_config):
        leaf = make_leaf(0)
        assert build_tree([leaf], config=chain_config).root == sha256(LEAF + leaf)

    def test_full_group_same_in_both_modes(self, config, chain_config):
        leaves = make_sorted_leaves(16)
        expected = sha256(LEAF + b"".join(leaves))
        assert build_tree(leaves, config=config).root == expected
        assert build_tree(leaves, config=chain_config).root == expected

    def test_fifteen_leaves_padded(self, config):
        leaves = make_sorted_leaves(15)
        assert build_tree(leaves, config=config).root == sha256(LEAF + b"".join(leaves) + ZERO)

    def test_fifteen_leaves_chain(self, chain_config):
        leaves = make_sorted_leaves(15)
        assert build_tree(leaves, config=chain_config).root == sha256(LEAF + b"".join(leaves))

    def test_seventeen_leaves_padded(self, config):
        leaves = make_sorted_leaves(17)
        left = sha256(LEAF + b"".join(leaves[:16]))
        right = sha256(LEAF + leaves[16] + ZERO * 15)
        tree = build_tree(leaves, config=config)
        assert tree.root == sha256(NODE + left + right + ZERO * 14)
        assert tree.depth == 2

    def test_seventeen_leaves_chain(self, chain_config):
        leaves = make_sorted_leaves(17)
        left = sha256(LEAF + b"".join(leaves[:16]))
        right = sha256(LEAF + leaves[16])
        assert build_tree(leaves, config=chain_config).root == sha256(NODE + left + right)

    def test_custom_empty_child(self):
        config = ProofConfig(empty_child=b"\xff" * 32)
        leaf = make_leaf(0)
        assert build_tree([leaf], config=config).root == sha256(LEAF + leaf + b"\xff" * 32 * 15)

    def test_small_fanout(self):
        config = ProofConfig(fanout=2, pad_partial_groups=False)
        a, b, c = make_sorted_leaves(3)
        expected = sha256(NODE + sha256(LEAF + a + b) + sha256(LEAF + c))
        assert build_tree([a, b, c], config=config).root == expected

    def test_leaf_and_node_groups_hash_apart(self, any_config):
        # The same children hash differently as leaves and as internal nodes
        children = make_sorted_leaves(3)
        assert hash_group(children, any_config, 0) != hash_group(children, any_config, 1)
        assert group_tag(0) == LEAF
        assert group_tag(1) == group_tag(5) == NODE


class TestBoundaryCounts:

    @pytest.mark.parametrize("count,depth", [(1, 1), (15, 1), (16, 1), (17, 2), (257, 3)])
    def test_depth(self, count, depth, any_config):
        assert make_tree(count, config=any_config).depth == depth

    @pytest.mark.parametrize("count", BOUNDARY_COUNTS)
    def test_every_leaf_proves_and_verifies(self, count, any_config):
        tree = make_tree(count, config=any_config)
        for leaf in tree.leaves:
            proof = tree.prove_inclusion(leaf)
            assert proof.depth == tree.depth
            assert proof.verify(tree.root, config=any_config).ok

    @pytest.mark.parametrize("count", BOUNDARY_COUNTS)
    def test_levels_hold_only_real_siblings(self, count, any_config):
        tree = make_tree(count, config=any_config)
        proof = tree.prove_inclusion(tree.leaves[-1])
        for level in proof.levels:
            assert len(level.siblings) <= any_config.fanout - 1
            assert ZERO not in level.siblings

    def test_padding_changes_partial_roots_only(self, config, chain_config):
        assert make_tree(16, config=config).root == make_tree(16, config=chain_config).root
        assert make_tree(17, config=config).root != make_tree(17, config=chain_config).root


class TestDeterminism:

    def test_same_leaves_same_root(self):
        assert make_tree(40).root == make_tree(40).root

    def test_different_leaves_different_root(self):
        assert make_tree(40).root != make_tree(41).root

    def test_algorithm_changes_root(self):
        assert make_tree(5).root != make_tree(5, config=ProofConfig(hash_algorithm="sha3_256")).root


class TestValidation:

    def test_unsorted_rejected(self):
        a, b = make_sorted_leaves(2)
        with pytest.raises(StructuralException) as exc_info:
            build_tree([b, a])
        assert exc_info.value.code == ErrorCodes.STRUCTURAL_ERROR
        assert "not sorted" in exc_info.value.message

    def test_duplicate_rejected(self):
        a = make_leaf(0)
        with pytest.raises(StructuralException, match="Duplicate"):
            build_tree([a, a])

    def test_short_leaf_rejected(self):
        with pytest.raises(StructuralException):
            build_tree([bytes(31)])

    def test_non_bytes_rejected(self):
        with pytest.raises(StructuralException):
            build_tree(["00" * 32])

    def test_from_account_hashes_sorts(self):
        leaves = [make_leaf(i) for i in range(20)]
        tree = AccountMerkleTree.from_account_hashes(leaves)
        assert tree.leaves == tuple(sorted(leaves))

    def test_from_account_hashes_rejects_duplicates(self):
        with pytest.raises(StructuralException):
            AccountMerkleTree.from_account_hashes([make_leaf(1), make_leaf(2), make_leaf(1)])

    def test_padding_sentinel_leaf_rejected_when_padded(self, config):
        with pytest.raises(StructuralException, match="padding sentinel"):
            build_tree([config.empty_child, make_leaf(1)], config=config)

    def test_zero_leaf_allowed_without_padding(self, chain_config):
        tree = build_tree([ZERO, make_leaf(1)], config=chain_config)
        assert tree.prove_inclusion(ZERO).verify(tree.root, config=chain_config).ok


class TestLookup:

    def test_contains_and_index_of(self):
        tree = make_tree(20)
        for i, leaf in enumerate(tree.leaves):
            assert leaf in tree
            assert tree.index_of(leaf) == i
        assert make_leaf(999) not in tree
        assert "not bytes" not in tree

    def test_index_of_missing_raises(self):
        with pytest.raises(ValueError):
            make_tree(3).index_of(make_leaf(999))

    def test_levels_layout(self):
        tree = make_tree(17)
        assert [len(level) for level in tree.levels] == [17, 2, 1]
        assert tree.levels[-1][0] == tree.root


class TestProofSelection:

    def test_prove_inclusion_missing_raises(self):
        with pytest.raises(ValueError, match="not in the tree"):
            make_tree(5).prove_inclusion(make_leaf(999))

    def test_prove_exclusion_present_raises(self):
        tree = make_tree(5)
        with pytest.raises(ValueError, match="present"):
            tree.prove_exclusion(tree.leaves[2])

    def test_prove_exclusion_bad_candidate(self):
        with pytest.raises(ValueError):
            make_tree(5).prove_exclusion(b"short")

    def test_variants(self):
        tree = make_tree(17)
        assert isinstance(tree.prove_exclusion(ZERO), ExclusionLeftProof)
        assert isinstance(tree.prove_exclusion(b"\xff" * 32), ExclusionRightProof)
        between = make_between(tree.leaves[3], tree.leaves[4])
        proof = tree.prove_exclusion(between)
        assert isinstance(proof, ExclusionInnerProof)
        assert proof.left.leaf == tree.leaves[3]
        assert proof.right.leaf == tree.leaves[4]

    def test_prove_dispatch(self):
        tree = make_tree(5)
        assert isinstance(tree.prove(tree.leaves[1]), InclusionProof)
        assert isinstance(tree.prove(b"\xff" * 32), ExclusionRightProof)

