"""
Common test fixtures shared by all modules.

Provides factory functions for proof building blocks:
- leaf hashes and sorted leaf sets
- account trees
- blobs and blob proofs
- slot histories
- complete compound inclusion / completeness proofs

These are the foundational building blocks used by the unit tests.
"""

from typing import NamedTuple, Optional, Sequence

from anchor_core.blob.blob_proof import BlobProof
from anchor_core.chain.bank_hash import BankHashProof
from anchor_core.chain.slot_hash import SlotHashProof, SlotHistorySnapshot
from anchor_core.compound.completeness import CompoundCompletenessProof
from anchor_core.compound.inclusion import CompoundInclusionProof
from anchor_core.config.runtime import ProofConfig
from anchor_core.crypto.hashing import sha256
from anchor_core.merkle.account_tree import AccountMerkleTree


def make_leaf(n: int) -> bytes:
    """Deterministic 32-byte leaf hash for seed n."""
    return sha256(f"leaf-{n}".encode("utf-8"))


def make_sorted_leaves(count: int, offset: int = 0) -> list[bytes]:
    """count distinct leaf hashes in ascending order."""
    return sorted(make_leaf(offset + i) for i in range(count))


def make_tree(count: int, config: Optional[ProofConfig] = None) -> AccountMerkleTree:
    """Account tree over count deterministic leaves."""
    return AccountMerkleTree(make_sorted_leaves(count), config=config)


def make_blob(seed: str = "blob", size: int = 2000) -> bytes:
    """Deterministic blob bytes of the given size."""
    out = b""
    counter = 0
    while len(out) < size:
        out += sha256(f"{seed}-{counter}".encode("utf-8"))
        counter += 1
    return out[:size]


def make_address(n: int) -> bytes:
    """Deterministic 32-byte blob account address."""
    return sha256(f"address-{n}".encode("utf-8"))


def make_history(
    head_slot: int,
    count: int,
    overrides: Optional[dict[int, bytes]] = None,
) -> SlotHistorySnapshot:
    """
    History of count consecutive slots ending at head_slot, newest first.

    Bank hashes are synthetic unless given in overrides.
    """
    overrides = overrides or {}
    entries = []
    for slot in range(head_slot, head_slot - count, -1):
        bank_hash = overrides.get(slot, sha256(f"bank-{slot}".encode("utf-8")))
        entries.append((slot, bank_hash))
    return SlotHistorySnapshot.from_pairs(entries)


BLOCKHASH = sha256(b"blockhash")


class TrustedAnchor(NamedTuple):
    """What a verifier knows about the target slot without the proof."""
    blockhash: bytes
    history: SlotHistorySnapshot
    bank_hash: bytes


def make_bank_hash_proof(accounts_delta_hash: bytes, signature_count: int = 42) -> BankHashProof:
    """Bank hash proof with fixed parent and blockhash around a delta hash."""
    return BankHashProof(
        parent_bank_hash=sha256(b"parent-bank-hash"),
        accounts_delta_hash=accounts_delta_hash,
        signature_count=signature_count,
        blockhash=BLOCKHASH,
    )


def blob_addresses(count: int) -> list[bytes]:
    """Account addresses make_compound_inclusion assigns to count blobs."""
    return [make_address(i) for i in range(count)]


def make_compound_inclusion(
    blobs: Sequence[bytes],
    config: Optional[ProofConfig] = None,
    target_slot: int = 1_000,
    extra_leaves: int = 20,
) -> tuple[CompoundInclusionProof, TrustedAnchor]:
    """
    Build a valid compound inclusion proof for blobs.

    The account tree holds one account leaf per blob plus extra_leaves
    unrelated accounts. The slot history ends two slots after target_slot.

    Returns:
        (proof, anchor), where the anchor's history is the honest chain's
    """
    config = config or ProofConfig()
    blob_proofs = [
        BlobProof.from_blob(address, data, config=config)
        for address, data in zip(blob_addresses(len(blobs)), blobs)
    ]
    leaves = [bp.account_leaf(config) for bp in blob_proofs]
    leaves += [make_leaf(10_000 + i) for i in range(extra_leaves)]
    tree = AccountMerkleTree.from_account_hashes(leaves, config=config)

    bank_hash_proof = make_bank_hash_proof(tree.root)
    bank_hash = bank_hash_proof.hash(config)
    history = make_history(target_slot + 2, 10, overrides={target_slot: bank_hash})

    proof = CompoundInclusionProof(
        target_slot=target_slot,
        bank_hash_proof=bank_hash_proof,
        slot_hash_proof=SlotHashProof(slot=target_slot, history=history),
        blob_proofs=tuple(
            (bp, tree.prove_inclusion(bp.account_leaf(config))) for bp in blob_proofs
        ),
    )
    return proof, TrustedAnchor(BLOCKHASH, history, bank_hash)


def make_compound_completeness(
    candidate: bytes,
    leaves: Sequence[bytes],
    config: Optional[ProofConfig] = None,
    target_slot: int = 1_000,
) -> tuple[CompoundCompletenessProof, TrustedAnchor]:
    """
    Build a valid compound completeness proof for a candidate absent from leaves.

    Returns:
        (proof, anchor), where the anchor's history is the honest chain's
    """
    config = config or ProofConfig()
    tree = AccountMerkleTree(sorted(leaves), config=config)
    bank_hash_proof = make_bank_hash_proof(tree.root)
    bank_hash = bank_hash_proof.hash(config)
    history = make_history(target_slot + 2, 10, overrides={target_slot: bank_hash})

    proof = CompoundCompletenessProof(
        target_slot=target_slot,
        bank_hash_proof=bank_hash_proof,
        slot_hash_proof=SlotHashProof(slot=target_slot, history=history),
        exclusion_proof=tree.prove_exclusion(candidate),
    )
    return proof, TrustedAnchor(BLOCKHASH, history, bank_hash)


def flip_bit(data: bytes, byte_index: int = 0, bit: int = 0) -> bytes:
    """Copy of data with one bit flipped."""
    mutable = bytearray(data)
    mutable[byte_index] ^= 1 << bit
    return bytes(mutable)


def make_between(low: bytes, high: bytes) -> bytes:
    """A 32-byte value strictly between two sorted hashes."""
    value = int.from_bytes(low, "big") + 1
    if value >= int.from_bytes(high, "big"):
        raise ValueError("No value strictly between the given hashes")
    return value.to_bytes(32, "big")


def make_below(leaf: bytes) -> bytes:
    """A 32-byte value just below leaf."""
    return (int.from_bytes(leaf, "big") - 1).to_bytes(32, "big")


def make_above(leaf: bytes) -> bytes:
    """A 32-byte value just above leaf."""
    return (int.from_bytes(leaf, "big") + 1).to_bytes(32, "big")
