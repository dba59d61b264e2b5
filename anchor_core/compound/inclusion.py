"""
Compound Inclusion Proof

End-to-end proof that one or more blobs were anchored in a slot:

    blob bytes -> blob digest -> account leaf -> accounts-delta hash
    -> bank hash -> slot history

The verifier supplies its own anchors: the blockhash of the slot's block,
a slot history it trusts, and the account address expected for each blob.
Nothing the proof transports is taken as a reference for itself.

Stages run in order and stop at the first failure:
1. shape: at least one blob, one address per blob, and one data buffer per
   blob when data is given
2. per blob: the account is the expected address, bytes match the digest,
   the inclusion leaf is the blob's account leaf, and the path recomputes to
   a root (independent per blob, may run on a thread pool; the lowest-index
   failure is reported)
3. the trusted history holds target_slot
4. the bank hash proof commits to the blockhash and recomputes to the
   trusted bank hash
5. every blob's root equals the accounts-delta hash
6. (target_slot, bank_hash) is in the transported history, which agrees
   with the trusted one
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from anchor_core.blob.blob_proof import BlobProof, verify_blob
from anchor_core.chain.bank_hash import BankHashProof
from anchor_core.chain.slot_hash import SlotHashProof, SlotHistorySnapshot, verify_slot_hash
from anchor_core.compound.stages import (
    StagePipeline,
    anchor_bank_hash,
    first_failure,
    map_ordered,
    tag_failure,
)
from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import to_hex
from anchor_core.merkle.inclusion import InclusionProof
from anchor_core.schemas.errors import ErrorCodes, Stages
from anchor_core.schemas.verification import CheckResult, VerificationResult

PROOF_KIND = "compound_inclusion"


@dataclass(frozen=True)
class CompoundInclusionProof:
    """
    Attributes:
        target_slot: Slot the blobs were anchored in
        bank_hash_proof: Components of the slot's bank hash
        slot_hash_proof: Recent slot history containing target_slot
        blob_proofs: (BlobProof, InclusionProof) per anchored blob
    """
    target_slot: int
    bank_hash_proof: BankHashProof
    slot_hash_proof: SlotHashProof
    blob_proofs: tuple[tuple[BlobProof, InclusionProof], ...]

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "blob_proofs",
            tuple((blob, inclusion) for blob, inclusion in self.blob_proofs),
        )

    def verify(
        self,
        blockhash: bytes,
        trusted_history: SlotHistorySnapshot,
        addresses: Sequence[bytes],
        blobs: Sequence[bytes] | None = None,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_compound_inclusion(
            self,
            blockhash,
            trusted_history,
            addresses,
            blobs=blobs,
            config=config,
        )


def _check_blob(
    index: int,
    blob_proof: BlobProof,
    inclusion: InclusionProof,
    address: bytes,
    data: bytes | None,
    config: ProofConfig,
) -> tuple[VerificationResult | None, bytes | None]:
    """Failure for one blob, or the account root its path recomputes to."""
    if blob_proof.address != address:
        return VerificationResult.failure(
            stage=Stages.ACCOUNT_MEMBERSHIP,
            code=ErrorCodes.UNEXPECTED_ACCOUNT,
            message=f"Blob {index}: proof is for a different account",
            details={
                "blob_index": index,
                "expected": to_hex(address),
                "actual": to_hex(blob_proof.address),
            },
            check_id="account_inclusion",
        ), None

    if data is not None:
        result = verify_blob(blob_proof, data, config=config)
        if not result.ok:
            return tag_failure(result, blob_index=index), None

    leaf = blob_proof.account_leaf(config)
    if inclusion.leaf != leaf:
        return VerificationResult.failure(
            stage=Stages.ACCOUNT_MEMBERSHIP,
            code=ErrorCodes.HASH_MISMATCH,
            message=f"Blob {index}: inclusion leaf is not the blob's account leaf",
            details={
                "blob_index": index,
                "expected": to_hex(leaf),
                "actual": to_hex(inclusion.leaf),
            },
            check_id="account_inclusion",
        ), None

    shape_error = inclusion.shape_error(config)
    if shape_error is not None:
        return VerificationResult.failure(
            stage=Stages.ACCOUNT_MEMBERSHIP,
            code=ErrorCodes.INVALID_PROOF_SHAPE,
            message=f"Blob {index}: {shape_error}",
            details={"blob_index": index},
            check_id="account_inclusion",
        ), None

    return None, inclusion.compute_root(config)


def verify_compound_inclusion(
    proof: CompoundInclusionProof,
    blockhash: bytes,
    trusted_history: SlotHistorySnapshot,
    addresses: Sequence[bytes],
    blobs: Sequence[bytes] | None = None,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify a compound inclusion proof end to end.

    Args:
        proof: The compound proof
        blockhash: Blockhash of the target slot's block, from a trusted source
        trusted_history: Slot history the verifier trusts; supplies the bank
            hash for proof.target_slot
        addresses: Expected blob account address per blob entry
        blobs: Raw bytes per blob entry, or None to skip the byte check
        config: Protocol constants

    Returns:
        VerificationResult naming the first failing stage, or one passed
        check per stage on success.
    """
    config = resolve_config(config)
    pipeline = StagePipeline(PROOF_KIND, proof.target_slot)
    entries = proof.blob_proofs

    # 1. shape
    if not entries:
        return pipeline.record(VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.INVALID_PROOF_SHAPE,
            message="Compound inclusion proof has no blob entries",
        ))
    if len(addresses) != len(entries):
        return pipeline.record(VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.INVALID_PROOF_SHAPE,
            message=f"Got {len(addresses)} addresses for {len(entries)} blob proofs",
            details={"addresses": len(addresses), "entries": len(entries)},
        ))
    if blobs is not None and len(blobs) != len(entries):
        return pipeline.record(VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.INVALID_PROOF_SHAPE,
            message=f"Got {len(blobs)} blobs for {len(entries)} blob proofs",
            details={"blobs": len(blobs), "entries": len(entries)},
        ))

    # 2. per-blob account, digest and leaf binding
    def check(i: int) -> tuple[VerificationResult | None, bytes | None]:
        blob_proof, inclusion = entries[i]
        data = None if blobs is None else blobs[i]
        return _check_blob(i, blob_proof, inclusion, addresses[i], data, config)

    outcomes = map_ordered(check, len(entries), config)
    failure = first_failure([failed for failed, _ in outcomes])
    if failure is not None:
        return pipeline.record(failure)
    roots = [root for _, root in outcomes]
    pipeline.passed(CheckResult.passed(
        "blob_digest",
        stage=Stages.BLOB_DIGEST,
        message=f"{len(entries)} blob(s) bound to their account leaves",
        details={"blobs": len(entries), "bytes_checked": blobs is not None},
    ))

    # 3-4. trusted bank hash, blockhash and bank hash components
    bank_hash, failure = anchor_bank_hash(
        pipeline, proof.bank_hash_proof, blockhash, trusted_history, config
    )
    if failure is not None:
        return failure

    # 5. account roots
    delta = proof.bank_hash_proof.accounts_delta_hash
    for i, root in enumerate(roots):
        if root != delta:
            return pipeline.record(VerificationResult.failure(
                stage=Stages.ACCOUNT_MEMBERSHIP,
                code=ErrorCodes.HASH_MISMATCH,
                message=f"Blob {i}: account root does not match the accounts-delta hash",
                details={"blob_index": i, "expected": to_hex(delta), "actual": to_hex(root)},
                check_id="account_inclusion",
            ))
    pipeline.passed(CheckResult.passed(
        "account_inclusion",
        stage=Stages.ACCOUNT_MEMBERSHIP,
        message="Every blob account is included under the accounts-delta hash",
        details={"accounts_delta_hash": to_hex(delta)},
    ))

    # 6. slot history
    failure = pipeline.record(verify_slot_hash(
        proof.slot_hash_proof, proof.target_slot, bank_hash, trusted_history, config=config
    ))
    if failure is not None:
        return failure

    return pipeline.accept()
