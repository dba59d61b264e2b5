"""
Compound Completeness Proof

End-to-end proof that nothing was anchored for a namespace in a slot: the
candidate account leaf is absent from the account tree whose root is the
slot's accounts-delta hash. As for inclusion, the bank hash comes from the
verifier's trusted slot history and the proof must commit to the verifier's
blockhash.
"""
from __future__ import annotations

from dataclasses import dataclass

from anchor_core.chain.bank_hash import BankHashProof
from anchor_core.chain.slot_hash import SlotHashProof, SlotHistorySnapshot, verify_slot_hash
from anchor_core.compound.stages import StagePipeline, anchor_bank_hash
from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.merkle.exclusion import ExclusionProof, verify_exclusion
from anchor_core.schemas.verification import VerificationResult

PROOF_KIND = "compound_completeness"


@dataclass(frozen=True)
class CompoundCompletenessProof:
    target_slot: int
    bank_hash_proof: BankHashProof
    slot_hash_proof: SlotHashProof
    exclusion_proof: ExclusionProof

    def verify(
        self,
        candidate: bytes,
        blockhash: bytes,
        trusted_history: SlotHistorySnapshot,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_compound_completeness(
            self,
            candidate,
            blockhash,
            trusted_history,
            config=config,
        )


def verify_compound_completeness(
    proof: CompoundCompletenessProof,
    candidate: bytes,
    blockhash: bytes,
    trusted_history: SlotHistorySnapshot,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify that candidate was not anchored in proof.target_slot.

    Stages: bank_hash (blockhash, then components against the bank hash
    trusted_history records), account_membership (exclusion against the
    accounts-delta hash), slot_history.
    """
    config = resolve_config(config)
    pipeline = StagePipeline(PROOF_KIND, proof.target_slot)

    bank_hash, failure = anchor_bank_hash(
        pipeline, proof.bank_hash_proof, blockhash, trusted_history, config
    )
    if failure is not None:
        return failure

    failure = pipeline.record(verify_exclusion(
        proof.exclusion_proof,
        candidate,
        proof.bank_hash_proof.accounts_delta_hash,
        config=config,
    ))
    if failure is not None:
        return failure

    failure = pipeline.record(verify_slot_hash(
        proof.slot_hash_proof, proof.target_slot, bank_hash, trusted_history, config=config
    ))
    if failure is not None:
        return failure

    return pipeline.accept()
