"""
anchor_core - offline builder and verifier for data-anchoring proofs.

Lets a client check, without trusting an indexer, that data was anchored in
a slot (compound inclusion) or that nothing was anchored for a namespace in
a slot (compound completeness), by recomputing the chain's own commitments:

    blob bytes -> blob digest -> account leaf -> accounts-delta hash
    -> bank hash -> slot history
"""

from anchor_core.config import ProofConfig
from anchor_core.blob import (
    BlobProof,
    Chunk,
    ChunkDigestAccumulator,
    accumulate_digest,
    chunk_blob,
    verify_blob,
)
from anchor_core.merkle import (
    AccountMerkleTree,
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionProof,
    ExclusionRightProof,
    InclusionProof,
    InclusionProofLevel,
    build_tree,
    verify_exclusion,
    verify_inclusion,
)
from anchor_core.chain import (
    BankHashProof,
    SlotHashProof,
    SlotHistorySnapshot,
    verify_bank_hash,
    verify_blockhash,
    verify_slot_hash,
)
from anchor_core.compound import (
    CompoundCompletenessProof,
    CompoundInclusionProof,
    verify_compound_completeness,
    verify_compound_inclusion,
)
from anchor_core.schemas import (
    CheckResult,
    ErrorCodes,
    ProofError,
    ProofException,
    Stages,
    VerificationResult,
)
from anchor_core.schemas.wire import decode_proof, encode_proof, proof_cache_key

__version__ = "0.1.0"

__all__ = [
    "ProofConfig",
    "BlobProof",
    "Chunk",
    "ChunkDigestAccumulator",
    "accumulate_digest",
    "chunk_blob",
    "verify_blob",
    "AccountMerkleTree",
    "ExclusionEmptyProof",
    "ExclusionInnerProof",
    "ExclusionLeftProof",
    "ExclusionProof",
    "ExclusionRightProof",
    "InclusionProof",
    "InclusionProofLevel",
    "build_tree",
    "verify_exclusion",
    "verify_inclusion",
    "BankHashProof",
    "SlotHashProof",
    "SlotHistorySnapshot",
    "verify_bank_hash",
    "verify_blockhash",
    "verify_slot_hash",
    "CompoundCompletenessProof",
    "CompoundInclusionProof",
    "verify_compound_completeness",
    "verify_compound_inclusion",
    "CheckResult",
    "ErrorCodes",
    "ProofError",
    "ProofException",
    "Stages",
    "VerificationResult",
    "decode_proof",
    "encode_proof",
    "proof_cache_key",
]
