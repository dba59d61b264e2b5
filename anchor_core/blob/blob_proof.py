"""
Blob Proof

Binds a blob's bytes to the digest stored in its on-chain blob account, and
derives the account leaf that commits to the finished blob:

    leaf = H(address ++ digest ++ u32_le(blob_size))
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from anchor_core.blob.accumulator import accumulate_digest, chunk_blob
from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, to_hex
from anchor_core.schemas.errors import ErrorCodes, Stages
from anchor_core.schemas.verification import CheckResult, VerificationResult

U32_MAX = 2**32 - 1

CHECK_BLOB_DIGEST = "blob_digest"


@dataclass(frozen=True)
class BlobProof:
    """
    Digest commitment for one blob.

    Attributes:
        address: 32-byte key of the blob account
        digest: Folded chunk digest of the blob bytes
        blob_size: Length of the blob in bytes
    """
    address: bytes
    digest: bytes
    blob_size: int

    def __post_init__(self) -> None:
        if len(self.address) != HASH_BYTES:
            raise ValueError(f"Blob address must be {HASH_BYTES} bytes, got {len(self.address)}")
        if len(self.digest) != HASH_BYTES:
            raise ValueError(f"Blob digest must be {HASH_BYTES} bytes, got {len(self.digest)}")
        if not 0 <= self.blob_size <= U32_MAX:
            raise ValueError(f"Blob size must fit in u32, got {self.blob_size}")

    @classmethod
    def from_blob(
        cls,
        address: bytes,
        data: bytes,
        config: ProofConfig | None = None,
    ) -> "BlobProof":
        """
        Build the proof for a complete blob.

        Raises:
            ChunkValidationException: EMPTY_INPUT for an empty blob.
        """
        config = resolve_config(config)
        digest = accumulate_digest(chunk_blob(data, config.chunk_size), config=config)
        return cls(address=address, digest=digest, blob_size=len(data))

    def account_leaf(self, config: ProofConfig | None = None) -> bytes:
        """Account leaf committing to this blob."""
        config = resolve_config(config)
        return config.digest_parts(
            (self.address, self.digest, struct.pack("<I", self.blob_size))
        )

    def verify(self, data: bytes, config: ProofConfig | None = None) -> VerificationResult:
        """Check that data re-chunks and folds to the stored digest."""
        return verify_blob(self, data, config=config)


def verify_blob(
    proof: BlobProof,
    data: bytes,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify blob bytes against a BlobProof.

    Fails at stage blob_digest with EMPTY_INPUT for empty data, or
    HASH_MISMATCH when the size or the recomputed digest differs.
    """
    config = resolve_config(config)

    if not data:
        return VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.EMPTY_INPUT,
            message="Cannot verify an empty blob",
            check_id=CHECK_BLOB_DIGEST,
        )

    if len(data) != proof.blob_size:
        return VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.HASH_MISMATCH,
            message=f"Blob size {len(data)} does not match committed size {proof.blob_size}",
            details={"expected_size": proof.blob_size, "actual_size": len(data)},
            check_id=CHECK_BLOB_DIGEST,
        )

    digest = accumulate_digest(chunk_blob(data, config.chunk_size), config=config)

    if digest != proof.digest:
        return VerificationResult.failure(
            stage=Stages.BLOB_DIGEST,
            code=ErrorCodes.HASH_MISMATCH,
            message="Recomputed blob digest does not match the committed digest",
            details={"expected": to_hex(proof.digest), "actual": to_hex(digest)},
            check_id=CHECK_BLOB_DIGEST,
        )

    return VerificationResult.success([
        CheckResult.passed(
            CHECK_BLOB_DIGEST,
            stage=Stages.BLOB_DIGEST,
            message="Blob bytes match the committed digest",
            details={"address": to_hex(proof.address), "blob_size": proof.blob_size},
        )
    ])
