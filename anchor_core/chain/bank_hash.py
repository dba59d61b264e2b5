"""
Bank Hash Proof

A slot's bank hash commits to the parent bank hash, the accounts-delta hash
(the account tree root), the signature count and the blockhash:

    bank_hash = H(parent ++ accounts_delta ++ u64_le(signature_count) ++ blockhash)
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, to_hex
from anchor_core.schemas.errors import ErrorCodes, Stages
from anchor_core.schemas.verification import CheckResult, VerificationResult

U64_MAX = 2**64 - 1

CHECK_BANK_HASH = "bank_hash"
CHECK_BLOCKHASH = "blockhash"


@dataclass(frozen=True)
class BankHashProof:
    """The four components of a slot's bank hash."""
    parent_bank_hash: bytes
    accounts_delta_hash: bytes
    signature_count: int
    blockhash: bytes

    def __post_init__(self) -> None:
        for name in ("parent_bank_hash", "accounts_delta_hash", "blockhash"):
            value = getattr(self, name)
            if len(value) != HASH_BYTES:
                raise ValueError(f"{name} must be {HASH_BYTES} bytes, got {len(value)}")
        if not 0 <= self.signature_count <= U64_MAX:
            raise ValueError(f"signature_count must fit in u64, got {self.signature_count}")

    def hash(self, config: ProofConfig | None = None) -> bytes:
        """Recompute the bank hash from its components."""
        config = resolve_config(config)
        return config.digest_parts((
            self.parent_bank_hash,
            self.accounts_delta_hash,
            struct.pack("<Q", self.signature_count),
            self.blockhash,
        ))

    def verify(self, expected_bank_hash: bytes, config: ProofConfig | None = None) -> VerificationResult:
        return verify_bank_hash(self, expected_bank_hash, config=config)


def verify_blockhash(proof: BankHashProof, blockhash: bytes) -> VerificationResult:
    """Fails at stage bank_hash with BLOCKHASH_MISMATCH unless the proof commits to blockhash."""
    if proof.blockhash != blockhash:
        return VerificationResult.failure(
            stage=Stages.BANK_HASH,
            code=ErrorCodes.BLOCKHASH_MISMATCH,
            message="Bank hash proof is for a different block",
            details={"expected": to_hex(blockhash), "actual": to_hex(proof.blockhash)},
            check_id=CHECK_BLOCKHASH,
        )
    return VerificationResult.success([
        CheckResult.passed(
            CHECK_BLOCKHASH,
            stage=Stages.BANK_HASH,
            message="Bank hash proof commits to the expected blockhash",
            details={"blockhash": to_hex(blockhash)},
        )
    ])


def verify_bank_hash(
    proof: BankHashProof,
    expected_bank_hash: bytes,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """Fails at stage bank_hash with HASH_MISMATCH when the recomputed hash differs."""
    bank_hash = proof.hash(config)
    if bank_hash != expected_bank_hash:
        return VerificationResult.failure(
            stage=Stages.BANK_HASH,
            code=ErrorCodes.HASH_MISMATCH,
            message="Recomputed bank hash does not match the expected bank hash",
            details={"expected": to_hex(expected_bank_hash), "actual": to_hex(bank_hash)},
            check_id=CHECK_BANK_HASH,
        )
    return VerificationResult.success([
        CheckResult.passed(
            CHECK_BANK_HASH,
            stage=Stages.BANK_HASH,
            message="Bank hash components recompute to the expected bank hash",
            details={"accounts_delta_hash": to_hex(proof.accounts_delta_hash)},
        )
    ])
