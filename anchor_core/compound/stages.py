"""
Shared plumbing for the compound verification pipelines.

A compound proof is checked stage by stage. Each stage either passes and
contributes its checks, or stops the pipeline with a stage-tagged failure
that carries every check recorded before it.
"""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable, Sequence, TypeVar

from anchor_core.chain.bank_hash import BankHashProof, verify_bank_hash, verify_blockhash
from anchor_core.chain.slot_hash import SlotHistorySnapshot, trusted_bank_hash
from anchor_core.config.runtime import ProofConfig
from anchor_core.schemas.verification import CheckResult, VerificationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StagePipeline:
    """Collects checks across stages and produces the final result."""

    def __init__(self, kind: str, target_slot: int) -> None:
        self.kind = kind
        self.target_slot = target_slot
        self.checks: list[CheckResult] = []

    def record(self, result: VerificationResult) -> VerificationResult | None:
        """Keep a passing stage's checks; return the rejection for a failing one."""
        if result.ok:
            for check in result.checks:
                logger.debug(f"{self.kind} slot={self.target_slot}: {check.check_id} passed")
            self.checks.extend(result.checks)
            return None

        logger.warning(
            f"Rejected {self.kind} proof for slot {self.target_slot} at stage "
            f"{result.stage}: [{result.code}] {result.error.message}"
        )
        return result.with_prior_checks(self.checks)

    def passed(self, check: CheckResult) -> None:
        logger.debug(f"{self.kind} slot={self.target_slot}: {check.check_id} passed")
        self.checks.append(check)

    def accept(self) -> VerificationResult:
        result = VerificationResult.success(self.checks)
        logger.info(
            f"Verified {self.kind} proof for slot {self.target_slot} "
            f"({result.passed_count} checks)"
        )
        return result


def tag_failure(result: VerificationResult, **extra: Any) -> VerificationResult:
    """Copy of a failed result whose error details include extra fields."""
    error = result.error
    return VerificationResult.failure(
        stage=result.stage,
        code=error.code,
        message=error.message,
        details={**error.details, **extra},
        check_id=result.checks[-1].check_id if result.checks else None,
    )


def anchor_bank_hash(
    pipeline: StagePipeline,
    bank_hash_proof: BankHashProof,
    blockhash: bytes,
    trusted_history: SlotHistorySnapshot,
    config: ProofConfig,
) -> tuple[bytes | None, VerificationResult | None]:
    """
    Run the bank_hash stage against the verifier's own anchors.

    The bank hash is taken from trusted_history, never from the proof. The
    proof must commit to blockhash and its components must recompute to that
    trusted bank hash.

    Returns:
        (bank_hash, None) when the stage passes, else (None, rejection).
    """
    bank_hash, failure = trusted_bank_hash(trusted_history, pipeline.target_slot)
    if failure is not None:
        return None, pipeline.record(failure)

    failure = pipeline.record(verify_blockhash(bank_hash_proof, blockhash))
    if failure is None:
        failure = pipeline.record(verify_bank_hash(bank_hash_proof, bank_hash, config=config))
    if failure is not None:
        return None, failure
    return bank_hash, None

def map_ordered(
    func: Callable[[int], T],
    count: int,
    config: ProofConfig,
) -> list[T]:
    """
    Apply func to 0..count-1, on a thread pool when config allows.

    Results are returned in index order regardless of completion order.
    """
    if config.max_workers <= 1 or count <= 1:
        return [func(i) for i in range(count)]
    with concurrent.futures.ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        return list(pool.map(func, range(count)))


def first_failure(results: Sequence[VerificationResult | None]) -> VerificationResult | None:
    for result in results:
        if result is not None:
            return result
    return None
