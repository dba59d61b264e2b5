"""
Schemas & Wire Format
File: verification.py

Purpose: Standard result format for every verify_* operation.
Verifiers never raise on bad evidence; they return a VerificationResult
whose error names the failing stage.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ProofError, ProofStage


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    stage: ProofStage | None = Field(
        default=None,
        description="Pipeline stage the check belongs to",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @classmethod
    def passed(
        cls,
        check_id: str,
        stage: ProofStage | None = None,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            stage=stage,
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        stage: ProofStage | None = None,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            stage=stage,
            message=message,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Complete result of a verification call.

    On failure `stage` and `error` identify where the pipeline stopped;
    `checks` holds every check that ran, in order, up to and including the
    failing one.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(
        ...,
        description="Overall verification success",
    )
    stage: ProofStage | None = Field(
        default=None,
        description="Failing stage, None on success",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results",
    )
    error: ProofError | None = Field(
        default=None,
        description="Structured failure if verification did not succeed",
    )

    @property
    def code(self) -> str | None:
        """Error code of the failure, None on success."""
        return self.error.code if self.error else None

    @property
    def passed_count(self) -> int:
        """Count of passed checks."""
        return sum(1 for check in self.checks if check.ok)

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        """Create a successful verification result."""
        return cls(ok=True, checks=checks or [])

    @classmethod
    def failure(
        cls,
        stage: ProofStage,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        checks: list[CheckResult] | None = None,
        check_id: str | None = None,
    ) -> "VerificationResult":
        """Create a failed verification result, appending the failing check."""
        error = ProofError(code=code, message=message, stage=stage, details=details or {})
        failed = CheckResult.failed(
            check_id=check_id or stage,
            message=message,
            stage=stage,
            details={"code": code, **(details or {})},
        )
        return cls(
            ok=False,
            stage=stage,
            checks=[*(checks or []), failed],
            error=error,
        )

    def with_prior_checks(self, checks: list[CheckResult]) -> "VerificationResult":
        """Return a copy whose check list is prefixed by earlier pipeline checks."""
        return self.model_copy(update={"checks": [*checks, *self.checks]})
