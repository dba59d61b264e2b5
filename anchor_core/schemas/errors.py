"""
Schemas & Wire Format
File: errors.py

Purpose: Standard error taxonomy across the proof core.
Defines both Pydantic models for structured failure reporting
(verifiers never raise) and Python exceptions for builder-side errors
(fatal for the current build request).
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes & Stages (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the proof core."""

    # Build-time structure errors
    STRUCTURAL_ERROR = "STRUCTURAL_ERROR"

    # Chunk validation errors
    EMPTY_INPUT = "EMPTY_INPUT"
    INDEX_GAP = "INDEX_GAP"
    DUPLICATE_INDEX = "DUPLICATE_INDEX"

    # Verification errors
    HASH_MISMATCH = "HASH_MISMATCH"
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"
    ADJACENCY_VIOLATION = "ADJACENCY_VIOLATION"
    INVALID_PROOF_SHAPE = "INVALID_PROOF_SHAPE"
    BLOCKHASH_MISMATCH = "BLOCKHASH_MISMATCH"
    UNEXPECTED_ACCOUNT = "UNEXPECTED_ACCOUNT"

    # Configuration & serialization errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    UNSUPPORTED_FORMAT_VERSION = "UNSUPPORTED_FORMAT_VERSION"
    WIRE_DECODE_ERROR = "WIRE_DECODE_ERROR"


class Stages:
    """Pipeline stages a verification failure can be attributed to."""

    BLOB_DIGEST = "blob_digest"
    ACCOUNT_MEMBERSHIP = "account_membership"
    BANK_HASH = "bank_hash"
    SLOT_HISTORY = "slot_history"


ProofStage = Literal["blob_digest", "account_membership", "bank_hash", "slot_history"]


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class ProofError(BaseModel):
    """
    Structured failure passed back from verifiers instead of an exception.

    Every verification failure names the stage it happened in so a caller can
    tell a stale indexer (slot history) from tampered data (blob digest,
    account membership, bank hash).
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.HASH_MISMATCH],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    stage: ProofStage | None = Field(
        default=None,
        description="Pipeline stage that failed, if the error is stage-bound",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )


# =============================================================================
# Python Exceptions (Builder-Side Control Flow)
# =============================================================================

class ProofException(Exception):
    """
    Base exception for all proof core errors.

    This exception carries structured error information and can be
    converted to a ProofError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "PROOF_ERROR",
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.stage = stage
        self.details = details or {}

    def to_error_model(self, stage: str | None = None) -> ProofError:
        """Convert this exception to a ProofError model."""
        return ProofError(
            code=self.code,
            message=self.message,
            stage=stage or self.stage,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class StructuralException(ProofException):
    """Raised when a leaf set or history snapshot is malformed (unsorted, duplicate, wrong size)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.STRUCTURAL_ERROR,
            details=details,
        )


class ChunkValidationException(ProofException):
    """Raised when a chunk sequence is empty, has a gap, or repeats an index."""

    def __init__(
        self,
        message: str,
        code: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        super().__init__(
            message=message,
            code=code,
            stage=Stages.BLOB_DIGEST,
            details=full_details,
        )


class ConfigurationException(ProofException):
    """Raised when a ProofConfig value is invalid."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_name:
            full_details["field"] = field_name
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
        )


class CanonicalizationException(ProofException):
    """Raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class WireFormatException(ProofException):
    """Raised when a serialized proof cannot be decoded."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.WIRE_DECODE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
        )
