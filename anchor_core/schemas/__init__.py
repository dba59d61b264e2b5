"""
Schemas & Wire Format
File: __init__.py

Purpose: Export the shared result, error and serialization types.
The proof wire codec lives in anchor_core.schemas.wire; it depends on every
proof type and is imported from there directly.
"""

# Version constants
from .versioning import (
    FORMAT_VERSION,
    SUPPORTED_FORMAT_VERSIONS,
    UnsupportedFormatVersionError,
    assert_supported_format_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_bytes,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    ChunkValidationException,
    ConfigurationException,
    ErrorCodes,
    ProofError,
    ProofException,
    ProofStage,
    Stages,
    StructuralException,
    WireFormatException,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

__all__ = [
    # Versioning
    "FORMAT_VERSION",
    "SUPPORTED_FORMAT_VERSIONS",
    "UnsupportedFormatVersionError",
    "assert_supported_format_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_bytes",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "CanonicalizationException",
    "ChunkValidationException",
    "ConfigurationException",
    "ErrorCodes",
    "ProofError",
    "ProofException",
    "ProofStage",
    "Stages",
    "StructuralException",
    "WireFormatException",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
