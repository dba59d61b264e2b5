"""
Schemas & Wire Format
File: versioning.py

Purpose: Centralize wire-format version constants for serialized proofs.
Stored proofs outlive the process that generated them, so every envelope
carries one of these versions. This file has no imports from other schema
files to avoid circular dependencies.
"""

# Current wire format version written by encode_proof()
FORMAT_VERSION: str = "v1"

# Versions decode_proof() accepts
SUPPORTED_FORMAT_VERSIONS: frozenset[str] = frozenset({"v1"})


class UnsupportedFormatVersionError(ValueError):
    """Raised when an unsupported wire format version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_FORMAT_VERSIONS
        super().__init__(
            f"Unsupported proof format version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def assert_supported_format_version(version: str) -> None:
    """
    Validate that the given wire format version is supported.

    Args:
        version: The format version string to validate.

    Raises:
        UnsupportedFormatVersionError: If the version is not supported.
    """
    if version not in SUPPORTED_FORMAT_VERSIONS:
        raise UnsupportedFormatVersionError(version)
