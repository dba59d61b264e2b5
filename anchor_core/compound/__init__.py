"""Compound proofs: blob-to-slot inclusion and namespace completeness."""
from .inclusion import CompoundInclusionProof, verify_compound_inclusion
from .completeness import CompoundCompletenessProof, verify_compound_completeness

__all__ = [
    "CompoundInclusionProof",
    "verify_compound_inclusion",
    "CompoundCompletenessProof",
    "verify_compound_completeness",
]
