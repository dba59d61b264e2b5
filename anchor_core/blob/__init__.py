"""Blob digests and blob proofs."""
from .accumulator import Chunk, ChunkDigestAccumulator, accumulate_digest, chunk_blob
from .blob_proof import BlobProof, verify_blob

__all__ = [
    "Chunk",
    "ChunkDigestAccumulator",
    "accumulate_digest",
    "chunk_blob",
    "BlobProof",
    "verify_blob",
]
