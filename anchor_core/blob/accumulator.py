"""
Blob Chunk Accumulator

Folds the chunks of one blob into a single running digest:

    digest_0 = H(chunk_0)
    digest_i = H(digest_{i-1} ++ chunk_i)

The result is independent of how the chunks are batched, so a blob can be
accumulated across many uploads and still match accumulate_digest() over the
whole chunk list. Every batch is validated in full before any of it is hashed;
a rejected batch leaves the accumulator unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from anchor_core.config.runtime import DEFAULT_CHUNK_SIZE, ProofConfig, resolve_config
from anchor_core.schemas.errors import ChunkValidationException, ErrorCodes


@dataclass(frozen=True)
class Chunk:
    """One contiguous slice of a blob, identified by its position."""
    index: int
    payload: bytes

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Chunk index must be non-negative, got {self.index}")


def chunk_blob(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    """
    Split raw bytes into contiguous chunks numbered from 0.

    The last chunk may be shorter than chunk_size. Empty data yields no chunks.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        Chunk(index=i, payload=bytes(data[offset:offset + chunk_size]))
        for i, offset in enumerate(range(0, len(data), chunk_size))
    ]


class ChunkDigestAccumulator:
    """
    Incremental blob digest.

    Example:
        >>> acc = ChunkDigestAccumulator()
        >>> acc.update([Chunk(0, b"a"), Chunk(1, b"b")])
        >>> acc.update([Chunk(2, b"c")])
        >>> acc.digest() == accumulate_digest(chunk_blob(b"abc", 1))
        True
    """

    def __init__(self, config: ProofConfig | None = None) -> None:
        self._config = resolve_config(config)
        self._digest: bytes | None = None
        self._next_index = 0

    @property
    def chunks_seen(self) -> int:
        """Number of chunks folded so far."""
        return self._next_index

    def _validate_batch(self, chunks: Sequence[Chunk]) -> None:
        expected = self._next_index
        for position, chunk in enumerate(chunks):
            if chunk.index < expected:
                raise ChunkValidationException(
                    f"Chunk index {chunk.index} was already accumulated",
                    code=ErrorCodes.DUPLICATE_INDEX,
                    index=chunk.index,
                    details={"position": position},
                )
            if chunk.index != expected:
                raise ChunkValidationException(
                    f"Expected chunk index {expected}, got {chunk.index}",
                    code=ErrorCodes.INDEX_GAP,
                    index=chunk.index,
                    details={"position": position, "expected": expected},
                )
            expected += 1

    def update(self, chunks: Iterable[Chunk]) -> None:
        """
        Fold a batch of chunks into the running digest.

        Raises:
            ChunkValidationException: INDEX_GAP if a chunk is not the next
                expected index, DUPLICATE_INDEX if it repeats one already
                accumulated. Nothing from the batch is folded in that case.
        """
        batch = list(chunks)
        self._validate_batch(batch)

        digest = self._digest
        for chunk in batch:
            if digest is None:
                digest = self._config.digest(chunk.payload)
            else:
                digest = self._config.digest_parts((digest, chunk.payload))
        self._digest = digest
        self._next_index += len(batch)

    def digest(self) -> bytes:
        """
        Return the blob digest of every chunk accumulated so far.

        Raises:
            ChunkValidationException: EMPTY_INPUT if no chunk was accumulated.
        """
        if self._digest is None:
            raise ChunkValidationException(
                "Cannot digest a blob with no chunks",
                code=ErrorCodes.EMPTY_INPUT,
            )
        return self._digest


def accumulate_digest(chunks: Iterable[Chunk], config: ProofConfig | None = None) -> bytes:
    """
    Compute the blob digest of a full, ordered chunk sequence.

    Raises:
        ChunkValidationException: EMPTY_INPUT, INDEX_GAP or DUPLICATE_INDEX.
    """
    accumulator = ChunkDigestAccumulator(config)
    accumulator.update(chunks)
    return accumulator.digest()
