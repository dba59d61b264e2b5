"""
Slot History Proof

Ties a (slot, bank_hash) pair to the chain's bounded recent-history record.
The snapshot is ordered newest first; a slot older than the retained window
has expired, which is reported as SLOT_NOT_FOUND rather than a hash mismatch
so callers can tell a stale proof from tampered data.

A transported snapshot is only evidence. Verification anchors it to a
history the verifier already trusts, for example one read from its own node.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

from anchor_core.config.runtime import ProofConfig, resolve_config
from anchor_core.crypto.hashing import HASH_BYTES, to_hex
from anchor_core.schemas.errors import ErrorCodes, Stages, StructuralException
from anchor_core.schemas.verification import CheckResult, VerificationResult

U64_MAX = 2**64 - 1

CHECK_SLOT_HISTORY = "slot_history"

# Which history a missing slot was looked up in
PROOF_SOURCE = "proof"
TRUSTED_SOURCE = "trusted"

# Binary record layout: u64 count, then count x (u64 slot, 32-byte hash)
_COUNT = struct.Struct("<Q")
_ENTRY = struct.Struct(f"<Q{HASH_BYTES}s")


@dataclass(frozen=True)
class SlotHistorySnapshot:
    """Recent (slot, bank_hash) entries, strictly descending by slot."""
    entries: tuple[tuple[int, bytes], ...]

    def __post_init__(self) -> None:
        entries = tuple((int(slot), bytes(bank_hash)) for slot, bank_hash in self.entries)
        object.__setattr__(self, "entries", entries)
        for i, (slot, bank_hash) in enumerate(entries):
            if not 0 <= slot <= U64_MAX:
                raise StructuralException(
                    f"Slot {slot} does not fit in u64",
                    details={"position": i},
                )
            if len(bank_hash) != HASH_BYTES:
                raise StructuralException(
                    f"Bank hash for slot {slot} is not {HASH_BYTES} bytes",
                    details={"position": i, "slot": slot},
                )
            if i > 0 and slot >= entries[i - 1][0]:
                raise StructuralException(
                    f"Slot history must be strictly descending: {entries[i - 1][0]} then {slot}",
                    details={"position": i, "slot": slot},
                )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, bytes]]) -> "SlotHistorySnapshot":
        return cls(entries=tuple(pairs))

    @classmethod
    def from_sysvar_bytes(cls, data: bytes) -> "SlotHistorySnapshot":
        """
        Decode the chain's binary history record.

        Raises:
            StructuralException: If the buffer is truncated or has trailing bytes.
        """
        if len(data) < _COUNT.size:
            raise StructuralException("Slot history record is shorter than its length prefix")
        (count,) = _COUNT.unpack_from(data, 0)
        expected = _COUNT.size + count * _ENTRY.size
        if len(data) != expected:
            raise StructuralException(
                f"Slot history record is {len(data)} bytes, expected {expected} for {count} entries",
                details={"count": count, "length": len(data)},
            )
        return cls(entries=tuple(
            _ENTRY.unpack_from(data, _COUNT.size + i * _ENTRY.size) for i in range(count)
        ))

    def to_sysvar_bytes(self) -> bytes:
        """Encode in the chain's binary history record layout."""
        return _COUNT.pack(len(self.entries)) + b"".join(
            _ENTRY.pack(slot, bank_hash) for slot, bank_hash in self.entries
        )

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def newest_slot(self) -> int | None:
        return self.entries[0][0] if self.entries else None

    @property
    def oldest_slot(self) -> int | None:
        return self.entries[-1][0] if self.entries else None

    def get(self, slot: int) -> bytes | None:
        """Bank hash recorded for slot, or None."""
        for entry_slot, bank_hash in self.entries:
            if entry_slot == slot:
                return bank_hash
            if entry_slot < slot:
                break
        return None


@dataclass(frozen=True)
class SlotHashProof:
    """A history snapshot offered as evidence for one slot."""
    slot: int
    history: SlotHistorySnapshot

    def verify(
        self,
        slot: int,
        bank_hash: bytes,
        trusted_history: SlotHistorySnapshot,
        config: ProofConfig | None = None,
    ) -> VerificationResult:
        return verify_slot_hash(self, slot, bank_hash, trusted_history, config=config)


def _fail(code: str, message: str, details: dict | None = None) -> VerificationResult:
    return VerificationResult.failure(
        stage=Stages.SLOT_HISTORY,
        code=code,
        message=message,
        details=details,
        check_id=CHECK_SLOT_HISTORY,
    )


def slot_not_found(
    history: SlotHistorySnapshot,
    slot: int,
    source: str = PROOF_SOURCE,
) -> VerificationResult:
    """SLOT_NOT_FOUND failure that says where slot falls relative to the window."""
    if not len(history):
        position = "empty_history"
    elif slot < history.oldest_slot:
        position = "older_than_window"
    elif slot > history.newest_slot:
        position = "newer_than_head"
    else:
        position = "skipped_slot"
    return _fail(
        ErrorCodes.SLOT_NOT_FOUND,
        f"Slot {slot} is not in the {source} slot history ({position})",
        {
            "slot": slot,
            "position": position,
            "source": source,
            "oldest_slot": history.oldest_slot,
            "newest_slot": history.newest_slot,
        },
    )


def trusted_bank_hash(
    trusted_history: SlotHistorySnapshot,
    slot: int,
) -> tuple[bytes | None, VerificationResult | None]:
    """
    The bank hash the verifier's own history records for slot.

    Returns:
        (bank_hash, None), or (None, SLOT_NOT_FOUND failure) when the trusted
        history does not hold slot.
    """
    recorded = trusted_history.get(slot)
    if recorded is None:
        return None, slot_not_found(trusted_history, slot, TRUSTED_SOURCE)
    return recorded, None


def verify_slot_hash(
    proof: SlotHashProof,
    slot: int,
    bank_hash: bytes,
    trusted_history: SlotHistorySnapshot,
    config: ProofConfig | None = None,
) -> VerificationResult:
    """
    Verify that the proof's history records bank_hash for slot and agrees
    with the verifier's trusted history.

    The transported snapshot is never trusted on its own: slot and bank_hash
    must also appear in trusted_history, and every slot the two histories
    share must carry the same bank hash.

    Fails at stage slot_history with INVALID_PROOF_SHAPE (proof for a
    different slot, or a snapshot longer than the window), SLOT_NOT_FOUND
    (details["source"] names the history missing the slot), or HASH_MISMATCH.
    """
    config = resolve_config(config)
    history = proof.history

    if proof.slot != slot:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            f"Slot proof is for slot {proof.slot}, expected {slot}",
            {"proof_slot": proof.slot, "slot": slot},
        )
    if len(history) > config.history_window:
        return _fail(
            ErrorCodes.INVALID_PROOF_SHAPE,
            f"Slot history has {len(history)} entries, window is {config.history_window}",
            {"entries": len(history), "history_window": config.history_window},
        )

    recorded = history.get(slot)
    if recorded is None:
        return slot_not_found(history, slot)
    if recorded != bank_hash:
        return _fail(
            ErrorCodes.HASH_MISMATCH,
            f"Slot history records a different bank hash for slot {slot}",
            {"slot": slot, "expected": to_hex(bank_hash), "recorded": to_hex(recorded)},
        )

    trusted, failure = trusted_bank_hash(trusted_history, slot)
    if failure is not None:
        return failure
    if trusted != bank_hash:
        return _fail(
            ErrorCodes.HASH_MISMATCH,
            f"Trusted slot history records a different bank hash for slot {slot}",
            {"slot": slot, "expected": to_hex(trusted), "recorded": to_hex(bank_hash)},
        )

    known_hashes = dict(trusted_history.entries)
    for entry_slot, entry_hash in history.entries:
        known = known_hashes.get(entry_slot)
        if known is not None and known != entry_hash:
            return _fail(
                ErrorCodes.HASH_MISMATCH,
                f"Slot history disagrees with the trusted history at slot {entry_slot}",
                {"slot": entry_slot, "expected": to_hex(known), "recorded": to_hex(entry_hash)},
            )

    return VerificationResult.success([
        CheckResult.passed(
            CHECK_SLOT_HISTORY,
            stage=Stages.SLOT_HISTORY,
            message=f"Slot {slot} and its bank hash are in the trusted slot history",
            details={"slot": slot, "bank_hash": to_hex(bank_hash)},
        )
    ])
