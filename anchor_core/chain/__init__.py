"""Bank hash and slot history proofs."""
from .bank_hash import BankHashProof, verify_bank_hash, verify_blockhash
from .slot_hash import SlotHashProof, SlotHistorySnapshot, trusted_bank_hash, verify_slot_hash

__all__ = [
    "BankHashProof",
    "verify_bank_hash",
    "verify_blockhash",
    "SlotHashProof",
    "SlotHistorySnapshot",
    "trusted_bank_hash",
    "verify_slot_hash",
]
