"""
Schemas & Wire Format
File: wire.py

Purpose: Versioned, tagged serialization of every proof type for storage and
transport. Proofs are written as a canonical JSON envelope:

    {"format_version": "v1", "kind": "<proof kind>", "payload": {...}}

Hashes are 0x-prefixed lowercase hex; integers are JSON integers with range
checks. Exclusion variants carry their own `kind` tag (empty, left, right,
inner) and decode through a discriminated union.
"""

from __future__ import annotations

import json
import re
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from anchor_core.blob.blob_proof import BlobProof
from anchor_core.chain.bank_hash import BankHashProof
from anchor_core.chain.slot_hash import SlotHashProof, SlotHistorySnapshot
from anchor_core.compound.completeness import CompoundCompletenessProof
from anchor_core.compound.inclusion import CompoundInclusionProof
from anchor_core.crypto.hashing import from_hex, hash_canonical, to_hex
from anchor_core.merkle.exclusion import (
    ExclusionEmptyProof,
    ExclusionInnerProof,
    ExclusionLeftProof,
    ExclusionRightProof,
)
from anchor_core.merkle.inclusion import InclusionProof, InclusionProofLevel

from .canonical import dumps_canonical
from .errors import ErrorCodes, ProofException, WireFormatException
from .versioning import FORMAT_VERSION, UnsupportedFormatVersionError, assert_supported_format_version


# Regex pattern for validating hex strings (0x followed by 64 hex chars = 32 bytes)
HEX_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

ProofKind = Literal[
    "inclusion",
    "exclusion",
    "blob",
    "bank_hash",
    "slot_hash",
    "compound_inclusion",
    "compound_completeness",
]


def validate_hex_hash(value: str, field_name: str) -> str:
    """Validate that a value is a valid 32-byte hex hash with 0x prefix."""
    if not HEX_HASH_PATTERN.match(value):
        shown = f"{value[:20]}..." if len(value) > 20 else value
        raise ValueError(
            f"{field_name} must be a valid 32-byte hex string with 0x prefix "
            f"(64 hex chars), got: {shown}"
        )
    return value.lower()


# =============================================================================
# Merkle paths
# =============================================================================

class WireInclusionLevel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    siblings: list[str] = Field(default_factory=list)
    index: int = Field(..., ge=0)

    @field_validator("siblings")
    @classmethod
    def _validate_siblings(cls, v: list[str]) -> list[str]:
        return [validate_hex_hash(s, f"siblings[{i}]") for i, s in enumerate(v)]


class WireInclusionProof(BaseModel):
    model_config = ConfigDict(extra="forbid")

    leaf: str
    levels: list[WireInclusionLevel]

    @field_validator("leaf")
    @classmethod
    def _validate_leaf(cls, v: str) -> str:
        return validate_hex_hash(v, "leaf")

    @classmethod
    def from_proof(cls, proof: InclusionProof) -> "WireInclusionProof":
        return cls(
            leaf=to_hex(proof.leaf),
            levels=[
                WireInclusionLevel(siblings=[to_hex(s) for s in level.siblings], index=level.index)
                for level in proof.levels
            ],
        )

    def to_proof(self) -> InclusionProof:
        return InclusionProof(
            leaf=from_hex(self.leaf),
            levels=tuple(
                InclusionProofLevel(
                    siblings=tuple(from_hex(s) for s in level.siblings),
                    index=level.index,
                )
                for level in self.levels
            ),
        )


class WireExclusionEmpty(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["empty"] = "empty"

    def to_proof(self) -> ExclusionEmptyProof:
        return ExclusionEmptyProof()


class WireExclusionLeft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["left"] = "left"
    path: WireInclusionProof

    def to_proof(self) -> ExclusionLeftProof:
        return ExclusionLeftProof(path=self.path.to_proof())


class WireExclusionRight(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["right"] = "right"
    path: WireInclusionProof

    def to_proof(self) -> ExclusionRightProof:
        return ExclusionRightProof(path=self.path.to_proof())


class WireExclusionInner(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["inner"] = "inner"
    left: WireInclusionProof
    right: WireInclusionProof

    def to_proof(self) -> ExclusionInnerProof:
        return ExclusionInnerProof(left=self.left.to_proof(), right=self.right.to_proof())


WireExclusionProof = Annotated[
    Union[WireExclusionEmpty, WireExclusionLeft, WireExclusionRight, WireExclusionInner],
    Field(discriminator="kind"),
]

_EXCLUSION_ADAPTER: TypeAdapter = TypeAdapter(WireExclusionProof)


def exclusion_to_wire(proof: Any) -> BaseModel:
    if isinstance(proof, ExclusionEmptyProof):
        return WireExclusionEmpty()
    if isinstance(proof, ExclusionLeftProof):
        return WireExclusionLeft(path=WireInclusionProof.from_proof(proof.path))
    if isinstance(proof, ExclusionRightProof):
        return WireExclusionRight(path=WireInclusionProof.from_proof(proof.path))
    if isinstance(proof, ExclusionInnerProof):
        return WireExclusionInner(
            left=WireInclusionProof.from_proof(proof.left),
            right=WireInclusionProof.from_proof(proof.right),
        )
    raise WireFormatException(f"Not an exclusion proof: {type(proof).__name__}")


# =============================================================================
# Blob & chain proofs
# =============================================================================

class WireBlobProof(BaseModel):
    model_config = ConfigDict(extra="forbid")

    address: str
    digest: str
    blob_size: int = Field(..., ge=0, le=U32_MAX)

    @field_validator("address", "digest")
    @classmethod
    def _validate_hashes(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_hash(v, info.field_name)

    @classmethod
    def from_proof(cls, proof: BlobProof) -> "WireBlobProof":
        return cls(
            address=to_hex(proof.address),
            digest=to_hex(proof.digest),
            blob_size=proof.blob_size,
        )

    def to_proof(self) -> BlobProof:
        return BlobProof(
            address=from_hex(self.address),
            digest=from_hex(self.digest),
            blob_size=self.blob_size,
        )


class WireBankHashProof(BaseModel):
    model_config = ConfigDict(extra="forbid")

    parent_bank_hash: str
    accounts_delta_hash: str
    signature_count: int = Field(..., ge=0, le=U64_MAX)
    blockhash: str

    @field_validator("parent_bank_hash", "accounts_delta_hash", "blockhash")
    @classmethod
    def _validate_hashes(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_hash(v, info.field_name)

    @classmethod
    def from_proof(cls, proof: BankHashProof) -> "WireBankHashProof":
        return cls(
            parent_bank_hash=to_hex(proof.parent_bank_hash),
            accounts_delta_hash=to_hex(proof.accounts_delta_hash),
            signature_count=proof.signature_count,
            blockhash=to_hex(proof.blockhash),
        )

    def to_proof(self) -> BankHashProof:
        return BankHashProof(
            parent_bank_hash=from_hex(self.parent_bank_hash),
            accounts_delta_hash=from_hex(self.accounts_delta_hash),
            signature_count=self.signature_count,
            blockhash=from_hex(self.blockhash),
        )


class WireSlotHistoryEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    slot: int = Field(..., ge=0, le=U64_MAX)
    bank_hash: str

    @field_validator("bank_hash")
    @classmethod
    def _validate_bank_hash(cls, v: str) -> str:
        return validate_hex_hash(v, "bank_hash")


class WireSlotHashProof(BaseModel):
    model_config = ConfigDict(extra="forbid")

    slot: int = Field(..., ge=0, le=U64_MAX)
    history: list[WireSlotHistoryEntry]

    @classmethod
    def from_proof(cls, proof: SlotHashProof) -> "WireSlotHashProof":
        return cls(
            slot=proof.slot,
            history=[
                WireSlotHistoryEntry(slot=slot, bank_hash=to_hex(bank_hash))
                for slot, bank_hash in proof.history.entries
            ],
        )

    def to_proof(self) -> SlotHashProof:
        return SlotHashProof(
            slot=self.slot,
            history=SlotHistorySnapshot.from_pairs(
                (entry.slot, from_hex(entry.bank_hash)) for entry in self.history
            ),
        )


# =============================================================================
# Compound proofs
# =============================================================================

class WireBlobInclusion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    blob: WireBlobProof
    inclusion: WireInclusionProof


class WireCompoundInclusion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_slot: int = Field(..., ge=0, le=U64_MAX)
    bank_hash_proof: WireBankHashProof
    slot_hash_proof: WireSlotHashProof
    blob_proofs: list[WireBlobInclusion]

    @classmethod
    def from_proof(cls, proof: CompoundInclusionProof) -> "WireCompoundInclusion":
        return cls(
            target_slot=proof.target_slot,
            bank_hash_proof=WireBankHashProof.from_proof(proof.bank_hash_proof),
            slot_hash_proof=WireSlotHashProof.from_proof(proof.slot_hash_proof),
            blob_proofs=[
                WireBlobInclusion(
                    blob=WireBlobProof.from_proof(blob),
                    inclusion=WireInclusionProof.from_proof(inclusion),
                )
                for blob, inclusion in proof.blob_proofs
            ],
        )

    def to_proof(self) -> CompoundInclusionProof:
        return CompoundInclusionProof(
            target_slot=self.target_slot,
            bank_hash_proof=self.bank_hash_proof.to_proof(),
            slot_hash_proof=self.slot_hash_proof.to_proof(),
            blob_proofs=tuple(
                (entry.blob.to_proof(), entry.inclusion.to_proof())
                for entry in self.blob_proofs
            ),
        )


class WireCompoundCompleteness(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_slot: int = Field(..., ge=0, le=U64_MAX)
    bank_hash_proof: WireBankHashProof
    slot_hash_proof: WireSlotHashProof
    exclusion_proof: WireExclusionProof

    @classmethod
    def from_proof(cls, proof: CompoundCompletenessProof) -> "WireCompoundCompleteness":
        return cls(
            target_slot=proof.target_slot,
            bank_hash_proof=WireBankHashProof.from_proof(proof.bank_hash_proof),
            slot_hash_proof=WireSlotHashProof.from_proof(proof.slot_hash_proof),
            exclusion_proof=exclusion_to_wire(proof.exclusion_proof),
        )

    def to_proof(self) -> CompoundCompletenessProof:
        return CompoundCompletenessProof(
            target_slot=self.target_slot,
            bank_hash_proof=self.bank_hash_proof.to_proof(),
            slot_hash_proof=self.slot_hash_proof.to_proof(),
            exclusion_proof=self.exclusion_proof.to_proof(),
        )


# =============================================================================
# Envelope
# =============================================================================

class ProofEnvelope(BaseModel):
    """Versioned wrapper written around every serialized proof."""

    model_config = ConfigDict(extra="forbid")

    format_version: str = Field(default=FORMAT_VERSION)
    kind: ProofKind
    payload: dict[str, Any]


_PAYLOAD_MODELS: dict[str, type[BaseModel]] = {
    "inclusion": WireInclusionProof,
    "blob": WireBlobProof,
    "bank_hash": WireBankHashProof,
    "slot_hash": WireSlotHashProof,
    "compound_inclusion": WireCompoundInclusion,
    "compound_completeness": WireCompoundCompleteness,
}

_EXCLUSION_TYPES = (ExclusionEmptyProof, ExclusionLeftProof, ExclusionRightProof, ExclusionInnerProof)


def to_wire(proof: Any) -> tuple[str, BaseModel]:
    """Return the (kind, wire model) pair for a proof object."""
    if isinstance(proof, InclusionProof):
        return "inclusion", WireInclusionProof.from_proof(proof)
    if isinstance(proof, _EXCLUSION_TYPES):
        return "exclusion", exclusion_to_wire(proof)
    if isinstance(proof, BlobProof):
        return "blob", WireBlobProof.from_proof(proof)
    if isinstance(proof, BankHashProof):
        return "bank_hash", WireBankHashProof.from_proof(proof)
    if isinstance(proof, SlotHashProof):
        return "slot_hash", WireSlotHashProof.from_proof(proof)
    if isinstance(proof, CompoundInclusionProof):
        return "compound_inclusion", WireCompoundInclusion.from_proof(proof)
    if isinstance(proof, CompoundCompletenessProof):
        return "compound_completeness", WireCompoundCompleteness.from_proof(proof)
    raise WireFormatException(
        f"Cannot encode object of type {type(proof).__name__}",
        details={"type": type(proof).__name__},
    )


def encode_proof(proof: Any) -> str:
    """
    Serialize a proof to its canonical JSON envelope.

    Raises:
        WireFormatException: If the object is not a known proof type.
    """
    return dumps_canonical(_envelope(proof))


def _envelope(proof: Any) -> ProofEnvelope:
    kind, model = to_wire(proof)
    return ProofEnvelope(
        format_version=FORMAT_VERSION,
        kind=kind,
        payload=model.model_dump(mode="json"),
    )


def decode_proof(text: str | bytes) -> Any:
    """
    Parse a proof envelope back into the proof object.

    Raises:
        WireFormatException: UNSUPPORTED_FORMAT_VERSION for an unknown
            version, WIRE_DECODE_ERROR for any malformed content.
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as e:
        raise WireFormatException(f"Proof is not valid JSON: {e}") from e

    try:
        envelope = ProofEnvelope.model_validate(raw)
    except ValidationError as e:
        raise WireFormatException(
            f"Invalid proof envelope: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    try:
        assert_supported_format_version(envelope.format_version)
    except UnsupportedFormatVersionError as e:
        raise WireFormatException(
            str(e),
            code=ErrorCodes.UNSUPPORTED_FORMAT_VERSION,
            details={"format_version": envelope.format_version},
        ) from e

    try:
        if envelope.kind == "exclusion":
            model = _EXCLUSION_ADAPTER.validate_python(envelope.payload)
        else:
            model = _PAYLOAD_MODELS[envelope.kind].model_validate(envelope.payload)
        return model.to_proof()
    except ValidationError as e:
        raise WireFormatException(
            f"Invalid {envelope.kind} payload: {e.error_count()} error(s)",
            details={"kind": envelope.kind, "errors": e.errors(include_url=False, include_context=False)},
        ) from e
    except (ValueError, ProofException) as e:
        raise WireFormatException(
            f"Invalid {envelope.kind} payload: {e}",
            details={"kind": envelope.kind},
        ) from e


def proof_cache_key(proof: Any) -> str:
    """Stable cache key for a proof: SHA-256 hex of its canonical encoding."""
    return hash_canonical(_envelope(proof)).hex()
