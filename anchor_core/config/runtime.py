"""
Runtime Configuration

Constants the proof builder and verifier must agree on. A ProofConfig is
passed explicitly to every build and verify call; builder and verifier given
the same config compute the same roots.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Iterable

from dotenv import load_dotenv

from anchor_core.crypto.hashing import (
    HASH_BYTES,
    SUPPORTED_HASH_ALGORITHMS,
    from_hex,
    hash_bytes,
    hashv,
    to_hex,
)
from anchor_core.schemas.errors import ConfigurationException

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_FANOUT = 16
DEFAULT_CHUNK_SIZE = 915
DEFAULT_HISTORY_WINDOW = 512
EMPTY_CHILD = bytes(HASH_BYTES)

# Environment variable -> ProofConfig field
_ENV_FIELDS: dict[str, str] = {
    "ANCHOR_HASH_ALGORITHM": "hash_algorithm",
    "ANCHOR_MERKLE_FANOUT": "fanout",
    "ANCHOR_CHUNK_SIZE": "chunk_size",
    "ANCHOR_HISTORY_WINDOW": "history_window",
    "ANCHOR_PAD_PARTIAL_GROUPS": "pad_partial_groups",
    "ANCHOR_MAX_WORKERS": "max_workers",
}

_INT_FIELDS = ("fanout", "chunk_size", "history_window", "max_workers")


def _parse_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    raise ConfigurationException(
        f"Expected a boolean for {name}, got {raw!r}",
        field_name=name,
    )


def _parse_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigurationException(
            f"Expected an integer for {name}, got {raw!r}",
            field_name=name,
        )
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationException(
            f"Expected an integer for {name}, got {raw!r}",
            field_name=name,
        ) from e


def _parse_hash(name: str, raw: Any) -> bytes:
    if isinstance(raw, str):
        try:
            raw = from_hex(raw)
        except ValueError as e:
            raise ConfigurationException(str(e), field_name=name) from e
    if not isinstance(raw, (bytes, bytearray)):
        raise ConfigurationException(
            f"Expected bytes or 0x-hex for {name}, got {type(raw).__name__}",
            field_name=name,
        )
    return bytes(raw)


@dataclass(frozen=True)
class ProofConfig:
    """
    Protocol constants for building and verifying proofs.

    Can be loaded from:
    - Environment variables (ANCHOR_*), with .env support
    - YAML file
    - Programmatic construction

    The defaults pad under-full Merkle groups with `empty_child`;
    `chain_compatible()` disables padding so trailing groups hash only their
    present children.
    """
    hash_algorithm: str = "sha256"
    fanout: int = DEFAULT_FANOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    history_window: int = DEFAULT_HISTORY_WINDOW
    pad_partial_groups: bool = True
    empty_child: bytes = EMPTY_CHILD
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.hash_algorithm not in SUPPORTED_HASH_ALGORITHMS:
            raise ConfigurationException(
                f"Unsupported hash algorithm {self.hash_algorithm!r}",
                field_name="hash_algorithm",
                details={"supported": sorted(SUPPORTED_HASH_ALGORITHMS)},
            )
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationException(
                    f"{name} must be an integer, got {value!r}",
                    field_name=name,
                )
        if self.fanout < 2:
            raise ConfigurationException(
                f"fanout must be at least 2, got {self.fanout}",
                field_name="fanout",
            )
        if self.chunk_size < 1:
            raise ConfigurationException(
                f"chunk_size must be positive, got {self.chunk_size}",
                field_name="chunk_size",
            )
        if self.history_window < 1:
            raise ConfigurationException(
                f"history_window must be positive, got {self.history_window}",
                field_name="history_window",
            )
        if self.max_workers < 1:
            raise ConfigurationException(
                f"max_workers must be positive, got {self.max_workers}",
                field_name="max_workers",
            )
        if not isinstance(self.pad_partial_groups, bool):
            raise ConfigurationException(
                "pad_partial_groups must be a boolean",
                field_name="pad_partial_groups",
            )
        if not isinstance(self.empty_child, bytes) or len(self.empty_child) != HASH_BYTES:
            raise ConfigurationException(
                f"empty_child must be {HASH_BYTES} bytes",
                field_name="empty_child",
            )

    @property
    def empty_root(self) -> bytes:
        """Root of a tree with no leaves: H(b"")."""
        return hash_bytes(b"", self.hash_algorithm)

    def digest(self, data: bytes) -> bytes:
        """Hash raw bytes with the configured algorithm."""
        return hash_bytes(data, self.hash_algorithm)

    def digest_parts(self, parts: Iterable[bytes]) -> bytes:
        """Hash the concatenation of parts with the configured algorithm."""
        return hashv(parts, self.hash_algorithm)

    @classmethod
    def chain_compatible(cls, **overrides: Any) -> "ProofConfig":
        """Preset with the chain's group layout: no padding of trailing groups."""
        return cls(**{"pad_partial_groups": False, **overrides})

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - ANCHOR_HASH_ALGORITHM: sha256, sha3_256 or blake2s
        - ANCHOR_MERKLE_FANOUT: Merkle arity
        - ANCHOR_CHUNK_SIZE: bytes per blob chunk
        - ANCHOR_HISTORY_WINDOW: retained slot-history entries
        - ANCHOR_PAD_PARTIAL_GROUPS: pad under-full groups (true/false)
        - ANCHOR_MAX_WORKERS: threads for per-blob compound checks
        """
        overrides: dict[str, Any] = {}
        for env_var, name in _ENV_FIELDS.items():
            raw = os.getenv(env_var)
            if raw:
                overrides[name] = raw
        return overrides

    @classmethod
    def from_env(cls) -> "ProofConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ProofConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationException(
                f"Config file must contain a mapping, got {type(data).__name__}",
                details={"path": str(path)},
            )
        logger.debug(f"Loaded proof config from {path}")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProofConfig":
        """Load configuration from a dictionary (supports partial data)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationException(
                f"Unknown config keys: {unknown}",
                details={"unknown": unknown},
            )

        kwargs: dict[str, Any] = {}
        for name, raw in data.items():
            if name in _INT_FIELDS:
                kwargs[name] = _parse_int(name, raw)
            elif name == "pad_partial_groups":
                kwargs[name] = _parse_bool(name, raw)
            elif name == "empty_child":
                kwargs[name] = _parse_hash(name, raw)
            else:
                kwargs[name] = str(raw)
        return cls(**kwargs)

    def with_env_overrides(self) -> "ProofConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        logger.debug(f"Applying env overrides to proof config: {sorted(overrides)}")
        merged = {**self.to_dict(), **overrides}
        return self.from_dict(merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm,
            "fanout": self.fanout,
            "chunk_size": self.chunk_size,
            "history_window": self.history_window,
            "pad_partial_groups": self.pad_partial_groups,
            "empty_child": to_hex(self.empty_child),
            "max_workers": self.max_workers,
        }


DEFAULT_CONFIG = ProofConfig()


def resolve_config(config: ProofConfig | None) -> ProofConfig:
    """Return config, or the built-in defaults when None."""
    return DEFAULT_CONFIG if config is None else config
