"""
Runtime Configuration Module

Provides configuration loading for the proof builder and verifier.
"""

from .runtime import (
    DEFAULT_CONFIG,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FANOUT,
    DEFAULT_HISTORY_WINDOW,
    EMPTY_CHILD,
    ProofConfig,
    resolve_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_FANOUT",
    "DEFAULT_HISTORY_WINDOW",
    "EMPTY_CHILD",
    "ProofConfig",
    "resolve_config",
]
