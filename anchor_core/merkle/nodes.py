"""
Merkle node hashing shared by the account tree builder and the verifiers.

A parent is the hash of a one-byte domain tag followed by the ordered
concatenation of up to `fanout` children. Groups of leaves take
LEAF_GROUP_TAG and groups of internal nodes take NODE_GROUP_TAG, so an
internal node can never be passed off as a leaf on a shortened path (or a
leaf as an internal node on a lengthened one).

When the config pads partial groups, an under-full group is filled with
`empty_child` before hashing; otherwise only the present children are hashed.
"""
from __future__ import annotations

from typing import Sequence

from anchor_core.config.runtime import ProofConfig

# Domain separation tags
LEAF_GROUP_TAG = b"\x00"
NODE_GROUP_TAG = b"\x01"


def pad_group(children: Sequence[bytes], config: ProofConfig) -> list[bytes]:
    """Return children padded to a full group when padding is enabled."""
    group = list(children)
    if config.pad_partial_groups and len(group) < config.fanout:
        group.extend([config.empty_child] * (config.fanout - len(group)))
    return group


def group_tag(height: int) -> bytes:
    """Domain tag for a group whose children sit at height (0 = leaves)."""
    return LEAF_GROUP_TAG if height == 0 else NODE_GROUP_TAG


def hash_group(children: Sequence[bytes], config: ProofConfig, height: int) -> bytes:
    """Hash one group of sibling nodes at height into their parent."""
    return config.digest_parts([group_tag(height), *pad_group(children, config)])
