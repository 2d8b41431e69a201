"""
Module 04 - Batch Commitments

Builds { root, proofs[] } payloads from leaf records and verifies
proof bundles on the claiming side.

Usage:
    from core.commitment import build_batch, verify_bundle, save_batch

    batch = build_batch(records, encoder, policy)
    save_batch(batch, "merkle_data.json")
"""
from .batch import (
    describe_scheme,
    policy_from_descriptor,
    encoder_from_descriptor,
    build_bundle,
    batch_from_tree,
    build_batch,
    verify_bundle,
    verify_batch,
)
from .io import (
    RECORD_KEYS,
    load_records,
    save_batch,
    load_batch,
)

__all__ = [
    "describe_scheme",
    "policy_from_descriptor",
    "encoder_from_descriptor",
    "build_bundle",
    "batch_from_tree",
    "build_batch",
    "verify_bundle",
    "verify_batch",
    "RECORD_KEYS",
    "load_records",
    "save_batch",
    "load_batch",
]
