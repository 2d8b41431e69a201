"""
Module 02 - Leaf Encoder

Serializes leaf records (address + amount, index + address, ...) into
canonical bytes and hashes them into 32-byte leaf digests.

Usage:
    from core.encoding import LeafEncoder, LeafSchema, LeafEncoding

    schema = LeafSchema.from_types(["address", "uint256"], ["address", "amount"])
    encoder = LeafEncoder(schema, LeafEncoding.PACKED)
    leaves = encoder.digest_all(records)
"""
from .leaf_encoder import (
    LeafEncoding,
    LeafSchema,
    LeafEncoder,
    validate_abi_type,
    coerce_field,
    field_to_json,
)

__all__ = [
    "LeafEncoding",
    "LeafSchema",
    "LeafEncoder",
    "validate_abi_type",
    "coerce_field",
    "field_to_json",
]
