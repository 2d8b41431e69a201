"""
Core cryptographic utilities.

Module 01 provides the hash primitives and hex codec used by every
other module.
"""
from .hashing import (
    DIGEST_SIZE,
    Hasher,
    HashFunction,
    keccak256,
    sha256,
    get_hasher,
    hash_concat,
    to_hex,
    from_hex,
    digest_from_hex,
)

__all__ = [
    "DIGEST_SIZE",
    "Hasher",
    "HashFunction",
    "keccak256",
    "sha256",
    "get_hasher",
    "hash_concat",
    "to_hex",
    "from_hex",
    "digest_from_hex",
]
