"""
Module 01 - Hashing Utilities
Hash primitives and hex helpers shared by leaf encoding and tree building.

Owner: Protocol/Crypto Engineer
Module ID: M01

This module provides:
- keccak-256 (Ethereum flavour, via eth-utils) and SHA-256 hashing
- A small registry mapping a HashFunction name to its callable
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Every digest is exactly DIGEST_SIZE (32) bytes
- Always hash raw bytes exactly as given
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
import re
from enum import Enum
from typing import Callable

from eth_utils import keccak


# Size in bytes of every leaf and node digest
DIGEST_SIZE: int = 32

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")

Hasher = Callable[[bytes], bytes]


class HashFunction(str, Enum):
    """Supported 256-bit hash primitives."""
    KECCAK256 = "keccak256"
    SHA256 = "sha256"


def keccak256(data: bytes) -> bytes:
    """
    Compute the Ethereum keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


_HASHERS: dict[HashFunction, Hasher] = {
    HashFunction.KECCAK256: keccak256,
    HashFunction.SHA256: sha256,
}


def get_hasher(name: HashFunction | str) -> Hasher:
    """
    Look up the hash callable for a HashFunction (or its string value).

    Raises:
        ValueError: If the name is not a supported hash function
    """
    return _HASHERS[HashFunction(name)]


def hash_concat(left: bytes, right: bytes, hasher: Hasher = keccak256) -> bytes:
    """
    Hash the concatenation of two byte sequences: hasher(left + right).

    Used for Merkle parent hashes once the pair order has been decided.
    """
    return hasher(left + right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    if not isinstance(hex_string, str):
        raise ValueError(f"Hex value must be a string, got {type(hex_string).__name__}")

    if not hex_string.startswith(("0x", "0X")):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    if not _HEX_PATTERN.fullmatch(hex_content):
        raise ValueError(f"Invalid hex characters in string: {hex_string!r}")

    return bytes.fromhex(hex_content)


def digest_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed hex digest and check it is DIGEST_SIZE bytes.

    Raises:
        ValueError: If the string is not valid hex or has the wrong length
    """
    data = from_hex(hex_string)
    if len(data) != DIGEST_SIZE:
        raise ValueError(
            f"Digest must be {DIGEST_SIZE} bytes, got {len(data)}"
        )
    return data


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
