"""
Common test fixtures shared by all modules.

Provides factory functions for the core merkledrop building blocks:
- addresses and recipient records (address, amount)
- raw 32-byte leaf digests
- LeafEncoder instances
- every TreePolicy combination
"""

from typing import Any, Sequence

from core.crypto.hashing import sha256
from core.encoding.leaf_encoder import LeafEncoder, LeafSchema
from core.merkle.merkle_tree import OddNodePolicy, PairingRule, TreePolicy


# Every pairing x odd-node combination over keccak256
ALL_POLICIES = [
    TreePolicy(pairing=pairing, odd_node=odd_node)
    for pairing in PairingRule
    for odd_node in OddNodePolicy
]

# EIP-55 test vector
CHECKSUM_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def make_address(i: int) -> str:
    """Deterministic lowercase address for position i."""
    return "0x" + f"{i + 1:040x}"


def make_recipients(n: int = 3, base_amount: int = 100) -> list[dict[str, Any]]:
    """
    Create n airdrop recipient records.

    Args:
        n: Number of records
        base_amount: Amount of the first record; record i gets base_amount * (i + 1)
    """
    return [
        {"address": make_address(i), "amount": base_amount * (i + 1)}
        for i in range(n)
    ]


def make_leaves(n: int, tag: str = "leaf") -> list[bytes]:
    """Create n distinct 32-byte leaf digests."""
    return [sha256(f"{tag}-{i}".encode()) for i in range(n)]


def make_encoder(
    types: Sequence[str] = ("address", "uint256"),
    fields: Sequence[str] | None = ("address", "amount"),
    encoding: str = "packed",
    hash_function: str = "keccak256",
) -> LeafEncoder:
    """Create a LeafEncoder; the defaults match the airdrop scheme."""
    schema = LeafSchema.from_types(list(types), list(fields) if fields else None)
    return LeafEncoder(schema, encoding=encoding, hash_function=hash_function)
