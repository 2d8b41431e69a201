"""
Module 03 - Merkle Tree Implementation
Deterministic Merkle tree construction over ordered leaf digests.

Owner: Protocol/Crypto Engineer
Module ID: M03

This module provides:
- PairingRule / OddNodePolicy / TreePolicy: the explicit tree scheme
- merkle_parent: the pair-combining rule
- MerkleTree: immutable handle retaining every level
- build_merkle_tree / build_merkle_root / compute_tree_depth

Canonical Commitment Rules (Hard Contracts):
1. Leaves are 32-byte digests; input order defines the leaf index.
   This module never sorts or deduplicates leaves.
2. Parent hashing:
   - canonical_sort: parent = H(min(a, b) + max(a, b))
   - positional:     parent = H(left + right)
3. Odd node at any level:
   - promote:   the unpaired node moves up unchanged
   - duplicate: the unpaired node is paired with itself
4. Empty leaves: EmptyTreeError
5. Single leaf: root = leaf (zero levels of pairing)

The same TreePolicy must be used to build, prove and verify, otherwise
roots silently diverge. DEFAULT_POLICY is canonical_sort + promote +
keccak256, which is what OpenZeppelin's MerkleProof.verify and
merkletreejs (sortPairs, no duplicateOdd) agree on.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from core.crypto.hashing import DIGEST_SIZE, HashFunction, Hasher, get_hasher, hash_concat, to_hex
from core.schemas.errors import EmptyTreeError, EncodingError


logger = logging.getLogger(__name__)


class PairingRule(str, Enum):
    """How two sibling digests are ordered before hashing."""
    CANONICAL_SORT = "canonical_sort"
    POSITIONAL = "positional"


class OddNodePolicy(str, Enum):
    """What happens to the last node of an odd-sized level."""
    PROMOTE = "promote"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class TreePolicy:
    """
    The complete, explicit tree scheme shared by build, prove and verify.

    Attributes:
        pairing: Pair ordering rule
        odd_node: Odd-node-out rule
        hash_function: 256-bit hash used for parent nodes
    """
    pairing: PairingRule = PairingRule.CANONICAL_SORT
    odd_node: OddNodePolicy = OddNodePolicy.PROMOTE
    hash_function: HashFunction = HashFunction.KECCAK256

    def __post_init__(self) -> None:
        # Accept plain strings from config files
        object.__setattr__(self, "pairing", PairingRule(self.pairing))
        object.__setattr__(self, "odd_node", OddNodePolicy(self.odd_node))
        object.__setattr__(self, "hash_function", HashFunction(self.hash_function))

    @property
    def hasher(self) -> Hasher:
        return get_hasher(self.hash_function)

    @property
    def positional(self) -> bool:
        return self.pairing is PairingRule.POSITIONAL

    def describe(self) -> str:
        return f"{self.pairing.value}/{self.odd_node.value}/{self.hash_function.value}"


DEFAULT_POLICY = TreePolicy()


def merkle_parent(left: bytes, right: bytes, policy: TreePolicy = DEFAULT_POLICY) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Under canonical_sort the numerically smaller digest goes first, so
    merkle_parent(a, b) == merkle_parent(b, a). Under positional the
    arguments are hashed as given.

    Args:
        left: Left child hash
        right: Right child hash
        policy: Tree scheme

    Returns:
        Parent hash (32 bytes)
    """
    if policy.pairing is PairingRule.CANONICAL_SORT and right < left:
        left, right = right, left
    return hash_concat(left, right, policy.hasher)


@dataclass(frozen=True)
class MerkleTree:
    """
    An immutable Merkle tree with every level retained.

    levels[0] holds the leaf digests in input order; levels[-1] holds the
    single root. Build with build_merkle_tree(); instances are read-only
    and safe to share between threads.

    Attributes:
        levels: Tuple of levels, each a tuple of 32-byte digests
        policy: The scheme the tree was built with
    """
    levels: tuple[tuple[bytes, ...], ...]
    policy: TreePolicy = field(default=DEFAULT_POLICY)

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def hex_root(self) -> str:
        """Root as 0x-prefixed hex, the published form."""
        return to_hex(self.root)

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        """Number of levels from leaves to root (inclusive)."""
        return len(self.levels)

    def level(self, height: int) -> tuple[bytes, ...]:
        """Return the digests at a level (0 = leaves)."""
        return self.levels[height]

    def leaf_index(self, leaf: bytes) -> int:
        """
        Return the index of the first leaf equal to the digest, or -1.
        """
        try:
            return self.levels[0].index(leaf)
        except ValueError:
            return -1

    def render(self) -> str:
        """Level-by-level hex dump, root first."""
        lines = []
        for height in range(len(self.levels) - 1, -1, -1):
            label = "root" if height == len(self.levels) - 1 else f"L{height}"
            lines.append(f"{label}:")
            for node in self.levels[height]:
                lines.append(f"  {to_hex(node)}")
        return "\n".join(lines)


def _check_leaves(leaves: Sequence[bytes]) -> None:
    if len(leaves) == 0:
        raise EmptyTreeError()
    for i, leaf in enumerate(leaves):
        if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != DIGEST_SIZE:
            raise EncodingError(
                f"Leaf digest {i} must be {DIGEST_SIZE} bytes",
                details={"index": i},
            )


def build_merkle_tree(leaves: Sequence[bytes], policy: TreePolicy = DEFAULT_POLICY) -> MerkleTree:
    """
    Build a Merkle tree from a sequence of leaf digests.

    Algorithm:
    1. Level 0 is the leaf digests as supplied
    2. Pair adjacent nodes left to right and hash each pair upwards
    3. An unpaired last node is promoted or duplicated per policy
    4. Repeat until one node remains

    Example with promote: [a, b, c] -> [parent(a,b), c] -> [parent(ab, c)]
    Example with duplicate: [a, b, c] -> [parent(a,b), parent(c,c)] -> ...

    Args:
        leaves: Sequence of 32-byte leaf digests. Order matters and is preserved.
        policy: Tree scheme

    Returns:
        MerkleTree retaining every level

    Raises:
        EmptyTreeError: If leaves is empty
        EncodingError: If a leaf is not a 32-byte digest
    """
    _check_leaves(leaves)

    current_level: tuple[bytes, ...] = tuple(bytes(leaf) for leaf in leaves)
    levels = [current_level]

    while len(current_level) > 1:
        next_level: list[bytes] = []
        for i in range(0, len(current_level), 2):
            if i + 1 < len(current_level):
                next_level.append(merkle_parent(current_level[i], current_level[i + 1], policy))
            elif policy.odd_node is OddNodePolicy.DUPLICATE:
                next_level.append(merkle_parent(current_level[i], current_level[i], policy))
            else:
                next_level.append(current_level[i])

        current_level = tuple(next_level)
        levels.append(current_level)

    tree = MerkleTree(levels=tuple(levels), policy=policy)
    logger.debug(
        "Built Merkle tree: %d leaves, depth %d, policy %s, root %s",
        tree.leaf_count, tree.depth, policy.describe(), tree.hex_root,
    )
    return tree


def build_merkle_root(leaves: Sequence[bytes], policy: TreePolicy = DEFAULT_POLICY) -> bytes:
    """
    Compute only the root of the tree over the given leaves.

    Raises:
        EmptyTreeError: If leaves is empty
    """
    return build_merkle_tree(leaves, policy).root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the number of levels (leaves to root, inclusive) of a tree.

    Promote and duplicate give the same level count: both carry
    ceil(n / 2) nodes to the next level.

    Returns:
        Tree depth (0 for no leaves, 1 for a single leaf)
    """
    if num_leaves <= 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


__all__ = [
    "PairingRule",
    "OddNodePolicy",
    "TreePolicy",
    "DEFAULT_POLICY",
    "MerkleTree",
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "compute_tree_depth",
]
