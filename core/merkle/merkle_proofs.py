"""
Module 03 - Merkle Proofs
Inclusion proof generation and verification.

Owner: Protocol/Crypto Engineer
Module ID: M03

This module provides:
- MerkleProof: Dataclass representing a Merkle inclusion proof
- build_merkle_proof / proof_for_leaf: Proof Generator
- verify_merkle_proof / verify_proof: Proof Verifier
- MerkleProver / MerkleVerifier: record-level convenience wrappers

Proof Rules:
1. Siblings are ordered from the leaf level upwards; the root is excluded.
2. promote: a level where the node was unpaired contributes no sibling.
   duplicate: the unpaired node's sibling is the node itself.
3. Position bits are carried only under positional pairing:
   SIBLING_RIGHT (0) -> parent = H(current + sibling)
   SIBLING_LEFT  (1) -> parent = H(sibling + current)
   Under canonical_sort the sibling side is implicit.
4. A wrong proof verifies to False. Only structurally invalid input
   (wrong digest size, missing/extra position bits) raises
   MalformedProofError.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from core.crypto.hashing import DIGEST_SIZE, to_hex
from core.encoding.leaf_encoder import LeafEncoder
from core.merkle.merkle_tree import (
    DEFAULT_POLICY,
    MerkleTree,
    OddNodePolicy,
    TreePolicy,
    build_merkle_tree,
    merkle_parent,
)
from core.schemas.errors import IndexOutOfRangeError, MalformedProofError


SIBLING_RIGHT: int = 0
SIBLING_LEFT: int = 1

# One sibling per level; a 256-level tree already exceeds any input size
MAX_PROOF_LENGTH: int = 256


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    Attributes:
        leaf: The leaf digest being proven
        index: The 0-based index of the leaf in the original leaf list
        siblings: Sibling digests from bottom to top of tree
        root: Root of the tree the proof was generated from
        positions: Side of each sibling (positional pairing only, else None)
    """
    leaf: bytes
    index: int
    siblings: tuple[bytes, ...]
    root: bytes
    positions: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")

    def __len__(self) -> int:
        return len(self.siblings)

    def hex_siblings(self) -> list[str]:
        return [to_hex(s) for s in self.siblings]


def build_merkle_proof(tree: MerkleTree, index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Algorithm:
    1. Start at the target leaf index on level 0
    2. At each level below the root:
       - Sibling index is index XOR 1
       - If the sibling exists, record it (and its side)
       - Otherwise the node is unpaired: record itself under duplicate,
         nothing under promote
       - Move up: index = index // 2

    Args:
        tree: Tree built by build_merkle_tree
        index: 0-based index of the leaf to prove

    Returns:
        MerkleProof with leaf, index, siblings (bottom-up) and root

    Raises:
        IndexOutOfRangeError: If index is not a valid leaf index
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRangeError(f"Leaf index must be an integer, got {index!r}", index=repr(index))
    if index < 0 or index >= tree.leaf_count:
        raise IndexOutOfRangeError(
            f"Leaf index {index} out of range for {tree.leaf_count} leaves",
            index=index,
            leaf_count=tree.leaf_count,
        )

    siblings: list[bytes] = []
    positions: list[int] = []
    current_index = index

    for level in tree.levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
            positions.append(SIBLING_LEFT if current_index & 1 else SIBLING_RIGHT)
        elif tree.policy.odd_node is OddNodePolicy.DUPLICATE:
            siblings.append(level[current_index])
            positions.append(SIBLING_RIGHT)

        current_index //= 2

    return MerkleProof(
        leaf=tree.leaves[index],
        index=index,
        siblings=tuple(siblings),
        root=tree.root,
        positions=tuple(positions) if tree.policy.positional else None,
    )


def proof_for_leaf(tree: MerkleTree, leaf: bytes) -> MerkleProof:
    """
    Generate the proof for the first leaf equal to the given digest.

    Raises:
        IndexOutOfRangeError: If the digest is not a leaf of the tree
    """
    index = tree.leaf_index(leaf)
    if index < 0:
        raise IndexOutOfRangeError(
            f"Leaf {to_hex(leaf) if isinstance(leaf, bytes) else leaf!r} is not in the tree",
            leaf_count=tree.leaf_count,
        )
    return build_merkle_proof(tree, index)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray, str))


def _check_digest(value: Any, what: str) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise MalformedProofError(
            f"{what} must be bytes, got {type(value).__name__}",
            details={"part": what},
        )
    if len(value) != DIGEST_SIZE:
        raise MalformedProofError(
            f"{what} must be {DIGEST_SIZE} bytes, got {len(value)}",
            details={"part": what, "size": len(value)},
        )
    return bytes(value)


def verify_merkle_proof(
    leaf: bytes,
    siblings: Sequence[bytes],
    root: bytes,
    *,
    positions: Sequence[int] | None = None,
    policy: TreePolicy = DEFAULT_POLICY,
) -> bool:
    """
    Verify a Merkle proof against a trusted root.

    Algorithm:
    1. Start with the leaf digest
    2. For each sibling (bottom-up) combine with merkle_parent:
       - canonical_sort: order is implicit
       - positional: the position bit says which side the sibling is on
    3. Check the computed root equals the trusted root

    Args:
        leaf: Leaf digest being proven
        siblings: Sibling digests, leaf level first
        root: Trusted root digest
        positions: Sibling sides (required under positional pairing)
        policy: Tree scheme the root was built with

    Returns:
        True if the recomputed root equals the trusted root, False otherwise

    Raises:
        MalformedProofError: If the proof input is structurally invalid
    """
    current = _check_digest(leaf, "leaf")
    trusted_root = _check_digest(root, "root")

    if not _is_sequence(siblings):
        raise MalformedProofError("Proof siblings must be a sequence of digests")
    siblings = [_check_digest(s, f"sibling[{i}]") for i, s in enumerate(siblings)]
    if len(siblings) > MAX_PROOF_LENGTH:
        raise MalformedProofError(
            f"Proof has {len(siblings)} siblings, more than {MAX_PROOF_LENGTH}",
        )

    if positions is not None:
        if not _is_sequence(positions):
            raise MalformedProofError("Proof positions must be a sequence of bits")
        positions = list(positions)
        if len(positions) != len(siblings):
            raise MalformedProofError(
                f"Proof has {len(siblings)} siblings but {len(positions)} position bits",
                details={"siblings": len(siblings), "positions": len(positions)},
            )
        bad = [p for p in positions if isinstance(p, bool) or p not in (SIBLING_RIGHT, SIBLING_LEFT)]
        if bad:
            raise MalformedProofError(f"Invalid position bits: {bad}")
    elif policy.positional:
        raise MalformedProofError("Positional pairing requires position bits")

    for i, sibling in enumerate(siblings):
        if policy.positional and positions[i] == SIBLING_LEFT:
            current = merkle_parent(sibling, current, policy)
        else:
            current = merkle_parent(current, sibling, policy)

    return current == trusted_root


def verify_proof(proof: MerkleProof, trusted_root: bytes, policy: TreePolicy = DEFAULT_POLICY) -> bool:
    """
    Verify a MerkleProof against a trusted root.

    The root stored inside the proof is not used: only the
    caller's trusted root counts.
    """
    return verify_merkle_proof(
        proof.leaf,
        proof.siblings,
        trusted_root,
        positions=proof.positions,
        policy=policy,
    )


class MerkleProver:
    """
    Convenience class for generating Merkle proofs from records.

    Example:
        >>> tree = MerkleProver.build(encoder, records)
        >>> proof = MerkleProver.prove(tree, index=1)
        >>> proof.leaf == encoder.digest(records[1])
        True
    """

    @staticmethod
    def build(
        encoder: LeafEncoder,
        records: Sequence[Any],
        policy: TreePolicy = DEFAULT_POLICY,
    ) -> MerkleTree:
        """Encode records into leaves and build the tree."""
        return build_merkle_tree(encoder.digest_all(records), policy)

    @staticmethod
    def prove(tree: MerkleTree, index: int) -> MerkleProof:
        """Generate a proof for the leaf at the given index."""
        return build_merkle_proof(tree, index)

    @staticmethod
    def prove_record(
        encoder: LeafEncoder,
        records: Sequence[Any],
        index: int,
        policy: TreePolicy = DEFAULT_POLICY,
    ) -> MerkleProof:
        """
        Generate a proof for the record at the given index.

        Builds the tree from scratch; callers proving many records should
        build once with MerkleProver.build and reuse the tree.
        """
        tree = MerkleProver.build(encoder, records, policy)
        return build_merkle_proof(tree, index)


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> MerkleVerifier.verify(proof, trusted_root)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof, trusted_root: bytes, policy: TreePolicy = DEFAULT_POLICY) -> bool:
        return verify_proof(proof, trusted_root, policy)

    @staticmethod
    def verify_record(
        encoder: LeafEncoder,
        record: Any,
        siblings: Sequence[bytes],
        root: bytes,
        *,
        positions: Sequence[int] | None = None,
        policy: TreePolicy = DEFAULT_POLICY,
    ) -> bool:
        """
        Verify a raw record is included in a Merkle root.

        The record is encoded with the encoder to produce the leaf digest.
        """
        leaf = encoder.digest(record)
        return verify_merkle_proof(leaf, siblings, root, positions=positions, policy=policy)


__all__ = [
    "SIBLING_RIGHT",
    "SIBLING_LEFT",
    "MAX_PROOF_LENGTH",
    "MerkleProof",
    "build_merkle_proof",
    "proof_for_leaf",
    "verify_merkle_proof",
    "verify_proof",
    "MerkleProver",
    "MerkleVerifier",
]
