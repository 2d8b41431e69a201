"""
Module 03 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification.

Owner: Protocol/Crypto Engineer
Module ID: M03

This module provides:
- TreePolicy: explicit pairing rule, odd-node policy and hash function
- MerkleTree / build_merkle_tree: Tree Builder
- MerkleProof / build_merkle_proof: Proof Generator
- verify_merkle_proof: Proof Verifier

Canonical Commitment Rules (default policy):
1. Leaf hashing: see core.encoding (packed or standard)
2. Parent hashing: keccak256(min(a, b) + max(a, b))
3. Odd node: promoted unchanged to the next level
4. Empty tree: EmptyTreeError
5. Single leaf: root = leaf

Usage:
    from core.merkle import build_merkle_tree, build_merkle_proof, verify_merkle_proof

    tree = build_merkle_tree(leaves)
    proof = build_merkle_proof(tree, index=2)
    assert verify_merkle_proof(proof.leaf, proof.siblings, tree.root)
"""
from .merkle_tree import (
    PairingRule,
    OddNodePolicy,
    TreePolicy,
    DEFAULT_POLICY,
    MerkleTree,
    merkle_parent,
    build_merkle_tree,
    build_merkle_root,
    compute_tree_depth,
)

from .merkle_proofs import (
    SIBLING_RIGHT,
    SIBLING_LEFT,
    MerkleProof,
    build_merkle_proof,
    proof_for_leaf,
    verify_merkle_proof,
    verify_proof,
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Policy
    "PairingRule",
    "OddNodePolicy",
    "TreePolicy",
    "DEFAULT_POLICY",
    # Tree
    "MerkleTree",
    "merkle_parent",
    "build_merkle_tree",
    "build_merkle_root",
    "compute_tree_depth",
    # Proofs
    "SIBLING_RIGHT",
    "SIBLING_LEFT",
    "MerkleProof",
    "build_merkle_proof",
    "proof_for_leaf",
    "verify_merkle_proof",
    "verify_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
