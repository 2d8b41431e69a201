"""
Module 04 - Batch Commitments
Root + per-leaf proof payloads for a whole leaf set.

Owner: Protocol/Crypto Engineer
Module ID: M04

This is the pure core of the airdrop / whitelist / tournament flows:
records in, BatchOutput out (and back again on the verifying side).
Reading and writing files is left to core.commitment.io and the CLI.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

from core.crypto.hashing import HashFunction, digest_from_hex, to_hex
from core.encoding.leaf_encoder import LeafEncoder, LeafEncoding, LeafSchema
from core.merkle.merkle_proofs import build_merkle_proof, verify_merkle_proof
from core.merkle.merkle_tree import (
    DEFAULT_POLICY,
    MerkleTree,
    OddNodePolicy,
    PairingRule,
    TreePolicy,
    build_merkle_tree,
)
from core.schemas.errors import EncodingError, MalformedProofError, PayloadException
from core.schemas.payloads import BatchOutput, PolicyDescriptor, ProofBundle


logger = logging.getLogger(__name__)


def describe_scheme(encoder: LeafEncoder, policy: TreePolicy) -> PolicyDescriptor:
    """Build the PolicyDescriptor published alongside a root."""
    return PolicyDescriptor(
        hash_function=policy.hash_function.value,
        pairing=policy.pairing.value,
        odd_node=policy.odd_node.value,
        leaf_encoding=encoder.encoding.value,
        leaf_types=list(encoder.schema.types),
        leaf_fields=list(encoder.schema.names),
    )


def policy_from_descriptor(descriptor: PolicyDescriptor) -> TreePolicy:
    """
    Rebuild the TreePolicy described by a payload.

    Raises:
        PayloadException: If the descriptor names an unknown scheme
    """
    try:
        return TreePolicy(
            pairing=PairingRule(descriptor.pairing),
            odd_node=OddNodePolicy(descriptor.odd_node),
            hash_function=HashFunction(descriptor.hash_function),
        )
    except ValueError as e:
        raise PayloadException(f"Unknown tree policy in payload: {e}") from e


def encoder_from_descriptor(descriptor: PolicyDescriptor) -> LeafEncoder:
    """
    Rebuild the LeafEncoder described by a payload.

    Raises:
        PayloadException: If the descriptor names an unknown leaf scheme
    """
    try:
        schema = LeafSchema.from_types(descriptor.leaf_types, descriptor.leaf_fields)
        return LeafEncoder(
            schema,
            encoding=LeafEncoding(descriptor.leaf_encoding),
            hash_function=HashFunction(descriptor.hash_function),
        )
    except EncodingError as e:
        raise PayloadException(f"Invalid leaf scheme in payload: {e.message}") from e
    except ValueError as e:
        raise PayloadException(f"Unknown leaf scheme in payload: {e}") from e


def build_bundle(tree: MerkleTree, encoder: LeafEncoder, record: Any, index: int) -> ProofBundle:
    """Proof bundle for the record at index (record must be the one the leaf came from)."""
    proof = build_merkle_proof(tree, index)
    return ProofBundle(
        index=index,
        value=encoder.to_json(record),
        leaf=to_hex(proof.leaf),
        proof=proof.hex_siblings(),
        positions=list(proof.positions) if proof.positions is not None else None,
    )


def batch_from_tree(
    tree: MerkleTree,
    encoder: LeafEncoder,
    records: Sequence[Any],
) -> BatchOutput:
    """
    Assemble the BatchOutput for a tree already built from records.
    """
    if len(records) != tree.leaf_count:
        raise ValueError(
            f"Tree has {tree.leaf_count} leaves but {len(records)} records were given"
        )
    bundles = [build_bundle(tree, encoder, record, i) for i, record in enumerate(records)]
    return BatchOutput(
        root=tree.hex_root,
        policy=describe_scheme(encoder, tree.policy),
        proofs=bundles,
    )


def build_batch(
    records: Sequence[Any],
    encoder: LeafEncoder,
    policy: TreePolicy = DEFAULT_POLICY,
) -> BatchOutput:
    """
    Encode records, build the tree and emit the root with every proof.

    Raises:
        EncodingError: If a record cannot be encoded
        EmptyTreeError: If records is empty
    """
    records = list(records)
    tree = build_merkle_tree(encoder.digest_all(records), policy)
    batch = batch_from_tree(tree, encoder, records)
    logger.info(
        "Committed %d leaves (%s, %s): root %s",
        tree.leaf_count, encoder.encoding.value, policy.describe(), batch.root,
    )
    return batch


def _root_bytes(root: bytes | str) -> bytes:
    if isinstance(root, str):
        try:
            return digest_from_hex(root)
        except ValueError as e:
            raise MalformedProofError(f"Invalid root: {e}") from e
    return root


def verify_bundle(
    bundle: ProofBundle,
    root: bytes | str,
    encoder: LeafEncoder,
    policy: TreePolicy = DEFAULT_POLICY,
) -> bool:
    """
    Verify a proof bundle against a trusted root.

    The leaf digest is always recomputed from the bundle's fields; a
    stated leaf that disagrees with the fields makes the bundle invalid.

    Returns:
        True if the bundle proves inclusion under root, False otherwise

    Raises:
        MalformedProofError: If the root or proof is structurally invalid
        EncodingError: If the bundle's fields cannot be encoded
    """
    trusted_root = _root_bytes(root)
    leaf = encoder.digest(bundle.value)

    if bundle.leaf is not None and digest_from_hex(bundle.leaf) != leaf:
        logger.debug("Bundle %d states a leaf that does not match its fields", bundle.index)
        return False

    siblings = [digest_from_hex(p) for p in bundle.proof]
    return verify_merkle_proof(
        leaf,
        siblings,
        trusted_root,
        positions=bundle.positions,
        policy=policy,
    )


def verify_batch(
    batch: BatchOutput,
    *,
    root: bytes | str | None = None,
    encoder: LeafEncoder | None = None,
    policy: TreePolicy | None = None,
) -> list[bool]:
    """
    Verify every bundle of a batch.

    The trusted root defaults to the batch's own root, and the encoder and
    policy default to the scheme the batch publishes.

    Raises:
        PayloadException: If no scheme is given and the batch publishes none
    """
    if encoder is None or policy is None:
        if batch.policy is None:
            raise PayloadException("Batch does not publish its policy; pass encoder and policy")
        encoder = encoder or encoder_from_descriptor(batch.policy)
        policy = policy or policy_from_descriptor(batch.policy)

    trusted_root = root if root is not None else batch.root
    results = [verify_bundle(bundle, trusted_root, encoder, policy) for bundle in batch.proofs]
    logger.info("Verified %d bundles: %d valid", len(results), sum(results))
    return results


__all__ = [
    "describe_scheme",
    "policy_from_descriptor",
    "encoder_from_descriptor",
    "build_bundle",
    "batch_from_tree",
    "build_batch",
    "verify_bundle",
    "verify_batch",
]
