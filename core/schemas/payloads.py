"""
Module 00 - Schemas
File: payloads.py

Purpose: Interchange payloads exchanged with the outside world.

- PolicyDescriptor: the published tree/leaf scheme
- ProofBundle: one leaf's fields + proof
- BatchOutput: { root, proofs[] } for a whole leaf set, in input order

Hex digests are 0x-prefixed, 64 hex characters.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .versioning import SCHEMA_VERSION, check_schema_version


_DIGEST_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

# Keys a ProofBundle owns; anything else in a flat entry is a leaf field
_BUNDLE_KEYS = frozenset({"index", "value", "leaf", "proof", "positions"})


def _check_hex_digest(value: str) -> str:
    if not _DIGEST_PATTERN.match(value):
        raise ValueError(f"Expected 0x-prefixed 32-byte hex digest, got {value!r}")
    return value.lower()


def _lift_flat_entry(data: Any) -> Any:
    """
    Accept the flat merkletreejs / OpenZeppelin entries, e.g.
    {address, amount, proof} or {address, proof, index}.

    Keys other than the bundle's own become the leaf value. A flat
    entry's index is also a field of its leaf record.
    """
    if not isinstance(data, dict) or "value" in data:
        return data
    value = {k: v for k, v in data.items() if k not in _BUNDLE_KEYS}
    if "index" in data:
        value["index"] = data["index"]
    lifted = {k: v for k, v in data.items() if k in _BUNDLE_KEYS}
    lifted["value"] = value
    return lifted


class PolicyDescriptor(BaseModel):
    """
    The exact scheme a root was built with.

    Published alongside the root so any verifier can reproduce leaf
    digests and parent hashes bit for bit.
    """

    model_config = ConfigDict(extra="forbid")

    hash_function: str = Field(default="keccak256")
    pairing: str = Field(default="canonical_sort")
    odd_node: str = Field(default="promote")
    leaf_encoding: str = Field(default="packed")
    leaf_types: list[str] = Field(..., min_length=1, description="ABI types in encoding order")
    leaf_fields: list[str] = Field(..., min_length=1, description="Field names in encoding order")

    @model_validator(mode="after")
    def _fields_match_types(self) -> "PolicyDescriptor":
        if len(self.leaf_fields) != len(self.leaf_types):
            raise ValueError(
                f"leaf_fields ({len(self.leaf_fields)}) and leaf_types "
                f"({len(self.leaf_types)}) must have the same length"
            )
        return self


class ProofBundle(BaseModel):
    """
    Inclusion proof for a single leaf, as handed to a claimant.
    """

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., ge=0, description="Leaf index in the original input order")
    value: dict[str, Any] = Field(..., description="Identifying fields of the leaf record")
    leaf: str | None = Field(default=None, description="Leaf digest (0x hex)")
    proof: list[str] = Field(default_factory=list, description="Sibling digests, leaf level first")
    positions: list[int] | None = Field(
        default=None,
        description="Sibling sides (0 = right, 1 = left); positional pairing only",
    )

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_fields(cls, data: Any) -> Any:
        return _lift_flat_entry(data)

    @field_validator("leaf")
    @classmethod
    def _leaf_is_digest(cls, value: str | None) -> str | None:
        return None if value is None else _check_hex_digest(value)

    @field_validator("proof")
    @classmethod
    def _proof_are_digests(cls, value: list[str]) -> list[str]:
        return [_check_hex_digest(v) for v in value]

    @model_validator(mode="after")
    def _positions_match_proof(self) -> "ProofBundle":
        if self.positions is not None and len(self.positions) != len(self.proof):
            raise ValueError(
                f"positions ({len(self.positions)}) must match proof length ({len(self.proof)})"
            )
        return self


class BatchOutput(BaseModel):
    """
    Root plus one proof bundle per leaf, in original input order.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=SCHEMA_VERSION)
    root: str = Field(..., description="Merkle root (0x hex)")
    policy: PolicyDescriptor | None = Field(default=None)
    proofs: list[ProofBundle] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _index_from_position(cls, data: Any) -> Any:
        """Entries without an index take their position in the list."""
        if not isinstance(data, dict) or not isinstance(data.get("proofs"), list):
            return data
        proofs = []
        for position, entry in enumerate(data["proofs"]):
            entry = _lift_flat_entry(entry)
            if isinstance(entry, dict) and "index" not in entry:
                entry = {**entry, "index": position}
            proofs.append(entry)
        return {**data, "proofs": proofs}

    @field_validator("schema_version")
    @classmethod
    def _supported_version(cls, value: str) -> str:
        return check_schema_version(value)

    @field_validator("root")
    @classmethod
    def _root_is_digest(cls, value: str) -> str:
        return _check_hex_digest(value)

    @property
    def leaf_count(self) -> int:
        return len(self.proofs)

    def bundle_at(self, index: int) -> ProofBundle:
        """Return the bundle for a leaf index."""
        for bundle in self.proofs:
            if bundle.index == index:
                return bundle
        raise KeyError(f"No proof bundle for index {index}")
