"""
Module 02 - Leaf Encoder
Deterministic serialization of leaf records into 32-byte leaf digests.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- LeafSchema: ordered (name, abi_type) pairs fixed per deployment
- LeafEncoding: the two supported leaf conventions
- LeafEncoder: record -> canonical bytes -> leaf digest

Canonical Encoding Rules (Hard Contracts):
1. packed:   leaf = H(abi.encodePacked(values))
   - fixed-width, type-aware concatenation, no delimiters
   - variable-length bytes/string are appended raw (no length prefix)
   - a single "address" field gives the raw-address convention H(address)
2. standard: leaf = H(H(abi.encode(values)))
   - the OpenZeppelin StandardMerkleTree leaf convention
3. Field order is part of the scheme: (address, uint256) and
   (uint256, address) are different schemes and never collide.
4. Values are range-checked against their declared width before encoding;
   overflow raises EncodingError instead of truncating.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.packed import encode_packed
from eth_utils import is_checksum_address, is_hex_address, to_checksum_address

from core.crypto.hashing import HashFunction, Hasher, from_hex, get_hasher, to_hex
from core.schemas.errors import EncodingError


logger = logging.getLogger(__name__)

_TYPE_PATTERN = re.compile(r"^(address|bool|string|bytes|u?int(\d+)|bytes(\d+))$")


class LeafEncoding(str, Enum):
    """Leaf serialization convention."""
    PACKED = "packed"
    STANDARD = "standard"


def validate_abi_type(abi_type: str) -> str:
    """
    Check that abi_type is a supported scalar ABI type.

    Supported: address, bool, string, bytes, uint<N>, int<N>
    (N a multiple of 8 in 8..256) and bytes<N> (N in 1..32).

    Raises:
        EncodingError: If the type is not supported
    """
    match = _TYPE_PATTERN.match(abi_type) if isinstance(abi_type, str) else None
    if match is None:
        raise EncodingError(f"Unsupported leaf field type: {abi_type!r}", abi_type=str(abi_type))

    int_bits, byte_size = match.group(2), match.group(3)
    if int_bits is not None:
        bits = int(int_bits)
        if bits < 8 or bits > 256 or bits % 8 != 0:
            raise EncodingError(f"Invalid integer width in type {abi_type!r}", abi_type=abi_type)
    if byte_size is not None:
        size = int(byte_size)
        if size < 1 or size > 32:
            raise EncodingError(f"Invalid fixed bytes width in type {abi_type!r}", abi_type=abi_type)
    return abi_type


@dataclass(frozen=True)
class LeafSchema:
    """
    Ordered, typed field layout of a leaf record.

    Attributes:
        fields: Tuple of (name, abi_type) pairs in encoding order
    """
    fields: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        if not self.fields:
            raise EncodingError("Leaf schema must declare at least one field")
        names = [name for name, _ in self.fields]
        if len(set(names)) != len(names):
            raise EncodingError(f"Duplicate field names in leaf schema: {names}")
        for _, abi_type in self.fields:
            validate_abi_type(abi_type)

    @classmethod
    def from_types(
        cls,
        types: Sequence[str],
        names: Sequence[str] | None = None,
    ) -> "LeafSchema":
        """
        Build a schema from a list of ABI types and optional field names.

        Without names the fields are called field0, field1, ...
        """
        types = list(types)
        if names is None or len(names) == 0:
            names = [f"field{i}" for i in range(len(types))]
        if len(names) != len(types):
            raise EncodingError(
                f"Leaf schema has {len(types)} types but {len(names)} field names"
            )
        return cls(fields=tuple(zip(names, types)))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    @property
    def types(self) -> tuple[str, ...]:
        return tuple(abi_type for _, abi_type in self.fields)


def _coerce_int(name: str, abi_type: str, value: Any) -> int:
    if isinstance(value, bool):
        raise EncodingError(f"Field {name!r} expects {abi_type}, got bool", field=name, abi_type=abi_type)
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise EncodingError(
                f"Field {name!r} expects {abi_type}, got non-numeric string {value!r}",
                field=name,
                abi_type=abi_type,
            ) from None
    if not isinstance(value, int):
        raise EncodingError(
            f"Field {name!r} expects {abi_type}, got {type(value).__name__}",
            field=name,
            abi_type=abi_type,
        )

    signed = not abi_type.startswith("uint")
    bits = int(abi_type[3:] if signed else abi_type[4:])
    if signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    if value < lower or value > upper:
        raise EncodingError(
            f"Value {value} of field {name!r} does not fit in {abi_type}",
            field=name,
            abi_type=abi_type,
            details={"value": str(value)},
        )
    return value


def _coerce_address(name: str, value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise EncodingError(
                f"Field {name!r} expects a 20-byte address, got {len(value)} bytes",
                field=name,
                abi_type="address",
            )
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not value.startswith("0x") or not is_hex_address(value):
        raise EncodingError(f"Field {name!r} is not a valid address: {value!r}", field=name, abi_type="address")

    body = value[2:]
    mixed_case = body != body.lower() and body != body.upper()
    if mixed_case and not is_checksum_address(value):
        raise EncodingError(f"Field {name!r} has a bad address checksum: {value}", field=name, abi_type="address")
    return to_checksum_address(value)


def _coerce_bytes(name: str, abi_type: str, value: Any) -> bytes:
    if isinstance(value, str):
        try:
            value = from_hex(value)
        except ValueError as e:
            raise EncodingError(f"Field {name!r}: {e}", field=name, abi_type=abi_type) from e
    if not isinstance(value, (bytes, bytearray)):
        raise EncodingError(
            f"Field {name!r} expects {abi_type}, got {type(value).__name__}",
            field=name,
            abi_type=abi_type,
        )
    value = bytes(value)

    if abi_type == "bytes":
        return value
    size = int(abi_type[5:])
    if len(value) > size:
        raise EncodingError(
            f"Field {name!r} holds {len(value)} bytes, which overflows {abi_type}",
            field=name,
            abi_type=abi_type,
        )
    # Solidity right-pads short fixed bytes values
    return value.ljust(size, b"\x00")


def coerce_field(name: str, abi_type: str, value: Any) -> Any:
    """
    Normalize a raw field value to the Python value the ABI encoder expects.

    Raises:
        EncodingError: On type mismatch or overflow of the declared width
    """
    if abi_type == "address":
        return _coerce_address(name, value)
    if abi_type == "bool":
        if not isinstance(value, bool):
            raise EncodingError(f"Field {name!r} expects bool, got {type(value).__name__}", field=name, abi_type=abi_type)
        return value
    if abi_type == "string":
        if not isinstance(value, str):
            raise EncodingError(f"Field {name!r} expects string, got {type(value).__name__}", field=name, abi_type=abi_type)
        return value
    if abi_type.startswith("bytes"):
        return _coerce_bytes(name, abi_type, value)
    return _coerce_int(name, abi_type, value)


def field_to_json(abi_type: str, value: Any) -> Any:
    """
    Render a normalized field value for JSON payloads.

    Integers become decimal strings (they routinely exceed 2**53),
    bytes become 0x hex, everything else is passed through.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, bytes):
        return to_hex(value)
    return value


class LeafEncoder:
    """
    Turns leaf records into canonical bytes and leaf digests.

    A record is either a sequence in schema order, a mapping keyed by
    field name, or (for single-field schemas) the bare value.

    Example:
        >>> schema = LeafSchema.from_types(["address", "uint256"], ["address", "amount"])
        >>> encoder = LeafEncoder(schema)
        >>> len(encoder.digest({"address": "0x" + "00" * 19 + "04", "amount": 200}))
        32
    """

    def __init__(
        self,
        schema: LeafSchema,
        encoding: LeafEncoding | str = LeafEncoding.PACKED,
        hash_function: HashFunction | str = HashFunction.KECCAK256,
    ) -> None:
        self.schema = schema
        self.encoding = LeafEncoding(encoding)
        self.hash_function = HashFunction(hash_function)
        self._hasher: Hasher = get_hasher(self.hash_function)

    def __repr__(self) -> str:
        return (
            f"LeafEncoder(types={list(self.schema.types)}, "
            f"encoding={self.encoding.value}, hash={self.hash_function.value})"
        )

    def _values_in_order(self, record: Any) -> list[Any]:
        names = self.schema.names
        if isinstance(record, Mapping):
            missing = [n for n in names if n not in record]
            if missing:
                raise EncodingError(f"Leaf record is missing fields: {missing}")
            extra = sorted(set(record) - set(names))
            if extra:
                raise EncodingError(f"Leaf record has unknown fields: {extra}")
            return [record[n] for n in names]

        if isinstance(record, Sequence) and not isinstance(record, (str, bytes, bytearray)):
            if len(record) != len(names):
                raise EncodingError(
                    f"Leaf record has {len(record)} values, schema expects {len(names)}"
                )
            return list(record)

        if len(names) == 1:
            return [record]
        raise EncodingError(f"Cannot interpret {type(record).__name__} as a leaf record")

    def normalize(self, record: Any) -> tuple[Any, ...]:
        """Return the record's coerced field values in schema order."""
        values = self._values_in_order(record)
        return tuple(
            coerce_field(name, abi_type, value)
            for (name, abi_type), value in zip(self.schema.fields, values)
        )

    def to_json(self, record: Any) -> dict[str, Any]:
        """Return the record as a {field: json_value} dict for payloads."""
        values = self.normalize(record)
        return {
            name: field_to_json(abi_type, value)
            for (name, abi_type), value in zip(self.schema.fields, values)
        }

    def encode(self, record: Any) -> bytes:
        """
        Serialize a record to its canonical byte string.

        Raises:
            EncodingError: If a value has the wrong type or overflows its width
        """
        values = list(self.normalize(record))
        types = list(self.schema.types)
        try:
            if self.encoding is LeafEncoding.PACKED:
                return encode_packed(types, values)
            return abi_encode(types, values)
        except AbiEncodingError as e:
            raise EncodingError(f"ABI encoding failed: {e}", details={"types": types}) from e

    def digest(self, record: Any) -> bytes:
        """Return the 32-byte leaf digest of a record."""
        encoded = self.encode(record)
        if self.encoding is LeafEncoding.STANDARD:
            return self._hasher(self._hasher(encoded))
        return self._hasher(encoded)

    def digest_all(self, records: Iterable[Any]) -> list[bytes]:
        """Digest every record, preserving input order."""
        digests = [self.digest(record) for record in records]
        logger.debug("Encoded %d leaves with %r", len(digests), self)
        return digests


__all__ = [
    "LeafEncoding",
    "LeafSchema",
    "LeafEncoder",
    "validate_abi_type",
    "coerce_field",
    "field_to_json",
]
