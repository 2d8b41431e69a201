"""
Module 02 - Leaf Encoder Unit Tests
Tests for core/encoding/leaf_encoder.py

Tests:
1. packed encoding is fixed-width concatenation (address 20 bytes, uint256 32 bytes)
2. standard encoding is abi.encode, double hashed
3. Semantically equal records encode identically (mapping, list, string ints)
4. Field order is part of the scheme
5. Overflow and type mismatches raise EncodingError
"""
import pytest

from core.crypto.hashing import keccak256, sha256
from core.encoding.leaf_encoder import (
    LeafEncoder,
    LeafEncoding,
    LeafSchema,
    validate_abi_type,
)
from core.schemas.errors import EncodingError, ErrorCodes

from fixtures.common import CHECKSUM_ADDRESS, make_address, make_encoder


ADDRESS_BYTES = bytes.fromhex(CHECKSUM_ADDRESS[2:])


class TestPackedEncoding:
    """encodePacked conventions."""

    def test_address_amount_layout(self, airdrop_encoder):
        encoded = airdrop_encoder.encode({"address": CHECKSUM_ADDRESS, "amount": 200})

        assert len(encoded) == 52
        assert encoded == ADDRESS_BYTES + (200).to_bytes(32, "big")

    def test_address_amount_digest(self, airdrop_encoder):
        record = {"address": CHECKSUM_ADDRESS, "amount": 200}
        expected = keccak256(ADDRESS_BYTES + (200).to_bytes(32, "big"))

        assert airdrop_encoder.digest(record) == expected

    def test_raw_address_leaf(self):
        """A single address field gives keccak256(address)."""
        encoder = make_encoder(types=["address"], fields=["address"])

        assert encoder.digest(CHECKSUM_ADDRESS) == keccak256(ADDRESS_BYTES)
        assert encoder.digest([CHECKSUM_ADDRESS]) == keccak256(ADDRESS_BYTES)

    def test_small_uint_width(self):
        encoder = make_encoder(types=["uint8", "uint16"], fields=["a", "b"])
        assert encoder.encode([1, 2]) == b"\x01\x00\x02"

    def test_signed_int(self):
        encoder = make_encoder(types=["int256"], fields=["v"])
        assert encoder.encode([-1]) == b"\xff" * 32

    def test_bool_and_string(self):
        encoder = make_encoder(types=["bool", "string"], fields=["flag", "name"])
        assert encoder.encode([True, "abc"]) == b"\x01abc"

    def test_fixed_bytes_right_padded(self):
        encoder = make_encoder(types=["bytes32"], fields=["tag"])
        assert encoder.encode(["0x01"]) == b"\x01" + b"\x00" * 31

    def test_sha256_hash_function(self):
        encoder = make_encoder(hash_function="sha256")
        record = {"address": CHECKSUM_ADDRESS, "amount": 1}

        assert encoder.digest(record) == sha256(encoder.encode(record))


class TestStandardEncoding:
    """abi.encode + double hash (OpenZeppelin StandardMerkleTree leaves)."""

    def test_index_address_layout(self):
        encoder = make_encoder(
            types=["uint256", "address"], fields=["index", "address"], encoding="standard"
        )
        encoded = encoder.encode({"index": 7, "address": CHECKSUM_ADDRESS})

        assert encoded == (7).to_bytes(32, "big") + b"\x00" * 12 + ADDRESS_BYTES

    def test_double_hashed(self):
        encoder = make_encoder(
            types=["uint256", "address"], fields=["index", "address"], encoding="standard"
        )
        record = [7, CHECKSUM_ADDRESS]

        assert encoder.digest(record) == keccak256(keccak256(encoder.encode(record)))

    def test_encodings_differ(self):
        record = {"address": CHECKSUM_ADDRESS, "amount": 5}
        packed = make_encoder(encoding="packed")
        standard = make_encoder(encoding="standard")

        assert packed.digest(record) != standard.digest(record)
        assert standard.encoding is LeafEncoding.STANDARD


class TestCanonicalForm:
    """Semantically equal records must encode to identical bytes."""

    def test_mapping_and_sequence_equal(self, airdrop_encoder):
        a = airdrop_encoder.encode({"amount": 10, "address": CHECKSUM_ADDRESS})
        b = airdrop_encoder.encode([CHECKSUM_ADDRESS, 10])
        c = airdrop_encoder.encode((CHECKSUM_ADDRESS, 10))

        assert a == b == c

    def test_numeric_strings_equal_ints(self, airdrop_encoder):
        as_int = airdrop_encoder.digest([CHECKSUM_ADDRESS, 255])

        assert airdrop_encoder.digest([CHECKSUM_ADDRESS, "255"]) == as_int
        assert airdrop_encoder.digest([CHECKSUM_ADDRESS, "0xff"]) == as_int

    def test_address_case_insensitive(self, airdrop_encoder):
        checksummed = airdrop_encoder.digest([CHECKSUM_ADDRESS, 1])

        assert airdrop_encoder.digest([CHECKSUM_ADDRESS.lower(), 1]) == checksummed
        assert airdrop_encoder.digest([ADDRESS_BYTES, 1]) == checksummed

    def test_to_json(self, airdrop_encoder):
        value = airdrop_encoder.to_json([CHECKSUM_ADDRESS.lower(), 2**200])

        assert value == {"address": CHECKSUM_ADDRESS, "amount": str(2**200)}

    def test_to_json_reencodes_identically(self, airdrop_encoder):
        record = [make_address(3), 12345]
        assert airdrop_encoder.digest(airdrop_encoder.to_json(record)) == airdrop_encoder.digest(record)

    def test_digest_all_preserves_order(self, airdrop_encoder, recipients):
        digests = airdrop_encoder.digest_all(recipients)
        assert digests == [airdrop_encoder.digest(r) for r in recipients]


class TestFieldOrder:
    """(address, amount) and (amount, address) are different schemes."""

    def test_swapped_field_order_does_not_collide(self):
        forward = make_encoder(types=["address", "uint256"], fields=["address", "amount"])
        backward = make_encoder(types=["uint256", "address"], fields=["amount", "address"])
        record = {"address": CHECKSUM_ADDRESS, "amount": 1000}

        assert forward.digest(record) != backward.digest(record)

    @pytest.mark.parametrize("encoding", ["packed", "standard"])
    def test_same_values_different_order(self, encoding):
        forward = make_encoder(types=["uint256", "address"], fields=["index", "address"], encoding=encoding)
        backward = make_encoder(types=["address", "uint256"], fields=["address", "index"], encoding=encoding)

        assert forward.digest([3, CHECKSUM_ADDRESS]) != backward.digest([CHECKSUM_ADDRESS, 3])


class TestEncodingErrors:
    """Invalid values raise EncodingError instead of truncating."""

    def test_uint_overflow(self):
        encoder = make_encoder(types=["uint8"], fields=["v"])
        with pytest.raises(EncodingError, match="does not fit"):
            encoder.encode([256])

    def test_uint256_overflow(self, airdrop_encoder):
        with pytest.raises(EncodingError) as exc_info:
            airdrop_encoder.digest([CHECKSUM_ADDRESS, 2**256])

        assert exc_info.value.code == ErrorCodes.ENCODING_ERROR
        assert exc_info.value.details["field"] == "amount"
        assert exc_info.value.details["type"] == "uint256"

    def test_negative_uint(self, airdrop_encoder):
        with pytest.raises(EncodingError):
            airdrop_encoder.encode([CHECKSUM_ADDRESS, -1])

    def test_signed_range(self):
        encoder = make_encoder(types=["int8"], fields=["v"])
        assert encoder.encode([-128]) == b"\x80"
        with pytest.raises(EncodingError):
            encoder.encode([128])

    def test_bool_is_not_an_int(self, airdrop_encoder):
        with pytest.raises(EncodingError, match="bool"):
            airdrop_encoder.encode([CHECKSUM_ADDRESS, True])

    def test_float_rejected(self, airdrop_encoder):
        with pytest.raises(EncodingError):
            airdrop_encoder.encode([CHECKSUM_ADDRESS, 1.5])

    def test_non_numeric_string(self, airdrop_encoder):
        with pytest.raises(EncodingError, match="non-numeric"):
            airdrop_encoder.encode([CHECKSUM_ADDRESS, "ten"])

    def test_bad_checksum(self, airdrop_encoder):
        bad = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        with pytest.raises(EncodingError, match="checksum"):
            airdrop_encoder.encode([bad, 1])

    def test_short_address(self, airdrop_encoder):
        with pytest.raises(EncodingError):
            airdrop_encoder.encode(["0x1234", 1])
        with pytest.raises(EncodingError):
            airdrop_encoder.encode([b"\x01" * 19, 1])

    def test_fixed_bytes_overflow(self):
        encoder = make_encoder(types=["bytes4"], fields=["sig"])
        with pytest.raises(EncodingError, match="overflows"):
            encoder.encode(["0x0102030405"])

    def test_fixed_bytes_embedded_whitespace(self):
        encoder = make_encoder(types=["bytes2"], fields=["tag"])
        with pytest.raises(EncodingError, match="Invalid hex"):
            encoder.encode(["0x00  00"])

    def test_missing_and_unknown_fields(self, airdrop_encoder):
        with pytest.raises(EncodingError, match="missing"):
            airdrop_encoder.encode({"address": CHECKSUM_ADDRESS})
        with pytest.raises(EncodingError, match="unknown"):
            airdrop_encoder.encode({"address": CHECKSUM_ADDRESS, "amount": 1, "memo": "x"})

    def test_wrong_arity(self, airdrop_encoder):
        with pytest.raises(EncodingError, match="values"):
            airdrop_encoder.encode([CHECKSUM_ADDRESS])

    def test_bare_value_needs_single_field(self, airdrop_encoder):
        with pytest.raises(EncodingError):
            airdrop_encoder.encode(CHECKSUM_ADDRESS)

    def test_encoding_error_is_value_error(self, airdrop_encoder):
        with pytest.raises(ValueError):
            airdrop_encoder.encode([CHECKSUM_ADDRESS, -5])


class TestLeafSchema:
    """Tests for LeafSchema and type validation."""

    @pytest.mark.parametrize("abi_type", [
        "address", "bool", "string", "bytes", "uint8", "uint256", "int128", "bytes1", "bytes32",
    ])
    def test_supported_types(self, abi_type):
        assert validate_abi_type(abi_type) == abi_type

    @pytest.mark.parametrize("abi_type", [
        "uint7", "uint264", "int0", "bytes0", "bytes33", "address[]", "tuple", "", "uint",
    ])
    def test_unsupported_types(self, abi_type):
        with pytest.raises(EncodingError):
            validate_abi_type(abi_type)

    def test_default_field_names(self):
        schema = LeafSchema.from_types(["address", "uint256"])
        assert schema.names == ("field0", "field1")
        assert schema.types == ("address", "uint256")

    def test_empty_schema_rejected(self):
        with pytest.raises(EncodingError):
            LeafSchema.from_types([])

    def test_duplicate_names_rejected(self):
        with pytest.raises(EncodingError, match="Duplicate"):
            LeafSchema.from_types(["uint256", "uint256"], ["a", "a"])

    def test_name_count_mismatch(self):
        with pytest.raises(EncodingError):
            LeafSchema.from_types(["uint256", "address"], ["only_one"])

    def test_encoder_repr(self, airdrop_encoder):
        assert "packed" in repr(airdrop_encoder)
        assert isinstance(airdrop_encoder, LeafEncoder)
