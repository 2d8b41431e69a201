"""
Module 01 - Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- keccak256 / sha256 known values
- hasher registry
- to_hex/from_hex round trip and validation
"""
import hashlib
import pytest

from core.crypto.hashing import (
    DIGEST_SIZE,
    HashFunction,
    keccak256,
    sha256,
    get_hasher,
    hash_concat,
    to_hex,
    from_hex,
    digest_from_hex,
)


KECCAK_EMPTY = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
SHA256_EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestKeccak256:
    """Tests for keccak256() function."""

    def test_keccak256_empty_bytes(self):
        """Ethereum keccak-256, not NIST SHA3-256."""
        assert keccak256(b"").hex() == KECCAK_EMPTY
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()

    def test_keccak256_size(self):
        assert len(keccak256(b"merkledrop")) == DIGEST_SIZE

    def test_keccak256_deterministic(self):
        data = b"test data for hashing"
        assert keccak256(data) == keccak256(data)

    def test_different_inputs_different_outputs(self):
        assert keccak256(b"input1") != keccak256(b"input2")


class TestSha256:
    """Tests for sha256() function."""

    def test_sha256_known_value(self):
        assert sha256(b"").hex() == SHA256_EMPTY
        assert sha256(b"hello") == hashlib.sha256(b"hello").digest()


class TestHasherRegistry:
    """Tests for get_hasher()."""

    def test_lookup_by_enum_and_string(self):
        assert get_hasher(HashFunction.KECCAK256) is keccak256
        assert get_hasher("keccak256") is keccak256
        assert get_hasher("sha256") is sha256

    def test_unknown_hash_raises(self):
        with pytest.raises(ValueError):
            get_hasher("md5")


class TestHashConcat:
    """Tests for hash_concat()."""

    def test_hash_concat_is_hash_of_concatenation(self):
        a, b = b"\x01" * 32, b"\x02" * 32
        assert hash_concat(a, b) == keccak256(a + b)
        assert hash_concat(a, b, sha256) == sha256(a + b)

    def test_hash_concat_order_matters(self):
        a, b = b"\x01" * 32, b"\x02" * 32
        assert hash_concat(a, b) != hash_concat(b, a)


class TestHexHelpers:
    """Tests for to_hex() / from_hex() / digest_from_hex()."""

    def test_round_trip(self):
        data = bytes.fromhex("deadbeef")
        assert to_hex(data) == "0xdeadbeef"
        assert from_hex(to_hex(data)) == data

    def test_uppercase_prefix_accepted(self):
        assert from_hex("0XDEADBEEF") == bytes.fromhex("deadbeef")

    def test_missing_prefix_raises(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_odd_length_raises(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_invalid_characters_raise(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")

    @pytest.mark.parametrize("value", ["0x00  00", "0x00 0", "0x0\n", "0x\t0"])
    def test_whitespace_rejected(self, value):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex(value)

    def test_non_string_raises(self):
        with pytest.raises(ValueError):
            from_hex(b"0x00")

    def test_digest_from_hex_checks_size(self):
        assert digest_from_hex("0x" + KECCAK_EMPTY) == keccak256(b"")
        with pytest.raises(ValueError, match="32 bytes"):
            digest_from_hex("0xdeadbeef")
