"""
Test fixtures package for merkledrop tests.

This package provides factory functions for creating test objects.

Usage:
    from fixtures import make_recipients, make_encoder

    def test_something():
        encoder = make_encoder()
        leaves = encoder.digest_all(make_recipients(5))
"""

from .common import (
    ALL_POLICIES,
    CHECKSUM_ADDRESS,
    make_address,
    make_recipients,
    make_leaves,
    make_encoder,
)

__all__ = [
    "ALL_POLICIES",
    "CHECKSUM_ADDRESS",
    "make_address",
    "make_recipients",
    "make_leaves",
    "make_encoder",
]
