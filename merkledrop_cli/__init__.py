"""
Module 05 - merkledrop CLI

Command-line interface for building Merkle commitments and proofs.

Usage:
    python -m merkledrop_cli build recipients.json --out merkle_data.json
    python -m merkledrop_cli prove recipients.json --index 2
    python -m merkledrop_cli verify merkle_data.json --root 0x...
    python -m merkledrop_cli config --init
"""

__version__ = "0.1.0"
