"""
Module 05 - CLI Verify Command

Verify the proof bundles of a batch payload against a trusted root.

The scheme published in the payload is used when present; otherwise the
configured tree scheme applies, with the --types/--fields/... flags on top.
Payloads without a policy include the flat { root, proofs: [{ address, proof }] }
files written by the hardhat scripts. The trusted root defaults to the
payload's own root, which only checks internal consistency: pass --root
with the published value to check inclusion.

Usage:
    merkledrop verify merkle_data.json --root 0x...
    merkledrop verify merkle_data.json --root 0x... --index 3 --json
    merkledrop verify merkle_data.json --types address --fields address
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.commitment.batch import (
    encoder_from_descriptor,
    policy_from_descriptor,
    verify_bundle,
)
from core.commitment.io import load_batch
from core.schemas.errors import MerkleDropException
from merkledrop_cli.commands.build import print_error
from merkledrop_cli.config import tree_config_from_args


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of batch verification for CLI output."""
    batch_path: str = ""
    root: str = ""
    checked: int = 0
    valid: int = 0
    invalid_indexes: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["ok"] = self.all_ok
        return d

    @property
    def all_ok(self) -> bool:
        return self.checked > 0 and not self.invalid_indexes


def print_summary_human(summary: VerifySummary) -> None:
    print(f"batch: {summary.batch_path}")
    print(f"root: {summary.root}")
    print(f"checked: {summary.checked}")
    print(f"valid: {summary.valid}")
    if summary.invalid_indexes:
        print(f"\ninvalid ({len(summary.invalid_indexes)}):")
        for index in summary.invalid_indexes[:20]:
            print(f"  ✗ index {index}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 all valid, 2 any invalid, 1 error)
    """
    output_json = args.json

    try:
        batch = load_batch(args.batch_path)
        if batch.policy is not None:
            encoder = encoder_from_descriptor(batch.policy)
            policy = policy_from_descriptor(batch.policy)
        else:
            logger.warning("Batch publishes no policy, using configured tree scheme")
            tree_config = tree_config_from_args(args.cli_config.tree, args)
            encoder = tree_config.to_encoder()
            policy = tree_config.to_policy()

        trusted_root = args.root or batch.root
        if args.index is not None:
            bundles = [batch.bundle_at(args.index)]
        else:
            bundles = batch.proofs

        summary = VerifySummary(batch_path=str(args.batch_path), root=trusted_root)
        for bundle in bundles:
            summary.checked += 1
            if verify_bundle(bundle, trusted_root, encoder, policy):
                summary.valid += 1
            else:
                summary.invalid_indexes.append(bundle.index)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except MerkleDropException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed for %d bundle(s)", len(summary.invalid_indexes))
    return EXIT_VERIFICATION_FAILED
