"""
Module 05 - CLI Build Command

Commit a list of leaf records: compute the Merkle root and write the
root with one proof bundle per record.

Usage:
    merkledrop build recipients.json --out merkle_data.json
    merkledrop build participants.json --types address --out merkle_data.json
    merkledrop build whitelist.json --types uint256,address --fields index,address --encoding standard
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from typing import Any

from core.commitment.batch import batch_from_tree
from core.commitment.io import load_records, save_batch
from core.merkle.merkle_proofs import MerkleProver
from core.schemas.errors import MerkleDropException
from merkledrop_cli.config import tree_config_from_args


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a build for CLI output."""
    records_path: str = ""
    output_path: str | None = None
    root: str = ""
    leaf_count: int = 0
    depth: int = 0
    policy: str = ""
    leaf_encoding: str = ""
    leaf_types: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["output_path"] is None:
            del d["output_path"]
        return d


def print_summary_human(summary: BuildSummary) -> None:
    print(f"records: {summary.records_path}")
    print(f"leaves: {summary.leaf_count}")
    print(f"depth: {summary.depth}")
    print(f"scheme: {summary.leaf_encoding}({','.join(summary.leaf_types or [])}) {summary.policy}")
    print(f"root: {summary.root}")
    if summary.output_path:
        print(f"written: {summary.output_path}")


def print_error(exc: MerkleDropException, output_json: bool) -> None:
    """Report a merkledrop error on stderr (structured when --json)."""
    if output_json:
        print(exc.to_error_model().model_dump_json(indent=2), file=sys.stderr)
    else:
        print(f"Error: {exc.message}", file=sys.stderr)


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    output_json = args.json

    try:
        tree_config = tree_config_from_args(args.cli_config.tree, args)
        encoder = tree_config.to_encoder()
        policy = tree_config.to_policy()

        records = load_records(args.records)
        tree = MerkleProver.build(encoder, records, policy)
        batch = batch_from_tree(tree, encoder, records)
    except MerkleDropException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    if args.show_tree:
        print(tree.render())
    else:
        logger.debug("Tree:\n%s", tree.render())

    output_path = None
    if args.out:
        output_path = str(save_batch(batch, args.out))

    summary = BuildSummary(
        records_path=str(args.records),
        output_path=output_path,
        root=batch.root,
        leaf_count=tree.leaf_count,
        depth=tree.depth,
        policy=policy.describe(),
        leaf_encoding=encoder.encoding.value,
        leaf_types=list(encoder.schema.types),
    )

    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    logger.info("Built root %s over %d leaves", batch.root, tree.leaf_count)
    return EXIT_SUCCESS
