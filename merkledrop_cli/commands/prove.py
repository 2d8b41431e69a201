"""
Module 05 - CLI Prove Command

Print the proof bundle for one record of a records file.

Usage:
    merkledrop prove recipients.json --index 2
    merkledrop prove participants.json --types address --index 6 --json
"""

from __future__ import annotations

import json
from argparse import Namespace

from core.commitment.batch import build_bundle
from core.commitment.io import load_records
from core.merkle.merkle_proofs import MerkleProver
from core.schemas.errors import MerkleDropException
from merkledrop_cli.commands.build import print_error
from merkledrop_cli.config import tree_config_from_args


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

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
        # Raises IndexOutOfRangeError before records[] is touched
        MerkleProver.prove(tree, args.index)
        bundle = build_bundle(tree, encoder, records[args.index], args.index)
    except MerkleDropException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    if output_json:
        print(json.dumps({"root": tree.hex_root, "bundle": bundle.model_dump(mode="json")}, indent=2))
        return EXIT_SUCCESS

    print(f"root: {tree.hex_root}")
    print(f"index: {bundle.index}")
    for name, value in bundle.value.items():
        print(f"{name}: {value}")
    print(f"leaf: {bundle.leaf}")
    print(f"proof ({len(bundle.proof)}):")
    for i, sibling in enumerate(bundle.proof):
        side = ""
        if bundle.positions is not None:
            side = " [left]" if bundle.positions[i] else " [right]"
        print(f"  {sibling}{side}")
    return EXIT_SUCCESS
