"""
Module 05 - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m merkledrop_cli build RECORDS [--out PATH] [--types T,..] [--fields F,..] [--json]
    python -m merkledrop_cli prove RECORDS --index N [--json]
    python -m merkledrop_cli verify BATCH [--root 0x..] [--index N] [--types T,..] [--json]
    python -m merkledrop_cli config --init

Environment Variables:
    MERKLEDROP_HASH_FUNCTION    keccak256 (default) or sha256
    MERKLEDROP_PAIRING          canonical_sort (default) or positional
    MERKLEDROP_ODD_NODE         promote (default) or duplicate
    MERKLEDROP_LEAF_ENCODING    packed (default) or standard
    MERKLEDROP_LEAF_TYPES       Comma separated ABI types
    MERKLEDROP_LEAF_FIELDS      Comma separated field names
    MERKLEDROP_LOG_LEVEL        Log level (default: INFO)
    MERKLEDROP_LOG_FILE         Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from merkledrop_cli import __version__
from merkledrop_cli.commands import build, prove, verify
from merkledrop_cli.config import add_tree_arguments, get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="merkledrop",
        description="merkledrop - Build Merkle roots over leaf records, generate and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./merkledrop.json or ~/.config/merkledrop/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle root and all proofs for a records file",
        description="Encode every record, build the tree and write { root, proofs }.",
    )
    build_parser.add_argument(
        "records",
        type=str,
        help="JSON file with the leaf records",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the batch payload (JSON)",
    )
    build_parser.add_argument(
        "--show-tree",
        action="store_true",
        default=False,
        help="Print every tree level",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    add_tree_arguments(build_parser)
    build_parser.set_defaults(func=build.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Print the proof bundle for one record",
        description="Build the tree over a records file and print one leaf's proof.",
    )
    prove_parser.add_argument(
        "records",
        type=str,
        help="JSON file with the leaf records",
    )
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="0-based index of the record to prove",
    )
    prove_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output the bundle as JSON",
    )
    add_tree_arguments(prove_parser)
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify the proof bundles of a batch payload",
        description="Recompute each bundle's leaf and fold its proof against the trusted root.",
    )
    verify_parser.add_argument(
        "batch_path",
        type=str,
        help="Path to a batch payload written by build",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Trusted root (0x hex); defaults to the payload's root",
    )
    verify_parser.add_argument(
        "--index", "-i",
        type=int,
        default=None,
        help="Verify only this leaf index",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    add_tree_arguments(verify_parser)
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="merkledrop.json",
        help="Path for config file (default: merkledrop.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to fix the tree scheme for your deployment.")
        print("You can also use environment variables (MERKLEDROP_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: merkledrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if log_level.upper() == "DEBUG":
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
