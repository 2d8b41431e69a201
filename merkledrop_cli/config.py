"""
Module 05 - CLI Configuration

Configuration management for the merkledrop CLI.
Supports configuration files, environment variables and per-command flags.

Precedence (lowest to highest):
    defaults < config file < MERKLEDROP_* environment < command-line flags
"""

from __future__ import annotations

import argparse
import copy
from pathlib import Path

from core.config.runtime import RuntimeConfig, TreeConfig
from core.crypto.hashing import HashFunction
from core.encoding.leaf_encoder import LeafEncoding
from core.merkle.merkle_tree import OddNodePolicy, PairingRule


def default_config_paths() -> list[Path]:
    """Locations searched when no --config is given."""
    return [
        Path.cwd() / "merkledrop.json",
        Path.cwd() / ".merkledrop.json",
        Path.home() / ".config" / "merkledrop" / "config.json",
    ]


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to a JSON or YAML config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_file(config_path)
    else:
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_file(default_path)
                break

    return config.with_env_overrides()


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def add_tree_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the tree/leaf scheme flags shared by build, prove and verify."""
    group = parser.add_argument_group("tree scheme (overrides config)")
    group.add_argument(
        "--types",
        type=_split,
        default=None,
        help="Comma separated leaf ABI types, e.g. address,uint256",
    )
    group.add_argument(
        "--fields",
        type=_split,
        default=None,
        help="Comma separated leaf field names, e.g. address,amount",
    )
    group.add_argument(
        "--encoding",
        choices=[e.value for e in LeafEncoding],
        default=None,
        help="Leaf encoding",
    )
    group.add_argument(
        "--pairing",
        choices=[p.value for p in PairingRule],
        default=None,
        help="Pair ordering rule",
    )
    group.add_argument(
        "--odd-node",
        choices=[o.value for o in OddNodePolicy],
        default=None,
        help="Odd-node-out policy",
    )
    group.add_argument(
        "--hash",
        dest="hash_function",
        choices=[h.value for h in HashFunction],
        default=None,
        help="Hash function",
    )


def tree_config_from_args(base: TreeConfig, args: argparse.Namespace) -> TreeConfig:
    """
    Apply command-line scheme flags on top of a TreeConfig.

    Giving --types without --fields drops the configured field names,
    since they describe a different layout.
    """
    tree = copy.deepcopy(base)
    if getattr(args, "types", None):
        tree.leaf_types = list(args.types)
        tree.leaf_fields = []
    if getattr(args, "fields", None):
        tree.leaf_fields = list(args.fields)
    for attr, key in (
        ("encoding", "leaf_encoding"),
        ("pairing", "pairing"),
        ("odd_node", "odd_node"),
        ("hash_function", "hash_function"),
    ):
        value = getattr(args, attr, None)
        if value is not None:
            setattr(tree, key, value)
    return tree.validate()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "tree": {
    "hash_function": "keccak256",
    "pairing": "canonical_sort",
    "odd_node": "promote",
    "leaf_encoding": "packed",
    "leaf_types": ["address", "uint256"],
    "leaf_fields": ["address", "amount"]
  },
  "log_level": "INFO",
  "log_file": null
}
"""
