"""
Runtime Configuration

Central configuration for the tree scheme and logging.

The tree scheme (hash, pairing, odd-node policy, leaf encoding and leaf
layout) is fixed per deployment: whoever builds a root and whoever
verifies proofs against it must load the same TreeConfig.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.crypto.hashing import HashFunction
from core.encoding.leaf_encoder import LeafEncoder, LeafEncoding, LeafSchema
from core.merkle.merkle_tree import OddNodePolicy, PairingRule, TreePolicy
from core.schemas.errors import ConfigurationException, EncodingError

load_dotenv()


ENV_PREFIX = "MERKLEDROP_"


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class TreeConfig:
    """
    Tree and leaf scheme.

    Defaults reproduce the airdrop convention: keccak256 over
    abi.encodePacked(address, uint256), sorted pairs, odd node promoted.
    """
    hash_function: str = HashFunction.KECCAK256.value
    pairing: str = PairingRule.CANONICAL_SORT.value
    odd_node: str = OddNodePolicy.PROMOTE.value
    leaf_encoding: str = LeafEncoding.PACKED.value
    leaf_types: list[str] = field(default_factory=lambda: ["address", "uint256"])
    leaf_fields: list[str] = field(default_factory=lambda: ["address", "amount"])

    def validate(self) -> "TreeConfig":
        """
        Check every value; raise ConfigurationException on the first bad one.
        """
        for key, enum_cls in (
            ("hash_function", HashFunction),
            ("pairing", PairingRule),
            ("odd_node", OddNodePolicy),
            ("leaf_encoding", LeafEncoding),
        ):
            value = getattr(self, key)
            try:
                enum_cls(value)
            except ValueError:
                allowed = [member.value for member in enum_cls]
                raise ConfigurationException(
                    f"Invalid {key} {value!r}; expected one of {allowed}",
                    key=key,
                ) from None
        try:
            self.to_schema()
        except EncodingError as e:
            raise ConfigurationException(f"Invalid leaf layout: {e.message}", key="leaf_types") from e
        return self

    def to_policy(self) -> TreePolicy:
        self.validate()
        return TreePolicy(
            pairing=PairingRule(self.pairing),
            odd_node=OddNodePolicy(self.odd_node),
            hash_function=HashFunction(self.hash_function),
        )

    def to_schema(self) -> LeafSchema:
        return LeafSchema.from_types(self.leaf_types, self.leaf_fields or None)

    def to_encoder(self) -> LeafEncoder:
        self.validate()
        return LeafEncoder(
            self.to_schema(),
            encoding=LeafEncoding(self.leaf_encoding),
            hash_function=HashFunction(self.hash_function),
        )


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    tree: TreeConfig = field(default_factory=TreeConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - MERKLEDROP_HASH_FUNCTION: keccak256 | sha256
        - MERKLEDROP_PAIRING: canonical_sort | positional
        - MERKLEDROP_ODD_NODE: promote | duplicate
        - MERKLEDROP_LEAF_ENCODING: packed | standard
        - MERKLEDROP_LEAF_TYPES: comma separated ABI types
        - MERKLEDROP_LEAF_FIELDS: comma separated field names
        - MERKLEDROP_LOG_LEVEL: log level name
        - MERKLEDROP_LOG_FILE: optional log file path
        """
        overrides: dict[str, Any] = {}

        for key in ("hash_function", "pairing", "odd_node", "leaf_encoding"):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value:
                overrides.setdefault("tree", {})[key] = value.strip().lower()

        for key in ("leaf_types", "leaf_fields"):
            value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if value:
                overrides.setdefault("tree", {})[key] = _split_list(value)

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a .json, .yaml or .yml file."""
        path = Path(path)
        if path.suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        if not isinstance(data, dict):
            raise ConfigurationException("Configuration must be a mapping")

        tree_data = data.get("tree", {}) or {}
        try:
            tree = TreeConfig(**tree_data)
        except TypeError as e:
            raise ConfigurationException(f"Invalid tree configuration: {e}", key="tree") from e
        tree.validate()

        return cls(
            tree=tree,
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        tree_overrides = overrides.get("tree", {})
        if "leaf_types" in tree_overrides and "leaf_fields" not in tree_overrides:
            # Field names from the file belong to the old layout
            new_config.tree.leaf_fields = []
        for key, value in tree_overrides.items():
            setattr(new_config.tree, key, value)
        new_config.tree.validate()

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "tree": {
                "hash_function": self.tree.hash_function,
                "pairing": self.tree.pairing,
                "odd_node": self.tree.odd_node,
                "leaf_encoding": self.tree.leaf_encoding,
                "leaf_types": list(self.tree.leaf_types),
                "leaf_fields": list(self.tree.leaf_fields),
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }

