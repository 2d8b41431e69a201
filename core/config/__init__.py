"""
Runtime Configuration Module

Provides configuration loading and management for merkledrop.
"""

from .runtime import (
    ENV_PREFIX,
    TreeConfig,
    RuntimeConfig,
)

__all__ = [
    "ENV_PREFIX",
    "TreeConfig",
    "RuntimeConfig",
]
