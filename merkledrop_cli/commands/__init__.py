"""
CLI command modules.
"""

from merkledrop_cli.commands import build, prove, verify

__all__ = ["build", "prove", "verify"]
