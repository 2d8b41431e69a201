"""
Module 00 - Schemas
File: versioning.py

Purpose: Centralize the interchange payload version constants.
This file has no imports from other schema files to avoid circular
dependencies.
"""

# Current batch payload version
SCHEMA_VERSION: str = "v1"

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})


class UnsupportedSchemaVersionError(ValueError):
    """Raised when an unsupported schema version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_SCHEMA_VERSIONS
        super().__init__(
            f"Unsupported schema version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def check_schema_version(version: str) -> str:
    """Return the version unchanged if supported, raise otherwise."""
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(version)
    return version
