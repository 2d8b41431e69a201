"""
Module 00 - Schemas

Error taxonomy, payload version constants and interchange models.
"""

from .errors import (
    ErrorCodes,
    MerkleDropError,
    MerkleDropException,
    EncodingError,
    EmptyTreeError,
    IndexOutOfRangeError,
    MalformedProofError,
    PayloadException,
    ConfigurationException,
)
from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    UnsupportedSchemaVersionError,
    check_schema_version,
)
from .payloads import (
    PolicyDescriptor,
    ProofBundle,
    BatchOutput,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "MerkleDropError",
    "MerkleDropException",
    "EncodingError",
    "EmptyTreeError",
    "IndexOutOfRangeError",
    "MalformedProofError",
    "PayloadException",
    "ConfigurationException",
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "UnsupportedSchemaVersionError",
    "check_schema_version",
    # Payloads
    "PolicyDescriptor",
    "ProofBundle",
    "BatchOutput",
]
