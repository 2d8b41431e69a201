"""
Module 00 - Schemas
File: errors.py

Purpose: Standard error taxonomy across merkledrop.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

A failed proof verification is NOT an error: verifiers return False.
Exceptions are reserved for input that cannot be processed at all.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Leaf encoding
    ENCODING_ERROR = "ENCODING_ERROR"

    # Tree construction and proof generation
    EMPTY_TREE = "EMPTY_TREE"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"

    # Verification input
    MALFORMED_PROOF = "MALFORMED_PROOF"

    # Interchange payloads and configuration
    PAYLOAD_INVALID = "PAYLOAD_INVALID"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class MerkleDropError(BaseModel):
    """
    Error model for structured error reporting (e.g. CLI JSON output).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ENCODING_ERROR],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "MerkleDropException":
        """Convert this error model to a raised exception."""
        return MerkleDropException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class MerkleDropException(Exception):
    """
    Base exception for all merkledrop errors.

    Carries structured error information and can be converted
    to a MerkleDropError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "MERKLEDROP_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> MerkleDropError:
        """Convert this exception to a MerkleDropError model."""
        return MerkleDropError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EncodingError(MerkleDropException, ValueError):
    """Raised when a leaf field overflows its width or has the wrong type."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        abi_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field is not None:
            full_details["field"] = field
        if abi_type is not None:
            full_details["type"] = abi_type
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_ERROR,
            details=full_details,
        )


class EmptyTreeError(MerkleDropException, ValueError):
    """Raised when a tree is requested over zero leaves."""

    def __init__(self, message: str = "Cannot build a Merkle tree from zero leaves") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_TREE)


class IndexOutOfRangeError(MerkleDropException, IndexError):
    """Raised when a proof is requested for a leaf the tree does not hold."""

    def __init__(
        self,
        message: str,
        index: Any = None,
        leaf_count: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if index is not None:
            details["index"] = index
        if leaf_count is not None:
            details["leaf_count"] = leaf_count
        super().__init__(
            message=message,
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details=details,
        )


class MalformedProofError(MerkleDropException, ValueError):
    """Raised when proof input is structurally invalid (not merely wrong)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_PROOF,
            details=details,
        )


class PayloadException(MerkleDropException):
    """Raised when a records file or batch payload cannot be read."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if path:
            full_details["path"] = path
        super().__init__(
            message=message,
            code=ErrorCodes.PAYLOAD_INVALID,
            details=full_details,
        )


class ConfigurationException(MerkleDropException):
    """Raised when tree or runtime configuration is invalid."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if key:
            full_details["key"] = key
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
        )
