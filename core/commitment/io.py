"""
Module 04 - Batch Commitment IO
File: io.py

Purpose: Read leaf records and read/write batch payloads as JSON files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.schemas.errors import PayloadException
from core.schemas.payloads import BatchOutput


logger = logging.getLogger(__name__)

# Keys under which a records file may nest its list
RECORD_KEYS = ("records", "participants", "recipients")


def _read_json_file(path: Path) -> Any:
    if not path.exists():
        raise PayloadException(f"File not found: {path}", path=str(path))
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise PayloadException(f"Invalid JSON in {path}: {e}", path=str(path)) from e


def load_records(path: str | Path) -> list[Any]:
    """
    Load leaf records from a JSON file.

    Accepted shapes:
        [record, ...]
        {"records": [record, ...]}  (or "participants" / "recipients")

    A record is a list of values in schema order, an object keyed by
    field name, or a bare value for single-field schemas.

    Raises:
        PayloadException: If the file is missing, not JSON, or has no record list
    """
    path = Path(path)
    data = _read_json_file(path)

    if isinstance(data, dict):
        for key in RECORD_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            raise PayloadException(
                f"No record list found in {path}; expected one of {list(RECORD_KEYS)}",
                path=str(path),
            )

    if not isinstance(data, list):
        raise PayloadException(f"Records file {path} must hold a JSON list", path=str(path))

    logger.debug("Loaded %d records from %s", len(data), path)
    return data


def save_batch(batch: BatchOutput, path: str | Path) -> Path:
    """Write a batch payload as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(batch.model_dump_json(indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote %d proofs to %s", batch.leaf_count, path)
    return path


def load_batch(path: str | Path) -> BatchOutput:
    """
    Read and validate a batch payload.

    Raises:
        PayloadException: If the file is missing, not JSON, or fails validation
    """
    path = Path(path)
    data = _read_json_file(path)
    try:
        return BatchOutput.model_validate(data)
    except ValidationError as e:
        raise PayloadException(
            f"Invalid batch payload in {path}: {e.error_count()} error(s)",
            path=str(path),
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


__all__ = [
    "RECORD_KEYS",
    "load_records",
    "save_batch",
    "load_batch",
]
