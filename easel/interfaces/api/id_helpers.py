"""Helpers for translating identifiers and records at the HTTP boundary.

Routes receive numeric public ids from URL paths; services expect ints.
Records coming back from services carry the backend-native `_id`, which
clients must never see: every record is passed through public_record()
before it is returned.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fastapi import HTTPException

from easel.helpers.numeric_id import parse_public_id

HIDDEN_FIELDS = frozenset({"_id", "password"})


def to_public_id(value: str, label: str = "ID") -> int:
    """Parse a path parameter into a public id (400 when not an integer)."""
    public_id = parse_public_id(value)
    if public_id is None:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return public_id


def public_record(record: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if record is None:
        return None
    return {k: v for k, v in record.items() if k not in HIDDEN_FIELDS}


def public_records(records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [{k: v for k, v in r.items() if k not in HIDDEN_FIELDS} for r in records]
