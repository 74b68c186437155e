# workshop/ticket/columns.py
"""Mapping between logical ticket field names and record store columns.

The UI works with camelCase names; the record store only accepts lowercase
column names. Anything not in the allow-list is dropped on the way in.
"""
import copy
import json
import logging
import re
from typing import Any

from workshop.core.errors import ForbiddenColumnError

logger = logging.getLogger(__name__)

# physical column -> logical name
COLUMNS: dict[str, str] = {
    "id": "id",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "ticket_number": "ticketNumber",
    "tag_number": "tagNumber",
    "customer_name": "customerName",
    "customer_phone": "customerPhone",
    "customer_email": "customerEmail",
    "bike_model": "bikeModel",
    "issue_description": "issueDescription",
    "status": "status",
    "priority": "priority",
    "internal_notes": "internalNotes",
    "is_archived": "isArchived",
    "quote": "quote",
    "history": "history",
}
PHYSICAL_COLUMNS = frozenset(COLUMNS)
LOGICAL_TO_PHYSICAL = {logical: physical for physical, logical in COLUMNS.items()}

JSON_COLUMNS = ("quote", "history")
IMMUTABLE_COLUMNS = ("id", "created_at")
NON_NULLABLE_COLUMNS = ("status", "priority", "is_archived")
FORBIDDEN_TOKEN = "tagNumber"

_UPPERCASE = re.compile(r"[A-Z]")

EMPTY_QUOTE: dict[str, Any] = {
    "items": [],
    "discount": 0,
    "subtotal": 0,
    "total": 0,
    "signature": None,
    "isSigned": False,
}


def empty_quote() -> dict[str, Any]:
    return copy.deepcopy(EMPTY_QUOTE)


def physical_name(key: str) -> str | None:
    if key in PHYSICAL_COLUMNS:
        return key
    return LOGICAL_TO_PHYSICAL.get(key)


def logical_name(key: str) -> str:
    return COLUMNS.get(key, key)


def _json_default(column: str) -> Any:
    return [] if column == "history" else None


def _has_json_shape(column: str, value: Any) -> bool:
    if column == "history":
        return isinstance(value, list)
    return value is None or isinstance(value, dict)


def _parse_json_column(column: str, value: Any) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            logger.warning("Malformed JSON for column %s, storing empty value: %s", column, exc)
            return _json_default(column)
    if not _has_json_shape(column, value):
        logger.warning("Column %s expects %s, got %s; storing empty value",
                       column, "a list" if column == "history" else "an object", type(value).__name__)
        return _json_default(column)
    return value


def to_physical(record: dict[str, Any], *, is_update: bool = False, now: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for physical, logical in COLUMNS.items():
        if logical in record:
            payload[physical] = record[logical]
        elif physical in record:
            payload[physical] = record[physical]

    for column in JSON_COLUMNS:
        if column in payload:
            payload[column] = _parse_json_column(column, payload[column])

    if is_update:
        for column in IMMUTABLE_COLUMNS:
            payload.pop(column, None)
        if now is not None:
            payload["updated_at"] = now

    # Only reachable when COLUMNS lists tagNumber as a physical column.
    if FORBIDDEN_TOKEN in payload:
        raise ForbiddenColumnError({FORBIDDEN_TOKEN})

    for key in [k for k in payload if _UPPERCASE.search(k)]:
        del payload[key]
    return payload


def to_logical(row: dict[str, Any]) -> dict[str, Any]:
    record = dict(row)
    for physical, logical in COLUMNS.items():
        if physical in row:
            record[logical] = row[physical]
    if not isinstance(record.get("quote"), dict):
        record["quote"] = empty_quote()
    if not isinstance(record.get("history"), list):
        record["history"] = []
    return record
