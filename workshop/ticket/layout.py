# workshop/ticket/layout.py
"""Which logical ticket fields live in the extras store, per schema version.

Each version lists the fields the record store cannot hold yet. When a field
leaves that list it is "promoted": the migration sweep moves any value still
sitting in the extras store into its record store column.
"""
from dataclasses import dataclass
from typing import Any

from workshop.ticket.columns import logical_name


@dataclass(frozen=True)
class StorageLayout:
    version: int
    extras_fields: frozenset[str]

    def partition(self, fields: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        extras: dict[str, Any] = {}
        for_store: dict[str, Any] = {}
        for key, value in fields.items():
            name = logical_name(key)
            if name in self.extras_fields:
                extras[name] = value
            else:
                for_store[key] = value
        return extras, for_store

    @property
    def promoted_fields(self) -> frozenset[str]:
        earlier = [layout.extras_fields for v, layout in LAYOUTS.items() if v < self.version]
        return frozenset().union(*earlier) - self.extras_fields


LAYOUTS: dict[int, StorageLayout] = {
    1: StorageLayout(1, frozenset({"timeline", "tagNumber", "history"})),
    2: StorageLayout(2, frozenset({"timeline", "tagNumber"})),
    3: StorageLayout(3, frozenset({"timeline"})),
}
CURRENT_SCHEMA_VERSION = 3


def get_layout(version: int = CURRENT_SCHEMA_VERSION) -> StorageLayout:
    try:
        return LAYOUTS[version]
    except KeyError:
        raise ValueError(f"Unknown schema version {version}; known: {sorted(LAYOUTS)}") from None
