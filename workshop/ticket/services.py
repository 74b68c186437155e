# workshop/ticket/services.py
"""Ticket reads and writes across the record store and the extras store.

A ticket is one logical record, but depending on the deployed schema version
some of its fields are kept in device-local extras instead of the record
store. Writes split the fields between the two, reads merge them back.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from workshop.core.clock import Clock
from workshop.core.errors import (
    RecordStoreError,
    TicketNotFoundError,
    TicketUpdateError,
    WorkshopError,
    WriteBlockedError,
)
from workshop.core.extras_store import ExtrasStore
from workshop.core.guard import WriteCapability
from workshop.core.notifier import Notifier
from workshop.ticket.columns import (
    NON_NULLABLE_COLUMNS,
    empty_quote,
    physical_name,
    to_logical,
    to_physical,
)
from workshop.ticket.layout import StorageLayout, get_layout
from workshop.ticket.record_store import RecordStore

logger = logging.getLogger(__name__)

ARCHIVED = "archived"

_EXTRAS_DEFAULTS = {
    "timeline": list,
    "history": list,
    "tagNumber": lambda: None,
    "quote": empty_quote,
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict)) and not value)


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def price_quote(quote: dict[str, Any]) -> dict[str, Any]:
    items = quote.get("items") or []
    subtotal = sum(_number(i.get("quantity")) * _number(i.get("price")) for i in items)
    discount = _number(quote.get("discount"))
    return {**quote, "items": items, "discount": discount, "subtotal": subtotal, "total": subtotal - discount}


def _drop_nulls(fields: dict[str, Any]) -> dict[str, Any]:
    """Treat an explicit null on a NOT NULL column as "leave unchanged"."""
    return {k: v for k, v in fields.items() if v is not None or physical_name(k) not in NON_NULLABLE_COLUMNS}


def _sync_archive_flag(fields: dict[str, Any]) -> dict[str, Any]:
    flag_key = next((k for k in ("isArchived", "is_archived") if k in fields), None)
    if "status" in fields and flag_key is None:
        fields["isArchived"] = fields["status"] == ARCHIVED
    elif flag_key is not None and "status" not in fields and fields[flag_key]:
        fields["status"] = ARCHIVED
    return fields


def filter_tickets(
    tickets: list[dict[str, Any]],
    *,
    search: str | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> list[dict[str, Any]]:
    """Narrow a ticket list the way the tickets screen does. ``search`` is a
    case-insensitive substring match on customer name, ticket number, bike
    model and tag number."""
    needle = (search or "").strip().lower()

    def matches(ticket: dict[str, Any]) -> bool:
        if status and ticket.get("status") != status:
            return False
        if priority and ticket.get("priority") != priority:
            return False
        if not needle:
            return True
        haystack = (ticket.get(k) for k in ("customerName", "ticketNumber", "bikeModel", "tagNumber"))
        return any(needle in str(value).lower() for value in haystack if value is not None)

    return [t for t in tickets if matches(t)]


@dataclass
class MigrationReport:
    promoted: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    orphaned: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class TicketService:
    def __init__(
        self,
        records: RecordStore,
        extras: ExtrasStore,
        *,
        clock: Clock | None = None,
        layout: StorageLayout | None = None,
        ticket_number_floor: int = 2400,
        notifier: Notifier | None = None,
    ):
        self.records = records
        self.extras = extras
        self.clock = clock or Clock()
        self.layout = layout or get_layout()
        self.ticket_number_floor = ticket_number_floor
        self.notifier = notifier or Notifier()

    def _merge(self, row: dict[str, Any], extras: dict[str, Any]) -> dict[str, Any]:
        ticket = to_logical(row)
        for key, value in extras.items():
            if _is_blank(value):
                continue
            ticket[key] = value
            physical = physical_name(key)
            if physical:
                ticket[physical] = value

        for key, default in _EXTRAS_DEFAULTS.items():
            if ticket.get(key) is None:
                ticket[key] = default()
        if ticket.get("isArchived") is None:
            ticket["isArchived"] = ticket["is_archived"] = False
        return ticket

    # reads

    def get_all(self) -> list[dict[str, Any]]:
        """All tickets, newest first. Never raises: a failed query is
        reported through the notifier and yields an empty list."""
        try:
            rows = self.records.select_all()
        except RecordStoreError as exc:
            self.notifier.error("load_failed", exc)
            return []
        return [self._merge(row, self.extras.get(row["id"])) for row in rows]

    def get(self, ticket_id: str) -> dict[str, Any] | None:
        try:
            row = self.records.select_one(ticket_id)
        except TicketNotFoundError:
            return None
        return self._merge(row, self.extras.get(ticket_id))

    def next_ticket_number(self) -> int:
        current = self.records.max_ticket_number() or 0
        return max(current + 1, self.ticket_number_floor)

    def schema(self) -> list[dict[str, Any]] | None:
        return self.records.columns()

    # writes

    def create(self, fields: dict[str, Any], *, actor: str | None = None) -> dict[str, Any]:
        now = self.clock.now()
        fields = _sync_archive_flag(_drop_nulls(fields))
        if actor and "history" not in fields:
            fields["history"] = [{"timestamp": now, "action": "created", "actor": actor}]

        extras, for_store = self.layout.partition(fields)
        record = {
            "status": "new",
            "priority": "normal",
            "isArchived": False,
            "quote": empty_quote(),
            **for_store,
            "id": self.clock.new_id(),
            "createdAt": now,
            "updatedAt": now,
            "ticketNumber": self.next_ticket_number(),
        }
        payload = to_physical(record)
        if isinstance(payload.get("quote"), dict):
            payload["quote"] = price_quote(payload["quote"])

        try:
            row = self.records.insert(payload)
        except RecordStoreError as exc:
            logger.error("Insert of ticket %s failed (%s): %s", payload["id"], exc.code, exc.message)
            self.notifier.error("save_failed")
            raise

        entry = {
            name: extras[name] if extras.get(name) is not None else _EXTRAS_DEFAULTS[name]()
            for name in self.layout.extras_fields
        }
        self.extras.set(row["id"], entry)
        logger.info("Created ticket #%s (%s)", row["ticket_number"], row["id"])
        return self._merge(row, entry)

    def update(
        self,
        ticket_id: str,
        fields: dict[str, Any],
        capability: WriteCapability | None = None,
    ) -> dict[str, Any]:
        if capability is None or not capability.allowed:
            source = capability.source if capability else "none"
            logger.warning("Blocked write to ticket %s: not from a user action (source=%s)", ticket_id, source)
            raise WriteBlockedError(f"Update of ticket {ticket_id} blocked: not from an explicit user action")

        fields = _sync_archive_flag(_drop_nulls(fields))
        extras, for_store = self.layout.partition(fields)
        payload = to_physical(for_store, is_update=True, now=self.clock.now())
        if isinstance(payload.get("quote"), dict):
            payload["quote"] = price_quote(payload["quote"])

        if set(payload) - {"updated_at"}:
            logger.debug("Updating ticket %s columns %s", ticket_id, sorted(payload))
            try:
                row = self.records.update(ticket_id, payload)
            except TicketNotFoundError:
                raise
            except RecordStoreError as exc:
                logger.error(
                    "Update of ticket %s failed (%s): %s; payload=%r",
                    ticket_id, exc.code, exc.message, payload,
                )
                self.notifier.error("update_failed")
                if extras:
                    self.extras.merge(ticket_id, extras)
                raise TicketUpdateError(ticket_id, payload, exc.code, exc.message) from exc
        else:
            row = self.records.select_one(ticket_id)

        entry = self.extras.merge(ticket_id, extras) if extras else self.extras.get(ticket_id)
        return self._merge(row, entry)

    def archive(self, ticket_id: str, capability: WriteCapability | None = None) -> dict[str, Any]:
        return self.update(ticket_id, {"status": ARCHIVED, "isArchived": True}, capability)

    def _require(self, ticket_id: str) -> dict[str, Any]:
        ticket = self.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def append_timeline(
        self,
        ticket_id: str,
        action: str,
        notes: str = "",
        actor: str | None = None,
        capability: WriteCapability | None = None,
    ) -> dict[str, Any]:
        ticket = self._require(ticket_id)
        entry = {
            "id": self.clock.new_id(),
            "timestamp": self.clock.now(),
            "action": action,
            "notes": notes,
            "actor": actor,
        }
        return self.update(ticket_id, {"timeline": [*ticket["timeline"], entry]}, capability)

    def append_history(
        self,
        ticket_id: str,
        action: str,
        actor: str | None = None,
        capability: WriteCapability | None = None,
    ) -> dict[str, Any]:
        ticket = self._require(ticket_id)
        entry = {"timestamp": self.clock.now(), "action": action, "actor": actor}
        return self.update(ticket_id, {"history": [*ticket["history"], entry]}, capability)

    # startup

    def init(self) -> MigrationReport:
        """Promote extras left behind by an older schema version into the
        record store. Safe to run repeatedly; one bad entry does not stop
        the sweep."""
        report = MigrationReport()
        try:
            known = self.records.ids()
        except RecordStoreError as exc:
            logger.warning("Legacy extras migration skipped: %s", exc)
            return report

        promoted_fields = self.layout.promoted_fields
        for ticket_id in self.extras.ids():
            if ticket_id not in known:
                report.orphaned.append(ticket_id)
                continue
            try:
                entry = self.extras.get(ticket_id)
                legacy = {k: v for k, v in entry.items() if k in promoted_fields}
                if not legacy:
                    report.kept.append(ticket_id)
                    continue
                values = {k: v for k, v in legacy.items() if not _is_blank(v)}
                if values:
                    self.records.update(ticket_id, to_physical(values, is_update=True, now=self.clock.now()))
                remaining = {k: v for k, v in entry.items() if k not in promoted_fields}
                if remaining:
                    self.extras.set(ticket_id, remaining)
                else:
                    self.extras.delete(ticket_id)
                report.promoted.append(ticket_id)
            except (WorkshopError, OSError) as exc:
                logger.warning("Legacy extras migration failed for ticket %s: %s", ticket_id, exc)
                report.failed.append(ticket_id)

        logger.info(
            "Legacy extras migration: %d promoted, %d kept, %d orphaned, %d failed",
            len(report.promoted), len(report.kept), len(report.orphaned), len(report.failed),
        )
        return report
