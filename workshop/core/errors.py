# workshop/core/errors.py
"""Errors raised by the ticket stores and the reconciliation service.

Record store failures carry the backend code and message so callers can
report them; guard violations (blocked writes, forbidden column names) are
programming defects and abort the operation.
"""
from typing import Any


class WorkshopError(Exception):
    pass


class RecordStoreError(WorkshopError):
    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class TicketNotFoundError(RecordStoreError):
    def __init__(self, ticket_id: str):
        super().__init__(f"Ticket {ticket_id} not found", code="not_found")
        self.ticket_id = ticket_id


class TicketUpdateError(WorkshopError):
    def __init__(self, ticket_id: str, payload: dict[str, Any], code: str | None, message: str):
        super().__init__(f"Update of ticket {ticket_id} failed ({code}): {message}")
        self.ticket_id = ticket_id
        self.payload = payload
        self.code = code
        self.message = message

    def as_detail(self) -> dict[str, Any]:
        return {
            "ticket_id": self.ticket_id,
            "payload_keys": sorted(self.payload),
            "code": self.code,
            "message": self.message,
        }


class WriteBlockedError(WorkshopError):
    """A write was attempted without a capability granted by a user action."""


class ForbiddenColumnError(WorkshopError):
    def __init__(self, keys: set[str]):
        super().__init__(f"Non-physical column names survived sanitization: {sorted(keys)}")
        self.keys = set(keys)
