# workshop/dashboard/services.py
"""Dashboard figures derived from the merged ticket list."""
import logging
from datetime import datetime, timezone
from typing import Any

from workshop.ticket.schemas import TicketStatus

logger = logging.getLogger(__name__)

ATTENTION_LIMIT = 10
NEW_TICKET_GRACE_DAYS = 2
_SETTLED = {TicketStatus.COMPLETED.value, TicketStatus.CANCELLED.value}


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable ticket timestamp %r", value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def is_open(ticket: dict[str, Any]) -> bool:
    return not ticket.get("isArchived") and ticket.get("status") != TicketStatus.ARCHIVED.value


def days_since_update(ticket: dict[str, Any], now: datetime) -> int:
    stamp = _parse_timestamp(ticket.get("updatedAt")) or _parse_timestamp(ticket.get("createdAt"))
    if stamp is None:
        return 0
    return abs(now - stamp).days


def status_counts(tickets: list[dict[str, Any]]) -> dict[str, int]:
    counts = {s.value: 0 for s in TicketStatus if s is not TicketStatus.ARCHIVED}
    for ticket in filter(is_open, tickets):
        status = ticket.get("status")
        if status in counts:
            counts[status] += 1
    return counts


def attention_tickets(
    tickets: list[dict[str, Any]],
    now: datetime | None = None,
    limit: int = ATTENTION_LIMIT,
) -> list[dict[str, Any]]:
    """Open tickets that have sat longest without an update. Completed and
    cancelled work is left out, and a new ticket only shows up once it has
    waited ``NEW_TICKET_GRACE_DAYS``."""
    now = now or datetime.now(timezone.utc)
    waiting = []
    for ticket in filter(is_open, tickets):
        status = ticket.get("status")
        if status in _SETTLED:
            continue
        days = days_since_update(ticket, now)
        if status == TicketStatus.NEW.value and days < NEW_TICKET_GRACE_DAYS:
            continue
        waiting.append({**ticket, "daysSinceUpdate": days})
    waiting.sort(key=lambda t: t["daysSinceUpdate"], reverse=True)
    return waiting[:limit]
