# workshop/customer/services.py
from typing import Any


def derive_customers(tickets: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """One entry per phone number, taken from the first (newest) ticket that
    names the customer. Tickets without a name or phone are skipped."""
    customers: dict[str, dict[str, Any]] = {}
    for ticket in tickets:
        name, phone = ticket.get("customerName"), ticket.get("customerPhone")
        if not name or not phone:
            continue
        if phone not in customers:
            customers[phone] = {
                "name": name,
                "phone": phone,
                "email": ticket.get("customerEmail") or "",
                "ticket_count": 0,
            }
        customers[phone]["ticket_count"] += 1
    return list(customers.values())


def tickets_for_customer(tickets: list[dict[str, Any]], phone: str) -> list[dict[str, Any]]:
    return [t for t in tickets if t.get("customerPhone") == phone]
