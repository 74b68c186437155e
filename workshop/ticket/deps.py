# workshop/ticket/deps.py
from functools import lru_cache

from fastapi import Header

from workshop.core.config import get_settings
from workshop.core.database import SessionLocal
from workshop.core.extras_store import ExtrasStore
from workshop.core.guard import WriteCapability
from workshop.core.notifier import Notifier
from workshop.core.state import AppState, TicketPoller
from workshop.ticket.layout import get_layout
from workshop.ticket.record_store import RecordStore
from workshop.ticket.services import TicketService


@lru_cache
def get_notifier() -> Notifier:
    return Notifier(locale=get_settings().LOCALE)


@lru_cache
def get_ticket_service() -> TicketService:
    settings = get_settings()
    return TicketService(
        RecordStore(SessionLocal),
        ExtrasStore(settings.EXTRAS_PATH),
        layout=get_layout(settings.SCHEMA_VERSION),
        ticket_number_floor=settings.TICKET_NUMBER_FLOOR,
        notifier=get_notifier(),
    )


@lru_cache
def get_app_state() -> AppState:
    return AppState()


@lru_cache
def get_poller() -> TicketPoller:
    return TicketPoller(
        get_app_state(),
        get_ticket_service().get_all,
        interval=get_settings().REFRESH_INTERVAL_SECONDS,
    )


def get_write_capability(x_user_action: str | None = Header(default=None)) -> WriteCapability:
    if x_user_action == "1":
        return WriteCapability.user_action("http")
    return WriteCapability.automatic("http")
