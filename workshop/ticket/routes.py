# workshop/ticket/routes.py
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query

from workshop.core.errors import (
    ForbiddenColumnError,
    RecordStoreError,
    TicketNotFoundError,
    TicketUpdateError,
    WorkshopError,
    WriteBlockedError,
)
from workshop.core.guard import WriteCapability
from workshop.core.state import AppState
from workshop.ticket.deps import get_app_state, get_ticket_service, get_write_capability
from workshop.ticket.schemas import (
    HistoryEntryCreate,
    NextNumberOut,
    Priority,
    TicketCreate,
    TicketOut,
    TicketStatus,
    TicketUpdate,
    TimelineEntryCreate,
    dump_fields,
)
from workshop.ticket.services import TicketService, filter_tickets

router = APIRouter(prefix="/tickets", tags=["Tickets"])


def _raise_http(exc: WorkshopError) -> NoReturn:
    if isinstance(exc, WriteBlockedError):
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    if isinstance(exc, TicketNotFoundError):
        raise HTTPException(status_code=404, detail="Ticket not found") from exc
    if isinstance(exc, TicketUpdateError):
        raise HTTPException(status_code=502, detail=exc.as_detail()) from exc
    if isinstance(exc, RecordStoreError):
        raise HTTPException(status_code=502, detail={"code": exc.code, "message": exc.message}) from exc
    if isinstance(exc, ForbiddenColumnError):
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    raise exc


@router.get("/", response_model=list[TicketOut])
def list_all(
    archived: bool | None = Query(default=None, description="Only archived (true) or only active (false) tickets"),
    search: str | None = Query(default=None, description="Customer name, ticket number, bike model or tag number"),
    status: TicketStatus | None = Query(default=None),
    priority: Priority | None = Query(default=None),
    service: TicketService = Depends(get_ticket_service),
    state: AppState = Depends(get_app_state),
):
    items = service.get_all()
    state.replace_tickets(items)
    if archived is not None:
        items = [t for t in items if t["isArchived"] == archived]
    return filter_tickets(
        items,
        search=search,
        status=status.value if status else None,
        priority=priority.value if priority else None,
    )


@router.get("/next-number", response_model=NextNumberOut)
def next_number(service: TicketService = Depends(get_ticket_service)):
    try:
        return {"ticket_number": service.next_ticket_number()}
    except WorkshopError as exc:
        _raise_http(exc)


@router.get("/schema")
def schema(service: TicketService = Depends(get_ticket_service)):
    return {"columns": service.schema()}


@router.get("/{ticket_id}", response_model=TicketOut)
def get(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    state: AppState = Depends(get_app_state),
):
    ticket = service.get(ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    state.current_ticket = ticket
    return ticket


@router.post("/", response_model=TicketOut, status_code=201)
def create(ticket: TicketCreate, service: TicketService = Depends(get_ticket_service)):
    try:
        created = service.create(dump_fields(ticket), actor=ticket.actor)
    except WorkshopError as exc:
        _raise_http(exc)
    service.notifier.success("ticket_created")
    return created


@router.patch("/{ticket_id}", response_model=TicketOut)
def update(
    ticket_id: str,
    ticket: TicketUpdate,
    service: TicketService = Depends(get_ticket_service),
    capability: WriteCapability = Depends(get_write_capability),
):
    try:
        return service.update(ticket_id, dump_fields(ticket), capability)
    except WorkshopError as exc:
        _raise_http(exc)


@router.post("/{ticket_id}/archive", response_model=TicketOut)
def archive(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service),
    capability: WriteCapability = Depends(get_write_capability),
):
    try:
        return service.archive(ticket_id, capability)
    except WorkshopError as exc:
        _raise_http(exc)


@router.post("/{ticket_id}/timeline", response_model=TicketOut)
def add_timeline_entry(
    ticket_id: str,
    entry: TimelineEntryCreate,
    service: TicketService = Depends(get_ticket_service),
    capability: WriteCapability = Depends(get_write_capability),
):
    try:
        return service.append_timeline(ticket_id, entry.action, entry.notes, entry.actor, capability)
    except WorkshopError as exc:
        _raise_http(exc)


@router.post("/{ticket_id}/history", response_model=TicketOut)
def add_history_entry(
    ticket_id: str,
    entry: HistoryEntryCreate,
    service: TicketService = Depends(get_ticket_service),
    capability: WriteCapability = Depends(get_write_capability),
):
    try:
        return service.append_history(ticket_id, entry.action, entry.actor, capability)
    except WorkshopError as exc:
        _raise_http(exc)
