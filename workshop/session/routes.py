# workshop/session/routes.py
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from workshop.core.notifier import Notifier
from workshop.core.state import AppState, TicketPoller
from workshop.ticket.deps import get_app_state, get_notifier, get_poller, get_ticket_service
from workshop.ticket.schemas import ToastOut
from workshop.ticket.services import TicketService

router = APIRouter(tags=["Session"])


class SessionStart(BaseModel):
    email: str = Field(..., min_length=3)


class SessionOut(BaseModel):
    user_email: str | None
    ticket_count: int
    revision: int


def _session_out(state: AppState) -> dict:
    return {"user_email": state.user_email, "ticket_count": len(state.tickets), "revision": state.revision}


@router.post("/session", response_model=SessionOut, status_code=201)
async def start_session(
    payload: SessionStart,
    state: AppState = Depends(get_app_state),
    poller: TicketPoller = Depends(get_poller),
    service: TicketService = Depends(get_ticket_service),
):
    state.start_session(payload.email)
    state.replace_tickets(await run_in_threadpool(service.get_all))
    poller.start()
    return _session_out(state)


@router.get("/session", response_model=SessionOut)
def current_session(state: AppState = Depends(get_app_state)):
    return _session_out(state)


@router.delete("/session", response_model=SessionOut)
async def end_session(
    state: AppState = Depends(get_app_state),
    poller: TicketPoller = Depends(get_poller),
):
    await poller.stop()
    state.end_session()
    return _session_out(state)


@router.get("/notifications", response_model=list[ToastOut])
def notifications(notifier: Notifier = Depends(get_notifier)):
    return notifier.drain()
