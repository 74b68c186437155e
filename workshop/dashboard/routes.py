# workshop/dashboard/routes.py
from fastapi import APIRouter, Depends

from workshop.dashboard import services as dashboard_service
from workshop.dashboard.schemas import DashboardOut
from workshop.ticket.deps import get_ticket_service
from workshop.ticket.services import TicketService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/", response_model=DashboardOut)
def overview(service: TicketService = Depends(get_ticket_service)):
    tickets = service.get_all()
    return {
        "counts": dashboard_service.status_counts(tickets),
        "attention": dashboard_service.attention_tickets(tickets),
    }
