# workshop/customer/routes.py
from fastapi import APIRouter, Depends, HTTPException

from workshop.customer import services as customer_service
from workshop.customer.schemas import CustomerOut
from workshop.ticket.deps import get_ticket_service
from workshop.ticket.schemas import TicketOut
from workshop.ticket.services import TicketService

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("/", response_model=list[CustomerOut])
def list_all(service: TicketService = Depends(get_ticket_service)):
    return customer_service.derive_customers(service.get_all())


@router.get("/{phone}/tickets", response_model=list[TicketOut])
def customer_tickets(phone: str, service: TicketService = Depends(get_ticket_service)):
    items = customer_service.tickets_for_customer(service.get_all(), phone)
    if not items:
        raise HTTPException(status_code=404, detail="Customer not found")
    return items
