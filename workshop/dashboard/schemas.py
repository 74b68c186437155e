# workshop/dashboard/schemas.py
from pydantic import BaseModel, Field

from workshop.ticket.schemas import TicketOut


class AttentionTicketOut(TicketOut):
    days_since_update: int = Field(alias="daysSinceUpdate")


class DashboardOut(BaseModel):
    counts: dict[str, int]
    attention: list[AttentionTicketOut]
