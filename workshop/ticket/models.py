# workshop/ticket/models.py
from sqlalchemy import JSON, Boolean, Column, Integer, String
from workshop.core.database import Base

class TicketRow(Base):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True)
    created_at = Column(String, nullable=False, index=True)
    updated_at = Column(String, nullable=False)
    ticket_number = Column(Integer, unique=True, index=True, nullable=False)
    tag_number = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True, index=True)
    customer_email = Column(String, nullable=True)
    bike_model = Column(String, nullable=True)
    issue_description = Column(String, nullable=True)
    status = Column(String, default="new", index=True, nullable=False)
    priority = Column(String, default="normal", nullable=False)
    internal_notes = Column(String, nullable=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    quote = Column(JSON, nullable=True)
    history = Column(JSON, nullable=True)
