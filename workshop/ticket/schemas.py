# workshop/ticket/schemas.py
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TicketStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    WAITING_APPROVAL = "waiting_approval"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NEW_BIKE = "new_bike"
    TEST_BIKE = "test_bike"
    SECOND_HAND = "second_hand"
    ARCHIVED = "archived"


class Priority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


def _not_null(value: Any) -> Any:
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class QuoteItem(CamelModel):
    description: str = ""
    quantity: float = 1
    price: float = 0
    completed: bool = False


class Quote(CamelModel):
    items: list[QuoteItem] = Field(default_factory=list)
    discount: float = 0
    subtotal: float = 0
    total: float = 0
    signature: str | None = None
    is_signed: bool = Field(default=False, alias="isSigned")


class HistoryEntry(CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    timestamp: str | None = None
    action: str
    actor: str | None = None


class TimelineEntry(HistoryEntry):
    id: str | None = None
    notes: str = ""


class TicketBase(CamelModel):
    customer_name: str | None = Field(default=None, alias="customerName")
    customer_phone: str | None = Field(default=None, alias="customerPhone")
    customer_email: str | None = Field(default=None, alias="customerEmail")
    bike_model: str | None = Field(default=None, alias="bikeModel")
    issue_description: str | None = Field(default=None, alias="issueDescription")
    tag_number: str | None = Field(default=None, alias="tagNumber")
    priority: Priority | None = None
    internal_notes: str | None = Field(default=None, alias="internalNotes")

    @field_validator("priority")
    @classmethod
    def priority_not_null(cls, value):
        return _not_null(value)


class TicketCreate(TicketBase):
    status: TicketStatus | None = None
    quote: Quote | None = None
    actor: str | None = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, value):
        return _not_null(value)


class TicketUpdate(TicketBase):
    status: TicketStatus | None = None
    is_archived: bool | None = Field(default=None, alias="isArchived")
    # A JSON string is accepted for the quote and parsed by the store layer.
    quote: Quote | str | None = None

    @field_validator("status", "is_archived")
    @classmethod
    def flags_not_null(cls, value):
        return _not_null(value)


class TimelineEntryCreate(CamelModel):
    action: str = Field(..., min_length=1)
    notes: str = ""
    actor: str | None = None


class HistoryEntryCreate(CamelModel):
    action: str = Field(..., min_length=1)
    actor: str | None = None


class TicketOut(TicketBase):
    id: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    ticket_number: int = Field(alias="ticketNumber")
    status: str
    priority: str
    is_archived: bool = Field(default=False, alias="isArchived")
    quote: Quote = Field(default_factory=Quote)
    history: list[HistoryEntry] = Field(default_factory=list)
    timeline: list[TimelineEntry] = Field(default_factory=list)


class NextNumberOut(BaseModel):
    ticket_number: int = Field(serialization_alias="ticketNumber")


class ToastOut(BaseModel):
    kind: str
    code: str
    message: str

    model_config = {"from_attributes": True}


def dump_fields(payload: BaseModel) -> dict[str, Any]:
    """Logical (camelCase) dict of the fields the client actually sent."""
    return payload.model_dump(by_alias=True, exclude_unset=True, exclude={"actor"})
