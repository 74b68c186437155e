# workshop/customer/schemas.py
from pydantic import BaseModel


class CustomerOut(BaseModel):
    name: str
    phone: str
    email: str = ""
    ticket_count: int = 0
