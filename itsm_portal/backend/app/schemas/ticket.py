# itsm_portal/backend/app/schemas/ticket.py

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import MAX_DB_ID, ApiModel, RequestModel


class TicketCreate(RequestModel):
    user_id: int = Field(ge=1, le=MAX_DB_ID)
    request_type: str = Field(min_length=1, max_length=64)
    software_id: Optional[int] = Field(default=None, ge=1, le=MAX_DB_ID)
    description: str = Field(min_length=1, max_length=5000)


class TicketStatusUpdate(RequestModel):
    status: str = Field(min_length=1, max_length=50)
    # Free text appended to the derived history note
    note: Optional[str] = Field(default=None, max_length=1000)


class TicketRead(ApiModel):
    id: int
    ticket_code: str = Field(alias="ticketId")
    user_id: int
    request_type: str
    software_id: Optional[int] = None
    description: str
    status: str
    created_at: datetime
    updated_at: datetime


class TicketHistoryRead(ApiModel):
    id: int
    ticket_id: int
    status: str
    notes: Optional[str] = None
    created_at: datetime


class TicketStats(ApiModel):
    total: int = 0
    start: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    urgent: int = 0
    completed: int = 0
