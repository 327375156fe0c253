# itsm_portal/backend/app/api/v1/tickets.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from ...auth import Identity, ensure_owner_access, ensure_ticket_access, get_current_user
from ...db import get_db
from ...errors import AccessDenied
from ...schemas.base import MAX_DB_ID
from ...schemas.ticket import (
    TicketCreate,
    TicketHistoryRead,
    TicketRead,
    TicketStats,
    TicketStatusUpdate,
)
from ...services import tickets as ticket_service

router = APIRouter(prefix="/tickets", tags=["tickets"])
stats_router = APIRouter(tags=["stats"])


def scoped_user_id(current_user: Identity, requested: Optional[int]) -> Optional[int]:
    """
    Admins may look at everyone (or any single user); everybody else is
    pinned to their own tickets.
    """
    if current_user.is_admin:
        return requested
    if requested is not None and requested != current_user.user_id:
        raise AccessDenied("You can only view your own tickets")
    return current_user.user_id


@router.post(
    "",
    response_model=TicketRead,
    status_code=status.HTTP_201_CREATED,
)
def create_ticket(
    payload: TicketCreate,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_owner_access(current_user, payload.user_id)
    return ticket_service.create_ticket(
        db,
        user_id=payload.user_id,
        request_type=payload.request_type,
        software_id=payload.software_id,
        description=payload.description,
    )


@router.get("", response_model=List[TicketRead])
def list_tickets(
    user_id: Optional[int] = Query(default=None, alias="userId", ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ticket_service.list_tickets(db, scoped_user_id(current_user, user_id))


@router.get("/by-code/{ticket_code}", response_model=TicketRead)
def get_ticket_by_code(
    ticket_code: str,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket_by_code(db, ticket_code)
    ensure_ticket_access(current_user, ticket)
    return ticket


@router.get("/{ticket_id}", response_model=TicketRead)
def get_ticket(
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    return ticket


@router.patch("/{ticket_id}/status", response_model=TicketRead)
def update_ticket_status(
    payload: TicketStatusUpdate,
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    return ticket_service.update_ticket_status(
        db, ticket.id, payload.status, note=payload.note
    )


@router.get("/{ticket_id}/history", response_model=List[TicketHistoryRead])
def get_ticket_history(
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    return ticket_service.get_ticket_history(db, ticket.id)


@stats_router.get("/stats", response_model=TicketStats)
def get_stats(
    user_id: Optional[int] = Query(default=None, alias="userId", ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    totals = ticket_service.get_ticket_stats(db, scoped_user_id(current_user, user_id))
    return TicketStats(**totals)
