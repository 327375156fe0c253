# itsm_portal/backend/app/api/v1/attachments.py

from typing import List

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session

from ...auth import Identity, ensure_ticket_access, get_current_user
from ...db import get_db
from ...errors import ValidationError
from ...schemas.attachment import AttachmentCreate, AttachmentRead
from ...schemas.base import MAX_DB_ID
from ...services import attachments as attachment_service
from ...services import tickets as ticket_service
from ...services.object_storage import ObjectStorageService, get_object_storage

router = APIRouter(prefix="/tickets/{ticket_id}/attachments", tags=["attachments"])


@router.get("", response_model=List[AttachmentRead])
def list_attachments(
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    return attachment_service.list_attachments(db, ticket.id)


@router.post("", response_model=AttachmentRead, status_code=status.HTTP_201_CREATED)
def add_attachment(
    payload: AttachmentCreate,
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorageService = Depends(get_object_storage),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    if payload.ticket_id is not None and payload.ticket_id != ticket.id:
        raise ValidationError("ticketId does not match the ticket in the URL")

    return attachment_service.add_attachment(
        db,
        storage,
        ticket,
        current_user,
        file_name=payload.file_name,
        file_size=payload.file_size,
        file_type=payload.file_type,
        object_path=payload.object_path,
    )


@router.delete("/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(
    ticket_id: int = Path(ge=1, le=MAX_DB_ID),
    attachment_id: int = Path(ge=1, le=MAX_DB_ID),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorageService = Depends(get_object_storage),
):
    ticket = ticket_service.get_ticket(db, ticket_id)
    ensure_ticket_access(current_user, ticket)
    attachment_service.delete_attachment(db, storage, ticket, attachment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
