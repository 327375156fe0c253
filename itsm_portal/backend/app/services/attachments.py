# itsm_portal/backend/app/services/attachments.py

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import Identity
from ..errors import AccessDenied, NotFoundError, ValidationError
from ..models.ticket import Ticket
from ..models.ticket_attachment import TicketAttachment
from .object_storage import ObjectStorageService

logger = logging.getLogger(__name__)


def list_attachments(db: Session, ticket_id: int) -> List[TicketAttachment]:
    return (
        db.query(TicketAttachment)
        .filter(TicketAttachment.ticket_id == ticket_id)
        .order_by(TicketAttachment.uploaded_at.desc(), TicketAttachment.id.desc())
        .all()
    )


def get_attachment_by_object_path(db: Session, object_path: str) -> TicketAttachment:
    attachment = (
        db.query(TicketAttachment)
        .filter(TicketAttachment.object_path == object_path)
        .first()
    )
    if attachment is None:
        raise NotFoundError("Attachment not found")
    return attachment


def add_attachment(
    db: Session,
    storage: ObjectStorageService,
    ticket: Ticket,
    uploader: Identity,
    *,
    file_name: str,
    object_path: str,
    file_size: Optional[int] = None,
    file_type: Optional[str] = None,
) -> TicketAttachment:
    """
    Record an upload that already landed in the object store. Only the user
    the upload URL was issued to (or an admin) may attach it.
    """
    object_path = storage.normalize_object_path(object_path)
    if not uploader.is_admin and storage.uploader_of(object_path) != uploader.user_id:
        logger.info(
            "[ATTACH] user %s refused upload %s issued to someone else",
            uploader.user_id,
            object_path,
        )
        raise AccessDenied("Upload was issued to another user")
    if not storage.object_exists(object_path):
        raise ValidationError("Uploaded object not found in storage")

    taken = (
        db.query(TicketAttachment.id)
        .filter(TicketAttachment.object_path == object_path)
        .first()
    )
    if taken is not None:
        raise ValidationError("Object is already attached to a ticket")

    attachment = TicketAttachment(
        ticket_id=ticket.id,
        file_name=file_name,
        file_size=file_size,
        file_type=file_type,
        object_path=object_path,
    )
    db.add(attachment)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent attach of the same object
        db.rollback()
        raise ValidationError("Object is already attached to a ticket")
    db.refresh(attachment)
    logger.info("[ATTACH] %s attached to %s", object_path, ticket.ticket_code)
    return attachment


def delete_attachment(
    db: Session,
    storage: ObjectStorageService,
    ticket: Ticket,
    attachment_id: int,
) -> None:
    attachment = (
        db.query(TicketAttachment)
        .filter(
            TicketAttachment.id == attachment_id,
            TicketAttachment.ticket_id == ticket.id,
        )
        .first()
    )
    if attachment is None:
        raise NotFoundError("Attachment not found")

    # Blob first: if the store is down the record stays and the caller retries
    storage.delete_object(attachment.object_path)
    db.delete(attachment)
    db.commit()
    logger.info("[ATTACH] removed %s from %s", attachment.object_path, ticket.ticket_code)
