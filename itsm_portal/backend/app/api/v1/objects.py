# itsm_portal/backend/app/api/v1/objects.py

from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...auth import Identity, ensure_ticket_access, get_current_user
from ...db import get_db
from ...schemas.attachment import UploadUrlRead
from ...services import attachments as attachment_service
from ...services.object_storage import (
    OBJECT_PATH_PREFIX,
    ObjectStorageService,
    get_object_storage,
)

router = APIRouter(prefix="/objects", tags=["objects"])

# Mounted without the /api prefix: attachment links are "/objects/<key>"
download_router = APIRouter(tags=["objects"])


@router.post("/upload", response_model=UploadUrlRead)
def request_upload_url(
    current_user: Identity = Depends(get_current_user),
    storage: ObjectStorageService = Depends(get_object_storage),
):
    upload_url, object_path = storage.get_upload_url(current_user.user_id)
    return UploadUrlRead(upload_url=upload_url, object_path=object_path)


@download_router.get("/objects/{object_key:path}")
def download_object(
    object_key: str,
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorageService = Depends(get_object_storage),
):
    """Stream an attachment to its ticket's owner or an admin."""
    object_path = storage.normalize_object_path(OBJECT_PATH_PREFIX + object_key)
    attachment = attachment_service.get_attachment_by_object_path(db, object_path)
    ensure_ticket_access(current_user, attachment.ticket)

    stored = storage.fetch_object(object_path)
    headers = {
        "Content-Disposition": f"attachment; filename*=UTF-8''{quote(attachment.file_name)}"
    }
    if stored.content_length is not None:
        headers["Content-Length"] = str(stored.content_length)

    return StreamingResponse(
        stored.body,
        media_type=attachment.file_type or stored.content_type or "application/octet-stream",
        headers=headers,
    )
