# itsm_portal/backend/app/schemas/attachment.py

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import MAX_DB_ID, MAX_FILE_SIZE, ApiModel, RequestModel


class AttachmentCreate(RequestModel):
    # Optional echo of the path parameter; must match when sent
    ticket_id: Optional[int] = Field(default=None, ge=1, le=MAX_DB_ID)
    file_name: str = Field(min_length=1, max_length=255)
    file_size: Optional[int] = Field(default=None, ge=0, le=MAX_FILE_SIZE)
    file_type: Optional[str] = Field(default=None, max_length=127)
    object_path: str = Field(min_length=1, max_length=512)


class AttachmentRead(ApiModel):
    id: int
    ticket_id: int
    file_name: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    object_path: str
    uploaded_at: datetime


class UploadUrlRead(ApiModel):
    upload_url: str = Field(alias="uploadURL")
    object_path: str
