# itsm_portal/backend/app/schemas/software.py

from typing import Optional

from pydantic import Field

from .base import ApiModel, RequestModel


class SoftwareRead(ApiModel):
    id: int
    name: str
    version: str


class SoftwareRow(RequestModel):
    name: str = Field(min_length=1, max_length=128)
    version: Optional[str] = Field(default=None, max_length=50)


class ImportSummary(ApiModel):
    imported: int
    skipped: int
    source: str
