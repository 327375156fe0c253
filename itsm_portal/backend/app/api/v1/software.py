# itsm_portal/backend/app/api/v1/software.py

from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ...auth import Identity, get_current_user, require_admin
from ...db import get_db
from ...errors import ValidationError
from ...schemas.software import ImportSummary, SoftwareRead, SoftwareRow
from ...services import software as software_service

router = APIRouter(prefix="/software", tags=["software"])
admin_router = APIRouter(prefix="/admin/software", tags=["admin"])

_rows_adapter = TypeAdapter(List[SoftwareRow])


@router.get("", response_model=List[SoftwareRead])
def list_software(
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return software_service.list_software(db)


@admin_router.post("/upload-csv", response_model=ImportSummary)
async def upload_software_csv(
    request: Request,
    current_user: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Bulk add catalog rows. Accepts either a multipart CSV upload ('file',
    columns name,version) or a JSON list of {name, version} objects.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("file")
        if upload is None or isinstance(upload, str):
            raise ValidationError("Provide a CSV file in the 'file' field")
        raw = await upload.read()
        rows = software_service.parse_software_csv(raw)
        return software_service.import_software(db, rows, source="csv")

    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError(
            "Provide either a CSV file ('file') or a JSON list of software rows."
        )
    try:
        items = _rows_adapter.validate_python(payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid software rows: {exc.error_count()} error(s)")

    rows = [(item.name, item.version) for item in items]
    return software_service.import_software(db, rows, source="json")


@admin_router.get("/sample-csv")
def download_sample_csv(current_user: Identity = Depends(require_admin)):
    return Response(
        content=software_service.sample_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="software-catalog-sample.csv"'},
    )
