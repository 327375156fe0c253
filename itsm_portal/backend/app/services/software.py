# itsm_portal/backend/app/services/software.py

import csv
import logging
from io import StringIO
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models.software import DEFAULT_VERSION, SoftwareCatalog

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["name", "version"]

SAMPLE_ROWS = [
    ("Microsoft Office 365", "2024"),
    ("Adobe Creative Suite", "2024"),
    ("Slack", "4.34.0"),
    ("Zoom", "5.15.0"),
    ("Visual Studio Code", "1.82.0"),
    ("Google Chrome", DEFAULT_VERSION),
]


def list_software(db: Session) -> List[SoftwareCatalog]:
    return (
        db.query(SoftwareCatalog)
        .order_by(SoftwareCatalog.name.asc(), SoftwareCatalog.version.asc())
        .all()
    )


def get_software(db: Session, software_id: int) -> SoftwareCatalog:
    software = db.query(SoftwareCatalog).filter(SoftwareCatalog.id == software_id).first()
    if software is None:
        raise NotFoundError("Software not found")
    return software


def _normalize_row(name: Optional[str], version: Optional[str], line: int):
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"Row {line}: software name is required")
    if len(name) > 128:
        raise ValidationError(f"Row {line}: software name is too long")
    version = (version or "").strip() or DEFAULT_VERSION
    if len(version) > 50:
        raise ValidationError(f"Row {line}: version is too long")
    return name, version


def import_software(db: Session, rows: Iterable[tuple], source: str) -> dict:
    """
    Add (name, version) rows to the catalog. Rows already present, or repeated
    within the upload, are skipped. Nothing is written if any row is invalid.
    """
    normalized = [
        _normalize_row(name, version, line)
        for line, (name, version) in enumerate(rows, start=1)
    ]
    if not normalized:
        raise ValidationError("No software rows provided")

    existing = {
        (s.name.lower(), s.version.lower())
        for s in db.query(SoftwareCatalog.name, SoftwareCatalog.version).all()
    }

    imported = 0
    skipped = 0
    for name, version in normalized:
        key = (name.lower(), version.lower())
        if key in existing:
            skipped += 1
            continue
        db.add(SoftwareCatalog(name=name, version=version))
        existing.add(key)
        imported += 1

    db.commit()
    logger.info(
        "[CATALOG] imported %d software rows from %s (%d skipped)",
        imported,
        source,
        skipped,
    )
    return {"imported": imported, "skipped": skipped, "source": source}


def parse_software_csv(raw: bytes) -> List[tuple]:
    """CSV with a name,version header (version optional), UTF-8 encoded."""
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("CSV must be UTF-8 encoded")

    reader = csv.DictReader(StringIO(text))
    fieldnames = [f.strip().lower() for f in (reader.fieldnames or [])]
    if "name" not in fieldnames:
        raise ValidationError("CSV must contain a 'name' column")
    reader.fieldnames = fieldnames

    rows = []
    for row in reader:
        # skip blank lines
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        rows.append((row.get("name"), row.get("version")))
    return rows


def sample_csv() -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(SAMPLE_ROWS)
    return buffer.getvalue()
