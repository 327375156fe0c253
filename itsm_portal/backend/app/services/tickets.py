# itsm_portal/backend/app/services/tickets.py
"""
Ticket lifecycle: creation with INC-YYYY-NNNN identifiers, status changes and
the append-only history that records both.

Identifiers come from a per-year counter row that is bumped with a single
UPDATE inside the ticket's own transaction, so two requests can never be
handed the same number. The unique constraint on tickets.ticket_id is the
backstop; a conflict rolls back, resyncs the counter and retries.
"""
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import NotFoundError, StorageUnavailable, ValidationError
from ..models.software import SoftwareCatalog
from ..models.ticket import Ticket
from ..models.ticket_history import TicketHistory
from ..models.ticket_sequence import TicketSequence
from ..models.user import User

logger = logging.getLogger(__name__)

# Canonical labels; lookups are case and spacing insensitive
ALLOWED_STATUSES = ["Start", "Pending", "In Progress", "Resolved", "Urgent", "Completed"]
DEFAULT_STATUS = "Start"

ALLOWED_REQUEST_TYPES = [
    "Software Installation",
    "License Activation",
    "Hardware Replacement",
    "Network Issue",
    "System Maintenance",
    "User Access",
]

TICKET_ID_PREFIX = "INC"
MAX_ID_ATTEMPTS = 5

_TICKET_ID_RE = re.compile(r"^INC-(\d{4})-(\d{4,})$")


def _canon_key(value: str) -> str:
    return re.sub(r"[\s_\-]+", "", value).lower()


_STATUS_CANON = {_canon_key(s): s for s in ALLOWED_STATUSES}
_REQUEST_TYPE_CANON = {_canon_key(r): r for r in ALLOWED_REQUEST_TYPES}


def validate_status(value: Optional[str]) -> str:
    """
    Normalize + validate a status label. "in_progress", "InProgress" and
    "in progress" all map to "In Progress".
    """
    raw = (value or "").strip()
    key = _canon_key(raw)
    if not key or key not in _STATUS_CANON:
        raise ValidationError(
            f"Invalid status '{raw}'. Allowed: {', '.join(ALLOWED_STATUSES)}"
        )
    return _STATUS_CANON[key]


def validate_request_type(value: Optional[str]) -> str:
    raw = (value or "").strip()
    key = _canon_key(raw)
    if not key or key not in _REQUEST_TYPE_CANON:
        raise ValidationError(
            f"Invalid request type '{raw}'. "
            f"Allowed: {', '.join(ALLOWED_REQUEST_TYPES)}"
        )
    return _REQUEST_TYPE_CANON[key]


# Identifier generation

def format_ticket_id(year: int, sequence: int) -> str:
    return f"{TICKET_ID_PREFIX}-{year}-{sequence:04d}"


def parse_ticket_id(ticket_code: str):
    """Return (year, sequence) or None for codes not in INC-YYYY-NNNN form."""
    match = _TICKET_ID_RE.match(ticket_code or "")
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def _current_year(now: Optional[datetime] = None) -> int:
    return (now or datetime.now(timezone.utc)).year


def _highest_issued_sequence(db: Session, year: int) -> int:
    """Highest sequence already used by a ticket for this year (0 if none)."""
    prefix = f"{TICKET_ID_PREFIX}-{year}-"
    codes = db.execute(
        select(Ticket.ticket_code).where(Ticket.ticket_code.like(f"{prefix}%"))
    ).scalars()
    highest = 0
    for code in codes:
        parsed = parse_ticket_id(code)
        if parsed and parsed[0] == year:
            highest = max(highest, parsed[1])
    return highest


def _next_sequence_value(db: Session, year: int) -> int:
    result = db.execute(
        update(TicketSequence)
        .where(TicketSequence.year == year)
        .values(last_value=TicketSequence.last_value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        return db.execute(
            select(TicketSequence.last_value).where(TicketSequence.year == year)
        ).scalar_one()

    # First ticket of the year. A concurrent insert of the same row fails on
    # the primary key and the caller retries.
    start = _highest_issued_sequence(db, year) + 1
    db.add(TicketSequence(year=year, last_value=start))
    db.flush()
    return start


def generate_ticket_id(db: Session, now: Optional[datetime] = None) -> str:
    """
    Reserve the next identifier for the current year. Runs inside the
    caller's transaction: the reservation only sticks if the caller commits.
    """
    year = _current_year(now)
    return format_ticket_id(year, _next_sequence_value(db, year))


def resync_ticket_sequence(db: Session, year: int) -> int:
    """Move the year's counter past any identifier already issued."""
    highest = _highest_issued_sequence(db, year)
    sequence = db.query(TicketSequence).filter(TicketSequence.year == year).first()
    if sequence is None:
        db.add(TicketSequence(year=year, last_value=highest))
    elif sequence.last_value < highest:
        sequence.last_value = highest
    db.commit()
    return highest


# Lifecycle operations

def create_ticket(
    db: Session,
    *,
    user_id: int,
    request_type: str,
    description: str,
    software_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Ticket:
    """
    Create a ticket with a fresh identifier and its "Ticket created"
    history row in one transaction.
    """
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise ValidationError("Invalid user ID")

    if software_id is not None:
        exists = (
            db.query(SoftwareCatalog.id)
            .filter(SoftwareCatalog.id == software_id)
            .first()
        )
        if exists is None:
            raise ValidationError("Invalid software ID")

    request_type = validate_request_type(request_type)
    description = (description or "").strip()
    if not description:
        raise ValidationError("Description is required")

    for attempt in range(1, MAX_ID_ATTEMPTS + 1):
        ticket_code = None
        try:
            ticket_code = generate_ticket_id(db, now=now)
            ticket = Ticket(
                ticket_code=ticket_code,
                user_id=user_id,
                request_type=request_type,
                software_id=software_id,
                description=description,
                status=DEFAULT_STATUS,
            )
            db.add(ticket)
            db.flush()
            db.add(
                TicketHistory(
                    ticket_id=ticket.id,
                    status=ticket.status,
                    notes="Ticket created",
                )
            )
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(
                "[TICKETS] identifier conflict on %s (attempt %d/%d): %s",
                ticket_code or "year counter",
                attempt,
                MAX_ID_ATTEMPTS,
                exc.orig,
            )
            try:
                resync_ticket_sequence(db, _current_year(now))
            except IntegrityError:
                # another request created the year's counter first
                db.rollback()
            continue

        db.refresh(ticket)
        logger.info("[TICKETS] created %s for user %s", ticket.ticket_code, user_id)
        return ticket

    raise StorageUnavailable("Could not allocate a unique ticket identifier")


def get_ticket(db: Session, ticket_id: int) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


def get_ticket_by_code(db: Session, ticket_code: str) -> Ticket:
    ticket = db.query(Ticket).filter(Ticket.ticket_code == ticket_code).first()
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


def list_tickets(db: Session, user_id: Optional[int] = None) -> List[Ticket]:
    query = db.query(Ticket)
    if user_id is not None:
        query = query.filter(Ticket.user_id == user_id)
    return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()


def update_ticket_status(
    db: Session,
    ticket_id: int,
    new_status: str,
    note: Optional[str] = None,
) -> Ticket:
    """
    Overwrite the status and append one history row. Any status may follow
    any other; repeating the current status still records an entry.
    """
    new_status = validate_status(new_status)
    ticket = get_ticket(db, ticket_id)

    old_status = ticket.status
    ticket.status = new_status

    notes = f"Status updated from {old_status} to {new_status}"
    if note and note.strip():
        notes = f"{notes}: {note.strip()}"
    db.add(TicketHistory(ticket_id=ticket.id, status=new_status, notes=notes))
    db.commit()
    db.refresh(ticket)

    logger.info(
        "[TICKETS] %s status %s -> %s", ticket.ticket_code, old_status, new_status
    )
    return ticket


def get_ticket_history(db: Session, ticket_id: int) -> List[TicketHistory]:
    """Oldest entry first; id breaks timestamp ties."""
    return (
        db.query(TicketHistory)
        .filter(TicketHistory.ticket_id == ticket_id)
        .order_by(TicketHistory.created_at.asc(), TicketHistory.id.asc())
        .all()
    )


_STATS_FIELDS = {
    "Start": "start",
    "Pending": "pending",
    "In Progress": "in_progress",
    "Resolved": "resolved",
    "Urgent": "urgent",
    "Completed": "completed",
}


def get_ticket_stats(db: Session, user_id: Optional[int] = None) -> dict:
    totals = {field: 0 for field in _STATS_FIELDS.values()}
    totals["total"] = 0

    query = db.query(Ticket.status, func.count(Ticket.id))
    if user_id is not None:
        query = query.filter(Ticket.user_id == user_id)

    for status_value, count in query.group_by(Ticket.status).all():
        totals["total"] += int(count)
        field = _STATS_FIELDS.get(status_value)
        if field is not None:
            totals[field] += int(count)
        else:
            logger.warning("[TICKETS] unknown status %r in stats", status_value)

    return totals
