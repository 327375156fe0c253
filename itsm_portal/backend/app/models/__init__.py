# itsm_portal/backend/app/models/__init__.py

from .user import User
from .software import SoftwareCatalog
from .ticket import Ticket
from .ticket_history import TicketHistory
from .ticket_attachment import TicketAttachment
from .ticket_sequence import TicketSequence

__all__ = [
    "User",
    "SoftwareCatalog",
    "Ticket",
    "TicketHistory",
    "TicketAttachment",
    "TicketSequence",
]
