# itsm_portal/backend/app/models/ticket_sequence.py
from sqlalchemy import Column, Integer

from ..db import Base


class TicketSequence(Base):
    """
    Per-year counter behind INC-YYYY-NNNN identifiers.
    last_value is the highest sequence handed out for that year.
    """
    __tablename__ = "ticket_sequences"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_value = Column(Integer, nullable=False, default=0)
