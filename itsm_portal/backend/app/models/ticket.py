# itsm_portal/backend/app/models/ticket.py

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..db import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)

    # Human readable INC-YYYY-NNNN code (column keeps its public name)
    ticket_code = Column("ticket_id", String(32), unique=True, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    request_type = Column(String(64), nullable=False)
    software_id = Column(Integer, ForeignKey("software_catalog.id"), nullable=True)
    description = Column(Text, nullable=False)

    status = Column(String(50), nullable=False, server_default="Start")

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    user = relationship("User", back_populates="tickets")
    software = relationship("SoftwareCatalog")
    history_entries = relationship(
        "TicketHistory",
        back_populates="ticket",
        order_by="TicketHistory.id",
    )
    attachments = relationship("TicketAttachment", back_populates="ticket")
