# itsm_portal/backend/app/models/ticket_attachment.py

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..db import Base


class TicketAttachment(Base):
    __tablename__ = "ticket_attachments"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, index=True)

    file_name = Column(String(255), nullable=False)
    file_size = Column(BigInteger, nullable=True)
    file_type = Column(String(127), nullable=True)

    # /objects/<key> in the object store
    object_path = Column(String(512), unique=True, nullable=False)

    uploaded_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    ticket = relationship("Ticket", back_populates="attachments")
