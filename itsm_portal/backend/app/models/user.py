# itsm_portal/backend/app/models/user.py

from sqlalchemy import Boolean, Column, DateTime, Integer, String, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    employee_id = Column(String(50), unique=True, nullable=False)

    # only admins sign in with a password
    password_hash = Column(String(255), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    tickets = relationship("Ticket", back_populates="user")
