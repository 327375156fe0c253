# itsm_portal/backend/app/models/software.py

from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from ..db import Base

DEFAULT_VERSION = "Latest"


class SoftwareCatalog(Base):
    __tablename__ = "software_catalog"
    __table_args__ = (
        UniqueConstraint("name", "version", name="ux_software_name_version"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), nullable=False)
    version = Column(
        String(50), nullable=False, default=DEFAULT_VERSION, server_default=DEFAULT_VERSION
    )

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
