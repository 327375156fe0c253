# itsm_portal/backend/app/db.py
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from . import config

DATABASE_URL = config.DATABASE_URL


def build_engine(url: str, **kwargs):
    """Engine for either backend; SQLite needs cross-thread access for FastAPI."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args
    return create_engine(url, echo=False, future=True, **kwargs)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

Base = declarative_base()


def get_db():
    """FastAPI dependency to provide DB session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all tables; used for SQLite deployments and tests (Alembic otherwise)."""
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)


def ping(db) -> None:
    db.execute(text("SELECT 1"))
