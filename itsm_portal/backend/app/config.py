# itsm_portal/backend/app/config.py
import os

from dotenv import load_dotenv

# Load settings from .env at project root
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Database (file-based SQLite for development, PostgreSQL in production)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./itsm-portal.sqlite")
AUTO_CREATE_SCHEMA = _env_bool("AUTO_CREATE_SCHEMA", DATABASE_URL.startswith("sqlite"))

# Access tokens
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

# Admin account seeded at startup
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "AdminPass123!")
ADMIN_EMPLOYEE_ID = os.getenv("ADMIN_EMPLOYEE_ID", "ADMIN001")
SEED_ADMIN = _env_bool("SEED_ADMIN", True)

# Object storage (S3 or MinIO)
OBJECT_STORAGE_BUCKET = os.getenv("OBJECT_STORAGE_BUCKET", "itsm-attachments")
OBJECT_STORAGE_ENDPOINT_URL = os.getenv("OBJECT_STORAGE_ENDPOINT_URL") or None
OBJECT_STORAGE_PREFIX = os.getenv("OBJECT_STORAGE_PREFIX", "uploads")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID") or None
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY") or None
UPLOAD_URL_TTL_SECONDS = int(os.getenv("UPLOAD_URL_TTL_SECONDS", "900"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
