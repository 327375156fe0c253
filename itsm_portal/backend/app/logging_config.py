# itsm_portal/backend/app/logging_config.py
import logging
import sys

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    global _configured

    root = logging.getLogger()
    root.setLevel((level or config.LOG_LEVEL).upper())
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
