# itsm_portal/backend/app/main.py
import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .api.v1.attachments import router as attachments_router
from .api.v1.auth import router as auth_router
from .api.v1.objects import download_router as object_download_router
from .api.v1.objects import router as objects_router
from .api.v1.software import admin_router as software_admin_router
from .api.v1.software import router as software_router
from .api.v1.tickets import router as tickets_router
from .api.v1.tickets import stats_router
from .api.v1.users import router as users_router
from .db import SessionLocal, get_db, init_db, ping
from .errors import PortalError, Unauthenticated
from .logging_config import setup_logging
from .services import users as user_service

logger = logging.getLogger(__name__)

app = FastAPI(title="IT Service Management Portal")


# Error mapping

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[API] database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Request log

@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %s in %.0fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
    return response


# Startup: schema (SQLite) + admin seed

@app.on_event("startup")
def on_startup():
    setup_logging()
    if config.AUTO_CREATE_SCHEMA:
        init_db()
    if config.SEED_ADMIN:
        seed_initial_admin()


def seed_initial_admin():
    db = SessionLocal()
    try:
        if user_service.get_user_by_username(db, config.ADMIN_USERNAME) is None:
            user_service.create_user(
                db,
                username=config.ADMIN_USERNAME,
                employee_id=config.ADMIN_EMPLOYEE_ID,
                is_admin=True,
                password=config.ADMIN_PASSWORD,
            )
    finally:
        db.close()


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    try:
        ping(db)
    except SQLAlchemyError as exc:
        logger.error("[HEALTH] database unreachable: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": "unreachable"},
        )
    return {"status": "ok", "database": "ok"}


app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(tickets_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(attachments_router, prefix="/api")
app.include_router(software_router, prefix="/api")
app.include_router(software_admin_router, prefix="/api")
app.include_router(objects_router, prefix="/api")
app.include_router(object_download_router)
