# itsm_portal/backend/app/errors.py
"""
Domain errors raised by the service layer.

Each carries the HTTP status the API maps it to, so routers can let them
propagate and the exception handlers in main.py render them.
"""


class PortalError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    status_code = 400
    default_message = "Invalid request data"


class Unauthenticated(PortalError):
    status_code = 401
    default_message = "Not authenticated"


class AccessDenied(PortalError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Not found"


class StorageUnavailable(PortalError):
    status_code = 503
    default_message = "Storage unavailable"
