"""
Error taxonomy for the Catalog Service.

Services raise these exceptions; the handlers registered by
``register_exception_handlers`` turn them into the JSON envelope every
API response uses::

    {"success": false, "message": "...", "errors": {"field": ["..."]}}
"""
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.message
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationFailed(ServiceError):
    """Field level, client-correctable input errors."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Validation failed"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.errors
        return data


class InvalidCredentials(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Login credentials are invalid."


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFound(ServiceError):
    """Resource is absent or not owned by the caller. The two cases are not distinguished."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class InternalError(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class TokenCreationFailed(InternalError):
    message = "Could not create token."


def _field_name(loc) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts in front of field names
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def validation_errors_from(exc: RequestValidationError) -> Dict[str, List[str]]:
    """Group Pydantic error entries by field name."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        field = _field_name(err.get("loc", ()))
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(field, []).append(msg)
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        # Store failures outside an explicit operation boundary
        logger.error("%s %s store failure", request.method, request.url.path, exc_info=exc)
        failed = InternalError()
        return JSONResponse(status_code=failed.status_code, content=failed.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        failed = ValidationFailed(validation_errors_from(exc))
        return JSONResponse(status_code=failed.status_code, content=failed.to_dict())
