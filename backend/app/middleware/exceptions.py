"""Custom exceptions and handlers for consistent error responses.

Every error raised by the onboarding core derives from BackofficeException
and is rendered as:

    {"error": {"code": "ERROR_CODE", "message": "...", "details": {...}}}
"""

import logging
import traceback
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BackofficeException(Exception):
    """Base exception for back-office application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: Union[dict, list, None] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class BusinessLogicError(BackofficeException):
    """Exception for business logic violations."""

    def __init__(
        self,
        message: str,
        error_code: str = "BUSINESS_LOGIC_ERROR",
        details: Union[dict, list, None] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code=error_code,
            details=details,
        )


class ResourceNotFoundError(BackofficeException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str, error_code: str = "RESOURCE_NOT_FOUND"):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
        )


# ── Onboarding workflow errors ───────────────────────────────

class SetupNotFoundError(ResourceNotFoundError):
    """No setup process exists for the branch yet."""

    def __init__(self, branch_id: str):
        super().__init__("Branch setup", branch_id, error_code="SETUP_NOT_FOUND")
        self.branch_id = branch_id


class UnknownStepError(BackofficeException):
    def __init__(self, step: Union[str, int]):
        super().__init__(
            message=f"Unknown setup step: {step}",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="UNKNOWN_STEP",
        )
        self.step = step


class InvariantViolationError(BusinessLogicError):
    """A module change would disable one or more core modules."""

    def __init__(self, codes: list[str]):
        super().__init__(
            message=f"Core modules cannot be disabled: {', '.join(codes)}",
            error_code="CORE_MODULE_REQUIRED",
            details={"modules": codes},
        )
        self.codes = codes


class UnknownModuleError(BusinessLogicError):
    def __init__(self, codes: list[str]):
        super().__init__(
            message=f"Unknown modules: {', '.join(codes)}",
            error_code="UNKNOWN_MODULE",
            details={"modules": codes},
        )
        self.codes = codes


class NotSkippableError(BackofficeException):
    def __init__(self, step: int, name: str):
        super().__init__(
            message=f"Step {step} ({name}) is mandatory and cannot be skipped",
            status_code=status.HTTP_409_CONFLICT,
            error_code="STEP_NOT_SKIPPABLE",
        )
        self.step = step


class SetupCompletedError(BackofficeException):
    def __init__(self, branch_id: str):
        super().__init__(
            message=f"Setup for branch {branch_id} is already completed",
            status_code=status.HTTP_409_CONFLICT,
            error_code="SETUP_COMPLETED",
        )


class IncompleteSetupError(BusinessLogicError):
    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Incomplete steps: {', '.join(missing)}",
            error_code="INCOMPLETE_SETUP",
            details={"missing": missing},
        )
        self.missing = missing


class PersistenceFailureError(BackofficeException):
    """The store could not durably record the change; the caller may retry."""

    def __init__(self, message: str = "Could not save setup data. Please try again."):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="PERSISTENCE_FAILURE",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Create standardized error response.

    Format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }
    """
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


async def backoffice_exception_handler(
    request: Request,
    exc: BackofficeException,
) -> JSONResponse:
    """Handle application exceptions."""
    logger.warning(
        f"Application exception: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Handle Pydantic validation errors (request bodies and step payloads)."""
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle database integrity errors (unique violations, foreign key, etc.)."""
    logger.error(
        f"Database integrity error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)

    if "unique" in error_msg.lower():
        message = "A record with this value already exists"
        error_code = "DUPLICATE_RECORD"
    elif "foreign key" in error_msg.lower():
        message = "Referenced record does not exist"
        error_code = "FOREIGN_KEY_VIOLATION"
    else:
        message = "Database constraint violation"
        error_code = "INTEGRITY_ERROR"

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message=message,
        error_code=error_code,
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    logger.error(
        f"Database operational error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc(),
        },
        exc_info=True,
    )

    # Internal details stay in the log
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(BackofficeException, backoffice_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
