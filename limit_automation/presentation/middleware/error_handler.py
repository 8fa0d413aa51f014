"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from limit_automation.domain.exceptions import (
    ApplicationAlreadyExistsException,
    ApplicationNotEditableException,
    ApplicationNotFoundException,
    ClientDebtorNotFoundException,
    ClientNotFoundException,
    CollaboratorException,
    DomainException,
    InvalidStatusTransitionException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)

NOT_FOUND = (
    ApplicationNotFoundException,
    ClientNotFoundException,
    ClientDebtorNotFoundException,
)

CONFLICT = (
    ApplicationAlreadyExistsException,
    ApplicationNotEditableException,
    InvalidStatusTransitionException,
)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": code,
            "message": message,
            "request_id": get_request_id(),
        },
    )


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    async def not_found_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Handle unknown applications, clients and credit limits."""
        return _error_response(404, exc.code, exc.message)

    async def conflict_handler(request: Request, exc: DomainException) -> JSONResponse:
        """Handle requests that clash with the application's current state."""
        logger.info(
            "request_conflict",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(409, exc.code, exc.message)

    for exc_class in NOT_FOUND:
        app.add_exception_handler(exc_class, not_found_handler)
    for exc_class in CONFLICT:
        app.add_exception_handler(exc_class, conflict_handler)

    @app.exception_handler(CollaboratorException)
    async def collaborator_error_handler(
        request: Request,
        exc: CollaboratorException,
    ) -> JSONResponse:
        """Handle a dependency failure that escaped the eligibility gate."""
        logger.error(
            "collaborator_error",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(
            503,
            exc.code,
            "Unable to process request. Please try again later.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle validation failures (INSUFFICIENT_DATA, REQUIRE_FIELD_MISSING, ...)."""
        logger.warning(
            "domain_exception",
            request_id=get_request_id(),
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            request_id=get_request_id(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
