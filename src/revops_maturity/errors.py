"""Error taxonomy for the RevOps maturity service.

Service and adapter code raises these exceptions; the HTTP layer maps them
to status codes in ``register_exception_handlers``. AI enrichment errors and
``UnconfiguredError`` never reach a client: the service layer turns them
into log events or an ``unavailable`` status.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from revops_maturity.observability import get_logger

logger = get_logger(__name__)


class RevOpsError(Exception):
    """Base class for all service errors."""


class ValidationError(RevOpsError):
    """Raised when request input is malformed."""


class NotFoundError(RevOpsError):
    """Raised when an assessment id does not exist."""


class UnauthorizedError(RevOpsError):
    """Raised for a missing, invalid or expired admin token, or a bad password."""


class ConstraintViolationError(RevOpsError):
    """Raised when an insert collides with an existing primary key."""


class UnconfiguredError(RevOpsError):
    """Raised when AI enrichment is requested without an API credential."""


class AIEnrichmentError(RevOpsError):
    """Base class for failures of a configured AI enrichment call."""


class UpstreamError(AIEnrichmentError):
    """Raised when the remote model call itself fails."""


class MalformedResponseError(AIEnrichmentError):
    """Raised when the model reply is not the expected JSON object."""


def _error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc) or "Invalid request")


async def _request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.info(
        "Request validation failed",
        path=request.url.path,
        location=location,
        error_count=len(errors),
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        f"{location}: {message}" if location else message,
    )


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, "Not found")


async def _unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    return _error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc) or "Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error while serving request",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error-to-HTTP mapping to an application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, _not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UnauthorizedError, _unauthorized_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _internal_error_handler)
