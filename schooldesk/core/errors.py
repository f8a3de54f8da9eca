from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from schooldesk.core.config import settings
from schooldesk.core.i18n import get_translation
from schooldesk.core.logging import logger


class BaseAPIError(Exception):
    """Base exception class for API errors.

    ``error_code`` is the stable kind identifier surfaced to clients as
    ``errorKind``; ``message`` is the human readable text.
    """
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "InternalError",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class InvalidArgument(BaseAPIError):
    """Raised when caller input is malformed"""
    def __init__(self, message: str = "Invalid argument", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="InvalidArgument",
            details=details
        )


class MissingCredentials(BaseAPIError):
    """Raised when the login body is incomplete"""
    def __init__(self, message: str = "Email and password are required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="MissingCredentials"
        )


class InvalidCredentials(BaseAPIError):
    """Raised for an unknown email or a wrong password.

    Both causes share one message so the response never tells which check failed.
    """
    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="InvalidCredentials"
        )


class TenantInactive(BaseAPIError):
    """Raised when the account's school has been deactivated"""
    def __init__(self, message: str = "Your school is currently inactive"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="TenantInactive"
        )


class TenantNotFound(BaseAPIError):
    """Raised when a schoolId has no directory entry"""
    def __init__(self, message: str = "School not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="TenantNotFound",
            details=details
        )


class NotConnected(BaseAPIError):
    """Raised when the primary database connection is not established"""
    def __init__(self, message: str = "Database connection unavailable. Please try again."):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="NotConnected"
        )


class ServiceUnavailable(BaseAPIError):
    """Raised when a downstream call times out or the connection drops"""
    def __init__(self, message: str = "Service temporarily unavailable. Please try again."):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code="ServiceUnavailable"
        )


class Unauthorized(BaseAPIError):
    """Raised when the session token is missing, malformed, invalid or expired"""
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="Unauthorized"
        )


class Forbidden(BaseAPIError):
    """Raised when a valid session is not allowed to use the route"""
    def __init__(self, message: str = "Access denied. Insufficient permissions."):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="Forbidden"
        )


class NotFoundError(BaseAPIError):
    """Raised when a requested resource is not found"""
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NotFound",
            details=details
        )


class DuplicateResource(BaseAPIError):
    """Raised when attempting to create a duplicate resource"""
    def __init__(self, message: str = "Resource already exists", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="DuplicateResource",
            details=details
        )


class ScheduleConflict(BaseAPIError):
    """Raised when a timetable or exam slot collides with an existing booking"""
    def __init__(self, message: str = "Schedule conflicts detected", conflicts: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="ScheduleConflict",
            details={"conflicts": conflicts or []}
        )


class ValidationError(BaseAPIError):
    """Raised when input validation fails"""
    def __init__(self, message: str = "Validation error", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="ValidationError",
            details=details
        )


def get_error_message(
    error: Union[Exception, str],
    language: str = "en",
    default_message: str = "Internal server error",
    include_details: bool = False
) -> Dict[str, Any]:
    """
    Build the client-facing error body.

    Args:
        error: The exception that was raised or an error message string
        language: Language code for translation (default: 'en')
        default_message: Fallback message if the error type is not recognized
        include_details: Whether to include error details in the response

    Returns:
        Dict with ``success``, ``message``, ``errorKind`` and the HTTP
        ``status_code`` (the latter is popped by the handler, not sent).
    """
    translate = get_translation(language)

    error_response = {
        "success": False,
        "message": translate(default_message),
        "errorKind": "InternalError",
        "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
    }

    if isinstance(error, str):
        error_response["message"] = translate(error)
        return error_response

    if isinstance(error, BaseAPIError):
        error_response.update({
            "message": translate(error.message),
            "errorKind": error.error_code,
            "status_code": error.status_code
        })
        if error.details and (include_details or isinstance(error, ScheduleConflict)):
            error_response["details"] = error.details

    elif isinstance(error, RequestValidationError):
        error_response.update({
            "message": translate("Validation error"),
            "errorKind": "ValidationError",
            "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY
        })
        if include_details:
            error_response["details"] = {"errors": error.errors()}

    elif isinstance(error, StarletteHTTPException):
        error_response.update({
            "message": translate(str(error.detail)),
            "errorKind": "HttpError",
            "status_code": error.status_code
        })

    elif isinstance(error, SQLAlchemyError):
        error_response.update({
            "message": translate("Database error occurred"),
            "errorKind": "DatabaseError",
        })

    return error_response


def _request_language(request: Request) -> str:
    header = request.headers.get("accept-language", "")
    return header.split(",")[0].split("-")[0].strip().lower() or "en"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{success: false, message, errorKind}``"""

    # Unauthorized responses carry the bearer challenge header
    @app.exception_handler(BaseAPIError)
    async def handle_api_error(request: Request, exc: BaseAPIError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                f"{exc.error_code}: {exc.message}",
                extra={"error_kind": exc.error_code}
            )
        else:
            logger.info(
                f"{exc.error_code} on {request.method} {request.url.path}",
                extra={"error_kind": exc.error_code}
            )
        body = get_error_message(
            exc,
            language=_request_language(request),
            include_details=not settings.PRODUCTION
        )
        status_code = body.pop("status_code")
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return JSONResponse(status_code=status_code, content=body, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        body = get_error_message(
            exc,
            language=_request_language(request),
            include_details=True
        )
        status_code = body.pop("status_code")
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        body = get_error_message(exc, language=_request_language(request))
        status_code = body.pop("status_code")
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}",
            exc_info=exc
        )
        body = get_error_message(exc, language=_request_language(request))
        status_code = body.pop("status_code")
        return JSONResponse(status_code=status_code, content=body)
