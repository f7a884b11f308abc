"""
Centralized exception handling for the FastAPI application.

This module provides custom exceptions and exception handlers for consistent
error responses across the application.
"""
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from launchline.core.logger import get_logger

logger = get_logger(__name__)


class BaseAPIException(Exception):
    """Base exception class for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(BaseAPIException):
    """Exception for validation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
            details=details
        )


class AuthenticationException(BaseAPIException):
    """Exception for authentication errors."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_ERROR"
        )


class AuthorizationException(BaseAPIException):
    """Exception for authorization errors."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTHORIZATION_ERROR"
        )


class ResourceNotFoundException(BaseAPIException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource: str,
        identifier: Union[str, int],
        message: Optional[str] = None,
        error_code: str = "RESOURCE_NOT_FOUND",
    ):
        super().__init__(
            message=message or f"{resource} with identifier '{identifier}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            details={"resource": resource, "identifier": str(identifier)}
        )


class ConflictException(BaseAPIException):
    """Exception for resource conflict errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code="RESOURCE_CONFLICT",
            details=details
        )


class RateLimitException(BaseAPIException):
    """Exception for rate limit errors."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error_code="RATE_LIMIT_EXCEEDED"
        )


class ExternalServiceException(BaseAPIException):
    """Exception for external service errors."""

    def __init__(self, service: str, message: str = "External service error"):
        super().__init__(
            message=f"{service}: {message}",
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="EXTERNAL_SERVICE_ERROR",
            details={"service": service}
        )


# Workspace domain errors


class WorkspaceNotFoundException(ResourceNotFoundException):
    """The user has no active workspace membership."""

    def __init__(self, user_id: str):
        super().__init__(
            resource="Workspace",
            identifier=user_id,
            message="Workspace not found for user",
            error_code="WORKSPACE_NOT_FOUND",
        )


class AmbiguousWorkspaceException(ResourceNotFoundException):
    """The user has more than one active workspace membership."""

    def __init__(self, user_id: str, workspace_count: int):
        super().__init__(
            resource="Workspace",
            identifier=user_id,
            message="Workspace could not be determined for user",
            error_code="WORKSPACE_AMBIGUOUS",
        )
        self.details["workspace_count"] = workspace_count


class InvitationNotFoundException(ResourceNotFoundException):
    """No invitation exists for the given token or id."""

    def __init__(self, identifier: str = "token"):
        super().__init__(
            resource="Invitation",
            identifier=identifier,
            message="Invitation not found",
            error_code="INVITATION_NOT_FOUND",
        )


class InvitationInvalidStateException(BaseAPIException):
    """The invitation exists but cannot be used. `error_code` says why."""

    def __init__(
        self,
        message: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class InvitationWorkspaceDeactivatedException(InvitationInvalidStateException):
    def __init__(self):
        super().__init__("Invitation workspace is deactivated", "INVITATION_WORKSPACE_DEACTIVATED")


class InvitationMembershipInactiveException(InvitationInvalidStateException):
    def __init__(self):
        super().__init__("Invitation membership is inactive", "INVITATION_MEMBERSHIP_INACTIVE")


class InvitationExpiredException(InvitationInvalidStateException):
    def __init__(self):
        super().__init__("Invitation has expired", "INVITATION_EXPIRED")


class InvitationDisabledException(InvitationInvalidStateException):
    def __init__(self):
        super().__init__("Invitation has been disabled", "INVITATION_DISABLED")


class InvitationAlreadyConsumedException(InvitationInvalidStateException):
    def __init__(self):
        super().__init__("Invitation has already been consumed", "INVITATION_ALREADY_CONSUMED")


class InvitationEmailInUseException(InvitationInvalidStateException):
    def __init__(self, email: str):
        super().__init__(
            "Email is already in use",
            "INVITATION_EMAIL_IN_USE",
            details={"email": email},
            status_code=status.HTTP_409_CONFLICT,
        )


def create_error_response(
    message: str,
    error_code: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create a standardized error response."""
    error_response = {
        "error": {
            "message": message,
            "code": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }

    if details:
        error_response["error"]["details"] = details

    if request_id:
        error_response["error"]["request_id"] = request_id

    return error_response


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handler for custom API exceptions."""
    request_id = getattr(request.state, 'request_id', None)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "API exception occurred",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            message=exc.message,
            error_code=exc.error_code,
            details=exc.details,
            request_id=request_id
        )
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPExceptions."""
    request_id = getattr(request.state, 'request_id', None)

    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            message=str(exc.detail),
            error_code="HTTP_ERROR",
            request_id=request_id
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for request validation errors."""
    request_id = getattr(request.state, 'request_id', None)

    errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        "Validation error occurred",
        errors=errors,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=create_error_response(
            message="Validation error",
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
            request_id=request_id
        )
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unexpected exceptions."""
    request_id = getattr(request.state, 'request_id', None)

    logger.error(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        traceback=traceback.format_exc(),
        path=request.url.path,
        method=request.method
    )

    # Don't expose internal error details in production
    from launchline.core.config import settings
    if settings.is_development:
        message = f"Internal server error: {str(exc)}"
        details = {"traceback": traceback.format_exc()}
    else:
        message = "Internal server error"
        details = None

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            message=message,
            error_code="INTERNAL_SERVER_ERROR",
            details=details,
            request_id=request_id
        )
    )


def setup_exception_handlers(app) -> None:
    """Setup exception handlers for the FastAPI application."""

    app.add_exception_handler(BaseAPIException, base_api_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers configured successfully")
