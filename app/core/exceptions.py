from typing import Dict, Any, Optional
from fastapi import status
from pydantic import BaseModel
import logging

logger = logging.getLogger(__name__)


class BaseCustomException(Exception):
    """Base class for custom exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


class RequestFailedError(BaseCustomException):
    """The record store answered with a failure envelope or could not be reached"""

    def __init__(
        self,
        message: str = "Record store request failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details,
            error_code=error_code or "REQUEST_FAILED"
        )


class FieldValidationFailedError(BaseCustomException):
    """A submitted field value was rejected by the record store"""

    def __init__(
        self,
        field_label: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.field_label = field_label
        self.field_message = message
        super().__init__(
            message=f"{field_label}: {message}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field_label": field_label, **(details or {})},
            error_code=error_code or "FIELD_VALIDATION_FAILED"
        )


class NotFoundError(BaseCustomException):
    """Exception for resource not found errors"""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code=error_code or "NOT_FOUND_ERROR"
        )


class LocalValidationError(BaseCustomException):
    """Form-side rule violations; never reaches the record store"""

    def __init__(
        self,
        errors: Dict[str, str],
        message: str = "Validation failed",
        error_code: Optional[str] = None
    ):
        self.errors = dict(errors)
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"errors": self.errors},
            error_code=error_code or "VALIDATION_ERROR"
        )


# Response models for errors
class ErrorResponse(BaseModel):
    """Standard error response model"""
    error: str
    message: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None
    request_id: Optional[str] = None


def create_error_response(
    exception: BaseCustomException,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create standardized error response"""
    from datetime import datetime, timezone

    response = {
        "error": exception.__class__.__name__.replace("Error", " Error"),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id
    }

    if exception.details:
        response["details"] = exception.details

    return response


def handle_transport_error(error: Exception, operation: str) -> RequestFailedError:
    """Convert a transport failure talking to the record store into RequestFailedError"""
    logger.error(f"Record store transport error during {operation}: {error}")

    error_message = "Record store unavailable"
    if "timeout" in type(error).__name__.lower() or "timeout" in str(error).lower():
        error_message = "Record store request timed out"

    return RequestFailedError(
        message=error_message,
        details={"operation": operation, "original_error": str(error)},
        error_code="RECORD_STORE_UNAVAILABLE"
    )
