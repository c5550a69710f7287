from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Service error"

    def __init__(self, message: Optional[str] = None, details: Optional[Mapping[str, Any]] = None, code: Optional[str] = None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met.

    Covers empty update patches, zero or several food resolution strategies and
    malformed time or distribution input. http_status is 400.
    """

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(ServiceError):
    """Raised when a plan, meal or food is absent or not owned by the caller.

    http_status is 404.
    """

    http_status = 404
    default_message = "Not found"


class ExternalLookupError(ServiceError):
    """Raised when the food provider fails (timeout, transport error, bad payload).

    The caller may retry. http_status is 503.
    """

    http_status = 503
    default_message = "Food lookup service unavailable"


class ConsistencyViolationError(ServiceError):
    """Raised when an eaten cascade or distribution invariant does not hold after a write.

    The surrounding transaction is rolled back. http_status is 500.
    """

    http_status = 500
    default_message = "Consistency violation"
