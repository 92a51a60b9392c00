"""
API error taxonomy

Every failure a handler can report maps to one of these classes. The
exception handlers in main.py turn them into the JSON error envelope:
{"success": false, "error": ..., "code": ..., "details": ...}
"""
from typing import Any, Optional

from fastapi import status


class BillingAPIError(Exception):
    """Base class for errors returned to the caller"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "InternalError"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(BillingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidRequest"


class MissingParameters(BillingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MissingParameters"


class MissingReference(BillingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MissingReference"


class InvalidTransactionType(BillingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "InvalidTransactionType"


class UnsupportedReportType(BillingAPIError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "UnsupportedReportType"


class Unauthenticated(BillingAPIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "Unauthenticated"


class Forbidden(BillingAPIError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "Forbidden"


class NotFound(BillingAPIError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"


class MethodNotAllowed(BillingAPIError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    code = "MethodNotAllowed"


class InternalError(BillingAPIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "InternalError"


class StoreError(InternalError):
    """A data store call failed; message names the sub-operation"""

    code = "StoreError"

    def __init__(self, operation: str, details: Optional[Any] = None):
        super().__init__(f"Failed to {operation}", details)
        self.operation = operation
