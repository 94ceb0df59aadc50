"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py.
"""
from typing import Any

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvoiceValidationError(ValidationError):
    """Invoice payload failed schema checks; raised before any network call."""
    def __init__(self, errors: list[dict[str, Any]]):
        fields = sorted({".".join(str(p) for p in e.get("loc", ())) for e in errors if e.get("loc")})
        message = "Invalid invoice request"
        if fields:
            message = f"{message}: {', '.join(fields)}"
        super().__init__(message, details={"errors": errors})
        self.errors = errors


class RemoteServiceError(DomainError):
    """Backend remote function failed in a user-visible way (502)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


class InvoiceError(RemoteServiceError):
    """Invoice creation failed after validation passed (502)."""
    pass


class RemoteFunctionError(Exception):
    """
    Transport-level failure of a single remote function call.

    Raised by services.functions_client; services decide whether it becomes a
    user-visible error, an aggregate error, or a silent degrade.
    """
    def __init__(self, function: str, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.function = function
        self.message = message
        self.status_code = status_code
        self.payload = payload
