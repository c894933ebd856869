"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    code = "error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Validation error (400)."""
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class InvalidAddressError(ValidationError):
    """Destination address failed length/checksum validation (400)."""
    code = "invalid_address"

    def __init__(self, message: str = "Invalid recipient address", details: dict | None = None):
        super().__init__(message, details=details)


class InvalidAmountError(ValidationError):
    """Amount is zero or negative (400)."""
    code = "invalid_amount"

    def __init__(self, message: str = "Amount must be greater than 0", details: dict | None = None):
        super().__init__(message, details=details)


class InvalidCredentialError(DomainError):
    """Mnemonic could not be parsed into a signing key (400)."""
    code = "invalid_credential"

    def __init__(self, message: str = "Invalid mnemonic phrase", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class NotFoundError(DomainError):
    """Resource not found (404)."""
    code = "not_found"

    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class RateLimitError(DomainError):
    """Rate limit exceeded (429)."""
    code = "rate_limited"

    def __init__(self, message: str = "Rate limit exceeded", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, details=details)


class NetworkError(DomainError):
    """Algorand node/indexer unreachable, timed out, or rejected the request (500)."""
    code = "network_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
