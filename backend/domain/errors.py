"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handler
in main.py.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    code = "domain_error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    code = "not_found"

    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class ValidationError(DomainError):
    """Validation error (400)."""
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class PermissionDeniedError(DomainError):
    """Permission denied (403)."""
    code = "permission_denied"

    def __init__(self, message: str = "Permission denied", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    code = "conflict"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class RateLimitError(DomainError):
    """Rate limit exceeded (429)."""
    code = "rate_limited"

    def __init__(self, message: str = "Rate limit exceeded", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS, details=details)


# ════════════════════════════════════════════════════════════════════
# Checkout
# ════════════════════════════════════════════════════════════════════

class CatalogMismatchError(DomainError):
    """Cart does not match the catalog (400). Checkout is refused before any charge."""
    code = "catalog_mismatch"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class EmptyCartError(CatalogMismatchError):
    code = "empty_cart"

    def __init__(self):
        super().__init__("Cart is empty")


class ItemNotFoundError(CatalogMismatchError):
    code = "item_not_found"

    def __init__(self, refs: list[str]):
        super().__init__("Cart items not found in catalog", details={"items": refs})


class UnavailableItemError(CatalogMismatchError):
    code = "item_unavailable"

    def __init__(self, refs: list[str]):
        super().__init__("Some cart items are unavailable", details={"items": refs})


class PriceMismatchError(CatalogMismatchError):
    code = "price_mismatch"

    def __init__(self, mismatches: list[dict]):
        super().__init__("Cart prices do not match the catalog", details={"items": mismatches})


class GatewayError(DomainError):
    """
    Payment gateway failure (502).

    `details` carries the gateway's own error payload unmodified.
    """
    code = "gateway_failure"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


class PersistenceError(DomainError):
    """Database read/write failure (500)."""
    code = "persistence_failure"

    def __init__(self, message: str = "Persistence failure", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
