# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the directory search API.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when request validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific search exceptions


class LocationRequiredException(ValidationException):
    """Raised when a proximity search arrives without caller coordinates."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message=message
            or "Your location is required to search near you. Share your location and try again.",
            code="LOCATION_REQUIRED",
        )


class SearchUnavailableException(ServiceException):
    """Raised when the listing store fails in a way that must not look like 'no results'."""

    def __init__(self, message: str, *, reason: Optional[str] = None) -> None:
        super().__init__(
            message=message,
            code="SEARCH_UNAVAILABLE",
            details={"reason": reason} if reason else {},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    """


def is_db_pool_exhaustion(exc: BaseException) -> bool:
    """
    Check if an exception indicates DB connection pool exhaustion.

    This is a common failure mode under high load when all database
    connections are in use and new requests time out waiting.
    """
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )


def raise_503_if_pool_exhaustion(exc: BaseException) -> None:
    """
    Convert DB pool exhaustion errors to HTTP 503 (Service Unavailable).

    Raises:
        HTTPException: 503 if pool exhaustion detected
        Does not raise if not pool exhaustion (caller should re-raise original)
    """
    if is_db_pool_exhaustion(exc):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily overloaded. Please retry.",
            headers={"Retry-After": "2"},
        )
