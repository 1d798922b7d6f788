# backend/guidebook/core/exceptions.py
"""
Domain-specific exceptions for the Guidebook platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

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
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when the acting user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# Specific business exceptions


class InvalidCapacityException(ValidationException):
    """Raised when a participant count is outside an activity's bounds."""

    def __init__(self, requested: int, minimum: int, maximum: int):
        super().__init__(
            message=(
                f"Invalid number of participants. Must be between {minimum} and {maximum}"
            ),
            code="INVALID_CAPACITY",
            details={"requested": requested, "min": minimum, "max": maximum},
        )


class NoEmployeeAvailableException(BusinessRuleException):
    """
    Raised when no employee can take a booking request.

    This is a normal negative outcome, not a system fault; clients should not
    auto-retry the same request.
    """

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="No employee available for this time slot",
            code="NO_EMPLOYEE_AVAILABLE",
            details=details or {},
        )


class IncompatibleSwapException(BusinessRuleException):
    """Raised when two bookings cannot exchange employees."""

    def __init__(self, message: str, failed_rule: str, details: Optional[Dict[str, Any]] = None):
        merged = dict(details or {})
        merged["failed_rule"] = failed_rule
        super().__init__(message=message, code="INCOMPATIBLE_SWAP", details=merged)
        self.failed_rule = failed_rule


class ConcurrencyConflictException(ConflictException):
    """Raised when concurrent writers kept invalidating a capacity decision."""

    def __init__(self, message: Optional[str] = None, *, attempts: int = 0):
        super().__init__(
            message=message or "The time slot was taken by a concurrent booking, please retry",
            code="CONCURRENCY_CONFLICT",
            details={"attempts": attempts},
        )


class AvailabilityOverlapException(ConflictException):
    """Raised when a work window overlaps an existing window of the same employee."""

    def __init__(
        self,
        specific_date: str,
        new_range: str,
        conflicting_range: str,
    ):
        super().__init__(
            message=(
                f"Overlapping work hours on {specific_date}: {new_range} conflicts with {conflicting_range}"
            ),
            code="AVAILABILITY_OVERLAP",
            details={
                "date": specific_date,
                "new_window": new_range,
                "conflicting_window": conflicting_range,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
