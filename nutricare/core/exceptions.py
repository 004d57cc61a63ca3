"""
Shared exception classes for the NutriCare patient registry.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error formatting for display by the presentation layer

Usage:
    from nutricare.core.exceptions import PatientValidationError, PersistenceWriteError

    # In service layer - raise domain exceptions
    raise PatientValidationError(field="name", reason="required")

    # In the presentation layer - show exc.detail to the user
"""
import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class NutriCareError(Exception):
    """
    Base exception for all NutriCare domain errors.

    All custom exceptions should inherit from this class.
    Provides a consistent error structure with a detail message and context.
    """

    detail: str = "An unexpected error occurred"

    def __init__(self, detail: Optional[str] = None, **kwargs: Any):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            **kwargs: Additional context to include in the error payload.
        """
        self.detail = detail or self.__class__.detail
        self.context = {key: value for key, value in kwargs.items() if value is not None}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for display or logging."""
        result: Dict[str, Any] = {"error": self.__class__.__name__, "detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# PATIENT EXCEPTIONS
# =============================================================================

class PatientValidationError(NutriCareError):
    """Raised when a registration form has a missing or invalid field."""

    detail = "Invalid patient data"

    def __init__(self, field: Optional[str] = None, reason: Optional[str] = None, **kwargs: Any):
        self.field = field
        self.reason = reason
        if field and reason:
            detail = f"Invalid field '{field}': {reason}"
        elif field:
            detail = f"Invalid field '{field}'"
        else:
            detail = None
        super().__init__(detail=detail, field=field, reason=reason, **kwargs)


class PatientNotFoundError(NutriCareError):
    """Raised when no patient with the given id exists."""

    detail = "Patient not found"

    def __init__(self, patient_id: Optional[str] = None, **kwargs: Any):
        self.patient_id = patient_id
        detail = f"Patient '{patient_id}' not found" if patient_id else None
        super().__init__(detail=detail, patient_id=patient_id, **kwargs)


# =============================================================================
# PERSISTENCE EXCEPTIONS
# =============================================================================

class PersistenceError(NutriCareError):
    """Raised when the durable key-value slot cannot be used."""

    detail = "Storage operation failed"

    def __init__(self, key: Optional[str] = None, detail: Optional[str] = None, **kwargs: Any):
        self.key = key
        super().__init__(detail=detail, key=key, **kwargs)


class PersistenceReadError(PersistenceError):
    """Raised when stored patients cannot be read or parsed."""

    detail = "Could not load the saved patients"


class PersistenceWriteError(PersistenceError):
    """Raised when the patient list cannot be written to storage."""

    detail = "Could not save the patients"
