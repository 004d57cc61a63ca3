"""
Service layer for business logic.
"""
from nutricare.services.metrics_calculator import (
    classify_bmi,
    compute_bmi,
    compute_ideal_weight,
)
from nutricare.services.patient_store import PatientStore, validate_form

__all__ = [
    "classify_bmi",
    "compute_bmi",
    "compute_ideal_weight",
    "PatientStore",
    "validate_form",
]
