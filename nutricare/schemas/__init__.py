"""
Pydantic schemas for patient data and derived metrics.
"""
from nutricare.schemas.metrics import BMIClassification, BMIResult, Sex
from nutricare.schemas.patient import PatientForm, PatientRecord

__all__ = [
    # Metric schemas
    "BMIClassification",
    "BMIResult",
    "Sex",
    # Patient schemas
    "PatientForm",
    "PatientRecord",
]
