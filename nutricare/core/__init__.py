"""
Core module for application configuration, logging, and shared errors.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency wiring: module-level instances of the store and its storage
- Exceptions: Domain-specific exception classes
- Logging setup: JSON or text log output
"""
from nutricare.core.config import settings, Settings

from nutricare.core.dependencies import (
    get_database,
    get_key_value_repository,
    get_patient_store,
    reset_dependencies,
)

from nutricare.core.exceptions import (
    NutriCareError,
    PatientValidationError,
    PatientNotFoundError,
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
)

from nutricare.core.logging_config import setup_logging

__all__ = [
    # Config
    "settings",
    "Settings",
    # Dependencies
    "get_database",
    "get_key_value_repository",
    "get_patient_store",
    "reset_dependencies",
    # Exceptions
    "NutriCareError",
    "PatientValidationError",
    "PatientNotFoundError",
    "PersistenceError",
    "PersistenceReadError",
    "PersistenceWriteError",
    # Logging
    "setup_logging",
]
