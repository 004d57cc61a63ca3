"""
Dependency wiring for the NutriCare registry.

Holds the single application-wide instances:

    Presentation layer
         ↓ get_patient_store()
    PatientStore (owner of the patient collection)
         ↓ injected
    KeyValueRepository (durable slot)
         ↓ injected
    Database (SQLite file)

Usage:
    from nutricare.core.dependencies import get_patient_store

    store = get_patient_store()   # loaded from storage on first call
    store.add({"name": "Ana", "weight": "60", "height": "1.65", "age": "30"})

Testing:
    Build the objects directly with a temporary Database, or call
    reset_dependencies() between tests that use the module-level instances.
"""
import logging
from typing import Optional

from nutricare.core.config import settings

logger = logging.getLogger(__name__)


# Imports of the classes are lazy to avoid circular dependencies
_database_instance: Optional["Database"] = None
_patient_store_instance: Optional["PatientStore"] = None


def get_database() -> "Database":
    """
    Get the database instance, creating it on first use.

    Returns:
        Database: The configured database instance.
    """
    global _database_instance

    if _database_instance is None:
        from nutricare.repositories import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.nutricare_db_busy_timeout
        )

    return _database_instance


def get_key_value_repository() -> "KeyValueRepository":
    """
    Get a KeyValueRepository with the database injected.

    Returns:
        KeyValueRepository: Repository for the durable slot.
    """
    from nutricare.repositories import KeyValueRepository

    return KeyValueRepository(db=get_database())


def get_patient_store() -> "PatientStore":
    """
    Get the application-wide PatientStore.

    The store is created and loaded from storage on first call, so the slot
    is read once at startup. Load problems are reported through
    ``store.last_error``.

    Returns:
        PatientStore: The owner of the patient collection.
    """
    global _patient_store_instance

    if _patient_store_instance is None:
        from nutricare.services import PatientStore

        store = PatientStore(
            repository=get_key_value_repository(),
            storage_key=settings.nutricare_storage_key,
        )
        store.load()
        _patient_store_instance = store

    return _patient_store_instance


def reset_dependencies() -> None:
    """
    Drop the cached instances (for testing only).
    """
    global _database_instance, _patient_store_instance
    _database_instance = None
    _patient_store_instance = None
