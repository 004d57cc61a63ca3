"""
Repository layer for storage access.

This module contains all database access, encapsulating SQL and persistence logic.
"""
from nutricare.repositories.base import Database
from nutricare.repositories.key_value_repository import KeyValueRepository

__all__ = [
    "Database",
    "KeyValueRepository",
]
