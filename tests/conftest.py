"""
Shared pytest fixtures.

Fixture Hierarchy:
    temp_db → kv_repo → store
"""
import os
import tempfile
import pytest

from nutricare.core import dependencies as deps
from nutricare.repositories import Database, KeyValueRepository
from nutricare.schemas import PatientForm
from nutricare.services import PatientStore


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    Each test gets a fresh SQLite file, removed afterwards together with
    its WAL side files.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    for path in (db_path, db_path + "-wal", db_path + "-shm"):
        if os.path.exists(path):
            os.unlink(path)


@pytest.fixture
def kv_repo(temp_db):
    """Create a KeyValueRepository with the test database."""
    return KeyValueRepository(db=temp_db)


@pytest.fixture
def store(kv_repo):
    """Create an empty, loaded PatientStore."""
    patient_store = PatientStore(repository=kv_repo, storage_key="patients")
    patient_store.load()
    return patient_store


@pytest.fixture
def valid_form():
    """A complete registration form."""
    return PatientForm(
        name="Maria Silva",
        weight="64",
        height="1.60",
        age="34",
        sex="female",
        phone="+55 11 99999-0000",
        email="maria@example.com",
        address="Rua das Flores, 100",
    )


@pytest.fixture(autouse=True)
def clean_dependencies():
    """Make sure module-level instances never leak between tests."""
    deps.reset_dependencies()
    yield
    deps.reset_dependencies()
