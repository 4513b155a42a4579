import asyncio
import os
import sys

# Settings are read at import time; keep tests on the in-memory store and
# free of rate limits.
os.environ["MONGODB_URI"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from fastapi.testclient import TestClient

from leave_tracker.constants.constants import USERS_COLLECTION
from leave_tracker.core.config import Settings
from leave_tracker.core.database import DocumentStoreManager
from leave_tracker.main import create_app
from leave_tracker.models.user import new_user_document
from leave_tracker.services.AuthenticationService import AuthenticationService
from leave_tracker.services.LeaveRepository import LeaveRepository


@pytest.fixture
def settings():
    return Settings(
        MONGODB_URI=None,
        SECRET_KEY="test-secret-key",
        RATE_LIMIT_ENABLED=False,
        SEED_DEFAULT_EMPLOYEES=True,
    )


@pytest.fixture
def store(settings):
    return DocumentStoreManager(settings)


@pytest.fixture
def repository(store):
    return LeaveRepository(store)


@pytest.fixture
def auth_service(repository, settings):
    return AuthenticationService(repository, settings)


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings, store)) as test_client:
        yield test_client


async def insert_employee(store, name, paysheet_number=None, email=None, **extra):
    """Add an employee document and return its string id."""
    document = new_user_document(name, paysheet_number=paysheet_number, email=email)
    document.update(extra)
    users = await store.collection(USERS_COLLECTION)
    return str(await users.insert_one(document))


def add_employee(store, name, paysheet_number=None, email=None, **extra):
    """Synchronous variant for tests driving the app through TestClient."""
    return asyncio.run(insert_employee(store, name, paysheet_number, email, **extra))
