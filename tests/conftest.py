from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from dashboard.auth import get_current_admin
from dashboard.database import DashboardContext
from dashboard.main import app

IST = ZoneInfo("Asia/Kolkata")
PROVIDERS = ["p1", "p2", "p3"]


@pytest.fixture
def tz():
    return IST


@pytest.fixture
def ctx():
    """Context whose Firestore client is never touched: repositories are faked"""
    return DashboardContext(db=None, provider_ids=list(PROVIDERS), tz=IST)


@pytest.fixture
def client():
    app.dependency_overrides[get_current_admin] = lambda: {"uid": "admin", "email": "ops@example.com"}
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def override():
    """Register dependency overrides for one test"""

    def _override(dependency, factory):
        app.dependency_overrides[dependency] = factory

    return _override
