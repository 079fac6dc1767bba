# This project was developed with assistance from AI tools.
"""Fixtures for functional tests.

The real app from ``homestay_api.main`` is a module singleton.
``_clean_overrides`` ensures dependency_overrides are cleared after every
test so persona configuration from one test never leaks into the next.
"""

import pytest
from fastapi.testclient import TestClient

from homestay_api.main import app as real_app
from homestay_api.schemas.auth import UserContext

from ..factories import make_workflow
from .mock_db import configure_app_for_persona


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def world():
    """One shared in-memory store: (workflow, storage, settings, notifier)."""
    return make_workflow()


@pytest.fixture
def make_client(app, world):
    """Factory fixture: configure persona against the shared workflow, return TestClient.

    Every client made in one test sees the same applications, so a test can
    switch personas mid-flow the way the owner, DA and DTDO would. The
    overrides live on the shared app, so the most recent call decides who
    the caller is.
    """
    workflow = world[0]

    def _make(user: UserContext, session=None) -> TestClient:
        configure_app_for_persona(app, user, workflow=workflow, session=session)
        return TestClient(app)

    return _make
