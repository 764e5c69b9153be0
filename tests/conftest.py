"""Pytest shared fixtures for the reconciler tests."""
import os
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any provider imports
os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests

from okta_provider.core.okta import OktaAdapter
from okta_provider.core.schema import UserData


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching a real Okta org.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _blocked(method):
        def _stub(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _stub

    for method in ("get", "post", "put", "delete"):
        monkeypatch.setattr(requests, method, _blocked(method.upper()))


# ─────────────────────────────────────────────────────────────────────────────
# Adapter Double
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def adapter():
    """Adapter double recording every remote call.

    Defaults describe a settled ACTIVE user with no roles or groups; tests
    override return values or side effects per call.
    """
    mock = MagicMock(spec=OktaAdapter)
    mock.create_user.return_value = {"id": "00u1", "status": "ACTIVE"}
    mock.get_user.return_value = {
        "id": "00u1",
        "status": "ACTIVE",
        "profile": {
            "login": "alice@example.com",
            "email": "alice@example.com",
            "firstName": "Alice",
            "lastName": "Smith",
        },
    }
    mock.list_user_roles.return_value = []
    mock.list_user_groups.return_value = []
    mock.list_applications.return_value = []
    mock.list_authenticators.return_value = []
    return mock


def make_user(**overrides) -> UserData:
    """Valid desired configuration for alice@example.com."""
    data = {
        "login": "alice@example.com",
        "email": "alice@example.com",
        "first_name": "Alice",
        "last_name": "Smith",
    }
    data.update(overrides)
    return UserData.from_dict(data)


def make_state(**overrides) -> UserData:
    """Recorded state of an existing ACTIVE user."""
    overrides.setdefault("id", "00u1")
    overrides.setdefault("raw_status", "ACTIVE")
    return make_user(**overrides)


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a real Okta org)"
    )
