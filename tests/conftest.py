"""
Shared pytest fixtures for the proxy tests.

The outbound call is always patched so no test ever reaches a real backend.
"""
import importlib
from unittest.mock import MagicMock, patch

import pytest

import student_proxy


def backend_response(status=200, payload=None, json_error=None):
    """Build a fake requests.Response whose json() returns payload or raises json_error."""
    resp = MagicMock()
    resp.status_code = status
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    student_proxy.app.config["TESTING"] = True
    with student_proxy.app.test_client() as c:
        yield c


@pytest.fixture
def outbound():
    with patch("student_proxy.requests.request") as mock_request:
        yield mock_request


@pytest.fixture
def limited_client(monkeypatch):
    """Client for a freshly loaded app limited to one request per minute per key."""
    monkeypatch.delenv("BACKEND_URL", raising=False)
    monkeypatch.setenv("RATE_LIMIT", "1 per minute")
    module = importlib.reload(student_proxy)
    try:
        module.app.config["TESTING"] = True
        with module.app.test_client() as c:
            yield c
    finally:
        monkeypatch.delenv("RATE_LIMIT")
        importlib.reload(student_proxy)
