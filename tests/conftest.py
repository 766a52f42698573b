import os
from datetime import datetime, timezone

import pytest

from hecpump.analytics import AnalyticsRecord


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")
    config.addinivalue_line("markers", "integration: tests against a local HTTP server")


@pytest.fixture(autouse=True)
def clean_hecpump_env(monkeypatch):
    """
    Keep HECPUMP_* variables of the developer's shell out of the tests.
    """
    for key in list(os.environ):
        if key.startswith("HECPUMP_"):
            monkeypatch.delenv(key)


@pytest.fixture
def record() -> AnalyticsRecord:
    """
    A fully populated analytics record.
    """
    return AnalyticsRecord(
        method="GET",
        path="/x",
        response_code=200,
        api_key="1234567890",
        timestamp=datetime(2021, 3, 4, 5, 6, 7, tzinfo=timezone.utc),
        api_version="v1",
        api_name="Orders",
        api_id="api-1",
        org_id="org-1",
        oauth_id="oauth-1",
        raw_request="R0VUIC94",
        raw_response="SFRUUC8xLjEgMjAw",
        request_time=42,
        ip_address="10.0.0.1",
    )


@pytest.fixture
def settings() -> dict:
    """
    Minimal settings accepted by the pump without certificates.
    """
    return {
        "collector_token": "tok",
        "collector_url": "https://h:8088",
        "ssl_insecure_skip_verify": True,
    }
