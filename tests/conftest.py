"""
Pytest configuration and fixtures for cloubil tests.

This module provides shared fixtures for the signer, the credential
sources and the Cost Explorer client, including an httpx mock transport
so the client can be exercised without reaching AWS.

Usage:
    def test_something(e2e_args, frozen_now):
        headers = compute_headers(e2e_args, frozen_now)

    def test_client(cost_transport):
        transport = cost_transport(status_code=200, body={...})
"""

import datetime
import json
import os

import httpx
import pytest

from cloubil.auth import AWSCredentials
from cloubil.operations import AWSArgs


E2E_PAYLOAD = (
    '{"TimePeriod":{"Start":"2023-01-01","End":"2023-02-01"},'
    '"Granularity":"MONTHLY","Metrics":["AmortizedCost"]}'
)


# ============================================================================
# Signing Fixtures
# ============================================================================

@pytest.fixture
def frozen_now() -> datetime.datetime:
    """The instant every golden signature in the suite was recorded at."""
    return datetime.datetime(2023, 1, 1, 0, 0, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def e2e_args() -> AWSArgs:
    """Request arguments for the recorded end-to-end signature."""
    return AWSArgs(
        access_key="AKIDEXAMPLE",
        secret_access_key="secret",
        service="ce",
        method="POST",
        region="us-east-1",
        host="ce.us-east-1.amazonaws.com",
        canonical_uri="/",
        payload=E2E_PAYLOAD,
    )


@pytest.fixture
def example_credentials() -> AWSCredentials:
    return AWSCredentials(
        access_key="AKIDEXAMPLE",
        secret_key="wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY",
    )


@pytest.fixture
def credentials_file(tmp_path):
    """Write a cloubil config file and return its path."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "access_key": "AKIAFILEEXAMPLE",
        "secret_access_key": "file-secret",
    }))
    return path


# ============================================================================
# Mock HTTP Transport Fixtures
# ============================================================================

@pytest.fixture
def cost_explorer_body() -> dict:
    """A trimmed GetCostAndUsage response for one monthly period."""
    return {
        "GroupDefinitions": [],
        "ResultsByTime": [
            {
                "TimePeriod": {"Start": "2023-01-01", "End": "2023-02-01"},
                "Total": {"AmortizedCost": {"Amount": "123.4567", "Unit": "USD"}},
                "Groups": [],
                "Estimated": False,
            }
        ],
        "DimensionValueAttributes": [],
    }


@pytest.fixture
def cost_transport():
    """
    Build an httpx.MockTransport that records the requests it receives.

    Returns:
        Factory taking ``status_code`` and ``body`` (dict or str); the
        returned transport exposes the captured requests as ``.requests``.
    """
    def factory(status_code: int = 200, body=None):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if isinstance(body, (dict, list)):
                return httpx.Response(status_code, json=body)
            return httpx.Response(status_code, text=body or "")

        transport = httpx.MockTransport(handler)
        transport.requests = requests
        return transport

    return factory


# ============================================================================
# Environment-based Fixtures
# ============================================================================

@pytest.fixture
def live_period() -> tuple[str, str]:
    """
    Billing period for integration tests against the real Cost Explorer API.

    Raises:
        pytest.skip: If CLOUBIL_LIVE_START / CLOUBIL_LIVE_END are not set
    """
    start = os.environ.get("CLOUBIL_LIVE_START")
    end = os.environ.get("CLOUBIL_LIVE_END")
    if not start or not end:
        pytest.skip("CLOUBIL_LIVE_START/CLOUBIL_LIVE_END not set - skipping integration tests")
    return start, end


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires AWS credentials)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(
        reason="Integration tests skipped. Use --run-integration to run."
    )

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires AWS credentials and ce:GetCostAndUsage)",
    )
