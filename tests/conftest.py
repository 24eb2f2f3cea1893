"""Pytest configuration and shared fixtures."""
import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import config  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Write logs to a temp dir, open API, no rate limiting, empty history."""
    from session_memory import reset_calculation_history

    monkeypatch.setattr(config.logging, "log_dir", str(tmp_path / "logs"))
    monkeypatch.setattr(config.logging, "jsonl_enabled", True)
    monkeypatch.setattr(config.server, "api_key", None)
    monkeypatch.setattr(config.rate_limit, "enabled", False)
    reset_calculation_history()
    yield config
    reset_calculation_history()


@pytest.fixture
def log_file(isolated_config):
    return os.path.join(isolated_config.logging.log_dir, "calculator.log")


@pytest.fixture
def client():
    """Fixture for the FastAPI test client."""
    from fastapi.testclient import TestClient

    import api_server

    api_server.api_limiter.reset()
    api_server.calculation_limiter.reset()
    with TestClient(api_server.app) as test_client:
        yield test_client
