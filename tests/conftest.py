import os
import warnings

import pytest

os.environ.setdefault("CALC_RATE_LIMIT_STORAGE_URL", "memory://")
os.environ.setdefault("CALC_LOG_JSON", "0")

warnings.filterwarnings(
    "ignore",
    message=r"Using the in-memory storage for tracking rate limits.*",
    category=UserWarning,
)


@pytest.fixture
def app(monkeypatch):
    from calc_service.server import create_app

    monkeypatch.setenv("CALC_ENABLE_API", "1")
    monkeypatch.delenv("CALC_STRICT_SYNTAX_STATUS", raising=False)
    return create_app()


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client
