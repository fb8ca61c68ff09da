from __future__ import annotations

import os
from typing import Any, Sequence

import pytest
from fastapi.testclient import TestClient

# Configure required env vars before importing app settings/app.
os.environ.setdefault("JWT_SECRET", "test-secret-1234567890")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", "86400")
os.environ.setdefault("JWT_ISSUER", "promolink-api")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "adminpass")
os.environ.setdefault("SHOPEE_APP_ID", "123456")
os.environ.setdefault("SHOPEE_APP_SECRET", "demo-secret")
os.environ.setdefault("SHOPEE_GRAPHQL_URL", "https://open-api.affiliate.shopee.com.br/graphql")
os.environ.setdefault("SHOPEE_SUB_IDS", "promo, ,site")
os.environ.setdefault("HTTP_RETRY_MAX_ATTEMPTS", "1")
os.environ.setdefault("CACHE_ENABLED", "true")
os.environ.setdefault("CACHE_PRODUCT_OFFERS_TTL_SECONDS", "90")
os.environ.setdefault("CACHE_LOGS_TTL_SECONDS", "3600")
os.environ.setdefault("CACHE_MAXSIZE", "256")
os.environ.setdefault("DATABASE_HOST", "db.test")
os.environ.setdefault("DATABASE_USER", "promolink")
os.environ.setdefault("DATABASE_PASSWORD", "dbpass")
os.environ.setdefault("DATABASE_NAME", "promolink")
os.environ.setdefault("ENABLE_DOCS", "true")

from promolink.core.config import get_settings, reset_settings_cache  # noqa: E402
from promolink.db.database import Database  # noqa: E402
from promolink.main import create_app  # noqa: E402


MUTATION_OK = [[{"sp_return_id": "42", "sp_message": "Record created", "sp_error_id": 0}]]


class FakeProcedures:
    """Stands in for MySQL: records every CALL and replays canned result sets."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.results: dict[str, Any] = {}

    def set_result(self, name: str, result: Any) -> None:
        self.results[name] = result

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def __call__(self, name: str, params: Sequence[Any]) -> list[list[dict[str, Any]]]:
        self.calls.append((name, tuple(params)))
        result = self.results.get(name, MUTATION_OK)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def _reset_settings() -> None:
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def procedures(monkeypatch: pytest.MonkeyPatch) -> FakeProcedures:
    fake = FakeProcedures()
    monkeypatch.setattr(Database, "call_procedure", lambda self, name, params=(): fake(name, params))
    return fake


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def client(procedures: FakeProcedures) -> TestClient:
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "adminpass"})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["accessToken"]
    return {"Authorization": f"Bearer {token}"}
