from __future__ import annotations

import pytest
from pydantic import ValidationError

from promolink.core.config import Settings, split_sub_ids


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_sub_ids_are_split_trimmed_and_filtered() -> None:
    assert split_sub_ids(" a, ,b ,,c ") == ["a", "b", "c"]
    assert split_sub_ids("") == []
    assert _settings(shopee_sub_ids="x, y").sub_ids_list == ["x", "y"]


def test_too_many_sub_ids_fail_fast() -> None:
    with pytest.raises(ValidationError):
        _settings(shopee_sub_ids="a,b,c,d,e,f")


def test_overlong_sub_id_fails_fast() -> None:
    with pytest.raises(ValidationError):
        _settings(shopee_sub_ids="a" * 51)


def test_missing_required_values_fail_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHOPEE_APP_SECRET", raising=False)
    monkeypatch.delenv("DATABASE_HOST", raising=False)

    with pytest.raises(ValidationError) as exc_info:
        _settings()

    fields = {error["loc"][0] for error in exc_info.value.errors()}
    assert {"shopee_app_secret", "database_host"} <= fields


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        _settings(shopee_timeout_seconds=0)


def test_docs_urls_follow_flag() -> None:
    enabled = _settings(enable_docs=True)
    disabled = _settings(enable_docs=False)

    assert enabled.docs_url == "/docs"
    assert disabled.docs_url is None
    assert disabled.openapi_url is None


def test_cors_origins_list() -> None:
    settings = _settings(cors_allow_origins="https://a.test, https://b.test,")
    assert settings.cors_allow_origins_list == ["https://a.test", "https://b.test"]
    assert _settings(cors_allow_origins=" ").cors_allow_origins_list == []
