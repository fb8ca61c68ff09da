from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_SUB_IDS = 5
MAX_SUB_ID_LENGTH = 50


def split_sub_ids(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    app_env: str = "production"
    log_level: str = "INFO"
    enable_docs: bool = True

    jwt_secret: str = Field(..., min_length=16)
    jwt_algorithm: str = "HS256"
    jwt_access_token_expires_seconds: int = 86400
    jwt_issuer: str = "promolink-api"

    admin_username: str = Field(..., min_length=1)
    admin_password: str = Field(..., min_length=1)

    shopee_app_id: str = Field(..., min_length=1)
    shopee_app_secret: str = Field(..., min_length=1)
    shopee_graphql_url: str = "https://open-api.affiliate.shopee.com.br/graphql"
    shopee_timeout_seconds: float = Field(default=20.0, gt=0)
    shopee_sub_ids: str = ""

    http_retry_max_attempts: int = Field(default=3, ge=1)
    http_retry_base_delay_seconds: float = Field(default=1.0, ge=0)
    http_retry_jitter_seconds: float = Field(default=0.25, ge=0)

    cache_enabled: bool = True
    cache_product_offers_ttl_seconds: int = 90
    cache_logs_ttl_seconds: int = 3600
    cache_maxsize: int = 256

    database_host: str = Field(..., min_length=1)
    database_port: int = Field(default=3306, gt=0)
    database_user: str = Field(..., min_length=1)
    database_password: str = Field(..., min_length=1)
    database_name: str = Field(..., min_length=1)
    database_pool_size: int = 5
    database_max_overflow: int = 2
    database_pool_recycle_seconds: int = 1800
    database_connect_timeout_seconds: int = 10
    database_read_timeout_seconds: int = 30

    link_app_id: int = 1
    link_client_id: int = 1
    log_app_id: int = 1
    log_organization_id: str = "promolink"
    log_module_id: int = 1

    cors_enabled: bool = False
    cors_allow_origins: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("shopee_sub_ids")
    @classmethod
    def validate_sub_ids(cls, value: str) -> str:
        items = split_sub_ids(value)
        if len(items) > MAX_SUB_IDS:
            raise ValueError(f"SHOPEE_SUB_IDS supports at most {MAX_SUB_IDS} items")
        if any(len(item) > MAX_SUB_ID_LENGTH for item in items):
            raise ValueError(f"SHOPEE_SUB_IDS items must be at most {MAX_SUB_ID_LENGTH} characters")
        return value

    @property
    def docs_url(self) -> str | None:
        return "/docs" if self.enable_docs else None

    @property
    def redoc_url(self) -> str | None:
        return "/redoc" if self.enable_docs else None

    @property
    def openapi_url(self) -> str | None:
        return "/openapi.json" if self.enable_docs else None

    @property
    def sub_ids_list(self) -> list[str]:
        return split_sub_ids(self.shopee_sub_ids)

    @property
    def cors_allow_origins_list(self) -> list[str]:
        if not self.cors_allow_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()
