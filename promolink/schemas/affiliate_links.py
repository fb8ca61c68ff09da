from __future__ import annotations

from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError

from promolink.core.config import MAX_SUB_ID_LENGTH, MAX_SUB_IDS
from promolink.schemas.shopee_offers import ProductOfferV2Node
from promolink.services.shopee_urls import ALLOWED_SHOPEE_DOMAINS, hostname_of, is_allowed_shopee_host
from promolink.services.redirect_resolver import is_valid_http_url

MAX_ORIGIN_URL_LENGTH = 2048


class AffiliateLinkRequest(BaseModel):
    originUrl: str
    subIds: list[str] | None = None

    @field_validator("originUrl")
    @classmethod
    def validate_origin_url(cls, value: str) -> str:
        url = value.strip()
        if not url:
            raise PydanticCustomError("empty_url", "URL cannot be empty")
        if len(url) > MAX_ORIGIN_URL_LENGTH:
            raise PydanticCustomError(
                "url_too_long", "URL is too long (maximum {max_length} characters)", {"max_length": MAX_ORIGIN_URL_LENGTH}
            )
        if not is_valid_http_url(url):
            raise PydanticCustomError("invalid_url_format", "Invalid URL format")
        if not is_allowed_shopee_host(hostname_of(url)):
            raise PydanticCustomError(
                "domain_not_allowed",
                "URL must belong to an official Shopee domain ({domains})",
                {"domains": ", ".join(ALLOWED_SHOPEE_DOMAINS)},
            )
        return url

    @field_validator("subIds")
    @classmethod
    def validate_sub_ids(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        if len(value) > MAX_SUB_IDS:
            raise ValueError(f"subIds supports at most {MAX_SUB_IDS} items")
        normalized: list[str] = []
        for item in value:
            stripped = item.strip()
            if not stripped:
                raise ValueError("subIds items must be non-empty strings")
            if len(stripped) > MAX_SUB_ID_LENGTH:
                raise ValueError(f"subIds items must be at most {MAX_SUB_ID_LENGTH} characters")
            normalized.append(stripped)
        return normalized


class AffiliateLinkCreateBody(BaseModel):
    originUrl: str | None = None
    subIds: list[str] | None = None


class DatabaseRecord(BaseModel):
    recordId: str
    message: str


class AffiliateLinkResponse(BaseModel):
    success: bool
    shortLink: str | None = None
    error: str | None = None
    errorCode: str | None = None
    message: str | None = None
    resolvedUrl: str | None = None
    productInfo: ProductOfferV2Node | None = None
    databaseRecord: DatabaseRecord | None = None

    @classmethod
    def failure(cls, error: str, code: str) -> "AffiliateLinkResponse":
        return cls(success=False, error=error, errorCode=code)


class AffiliateLinkData(BaseModel):
    shortLink: str
    resolvedUrl: str | None = None
    message: str | None = None
    productInfo: ProductOfferV2Node | None = None
    databaseRecord: DatabaseRecord | None = None
