from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class PageInfo(BaseModel):
    page: int | None = None
    limit: int | None = None
    hasNextPage: bool | None = None


class ProductOfferV2Node(BaseModel):
    itemId: int | None = None
    commissionRate: str | None = None
    sellerCommissionRate: str | None = None
    shopeeCommissionRate: str | None = None
    commission: str | None = None
    sales: int | None = None
    priceMax: str | None = None
    priceMin: str | None = None
    productCatIds: list[int] | None = None
    ratingStar: str | None = None
    priceDiscountRate: int | None = None
    imageUrl: str | None = None
    productName: str | None = None
    shopId: int | None = None
    shopName: str | None = None
    shopType: list[int] | None = None
    productLink: str | None = None
    offerLink: str | None = None
    periodStartTime: int | None = None
    periodEndTime: int | None = None


class ProductOfferSearchData(BaseModel):
    nodes: list[ProductOfferV2Node]
    pageInfo: PageInfo


class ProductOffersSearchRequest(BaseModel):
    itemId: int | None = Field(default=None, ge=1)
    shopId: int | None = Field(default=None, ge=1)
    keyword: str | None = None
    sortType: Literal[1, 2, 3, 4, 5] | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    isAMSOffer: bool | None = None
    isKeySeller: bool | None = None

    @field_validator("keyword")
    @classmethod
    def normalize_keyword(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    def to_variables(self) -> dict[str, object]:
        variables = self.model_dump(exclude_none=True)
        # Int64 arguments travel as strings.
        for key in ("itemId", "shopId"):
            if key in variables:
                variables[key] = str(variables[key])
        return variables
