from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

ALLOWED_SHOPEE_DOMAINS = (
    "shopee.com.br",
    "shopee.com",
    "shope.ee",
    "s.shopee.com.br",
)

SHORT_LINK_HOST_PREFIXES = (
    "s.shopee.",
    "l.shopee.",
    "shope.ee",
    "shp.ee",
    "br.shp.ee",
)

_SHOPEE_ITEM_PATTERNS = (
    re.compile(r"/(?P<slug>[^/?#]+)-i\.(?P<shop_id>\d+)\.(?P<item_id>\d+)(?:[/?#]|$)", re.IGNORECASE),
    re.compile(r"/product/(?P<shop_id>\d+)/(?P<item_id>\d+)(?:[/?#]|$)", re.IGNORECASE),
    re.compile(r"/opaanlp/(?P<shop_id>\d+)/(?P<item_id>\d+)(?:[/?#]|$)", re.IGNORECASE),
)


@dataclass(frozen=True)
class ProductRef:
    shop_id: int
    item_id: int
    product_name: str = ""


def hostname_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def is_allowed_shopee_host(hostname: str) -> bool:
    host = hostname.lower().rstrip(".")
    return any(host == domain or host.endswith(f".{domain}") for domain in ALLOWED_SHOPEE_DOMAINS)


def is_short_shopee_url(url: str) -> bool:
    return hostname_of(url).startswith(SHORT_LINK_HOST_PREFIXES)


def _title_from_slug(slug: str) -> str:
    return " ".join(word.capitalize() for word in slug.split("-") if word)


def parse_shopee_product_url(url: str) -> ProductRef | None:
    path = urlparse(url).path
    for pattern in _SHOPEE_ITEM_PATTERNS:
        match = pattern.search(path)
        if match:
            groups = match.groupdict()
            return ProductRef(
                shop_id=int(groups["shop_id"]),
                item_id=int(groups["item_id"]),
                product_name=_title_from_slug(groups.get("slug") or ""),
            )
    return None
