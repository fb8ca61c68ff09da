from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass

AUTH_SCHEME = "SHA256"
JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ShopeeSignature:
    """Credential, timestamp and digest for one signed GraphQL body."""

    credential_id: str
    timestamp: int
    signature: str

    @property
    def authorization_header(self) -> str:
        return f"{AUTH_SCHEME} Credential={self.credential_id}, Timestamp={self.timestamp}, Signature={self.signature}"

    def request_headers(self) -> dict[str, str]:
        return {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
            "Authorization": self.authorization_header,
        }


def sign_payload(app_id: str, app_secret: str, payload_json: str, timestamp: int) -> str:
    digest_input = "".join((app_id, str(timestamp), payload_json, app_secret))
    return hashlib.sha256(digest_input.encode("utf-8")).hexdigest()


def build_shopee_signature(
    *,
    app_id: str,
    app_secret: str,
    payload_json: str,
    timestamp: int | None = None,
) -> ShopeeSignature:
    """Sign one request body for the Shopee affiliate API.

    ``payload_json`` must be the exact text sent on the wire. A fresh
    timestamp is taken on every call unless one is given.
    """
    ts = int(time.time()) if timestamp is None else int(timestamp)
    return ShopeeSignature(
        credential_id=app_id,
        timestamp=ts,
        signature=sign_payload(app_id, app_secret, payload_json, ts),
    )
