from __future__ import annotations

import hashlib

from promolink.services.shopee_client import build_graphql_payload, compact_json
from promolink.services.shopee_signing import build_shopee_signature, sign_payload


def test_shopee_signature_header_format_and_value() -> None:
    payload_json = '{"query":"{__typename}"}'
    timestamp = 1577836800

    signature = build_shopee_signature(
        app_id="123456",
        app_secret="demo",
        payload_json=payload_json,
        timestamp=timestamp,
    )

    expected_hash = hashlib.sha256(f"123456{timestamp}{payload_json}demo".encode("utf-8")).hexdigest()
    expected_header = f"SHA256 Credential=123456, Timestamp={timestamp}, Signature={expected_hash}"

    assert signature.signature == expected_hash
    assert signature.timestamp == timestamp
    assert signature.authorization_header == expected_header


def test_shopee_signature_changes_when_payload_changes() -> None:
    sig_a = build_shopee_signature(app_id="123456", app_secret="demo", payload_json='{"query":"{a}"}', timestamp=1)
    sig_b = build_shopee_signature(app_id="123456", app_secret="demo", payload_json='{"query":"{b}"}', timestamp=1)
    assert sig_a.signature != sig_b.signature


def test_shopee_signature_changes_when_timestamp_changes() -> None:
    payload_json = '{"query":"{a}"}'
    sig_a = build_shopee_signature(app_id="123456", app_secret="demo", payload_json=payload_json, timestamp=100)
    sig_b = build_shopee_signature(app_id="123456", app_secret="demo", payload_json=payload_json, timestamp=101)
    assert sig_a.signature != sig_b.signature
    assert len(sig_a.signature) == len(sig_b.signature) == 64


def test_shopee_signature_uses_current_time_by_default(monkeypatch) -> None:
    monkeypatch.setattr("promolink.services.shopee_signing.time.time", lambda: 1700000000.9)
    signature = build_shopee_signature(app_id="1", app_secret="s", payload_json="{}")
    assert signature.timestamp == 1700000000
    assert "Timestamp=1700000000," in signature.authorization_header


def test_graphql_payload_is_compact_and_omits_missing_variables() -> None:
    assert build_graphql_payload("{a}") == '{"query":"{a}"}'
    assert build_graphql_payload("q", {"originUrl": "https://shopee.com.br/x"}) == (
        '{"query":"q","variables":{"originUrl":"https://shopee.com.br/x"}}'
    )
    assert compact_json({"b": 1, "a": "ç"}, sort_keys=True) == '{"a":"ç","b":1}'


def test_signature_request_headers_and_digest_helper() -> None:
    signature = build_shopee_signature(app_id="77", app_secret="k", payload_json='{"query":"q"}', timestamp=5)

    assert signature.credential_id == "77"
    assert signature.signature == sign_payload("77", "k", '{"query":"q"}', 5)
    assert signature.request_headers() == {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "Authorization": f"SHA256 Credential=77, Timestamp=5, Signature={signature.signature}",
    }
