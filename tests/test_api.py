from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from fxconvert.core.config import Settings
from fxconvert.main import create_app

JITTER = 0.0101
EMAIL = "alice@mailbox.org"


def _sign_up(client, email=EMAIL, password="secret123", name="Alice"):
    return client.post("/auth/sign-up", json={"email": email, "password": password, "name": name})


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}


def test_request_id_header_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_rate_defaults_to_usd_cny(client):
    body = client.get("/api/rates").json()
    assert body["success"] is True
    assert (body["from"], body["to"]) == ("USD", "CNY")
    assert body["source"] == "mock-data"
    assert body["provenance"] == "table"
    assert body["rate"] == pytest.approx(7.314, rel=JITTER)
    datetime.fromisoformat(body["lastUpdated"].replace("Z", "+00:00"))


def test_rate_identity_and_lowercase_codes(client):
    body = client.get("/api/rates", params={"from": "cny", "to": "CNY"}).json()
    assert body["rate"] == 1.0
    assert body["provenance"] == "local"
    assert body["from"] == "CNY"


def test_rate_bridged_pair(client):
    body = client.get("/api/rates", params={"from": "KRW", "to": "SGD"}).json()
    assert body["provenance"] == "bridged"
    assert body["rate"] == pytest.approx(1.35 / 1320.5, rel=2 * JITTER)


def test_rate_rejects_malformed_code(client):
    resp = client.get("/api/rates", params={"from": "U1"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/no/such/route")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_trend_series(client):
    resp = client.post("/api/rates", json={"from": "EUR", "to": "JPY"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["days"] == 7 and len(body["data"]) == 7
    assert body["data"][-1]["date"] == date.today().isoformat()
    for point in body["data"]:
        assert point["rate"] == pytest.approx(177.4, rel=0.0502 + JITTER)


def test_trend_days_validated(client):
    resp = client.post("/api/rates", json={"from": "EUR", "to": "JPY", "days": 0})
    assert resp.status_code == 422


def test_currency_search(client):
    codes = [c["code"] for c in client.get("/api/currencies", params={"q": "franc"}).json()]
    assert codes == ["CHF"]
    assert len(client.get("/api/currencies").json()) == 10


def test_anonymous_conversion_is_not_saved(client):
    resp = client.post("/api/conversions", json={"from": "USD", "to": "CNY", "amount": 100})
    assert resp.status_code == 200
    body = resp.json()
    assert body["saved"] is False
    assert body["to_amount"] == pytest.approx(731.4, rel=JITTER)
    assert client.get("/api/conversions").status_code == 401


def test_negative_amount_rejected(client):
    resp = client.post("/api/conversions", json={"from": "USD", "to": "CNY", "amount": -5})
    assert resp.status_code == 422


def test_signed_in_conversions_are_recorded(client):
    resp = _sign_up(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["authenticated"] is True
    assert body["profile"]["name"] == "Alice"
    assert "fx_session" in resp.cookies

    saved = client.post("/api/conversions", json={"from": "GBP", "to": "EUR", "amount": 20})
    assert saved.json()["saved"] is True
    history = client.get("/api/conversions").json()
    assert len(history) == 1
    assert history[0]["from_currency"] == "GBP"
    assert history[0]["exchange_rate"] == saved.json()["rate"]


def test_bearer_token_authenticates(client):
    token = _sign_up(client).json()["access_token"]
    client.cookies.clear()
    assert client.get("/auth/session").json()["authenticated"] is False
    resp = client.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["user"]["email"] == EMAIL


def test_duplicate_sign_up_conflicts(client):
    _sign_up(client)
    resp = _sign_up(client, name="Again")
    assert resp.status_code == 409
    assert resp.json()["error"] == "email_taken"


def test_sign_up_requires_valid_email(client):
    resp = _sign_up(client, email="not-an-email")
    assert resp.status_code == 422


def test_sign_in_and_out(client):
    _sign_up(client)
    client.post("/auth/sign-out")
    assert client.get("/auth/session").json() == {
        "authenticated": False,
        "user": None,
        "profile": None,
    }

    bad = client.post("/auth/sign-in", json={"email": EMAIL, "password": "nope-nope"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "invalid_credentials"

    good = client.post("/auth/sign-in", json={"email": EMAIL, "password": "secret123"})
    assert good.status_code == 200
    assert client.get("/auth/session").json()["authenticated"] is True


def test_profile_update(client):
    assert client.patch("/auth/profile", json={"name": "X"}).status_code == 401
    _sign_up(client)
    resp = client.patch("/auth/profile", json={"name": "Alice B."})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Alice B."
    assert client.get("/auth/session").json()["profile"]["name"] == "Alice B."


def test_strict_mode_reports_unsupported_pair(tmp_path):
    settings = Settings(data_dir=tmp_path, strict_rate_pairs=True)
    settings.init_post_load()
    with TestClient(create_app(settings_override=settings)) as client:
        resp = client.get("/api/rates", params={"from": "XXX", "to": "CNY"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "unsupported_pair"
        assert client.get("/api/rates", params={"from": "KRW", "to": "SGD"}).status_code == 200
