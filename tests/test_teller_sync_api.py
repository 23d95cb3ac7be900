import base64
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from flask import request as flask_request

from functions.teller_sync.filtering import subtract_months
from functions.teller_sync.main import teller_sync

TODAY = datetime.now(timezone.utc).date().isoformat()
FIVE_MONTHS_AGO = subtract_months(datetime.now(timezone.utc).date(), 5).isoformat()


def _json(resp):
    return json.loads(resp.get_data(as_text=True) or "{}")


def _basic(user: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{user}:{password}".encode()).decode()


def _upstream(status_code=200, payload=None):
    resp = MagicMock(status_code=status_code, text=json.dumps(payload))
    resp.json.return_value = payload
    return resp


@pytest.fixture
def mock_get():
    with patch("functions.teller_sync.teller_client.requests.get") as mock:
        yield mock


def test_sync_returns_recent_transactions(app, mock_get, store):
    accounts = [
        {
            "id": "acc_1",
            "institution": {"name": "Chase"},
            "links": {"transactions": "https://api.teller.io/accounts/acc_1/transactions"},
        }
    ]
    transactions = [
        {"id": "t_today", "date": TODAY, "amount": "-4.20"},
        {"id": "t_old", "date": FIVE_MONTHS_AGO, "amount": "-9.99"},
    ]

    def side_effect(url, **kwargs):
        if url == "https://api.teller.io/accounts":
            return _upstream(200, accounts)
        if url == "https://api.teller.io/accounts/acc_1/transactions":
            return _upstream(200, transactions)
        return _upstream(404, {"error": "not found"})

    mock_get.side_effect = side_effect

    with app.test_request_context("/api/teller/sync", method="POST", json={"access_token": "tok123"}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    body = _json(resp)
    assert body["accessToken"] == "tok123"
    assert body["accounts"][0]["accountId"] == "acc_1"
    assert body["accounts"][0]["institution"] == "Chase"
    assert body["accounts"][0]["transactions"] == [{"id": "t_today", "date": TODAY, "amount": "-4.20"}]
    assert store.load() == [body]


def test_sync_accepts_camel_case_token(app, mock_get):
    mock_get.return_value = _upstream(200, [])

    with app.test_request_context("/api/teller/sync", method="POST", json={"accessToken": "tok456"}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 200
    assert _json(resp)["accessToken"] == "tok456"
    assert _json(resp)["accounts"] == []


def test_sync_missing_token(app, mock_get, store):
    with app.test_request_context("/api/teller/sync", method="POST", json={}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 500
    assert "Missing access_token" in _json(resp)["error"]
    mock_get.assert_not_called()
    assert store.load() == []


def test_sync_non_string_token(app, mock_get, store):
    with app.test_request_context("/api/teller/sync", method="POST", json={"access_token": 123}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 500
    assert _json(resp)["error"] == "access_token must be a string"
    mock_get.assert_not_called()
    assert store.load() == []


def test_sync_invalid_json_body(app, mock_get):
    with app.test_request_context(
        "/api/teller/sync", method="POST", data="{oops", content_type="application/json"
    ):
        resp = teller_sync(flask_request)

    assert resp.status_code == 500
    assert _json(resp)["error"] == "Invalid JSON body"


def test_sync_upstream_error_is_reported(app, mock_get, store):
    mock_get.return_value = _upstream(401, {"error": {"code": "unauthorized"}})

    with app.test_request_context("/api/teller/sync", method="POST", json={"access_token": "bad"}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 500
    assert "Teller API request failed: 401" in _json(resp)["error"]
    assert store.load() == []


def test_admin_requires_credentials(app):
    with app.test_request_context("/admin", method="GET"):
        resp = teller_sync(flask_request)

    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"].startswith("Basic")


def test_admin_wrong_credentials(app):
    with app.test_request_context("/admin", method="GET", headers={"Authorization": _basic("admin", "wrong")}):
        resp = teller_sync(flask_request)
    assert resp.status_code == 403


def test_admin_malformed_header(app):
    with app.test_request_context("/admin", method="GET", headers={"Authorization": "Basic %%%"}):
        resp = teller_sync(flask_request)
    assert resp.status_code == 400


def test_admin_lists_persisted_records(app, store):
    store.append({"accessToken": "tok1", "timestamp": "2024-01-01T10:00:00.000Z", "accounts": []})
    store.append({"accessToken": "tok2", "timestamp": "2024-02-01T10:00:00.000Z", "accounts": []})

    with app.test_request_context("/admin", method="GET", headers={"Authorization": _basic("admin", "password")}):
        resp = teller_sync(flask_request)

    assert resp.status_code == 200
    assert resp.headers["Content-Type"].startswith("text/html")
    html = resp.get_data(as_text=True)
    assert html.count("<tr><td>") == 2
    assert "2024-01-01T10:00:00.000Z" in html
    assert "2024-02-01T10:00:00.000Z" in html


def test_options_preflight(app):
    with app.test_request_context("/api/teller/sync", method="OPTIONS"):
        resp = teller_sync(flask_request)

    assert resp.status_code == 204
    assert resp.get_data() == b""
    assert resp.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS, GET"
    assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type, Authorization"


def test_cors_origin_is_configurable(app, monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGIN", "https://connect.example.com")
    with app.test_request_context("/nowhere", method="GET"):
        resp = teller_sync(flask_request)
    assert resp.headers["Access-Control-Allow-Origin"] == "https://connect.example.com"


@pytest.mark.parametrize("method,path", [("GET", "/"), ("GET", "/api/teller/sync"), ("POST", "/admin")])
def test_unknown_routes(app, method, path):
    with app.test_request_context(path, method=method):
        resp = teller_sync(flask_request)

    assert resp.status_code == 404
    assert resp.get_data(as_text=True) == "Not Found"
    assert resp.headers["Content-Type"].startswith("text/plain")
