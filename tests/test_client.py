"""Tests for the gateway HTTP client and its error classification."""
import json

import httpx
import pytest

from app.core.client import GatewayClient, merge_saved_entry, parse_envelope
from app.core.errors import (
    REMEDIATION_OPEN_SETTINGS,
    REMEDIATION_RETRY,
    AuthError,
    ConfigurationError,
    LogicalError,
    TransportError,
)
from app.core.gateway import handle_action, parse_body
from app.core.schemas import UserRecord, WeightEntryRecord
from app.core.stats import generate_stats

BACKEND = "https://script.google.com/macros/s/abc123/exec"


def client_for(handler, url=BACKEND):
    return GatewayClient(url, transport=httpx.MockTransport(handler))


def answer(payload, status=200):
    def handler(request):
        return httpx.Response(status, json=payload)

    return handler


def answer_text(text, status=200):
    def handler(request):
        return httpx.Response(status, text=text)

    return handler


def test_reads_use_get_with_query_args():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": []})

    client_for(handler).get_weights("ana")

    request = seen[0]
    assert request.method == "GET"
    assert request.url.params["action"] == "GET_WEIGHTS"
    assert request.url.params["user_name"] == "ana"
    assert "_t" in request.url.params


def test_writes_post_json_as_text_plain():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": json.loads(request.content)})

    entry = WeightEntryRecord(user_name="ana", date="2024-03-01", weight_kg=80.5)
    saved = client_for(handler).save_weight(entry)

    request = seen[0]
    assert request.method == "POST"
    assert request.url.params["action"] == "SAVE_WEIGHT"
    assert request.headers["content-type"] == "text/plain;charset=utf-8"
    assert json.loads(request.content) == {"user_name": "ana", "date": "2024-03-01", "weight_kg": 80.5}
    assert saved == entry


def test_spreadsheet_rows_are_parsed():
    """Rows from a spreadsheet backend: blank cells and timestamp dates."""
    rows = [{"user_name": "ana", "created_at": "2024-01-01T00:00:00.000Z", "height_cm": "", "target_weight": 70, "notes": ""}]
    users = client_for(answer({"success": True, "data": rows})).get_users()
    assert users == [UserRecord(user_name="ana", created_at="2024-01-01T00:00:00.000Z", target_weight=70)]

    weights = [{"user_name": "ana", "date": "2024-03-01T05:00:00.000Z", "weight_kg": "80", "note": ""}]
    entries = client_for(answer({"success": True, "data": weights})).get_weights("ana")
    assert entries == [WeightEntryRecord(user_name="ana", date="2024-03-01", weight_kg=80)]


def test_missing_url_is_configuration_error():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"success": True, "data": []})

    with pytest.raises(ConfigurationError) as exc:
        client_for(handler, url="").get_users()

    assert str(exc.value) == "API_URL_MISSING"
    assert exc.value.remediation == REMEDIATION_OPEN_SETTINGS
    assert calls == []


@pytest.mark.parametrize(
    "url",
    ["https://script.google.com/macros/s/abc123/edit", "script.google.com/macros/s/abc123/exec", "ftp://example.com/exec"],
)
def test_bad_urls_are_configuration_errors(url):
    with pytest.raises(ConfigurationError):
        client_for(answer({"success": True, "data": []}), url=url).get_users()


def test_http_error_status_is_transport_error():
    with pytest.raises(TransportError) as exc:
        client_for(answer_text("boom", status=500)).get_users()
    assert "500" in str(exc.value)
    assert exc.value.remediation == REMEDIATION_RETRY


def test_network_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc:
        client_for(handler).get_users()
    assert exc.value.user_message.startswith("Network Error")


def test_login_page_is_auth_error():
    page = "<!DOCTYPE html><html><title>Sign in - Google Accounts</title></html>"
    with pytest.raises(AuthError) as exc:
        client_for(answer_text(page)).get_users()
    assert exc.value.remediation == REMEDIATION_OPEN_SETTINGS


def test_other_html_is_transport_error():
    with pytest.raises(TransportError) as exc:
        client_for(answer_text("<html><body>Not Found</body></html>")).get_users()
    assert exc.value.user_message.startswith("Connection Error")


def test_setup_page_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        client_for(answer_text("API Connected Successfully")).get_users()
    assert str(exc.value) == "SETUP_INCOMPLETE"


def test_plain_text_is_invalid_response():
    with pytest.raises(TransportError) as exc:
        client_for(answer_text("hello there")).get_users()
    assert exc.value.user_message.startswith("Invalid Response")


def test_logical_failure_carries_backend_message():
    with pytest.raises(LogicalError) as exc:
        client_for(answer({"success": False, "message": "Error: User already exists"})).create_user(
            UserRecord(user_name="ana")
        )
    assert exc.value.user_message == "Error: User already exists"
    assert exc.value.remediation is None


def test_parse_envelope_defaults_unknown_error():
    with pytest.raises(LogicalError) as exc:
        parse_envelope('{"success": false}')
    assert str(exc.value) == "Unknown API Error"


def test_merge_saved_entry_replaces_same_day():
    entries = [
        WeightEntryRecord(user_name="ana", date="2024-03-01", weight_kg=80),
        WeightEntryRecord(user_name="ana", date="2024-03-02", weight_kg=79.5),
    ]
    saved = WeightEntryRecord(user_name="ana", date="2024-03-01", weight_kg=79.9)

    merged = merge_saved_entry(entries, saved)

    assert len(merged) == 2
    assert merged[-1] == saved
    assert [e.weight_kg for e in merged if e.date == "2024-03-01"] == [79.9]


def test_merge_saved_entry_appends_new_day():
    entries = [WeightEntryRecord(user_name="ana", date="2024-03-01", weight_kg=80)]
    saved = WeightEntryRecord(user_name="ana", date="2024-03-02", weight_kg=79.9)
    assert merge_saved_entry(entries, saved) == [*entries, saved]


def test_round_trip_against_gateway(store):
    """Client and gateway agree on the wire: create, log, overwrite, read back."""

    def handler(request):
        params = dict(request.url.params)
        body = parse_body(request.content)
        return httpx.Response(200, json=handle_action(store, params.get("action"), params, body))

    client = client_for(handler)
    user = client.create_user(UserRecord(user_name="ana", height_cm=170, target_weight=70))

    entries = []
    for d, kg in [("2024-03-01", 80), ("2024-03-08", 78), ("2024-03-08", 77.5)]:
        entries = merge_saved_entry(entries, client.save_weight(WeightEntryRecord(user_name="ana", date=d, weight_kg=kg)))

    fetched = client.get_weights("ana")
    assert fetched == entries
    assert generate_stats(fetched, user).change == -2.5

    client.delete_weight("ana", "2024-03-01")
    with pytest.raises(LogicalError):
        client.delete_weight("ana", "2024-03-01")

    client.delete_user("ana")
    assert client.get_users() == []


def test_from_settings_falls_back_to_saved_connection(tmp_path, monkeypatch):
    from app.core.config import settings
    from app.core.links import save_api_url

    path = tmp_path / "conn.json"
    save_api_url(path, BACKEND)
    monkeypatch.setattr(settings, "API_URL", "")
    monkeypatch.setattr(settings, "CONNECTION_FILE", str(path))

    assert GatewayClient.from_settings().base_url == BACKEND

    monkeypatch.setattr(settings, "API_URL", "https://tracker.example.com/v1/exec")
    assert GatewayClient.from_settings().base_url == "https://tracker.example.com/v1/exec"
