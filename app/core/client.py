"""
HTTP client for the record store gateway.

Reads go out as GET with their arguments in the query string; writes as POST
with a JSON body sent as text/plain, which keeps browsers and script hosts
from requiring a CORS preflight. Every failure is raised as one of the
GatewayError subclasses so a UI can map it to a message and a remediation.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Iterable

import httpx

from app.core.config import settings
from app.core.errors import AuthError, ConfigurationError, LogicalError, TransportError
from app.core.links import load_saved_api_url, resolve_api_url, validate_api_url
from app.core.schemas import UserRecord, WeightEntryRecord

logger = logging.getLogger(__name__)

SETUP_MARKER = "API Connected Successfully"
LOGIN_MARKERS = ("Google Accounts", "Sign in")


def parse_envelope(text: str) -> Any:
    """Classify a raw gateway response body and return its ``data`` payload."""
    if SETUP_MARKER in text:
        raise ConfigurationError(
            "SETUP_INCOMPLETE",
            "Backend Setup Incomplete: deploy the gateway code and publish a new version.",
        )

    try:
        payload = json.loads(text)
    except ValueError:
        if text.strip().startswith("<"):
            logger.warning("Gateway returned HTML: %s", text[:200])
            if any(marker in text for marker in LOGIN_MARKERS):
                raise AuthError(
                    "AUTH_REDIRECT",
                    "Auth Error: the backend redirects to a login page. Allow anonymous access to the deployment.",
                )
            raise TransportError(
                "HTML_RESPONSE",
                "Connection Error: the backend returned HTML. Check the URL and deployment permissions.",
            )
        logger.warning("Gateway returned invalid JSON: %s", text[:100])
        raise TransportError(
            "INVALID_JSON",
            "Invalid Response: the server returned text instead of JSON. Ensure the correct code is deployed.",
        )

    if not isinstance(payload, dict):
        raise TransportError("INVALID_ENVELOPE", "Invalid Response: unexpected payload shape.")

    if not payload.get("success"):
        message = payload.get("message") or "Unknown API Error"
        raise LogicalError(message)

    return payload.get("data")


def merge_saved_entry(entries: Iterable[WeightEntryRecord], saved: WeightEntryRecord) -> list[WeightEntryRecord]:
    """Local view after a save: the acknowledged entry replaces any entry for the same day."""
    others = [e for e in entries if not (e.user_name == saved.user_name and e.date == saved.date)]
    return [*others, saved]


class GatewayClient:
    def __init__(
        self,
        base_url: str | None,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, transport: httpx.BaseTransport | None = None) -> "GatewayClient":
        url = resolve_api_url(settings.API_URL, load_saved_api_url(settings.CONNECTION_FILE))
        return cls(url, timeout=settings.CLIENT_TIMEOUT_SECONDS, transport=transport)

    def _request(self, action: str, method: str, payload: dict | None = None) -> Any:
        url = validate_api_url(self.base_url)
        payload = payload or {}
        params = {"action": action}
        kwargs: dict[str, Any] = {}

        if method == "GET":
            params.update({k: str(v) for k, v in payload.items() if v is not None})
            params["_t"] = str(int(time.time() * 1000))
        else:
            kwargs["content"] = json.dumps(payload)
            kwargs["headers"] = {"Content-Type": "text/plain;charset=utf-8"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport, follow_redirects=True) as client:
                response = client.request(method, url, params=params, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Gateway %s %s failed: %s", method, action, e)
            raise TransportError(
                str(e),
                "Network Error: could not connect to the backend. Check your connection and the gateway URL.",
            )

        if not response.is_success:
            raise TransportError(f"HTTP Error: {response.status_code} {response.reason_phrase}")

        return parse_envelope(response.text)

    # ---------- reads ----------

    def get_users(self) -> list[UserRecord]:
        data = self._request("GET_USERS", "GET") or []
        return [UserRecord.model_validate(u) for u in data]

    def get_weights(self, user_name: str) -> list[WeightEntryRecord]:
        data = self._request("GET_WEIGHTS", "GET", {"user_name": user_name}) or []
        return [WeightEntryRecord.model_validate(w) for w in data]

    # ---------- writes ----------

    def create_user(self, user: UserRecord) -> UserRecord:
        data = self._request("CREATE_USER", "POST", user.model_dump(exclude_none=True))
        return UserRecord.model_validate(data)

    def delete_user(self, user_name: str) -> None:
        self._request("DELETE_USER", "POST", {"user_name": user_name})

    def save_weight(self, entry: WeightEntryRecord) -> WeightEntryRecord:
        data = self._request("SAVE_WEIGHT", "POST", entry.model_dump(exclude_none=True))
        return WeightEntryRecord.model_validate(data)

    def delete_weight(self, user_name: str, date: str) -> None:
        self._request("DELETE_WEIGHT", "POST", {"user_name": user_name, "date": date})
