"""
Action dispatch for the record store gateway.

One request names one action (query parameter ``action``); reads take their
arguments from the query string, writes from the JSON body. Results are
wrapped in the ``{success, data|message}`` envelope the client expects.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from app.core.errors import InvalidActionError, StoreError
from app.core.schemas import UserRecord, WeightEntryRecord
from app.core.store import RecordStore

logger = logging.getLogger(__name__)

GET_USERS = "GET_USERS"
CREATE_USER = "CREATE_USER"
DELETE_USER = "DELETE_USER"
GET_WEIGHTS = "GET_WEIGHTS"
SAVE_WEIGHT = "SAVE_WEIGHT"
DELETE_WEIGHT = "DELETE_WEIGHT"


def parse_body(raw: bytes | str | None) -> dict:
    """Decode a JSON request body; anything unparseable counts as an empty body."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _require(source: dict, key: str) -> str:
    value = source.get(key)
    if value is None or value == "":
        raise StoreError(f"Missing '{key}' parameter")
    return str(value)


def _get_users(store: RecordStore, params: dict, body: dict) -> Any:
    return [u.model_dump() for u in store.list_users()]


def _create_user(store: RecordStore, params: dict, body: dict) -> Any:
    return store.create_user(UserRecord.model_validate(body)).model_dump()


def _delete_user(store: RecordStore, params: dict, body: dict) -> Any:
    return store.delete_user(_require(body, "user_name"))


def _get_weights(store: RecordStore, params: dict, body: dict) -> Any:
    return [e.model_dump() for e in store.list_weights(_require(params, "user_name"))]


def _save_weight(store: RecordStore, params: dict, body: dict) -> Any:
    return store.save_weight(WeightEntryRecord.model_validate(body)).model_dump()


def _delete_weight(store: RecordStore, params: dict, body: dict) -> Any:
    return store.delete_weight(_require(body, "user_name"), _require(body, "date"))


HANDLERS: dict[str, Callable[[RecordStore, dict, dict], Any]] = {
    GET_USERS: _get_users,
    CREATE_USER: _create_user,
    DELETE_USER: _delete_user,
    GET_WEIGHTS: _get_weights,
    SAVE_WEIGHT: _save_weight,
    DELETE_WEIGHT: _delete_weight,
}


def dispatch(store: RecordStore, action: str | None, params: dict, body: dict) -> Any:
    if not action:
        raise InvalidActionError("Missing 'action' parameter. Check your API request.")

    handler = HANDLERS.get(action)
    if handler is None:
        raise InvalidActionError(f"Invalid Action: {action}")

    return handler(store, params, body)


def success_envelope(data: Any) -> dict:
    return {"success": True, "data": data}


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return "Invalid record: " + "; ".join(parts)
    return str(exc)


def failure_envelope(exc: Exception) -> dict:
    return {"success": False, "message": f"Error: {_describe(exc)}"}


def handle_action(store: RecordStore, action: str | None, params: dict, body: dict) -> dict:
    """Run one action and always answer with an envelope."""
    try:
        data = dispatch(store, action, params, body)
    except (StoreError, ValueError) as e:
        logger.warning("Action %s failed: %s", action, _describe(e))
        return failure_envelope(e)

    logger.info("Action %s ok", action)
    return success_envelope(data)
