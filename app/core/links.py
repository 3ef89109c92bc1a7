"""
Backend connection handling for clients: which gateway URL to use, where it
is remembered between runs, and "magic links" that carry it to another device.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from app.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONNECTION_KEY = "weight_tracker_api_url"
BACKEND_PARAM = "backend"
API_URL_MISSING = "API_URL_MISSING"


def validate_api_url(url: str | None) -> str:
    """Return the cleaned gateway URL or raise ConfigurationError."""
    url = (url or "").strip()
    if not url:
        raise ConfigurationError(
            API_URL_MISSING,
            "No backend connected. Open settings and paste your gateway URL.",
        )

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid URL: {url}", "Invalid URL: must be an http(s) gateway URL.")
    if parts.path.rstrip("/").endswith("/edit"):
        raise ConfigurationError(
            f"Invalid URL: {url}",
            "Invalid URL: ends in /edit. Use the deployed /exec URL instead.",
        )
    return url


def is_valid_api_url(url: str | None) -> bool:
    try:
        validate_api_url(url)
    except ConfigurationError:
        return False
    return True


def resolve_api_url(configured: str | None, saved: str | None) -> str:
    """A configured URL wins over the saved one; empty when neither is set."""
    if configured and configured.strip():
        return configured.strip()
    return (saved or "").strip()


def load_saved_api_url(path: str | Path) -> str | None:
    p = Path(path)
    if not p.exists():
        return None

    try:
        data = json.loads(p.read_text())
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable connection file %s: %s", p, e)
        return None

    if not isinstance(data, dict):
        return None
    return data.get(CONNECTION_KEY) or None


def save_api_url(path: str | Path, url: str) -> str:
    url = validate_api_url(url)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps({CONNECTION_KEY: url}))
    logger.info("Saved backend connection to %s", p)
    return url


def build_share_link(app_url: str, backend_url: str) -> str:
    """app_url?backend=<encoded gateway URL>; other query parameters are dropped."""
    backend_url = validate_api_url(backend_url)
    parts = urlsplit(app_url)
    query = urlencode({BACKEND_PARAM: backend_url})
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))


def extract_backend_url(link: str) -> str | None:
    """The gateway URL carried by a magic link, or None when absent or invalid."""
    values = parse_qs(urlsplit(link).query).get(BACKEND_PARAM)
    if not values:
        return None
    candidate = values[0].strip()
    return candidate if is_valid_api_url(candidate) else None


def strip_backend_param(link: str) -> str:
    """The link with the backend token removed, for display after connecting."""
    parts = urlsplit(link)
    query = {k: v for k, v in parse_qs(parts.query).items() if k != BACKEND_PARAM}
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query, doseq=True), parts.fragment))


def connect_from_link(link: str, path: str | Path) -> str | None:
    """Persist the backend carried by a magic link; returns it when one was found."""
    backend = extract_backend_url(link)
    if backend is None:
        return None
    return save_api_url(path, backend)
