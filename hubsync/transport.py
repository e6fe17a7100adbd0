"""Thin requests wrapper shared by authentication and record fetching."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlencode

import requests

from .constants import CONNECT_TIMEOUT_S, READ_TIMEOUT_S
from .exceptions import BadURLError, DecodeError, NetworkError
from .utils import validate_base_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = (CONNECT_TIMEOUT_S, READ_TIMEOUT_S)


def build_url(base_url: str, path: str, params: dict[str, Any] | None = None) -> str:
    """Join a hub base URL, an API path and query parameters.

    Parameters with a None value are omitted. Filter expressions keep spaces
    as %20, which PocketBase expects.
    """
    url = f"{validate_base_url(base_url)}{path}"
    query = {k: v for k, v in (params or {}).items() if v is not None}
    if query:
        url = f"{url}?{urlencode(query, quote_via=quote)}"
    return url


def send(
    http: requests.Session,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: dict[str, Any] | None = None,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
) -> requests.Response:
    """Issue one request, mapping requests failures onto hubsync errors."""
    request_headers = {"Accept": "application/json", "User-Agent": "hubsync"}
    if headers:
        request_headers.update(headers)
    try:
        if method == "GET":
            return http.get(url, headers=request_headers, timeout=timeout)
        return http.post(url, headers=request_headers, json=json, timeout=timeout)
    except (
        requests.exceptions.MissingSchema,
        requests.exceptions.InvalidSchema,
        requests.exceptions.InvalidURL,
    ) as e:
        raise BadURLError(f"Invalid URL {url}: {e}") from e
    except requests.exceptions.Timeout as e:
        raise NetworkError(f"Timed out talking to {url}") from e
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"Request to {url} failed: {e}") from e


def decode_json(response: requests.Response, url: str) -> Any:
    """Parse a response body as JSON or raise DecodeError."""
    try:
        return response.json()
    except ValueError as e:
        snippet = (response.text or "")[:240].strip()
        logger.debug("Non-JSON response from %s: %s", url, snippet)
        raise DecodeError(f"Invalid JSON from {url}") from e
