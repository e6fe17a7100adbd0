"""Authenticated, paginated reads of PocketBase collections."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import requests

from .cancel import CancelToken, check_cancelled
from .constants import DEFAULT_PAGE_SIZE
from .exceptions import AuthenticationFailedError, HubHTTPError
from .models import Page
from .session import SessionManager
from .transport import DEFAULT_TIMEOUT, build_url, decode_json, send

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PagedFetcher:
    """Fetches list pages from one hub using its SessionManager for auth."""

    def __init__(
        self,
        base_url: str,
        session: SessionManager,
        http: requests.Session,
        *,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self.session = session
        self.http = http
        self.timeout = timeout

    def fetch(
        self,
        path: str,
        decode: Callable[[Any], T],
        *,
        filter: str | None = None,
        page: int | None = 1,
        per_page: int = DEFAULT_PAGE_SIZE,
        sort: str | None = None,
        cancel: CancelToken | None = None,
    ) -> Page[T]:
        """Fetch and decode one page of a collection.

        A 401 clears the cached token and the identical request is retried
        once with a fresh one. A second 401 raises AuthenticationFailedError.

        Args:
            path: Collection records path, e.g. "/api/collections/systems/records"
            decode: Item decoder (a record's from_dict)
            filter: PocketBase filter expression, passed through verbatim
            page: Page number, or None to let the hub default it
            per_page: Page size
            sort: PocketBase sort expression, e.g. "-created"
            cancel: Checked after every response

        Raises:
            HubHTTPError: Any other non-200 status
            OperationCancelled: cancel was flipped while the request ran
        """
        params = {"perPage": per_page, "page": page, "sort": sort, "filter": filter}
        url = build_url(self.base_url, path, params)

        response = self._get(url)
        check_cancelled(cancel)
        if response.status_code == 401:
            logger.debug("401 from %s, re-authenticating and retrying once", url)
            self.session.invalidate()
            response = self._get(url)
            check_cancelled(cancel)
            if response.status_code == 401:
                self.session.invalidate()
                raise AuthenticationFailedError(f"Hub rejected credentials for {url} (HTTP 401)")

        if response.status_code != 200:
            raise HubHTTPError(response.status_code, url)

        return Page.from_dict(decode_json(response, url), decode)

    def fetch_all_pages(
        self,
        path: str,
        decode: Callable[[Any], T],
        *,
        filter: str | None = None,
        cancel: CancelToken | None = None,
    ) -> list[T]:
        """Fetch every page of a collection, in page order."""
        items: list[T] = []
        current = 1
        while True:
            result = self.fetch(path, decode, filter=filter, page=current, cancel=cancel)
            items.extend(result.items)
            current += 1
            if current > result.total_pages:
                return items

    def _get(self, url: str) -> requests.Response:
        token = self.session.get_valid_token()
        return send(
            self.http,
            "GET",
            url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
