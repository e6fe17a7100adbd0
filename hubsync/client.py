"""Typed operations against one hub instance."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

import requests

from .cancel import CancelToken
from .constants import (
    ALERTS_PATH,
    CONTAINER_STATS_PATH,
    CONTAINER_STATS_PER_CONTAINER,
    CONTAINERS_PATH,
    LATEST_ALERTS_LIMIT,
    SYSTEM_DETAILS_PATH,
    SYSTEM_STATS_PATH,
    SYSTEMS_PATH,
)
from .exceptions import HubHTTPError
from .fetcher import PagedFetcher
from .models import (
    Alert,
    Container,
    ContainerStats,
    Instance,
    System,
    SystemDetails,
    SystemStats,
)
from .session import SessionManager
from .transport import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

T = TypeVar("T")


def system_filter(system_id: str) -> str:
    """PocketBase filter selecting records that belong to one system."""
    return f"system = '{system_id}'"


def _empty_if_missing(what: str, call: Callable[[], list[T]]) -> list[T]:
    # Older hubs do not provision every collection; a 404 means "none".
    try:
        return call()
    except HubHTTPError as e:
        if e.status == 404:
            logger.debug("%s collection not found on hub, treating as empty", what)
            return []
        raise


class HubClient:
    """Facade over SessionManager and PagedFetcher for one hub instance.

    ``instance`` must carry its credential; the client never looks one up.
    """

    def __init__(
        self,
        instance: Instance,
        *,
        http: requests.Session | None = None,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.instance = instance
        self.http = http if http is not None else requests.Session()
        self.session = SessionManager(instance, self.http, timeout=timeout)
        self.fetcher = PagedFetcher(instance.url, self.session, self.http, timeout=timeout)

    def list_systems(self, *, cancel: CancelToken | None = None) -> list[System]:
        """All systems on the hub, sorted by name (case-sensitive)."""
        page = self.fetcher.fetch(SYSTEMS_PATH, System.from_dict, page=None, cancel=cancel)
        return sorted(page.items, key=lambda s: s.name)

    def list_system_details(self, *, cancel: CancelToken | None = None) -> list[SystemDetails]:
        return _empty_if_missing(
            "system_details",
            lambda: self.fetcher.fetch(
                SYSTEM_DETAILS_PATH, SystemDetails.from_dict, page=None, cancel=cancel
            ).items,
        )

    def list_system_stats(
        self, system_id: str, limit: int = 1, *, cancel: CancelToken | None = None
    ) -> list[SystemStats]:
        """Most recent stats rows for one system, newest first."""
        page = self.fetcher.fetch(
            SYSTEM_STATS_PATH,
            SystemStats.from_dict,
            filter=system_filter(system_id),
            page=None,
            per_page=limit,
            sort="-created",
            cancel=cancel,
        )
        return page.items

    def list_containers(
        self, filter: str | None = None, *, cancel: CancelToken | None = None
    ) -> list[Container]:
        return _empty_if_missing(
            "containers",
            lambda: self.fetcher.fetch_all_pages(
                CONTAINERS_PATH, Container.from_dict, filter=filter, cancel=cancel
            ),
        )

    def list_containers_for_system(
        self, system_id: str, *, cancel: CancelToken | None = None
    ) -> list[Container]:
        return self.list_containers(system_filter(system_id), cancel=cancel)

    def list_container_stats(
        self, system_id: str, limit: int = 1, *, cancel: CancelToken | None = None
    ) -> list[ContainerStats]:
        """Latest stats record per container of one system.

        Rows come back newest first, so the first row seen for a container id
        is the one kept.
        """

        def fetch() -> list[ContainerStats]:
            page = self.fetcher.fetch(
                CONTAINER_STATS_PATH,
                ContainerStats.from_dict,
                filter=system_filter(system_id),
                page=None,
                per_page=limit * CONTAINER_STATS_PER_CONTAINER,
                sort="-created",
                cancel=cancel,
            )
            latest: dict[str, ContainerStats] = {}
            for stat in page.items:
                latest.setdefault(stat.container_id, stat)
            return list(latest.values())

        return _empty_if_missing("container_stats", fetch)

    def list_alerts(
        self, filter: str | None = None, *, cancel: CancelToken | None = None
    ) -> list[Alert]:
        return self.fetcher.fetch_all_pages(
            ALERTS_PATH, Alert.from_dict, filter=filter, cancel=cancel
        )

    def list_latest_alerts(
        self, limit: int = LATEST_ALERTS_LIMIT, *, cancel: CancelToken | None = None
    ) -> list[Alert]:
        page = self.fetcher.fetch(
            ALERTS_PATH,
            Alert.from_dict,
            page=None,
            per_page=limit,
            sort="-created",
            cancel=cancel,
        )
        return page.items

    def verify(self) -> int:
        """Trial authentication used before saving a hub. Returns system count."""
        return len(self.list_systems())

    def close(self) -> None:
        self.http.close()
