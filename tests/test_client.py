"""Tests for hubsync/client.py - typed hub operations."""

from __future__ import annotations

import pytest
from conftest import FakeHTTP, make_page, make_response, system_record
from hubsync.client import HubClient, system_filter
from hubsync.constants import (
    ALERTS_PATH,
    CONTAINER_STATS_PATH,
    CONTAINERS_PATH,
    SYSTEM_DETAILS_PATH,
    SYSTEM_STATS_PATH,
    SYSTEMS_PATH,
)
from hubsync.exceptions import HubHTTPError


def ok_page(records: list[dict]):
    return make_response(200, make_page(records))


@pytest.fixture
def client(instance, http: FakeHTTP) -> HubClient:
    return HubClient(instance, http=http)


class TestListSystems:
    """Tests for HubClient.list_systems."""

    def test_sorted_by_name_case_sensitive(self, client: HubClient, http: FakeHTTP):
        """Systems come back sorted by name, uppercase first."""
        records = [
            system_record("1", "beta"),
            system_record("2", "Zeta"),
            system_record("3", "alpha"),
        ]
        http.add("GET", SYSTEMS_PATH, make_response(200, make_page(records)))

        assert [s.name for s in client.list_systems()] == ["Zeta", "alpha", "beta"]

    def test_single_page_request(self, client: HubClient, http: FakeHTTP):
        """Systems are one request with perPage=500 and no page param."""
        http.add("GET", SYSTEMS_PATH, make_response(200, make_page([])))
        client.list_systems()
        assert http.calls_to(SYSTEMS_PATH)[0]["query"] == {"perPage": "500"}

    def test_404_propagates(self, client: HubClient, http: FakeHTTP):
        """A missing systems collection is an error, not an empty list."""
        with pytest.raises(HubHTTPError):
            client.list_systems()

    def test_verify_returns_count(self, client: HubClient, http: FakeHTTP):
        records = [system_record("1", "a"), system_record("2", "b")]
        http.add("GET", SYSTEMS_PATH, make_response(200, make_page(records)))
        assert client.verify() == 2


class TestOptionalCollections:
    """Tests for collections treated as empty when absent."""

    def test_details_404_is_empty(self, client: HubClient, http: FakeHTTP):
        """Hubs without system_details give an empty list."""
        assert client.list_system_details() == []
        assert len(http.calls_to(SYSTEM_DETAILS_PATH)) == 1

    def test_containers_404_is_empty(self, client: HubClient, http: FakeHTTP):
        assert client.list_containers() == []

    def test_container_stats_404_is_empty(self, client: HubClient, http: FakeHTTP):
        assert client.list_container_stats("s1") == []

    def test_details_500_propagates(self, client: HubClient, http: FakeHTTP):
        """Only 404 is swallowed."""
        http.add("GET", SYSTEM_DETAILS_PATH, make_response(500, {}))
        with pytest.raises(HubHTTPError):
            client.list_system_details()

    def test_containers_for_system_filter(self, client: HubClient, http: FakeHTTP):
        http.add(
            "GET",
            CONTAINERS_PATH,
            make_response(200, make_page([{"id": "c1", "name": "web", "system": "s1"}])),
        )
        containers = client.list_containers_for_system("s1")
        assert [c.id for c in containers] == ["c1"]
        assert http.calls_to(CONTAINERS_PATH)[0]["query"]["filter"] == system_filter("s1")


class TestStats:
    """Tests for stats queries."""

    def test_container_stats_keeps_newest_per_container(self, client: HubClient, http: FakeHTTP):
        """The first (newest) record per container id wins."""
        rows = [
            {"id": "c1", "system": "s1", "cpu": 9.0, "created": "2024-01-01 00:02:00Z"},
            {"id": "c2", "system": "s1", "cpu": 1.0, "created": "2024-01-01 00:02:00Z"},
            {"id": "c1", "system": "s1", "cpu": 5.0, "created": "2024-01-01 00:01:00Z"},
        ]
        http.add("GET", CONTAINER_STATS_PATH, make_response(200, make_page(rows)))

        stats = client.list_container_stats("s1", limit=2)
        assert {s.container_id: s.cpu for s in stats} == {"c1": 9.0, "c2": 1.0}
        query = http.calls_to(CONTAINER_STATS_PATH)[0]["query"]
        assert query["perPage"] == "200"
        assert query["sort"] == "-created"
        assert query["filter"] == "system = 's1'"

    def test_system_stats_query(self, client: HubClient, http: FakeHTTP):
        http.add(
            "GET",
            SYSTEM_STATS_PATH,
            ok_page([{"id": "x", "created": "2024-01-01", "stats": {"cpu": 4}}]),
        )
        stats = client.list_system_stats("s1")
        assert stats[0].stats.cpu == 4.0
        query = http.calls_to(SYSTEM_STATS_PATH)[0]["query"]
        assert query == {"perPage": "1", "sort": "-created", "filter": "system = 's1'"}


class TestAlerts:
    """Tests for alert queries."""

    def test_list_alerts_with_filter(self, client: HubClient, http: FakeHTTP):
        http.add(
            "GET",
            ALERTS_PATH,
            make_response(200, make_page([{"id": "a1", "name": "CPU", "enabled": True}])),
        )
        alerts = client.list_alerts("enabled = true")
        assert alerts[0].name == "CPU"
        assert http.calls_to(ALERTS_PATH)[0]["query"]["filter"] == "enabled = true"

    def test_list_alerts_errors_propagate(self, client: HubClient, http: FakeHTTP):
        """Alerts have no 404 fallback."""
        with pytest.raises(HubHTTPError):
            client.list_alerts()

    def test_latest_alerts(self, client: HubClient, http: FakeHTTP):
        http.add("GET", ALERTS_PATH, make_response(200, make_page([])))
        client.list_latest_alerts()
        assert http.calls_to(ALERTS_PATH)[0]["query"] == {"perPage": "10", "sort": "-created"}


class TestClose:
    def test_close_closes_http(self, client: HubClient, http: FakeHTTP):
        client.close()
        assert http.closed
