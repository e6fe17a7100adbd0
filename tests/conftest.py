"""Shared pytest fixtures for hubsync tests."""

from __future__ import annotations

import tempfile
import threading
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

import pytest
from hubsync.models import Instance
from hubsync.stores import MemoryInstanceStore, MemorySecretStore

HUB_URL = "https://hub.example.com"
PASSWORD_TOKEN = "eyJhbGciOiJIUzI1NiJ9.eyJpZCI6InVzZXIifQ.sig"


def make_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body if body is not None else {}
    response.text = str(body)
    return response


def make_page(items: list[dict], *, page: int = 1, total_pages: int = 1, per_page: int = 500):
    """PocketBase list envelope."""
    return {
        "page": page,
        "perPage": per_page,
        "totalPages": total_pages,
        "totalItems": len(items) * total_pages,
        "items": items,
    }


def system_record(system_id: str, name: str, status: str = "up", **extra) -> dict:
    return {"id": system_id, "name": name, "status": status, **extra}


class FakeHTTP:
    """Recording stand-in for requests.Session.

    Responses are queued per (method, path). A route's last response repeats
    once the queue is drained. A queued item may be a response, an exception
    to raise, or a callable taking the URL and returning either.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def get(self, url: str, headers=None, timeout=None):
        return self._dispatch("GET", url, headers, None, timeout)

    def post(self, url: str, headers=None, json=None, timeout=None):
        return self._dispatch("POST", url, headers, json, timeout)

    def close(self) -> None:
        self.closed = True

    def calls_to(self, path: str) -> list[dict[str, Any]]:
        with self._lock:
            return [c for c in self.calls if c["path"] == path]

    def _dispatch(self, method, url, headers, json, timeout):
        parts = urlsplit(url)
        with self._lock:
            self.calls.append(
                {
                    "method": method,
                    "url": url,
                    "path": parts.path,
                    "query": {k: v[0] for k, v in parse_qs(parts.query).items()},
                    "headers": dict(headers or {}),
                    "json": json,
                    "timeout": timeout,
                }
            )
            queue = self.routes.get((method, parts.path))
            if not queue:
                return make_response(404, {"message": "not found"})
            item = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(item) and not isinstance(item, MagicMock):
            item = item(url)
        if isinstance(item, BaseException):
            raise item
        return item


class ManualTimer:
    def __init__(self, due: float, fn: Callable[[], None], every: float | None):
        self.due = due
        self.fn = fn
        self.every = every
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Timers implementation driven by advance() instead of wall time."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay: float, fn: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay, fn, None)
        self.timers.append(timer)
        return timer

    def call_every(self, interval: float, fn: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + interval, fn, interval)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    @property
    def repeating(self) -> list[ManualTimer]:
        return [t for t in self.active if t.every is not None]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.active if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            if timer.every is None:
                timer.cancelled = True
            else:
                timer.due += timer.every
            timer.fn()
        self.now = target


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def instance() -> Instance:
    """A hub instance carrying a password credential."""
    return Instance(
        id="inst-1",
        name="home",
        url=HUB_URL,
        email="admin@example.com",
        credential="hunter2",
    )


@pytest.fixture
def other_instance() -> Instance:
    return Instance(
        id="inst-2",
        name="office",
        url="https://office.example.com",
        email="ops@example.com",
        credential="swordfish",
    )


@pytest.fixture
def http() -> FakeHTTP:
    """Fake HTTP session that answers the password login with a token."""
    fake = FakeHTTP()
    fake.add(
        "POST",
        "/api/collections/users/auth-with-password",
        make_response(200, {"token": PASSWORD_TOKEN}),
    )
    return fake


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def secrets() -> MemorySecretStore:
    return MemorySecretStore()


@pytest.fixture
def instance_store() -> MemoryInstanceStore:
    return MemoryInstanceStore()
