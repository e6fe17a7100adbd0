"""Refresh orchestration for the selected hub.

One lock is the coordination point: every snapshot write, every start and
every cancel happens while holding it. Fetches themselves run on a thread
pool without the lock, one operation per resource kind at a time.

A fetch may only publish its result if, at write time, its handle is still
the current one for its kind and its token has not been cancelled. Starting
a kind replaces the handle first, so a superseded fetch that finishes late
can never overwrite newer data.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from .cancel import CancelToken
from .client import HubClient
from .constants import ENABLED_ALERTS_FILTER, FETCH_WORKERS
from .exceptions import HubSyncError, OperationCancelled
from .models import Instance, Snapshot
from .registry import ClientRegistry

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    SYSTEMS = "systems"
    DETAILS = "details"
    CONTAINERS = "containers"
    ALERTS = "alerts"


ALL_KINDS = tuple(ResourceKind)


class OperationState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class OperationHandle:
    kind: ResourceKind
    instance_id: str
    token: CancelToken = field(default_factory=CancelToken)
    state: OperationState = OperationState.IDLE
    future: Future[None] | None = None

    def cancel(self) -> None:
        self.token.cancel()
        if self.state in (OperationState.IDLE, OperationState.RUNNING):
            self.state = OperationState.CANCELLED


def _fetch(kind: ResourceKind, client: HubClient, token: CancelToken) -> Any:
    if kind is ResourceKind.SYSTEMS:
        return client.list_systems(cancel=token)
    if kind is ResourceKind.DETAILS:
        return client.list_system_details(cancel=token)
    if kind is ResourceKind.CONTAINERS:
        return client.list_containers(cancel=token)
    return client.list_alerts(ENABLED_ALERTS_FILTER, cancel=token)


def _apply(snapshot: Snapshot, kind: ResourceKind, data: Any) -> Snapshot:
    """Return a snapshot with one part replaced wholesale by fetched data."""
    if kind is ResourceKind.SYSTEMS:
        return replace(snapshot, systems=tuple(sorted(data, key=lambda s: s.name)))
    if kind is ResourceKind.DETAILS:
        return replace(snapshot, system_details=MappingProxyType({d.system: d for d in data}))
    if kind is ResourceKind.CONTAINERS:
        grouped: dict[str, list[Any]] = defaultdict(list)
        for container in data:
            grouped[container.system].append(container)
        return replace(
            snapshot,
            containers=MappingProxyType({k: tuple(v) for k, v in grouped.items()}),
        )
    return replace(snapshot, active_alerts=tuple(a for a in data if a.is_active))


class SyncOrchestrator:
    """Owns the selected instance, the per-kind operations and the Snapshot.

    Args:
        registry: Source of HubClients per instance
        executor: Pool the fetches run on (a private pool if omitted)
        on_supplementary_error: Called with (kind, exc) when details,
            containers or alerts fail. Those failures are otherwise silent.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        *,
        executor: ThreadPoolExecutor | None = None,
        on_supplementary_error: Callable[[ResourceKind, Exception], None] | None = None,
    ) -> None:
        self.registry = registry
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=FETCH_WORKERS, thread_name_prefix="hubsync-fetch"
        )
        self.on_supplementary_error = on_supplementary_error
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._selected: Instance | None = None
        self._snapshot = Snapshot()
        self._handles: dict[ResourceKind, OperationHandle] = {}
        self._pending: set[Future[None]] = set()
        self._last_error: str | None = None
        self._subscribers: list[Callable[[Snapshot], None]] = []
        self._notify_lock = threading.RLock()
        self._delivered_version = -1
        self._closed = False

    # Read side

    @property
    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    @property
    def selected_instance(self) -> Instance | None:
        with self._lock:
            return self._selected

    @property
    def is_loading(self) -> bool:
        with self._lock:
            handle = self._handles.get(ResourceKind.SYSTEMS)
            return handle is not None and handle.state is OperationState.RUNNING

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    def handle_for(self, kind: ResourceKind) -> OperationHandle | None:
        with self._lock:
            return self._handles.get(kind)

    def subscribe(self, callback: Callable[[Snapshot], None]) -> Callable[[], None]:
        """Register callback for published Snapshots; returns unsubscribe.

        Deliveries are serialized and arrive in version order. A snapshot
        published while a newer one was already delivered is skipped.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def wait_for_change(self, version: int, timeout: float | None = None) -> Snapshot:
        """Block until the snapshot version exceeds version (or timeout)."""
        with self._changed:
            self._changed.wait_for(lambda: self._snapshot.version > version, timeout=timeout)
            return self._snapshot

    # Control side

    def select_instance(self, instance: Instance | None) -> None:
        """Switch to instance: cancel everything, clear the snapshot, restart."""
        with self._lock:
            for handle in self._handles.values():
                handle.cancel()
            self._handles.clear()
            self._selected = instance
            self._last_error = None
            snapshot = Snapshot(
                version=self._snapshot.version + 1,
                instance_id=instance.id if instance else None,
            )
            self._publish(snapshot)
            if instance is not None and not self._closed:
                for kind in ALL_KINDS:
                    self._start(kind, instance)
        self._notify(snapshot)

    def refresh_all(self) -> None:
        with self._lock:
            instance = self._selected
            if instance is None or self._closed:
                return
            for kind in ALL_KINDS:
                self._start(kind, instance)

    def refresh_kind(self, kind: ResourceKind) -> None:
        with self._lock:
            instance = self._selected
            if instance is None or self._closed:
                return
            self._start(kind, instance)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for every submitted fetch, superseded ones included.

        Returns False if some were still running at timeout.
        """
        with self._lock:
            pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for handle in self._handles.values():
                handle.cancel()
            self._handles.clear()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # Internals

    def _start(self, kind: ResourceKind, instance: Instance) -> None:
        # caller holds the lock
        previous = self._handles.pop(kind, None)
        if previous is not None:
            previous.cancel()
        handle = OperationHandle(kind=kind, instance_id=instance.id)
        handle.state = OperationState.RUNNING
        self._handles[kind] = handle
        if kind is ResourceKind.SYSTEMS:
            self._last_error = None
        future = self._executor.submit(self._run, handle, instance)
        handle.future = future
        self._pending.add(future)
        future.add_done_callback(self._on_done)

    def _is_current(self, handle: OperationHandle) -> bool:
        return not handle.token.cancelled and self._handles.get(handle.kind) is handle

    def _run(self, handle: OperationHandle, instance: Instance) -> None:
        try:
            self._run_once(handle, instance)
        finally:
            # Never leave a handle RUNNING, whatever escaped; is_loading reads it.
            with self._lock:
                if handle.state is OperationState.RUNNING:
                    handle.state = OperationState.FAILED

    def _run_once(self, handle: OperationHandle, instance: Instance) -> None:
        kind = handle.kind
        try:
            handle.token.raise_if_cancelled()
            client = self.registry.client_for(instance)
            data = _fetch(kind, client, handle.token)
        except OperationCancelled:
            with self._lock:
                handle.state = OperationState.CANCELLED
            return
        except HubSyncError as e:
            self._fail(handle, e)
            return

        with self._lock:
            if not self._is_current(handle):
                handle.state = OperationState.CANCELLED
                logger.debug("Discarding superseded %s result for %s", kind.value, instance.name)
                return
            snapshot = _apply(self._snapshot, kind, data)
            snapshot = replace(snapshot, version=self._snapshot.version + 1)
            self._publish(snapshot)
            handle.state = OperationState.COMPLETED
        self._notify(snapshot)

    def _fail(self, handle: OperationHandle, error: Exception) -> None:
        kind = handle.kind
        with self._lock:
            if not self._is_current(handle):
                handle.state = OperationState.CANCELLED
                return
            handle.state = OperationState.FAILED
            if kind is ResourceKind.SYSTEMS:
                self._last_error = str(error)
                logger.warning("Failed to load systems: %s", error)
                snapshot = self._snapshot
            else:
                snapshot = None
        if snapshot is not None:
            # error state changed; let observers re-read last_error
            self._notify(snapshot)
            return
        logger.debug("Ignoring %s refresh failure: %s", kind.value, error)
        if self.on_supplementary_error is not None:
            self.on_supplementary_error(kind, error)

    def _on_done(self, future: Future[None]) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Unexpected error in refresh task", exc_info=exc)

    def _publish(self, snapshot: Snapshot) -> None:
        # caller holds the lock
        self._snapshot = snapshot
        self._changed.notify_all()

    def _notify(self, snapshot: Snapshot) -> None:
        # one delivery at a time, never older than what subscribers last saw
        with self._notify_lock:
            if snapshot.version < self._delivered_version:
                return
            self._delivered_version = snapshot.version
            with self._lock:
                subscribers = list(self._subscribers)
            for callback in subscribers:
                callback(snapshot)
