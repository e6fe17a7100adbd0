"""Explicit ownership of per-instance HubClients."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .client import HubClient
from .models import Instance
from .stores import SecretStore

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Maps instance id to its HubClient, building clients on first use.

    A client (and with it the cached session token) lives until ``drop`` is
    called for its instance, which hub removal and credential edits do.
    Dropped and replaced clients may still have fetches in flight, so they
    are retired rather than closed and their sessions are closed by ``clear``.
    """

    def __init__(
        self,
        secrets: SecretStore,
        *,
        client_factory: Callable[[Instance], HubClient] = HubClient,
    ) -> None:
        self.secrets = secrets
        self.client_factory = client_factory
        self._clients: dict[str, HubClient] = {}
        self._retired: list[HubClient] = []
        self._lock = threading.Lock()

    def client_for(self, instance: Instance) -> HubClient:
        with self._lock:
            client = self._clients.get(instance.id)
            if client is not None and (
                client.instance.url != instance.url or client.instance.email != instance.email
            ):
                self._retired.append(client)
                client = None
            if client is None:
                credential = instance.credential or self.secrets.load(instance.id) or ""
                client = self.client_factory(instance.with_credential(credential))
                self._clients[instance.id] = client
                logger.debug("Created client for hub %s", instance.name)
            return client

    def drop(self, instance_id: str) -> None:
        with self._lock:
            client = self._clients.pop(instance_id, None)
            if client is not None:
                self._retired.append(client)

    def clear(self) -> None:
        with self._lock:
            clients = [*self._clients.values(), *self._retired]
            self._clients.clear()
            self._retired.clear()
        for client in clients:
            client.close()

    def __contains__(self, instance_id: object) -> bool:
        with self._lock:
            return instance_id in self._clients
