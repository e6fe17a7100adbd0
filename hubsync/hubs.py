"""Hub list management: the add/edit/remove/select control surface."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from .client import HubClient
from .models import Instance
from .orchestrator import SyncOrchestrator
from .registry import ClientRegistry
from .stores import InstanceStore, SecretStore, SelectionStore
from .utils import clean_base_url

logger = logging.getLogger(__name__)


class HubManager:
    """Keeps stores, client registry and orchestrator in agreement.

    The in-memory list holds persisted-form instances (empty credentials);
    credentials go to the secret store only. Without an orchestrator the
    manager only edits configuration, which is what the hub-* CLI commands
    need.
    """

    def __init__(
        self,
        registry: ClientRegistry,
        instances: InstanceStore,
        selection: SelectionStore,
        secrets: SecretStore,
        *,
        orchestrator: SyncOrchestrator | None = None,
        client_factory: Callable[[Instance], HubClient] = HubClient,
    ) -> None:
        self.registry = registry
        self.instance_store = instances
        self.selection_store = selection
        self.secrets = secrets
        self.orchestrator = orchestrator
        self.client_factory = client_factory
        self.instances: list[Instance] = []
        self.selected: Instance | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.instances)

    def load(self) -> Instance | None:
        """Load the hub list and select the saved (or first) hub."""
        self.instances = self.instance_store.load()
        saved_id = self.selection_store.load_selected_id()
        selected = self.find(saved_id) if saved_id else None
        if selected is None and self.instances:
            selected = self.instances[0]
        self.selected = selected
        if selected is not None and self.orchestrator is not None:
            self.orchestrator.select_instance(selected)
        return selected

    def find(self, key: str) -> Instance | None:
        """Look a hub up by id, then by name."""
        for instance in self.instances:
            if instance.id == key:
                return instance
        for instance in self.instances:
            if instance.name == key:
                return instance
        return None

    def with_credential(self, instance: Instance) -> Instance:
        return instance.with_credential(self.secrets.load(instance.id) or "")

    def verify(self, instance: Instance) -> int:
        """Trial-authenticate instance (which must carry a credential).

        Raises whatever the hub call raises; returns the system count.
        """
        client = self.client_factory(instance)
        try:
            return client.verify()
        finally:
            client.close()

    def select(self, instance: Instance | None) -> None:
        self.selected = instance
        if self.orchestrator is not None:
            self.orchestrator.select_instance(instance)
        self.selection_store.save_selected_id(instance.id if instance else None)

    def add_instance(self, instance: Instance) -> Instance:
        instance = replace(instance, url=clean_base_url(instance.url))
        self.secrets.save(instance.id, instance.credential)
        stored = instance.persisted()
        self.instances.append(stored)
        self.instance_store.save(self.instances)
        logger.debug("Added hub %s (%s)", instance.name, instance.id)
        if self.selected is None:
            self.select(stored)
        return stored

    def update_instance(self, instance: Instance) -> Instance:
        """Apply an edit. An empty credential keeps the stored one."""
        instance = replace(instance, url=clean_base_url(instance.url))
        if instance.credential:
            self.secrets.save(instance.id, instance.credential)
        # url, email or credential may have changed; the old session is stale
        self.registry.drop(instance.id)
        stored = instance.persisted()
        for index, existing in enumerate(self.instances):
            if existing.id == instance.id:
                self.instances[index] = stored
                self.instance_store.save(self.instances)
                break
        if self.selected is not None and self.selected.id == instance.id:
            self.select(stored)
        return stored

    def remove_instance(self, instance: Instance) -> None:
        self.secrets.delete(instance.id)
        self.registry.drop(instance.id)
        self.instances = [i for i in self.instances if i.id != instance.id]
        self.instance_store.save(self.instances)
        logger.debug("Removed hub %s (%s)", instance.name, instance.id)
        if self.selected is not None and self.selected.id == instance.id:
            self.select(self.instances[0] if self.instances else None)

    def close(self) -> None:
        if self.orchestrator is not None:
            self.orchestrator.close()
        self.registry.clear()
