"""Wiring shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

from ..exceptions import UserError
from ..hubs import HubManager
from ..models import Instance
from ..orchestrator import SyncOrchestrator
from ..registry import ClientRegistry
from ..stores import JsonInstanceStore, KeyringSecretStore
from ..utils import default_data_dir


def resolve_data_dir(data_dir: str | None) -> Path:
    return Path(data_dir).expanduser() if data_dir else default_data_dir()


def open_manager(data_dir: str | None, *, with_engine: bool = False) -> HubManager:
    """Build a HubManager over the on-disk stores and load the hub list.

    With with_engine=True it also gets an orchestrator; nothing is selected
    (and so nothing is fetched) until the caller selects a hub.
    """
    secrets = KeyringSecretStore()
    store = JsonInstanceStore(resolve_data_dir(data_dir))
    registry = ClientRegistry(secrets)
    orchestrator = SyncOrchestrator(registry) if with_engine else None
    manager = HubManager(registry, store, store, secrets, orchestrator=orchestrator)
    manager.instances = store.load()
    saved = store.load_selected_id()
    manager.selected = manager.find(saved) if saved else None
    return manager


def require_hub(manager: HubManager, key: str) -> Instance:
    instance = manager.find(key)
    if instance is None:
        raise UserError(f"No hub named or with id {key!r} (see 'hubsync hub-list')")
    return instance


def pick_hub(manager: HubManager, key: str | None) -> Instance:
    """The hub a command should act on: explicit, saved selection, or first."""
    if key:
        return require_hub(manager, key)
    if manager.selected is not None:
        return manager.selected
    if manager.instances:
        return manager.instances[0]
    raise UserError("No hubs configured; add one with 'hubsync hub-add'")
