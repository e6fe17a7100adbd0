"""Load/save contracts for hub instances and their credentials.

The engine only depends on the three Protocols. The JSON and keyring classes
are what the CLI uses; the in-memory classes back tests and embedders that
keep state elsewhere.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .constants import INSTANCES_FILE_NAME, KEYRING_SERVICE, SELECTED_FILE_NAME
from .exceptions import DecodeError, HubSyncError
from .models import Instance
from .utils import ensure_parent_dir

logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    def save(self, key: str, value: str) -> None: ...

    def load(self, key: str) -> str | None: ...

    def delete(self, key: str) -> None: ...


class InstanceStore(Protocol):
    def load(self) -> list[Instance]: ...

    def save(self, instances: list[Instance]) -> None: ...


class SelectionStore(Protocol):
    def load_selected_id(self) -> str | None: ...

    def save_selected_id(self, instance_id: str | None) -> None: ...


class MemorySecretStore:
    def __init__(self) -> None:
        self.secrets: dict[str, str] = {}

    def save(self, key: str, value: str) -> None:
        self.secrets[key] = value

    def load(self, key: str) -> str | None:
        return self.secrets.get(key)

    def delete(self, key: str) -> None:
        self.secrets.pop(key, None)


class MemoryInstanceStore:
    """Instance list and selection kept in memory, persisted form only."""

    def __init__(self, instances: list[Instance] | None = None) -> None:
        self.instances = [i.persisted() for i in instances or []]
        self.selected_id: str | None = None

    def load(self) -> list[Instance]:
        return list(self.instances)

    def save(self, instances: list[Instance]) -> None:
        self.instances = [i.persisted() for i in instances]

    def load_selected_id(self) -> str | None:
        return self.selected_id

    def save_selected_id(self, instance_id: str | None) -> None:
        self.selected_id = instance_id


class KeyringSecretStore:
    """Credentials in the OS keyring, one entry per instance id."""

    def __init__(self, service: str | None = None) -> None:
        self.service = service or os.environ.get("HUBSYNC_KEYRING_SERVICE") or KEYRING_SERVICE

    def save(self, key: str, value: str) -> None:
        try:
            keyring.set_password(self.service, key, value)
        except KeyringError as e:
            raise HubSyncError(f"Failed to store credential in keyring: {e}") from e

    def load(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as e:
            logger.warning("Keyring lookup failed for %s: %s", key, e)
            return None

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            logger.debug("No keyring entry to delete for %s", key)
        except KeyringError as e:
            raise HubSyncError(f"Failed to delete credential from keyring: {e}") from e


class JsonInstanceStore:
    """Instance list as JSON plus a one-line selected-id file.

    Writes go through a temp file and rename so a crash never leaves a
    half-written list.
    """

    def __init__(self, data_dir: Path) -> None:
        self.instances_path = data_dir / INSTANCES_FILE_NAME
        self.selected_path = data_dir / SELECTED_FILE_NAME

    def load(self) -> list[Instance]:
        if not self.instances_path.exists():
            return []
        try:
            with self.instances_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise HubSyncError(f"Invalid JSON in {self.instances_path}: {e}") from e
        if not isinstance(data, list):
            raise HubSyncError(f"Expected a list of hubs in {self.instances_path}")
        try:
            return [Instance.from_dict(item) for item in data]
        except DecodeError as e:
            raise HubSyncError(f"Invalid hub entry in {self.instances_path}: {e}") from e

    def save(self, instances: list[Instance]) -> None:
        payload = [i.to_dict() for i in instances]
        self._write(self.instances_path, json.dumps(payload, indent=2) + "\n")

    def load_selected_id(self) -> str | None:
        try:
            value = self.selected_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return value or None

    def save_selected_id(self, instance_id: str | None) -> None:
        if instance_id is None:
            self.selected_path.unlink(missing_ok=True)
            return
        self._write(self.selected_path, instance_id + "\n")

    @staticmethod
    def _write(path: Path, text: str) -> None:
        ensure_parent_dir(path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(text, encoding="utf-8")
        os.replace(tmp, path)
