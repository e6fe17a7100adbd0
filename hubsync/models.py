"""Hub record types, instance configuration, and the published snapshot.

Records are decoded from PocketBase JSON with ``from_dict``. Decoding is
strict about the fields the engine depends on (ids, names, foreign keys) and
lenient about optional metrics, which vary between hub versions.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from .constants import JWT_PREFIX
from .exceptions import DecodeError

T = TypeVar("T")

_NUMBER = (int, float)


def _type_ok(value: Any, types: tuple[type, ...]) -> bool:
    # bool is an int subclass; only accept it where bool is asked for
    if isinstance(value, bool) and bool not in types:
        return False
    return isinstance(value, types)


def _require(data: Mapping[str, Any], key: str, types: tuple[type, ...]) -> Any:
    if key not in data or data[key] is None:
        raise DecodeError(f"missing required field {key!r}")
    value = data[key]
    if not _type_ok(value, types):
        raise DecodeError(f"field {key!r} has unexpected type {type(value).__name__}")
    return value


def _optional(data: Mapping[str, Any], key: str, types: tuple[type, ...]) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not _type_ok(value, types):
        raise DecodeError(f"field {key!r} has unexpected type {type(value).__name__}")
    return value


def _float(data: Mapping[str, Any], key: str) -> float | None:
    value = _optional(data, key, _NUMBER)
    return float(value) if value is not None else None


def _float_list(data: Mapping[str, Any], key: str) -> tuple[float, ...] | None:
    values = _optional(data, key, (list,))
    if values is None:
        return None
    for value in values:
        if not _type_ok(value, _NUMBER):
            raise DecodeError(f"field {key!r} holds non-number {type(value).__name__}")
    return tuple(float(v) for v in values)


def _ensure_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DecodeError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def is_jwt(credential: str) -> bool:
    """Return True if credential looks like a previously issued bearer token."""
    return len(credential.split(".")) == 3 and credential.startswith(JWT_PREFIX)


@dataclass(frozen=True, eq=False)
class Instance:
    """A configured connection to one hub.

    Equality and hashing use ``id`` only, so an edited instance still matches
    the stored one. ``credential`` is never part of the persisted form.
    """

    id: str
    name: str
    url: str
    email: str
    credential: str = field(default="", repr=False)

    @classmethod
    def create(cls, *, name: str, url: str, email: str, credential: str) -> Instance:
        return cls(id=str(uuid.uuid4()), name=name, url=url, email=email, credential=credential)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instance):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def with_credential(self, credential: str) -> Instance:
        return replace(self, credential=credential)

    def persisted(self) -> Instance:
        """Copy safe to hand to an instance store."""
        return replace(self, credential="")

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "url": self.url, "email": self.email}

    @classmethod
    def from_dict(cls, data: Any) -> Instance:
        data = _ensure_mapping(data, "instance")
        return cls(
            id=_require(data, "id", (str,)),
            name=_require(data, "name", (str,)),
            url=_require(data, "url", (str,)),
            email=_require(data, "email", (str,)),
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a PocketBase list response."""

    page: int
    per_page: int
    total_pages: int
    total_items: int
    items: list[T]

    @classmethod
    def from_dict(cls, data: Any, decode_item: Callable[[Any], T]) -> Page[T]:
        data = _ensure_mapping(data, "list response")
        items = _require(data, "items", (list,))
        return cls(
            page=_require(data, "page", (int,)),
            per_page=_require(data, "perPage", (int,)),
            total_pages=_require(data, "totalPages", (int,)),
            total_items=_require(data, "totalItems", (int,)),
            items=[decode_item(item) for item in items],
        )


@dataclass(frozen=True)
class SystemInfo:
    """Live metrics attached to a system record (short wire keys)."""

    hostname: str | None = None
    kernel: str | None = None
    cores: int | None = None
    threads: int | None = None
    cpu_model: str | None = None
    uptime: float | None = None
    agent_version: str | None = None
    cpu: float | None = None
    memory_percent: float | None = None
    disk_percent: float | None = None
    bandwidth: float | None = None
    temperature: float | None = None
    load_avg: tuple[float, ...] | None = None
    gpu_percent: float | None = None
    container_count: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SystemInfo:
        data = _ensure_mapping(data, "system info")
        return cls(
            hostname=_optional(data, "h", (str,)),
            kernel=_optional(data, "k", (str,)),
            cores=_optional(data, "c", (int,)),
            threads=_optional(data, "t", (int,)),
            cpu_model=_optional(data, "m", (str,)),
            uptime=_float(data, "u"),
            agent_version=_optional(data, "v", (str,)),
            cpu=_float(data, "cpu"),
            memory_percent=_float(data, "mp"),
            disk_percent=_float(data, "dp"),
            bandwidth=_float(data, "b"),
            temperature=_float(data, "dt"),
            load_avg=_float_list(data, "la"),
            gpu_percent=_float(data, "g"),
            container_count=_optional(data, "ct", (int,)),
        )


@dataclass(frozen=True)
class System:
    id: str
    name: str
    status: str | None = None
    host: str | None = None
    port: str | None = None
    info: SystemInfo | None = None
    version: str | None = None
    updated: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> System:
        data = _ensure_mapping(data, "system")
        info = data.get("info")
        return cls(
            id=_require(data, "id", (str,)),
            name=_require(data, "name", (str,)),
            status=_optional(data, "status", (str,)),
            host=_optional(data, "host", (str,)),
            port=_optional(data, "port", (str,)),
            info=SystemInfo.from_dict(info) if info else None,
            version=_optional(data, "v", (str,)),
            updated=_optional(data, "updated", (str,)),
        )

    @property
    def display_status(self) -> str:
        if not self.status:
            return "Unknown"
        status = self.status.lower()
        if status in ("up", "online"):
            return "Online"
        if status in ("down", "offline"):
            return "Offline"
        if status == "pending":
            return "Pending"
        return status.capitalize()

    @property
    def is_online(self) -> bool:
        return (self.status or "").lower() in ("up", "online")


@dataclass(frozen=True)
class SystemDetails:
    id: str
    system: str
    hostname: str | None = None
    kernel: str | None = None
    cores: int | None = None
    threads: int | None = None
    cpu: str | None = None
    memory: int | None = None
    os: int | None = None
    os_name: str | None = None
    arch: str | None = None
    podman: bool | None = None
    updated: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SystemDetails:
        data = _ensure_mapping(data, "system details")
        return cls(
            id=_require(data, "id", (str,)),
            system=_require(data, "system", (str,)),
            hostname=_optional(data, "hostname", (str,)),
            kernel=_optional(data, "kernel", (str,)),
            cores=_optional(data, "cores", (int,)),
            threads=_optional(data, "threads", (int,)),
            cpu=_optional(data, "cpu", (str,)),
            memory=_optional(data, "memory", (int,)),
            os=_optional(data, "os", (int,)),
            os_name=_optional(data, "os_name", (str,)),
            arch=_optional(data, "arch", (str,)),
            podman=_optional(data, "podman", (bool,)),
            updated=_optional(data, "updated", (str,)),
        )


class ContainerHealth(IntEnum):
    NONE = 0
    STARTING = 1
    HEALTHY = 2
    UNHEALTHY = 3

    @property
    def display_text(self) -> str:
        return {
            ContainerHealth.NONE: "No Health Check",
            ContainerHealth.STARTING: "Starting",
            ContainerHealth.HEALTHY: "Healthy",
            ContainerHealth.UNHEALTHY: "Unhealthy",
        }[self]


@dataclass(frozen=True)
class Container:
    id: str
    name: str
    system: str
    cpu: float = 0.0
    memory: float = 0.0
    net: float = 0.0
    health: ContainerHealth = ContainerHealth.NONE
    status: str = ""
    image: str = ""
    updated: int = 0  # epoch milliseconds

    @classmethod
    def from_dict(cls, data: Any) -> Container:
        data = _ensure_mapping(data, "container")
        health = _optional(data, "health", (int,))
        try:
            health_value = ContainerHealth(health) if health is not None else ContainerHealth.NONE
        except ValueError:
            health_value = ContainerHealth.NONE
        return cls(
            id=_require(data, "id", (str,)),
            name=_require(data, "name", (str,)),
            system=_require(data, "system", (str,)),
            cpu=_float(data, "cpu") or 0.0,
            memory=_float(data, "memory") or 0.0,
            net=_float(data, "net") or 0.0,
            health=health_value,
            status=_optional(data, "status", (str,)) or "",
            image=_optional(data, "image", (str,)) or "",
            updated=int(_optional(data, "updated", _NUMBER) or 0),
        )

    @property
    def updated_at(self) -> dt.datetime:
        return dt.datetime.fromtimestamp(self.updated / 1000.0, tz=dt.UTC)


@dataclass(frozen=True)
class Alert:
    id: str
    name: str
    system: str | None = None
    metric: str | None = None
    threshold: float | None = None
    enabled: bool | None = None
    triggered: bool | None = None
    created: str | None = None
    updated: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Alert:
        data = _ensure_mapping(data, "alert")
        return cls(
            id=_require(data, "id", (str,)),
            name=_require(data, "name", (str,)),
            system=_optional(data, "system", (str,)),
            metric=_optional(data, "metric", (str,)),
            threshold=_float(data, "threshold"),
            enabled=_optional(data, "enabled", (bool,)),
            triggered=_optional(data, "triggered", (bool,)),
            created=_optional(data, "created", (str,)),
            updated=_optional(data, "updated", (str,)),
        )

    @property
    def is_active(self) -> bool:
        return self.enabled is True and self.triggered is True

    @property
    def display_metric(self) -> str:
        return self.metric or "unknown"

    @property
    def display_threshold(self) -> str:
        if self.threshold is None:
            return "-"
        return f"{self.threshold:.0f}"


@dataclass(frozen=True)
class StatsDetail:
    cpu: float | None = None
    mp: float | None = None
    dp: float | None = None
    ns: float | None = None
    nr: float | None = None


@dataclass(frozen=True)
class SystemStats:
    id: str
    created: str
    type: str | None = None
    stats: StatsDetail | None = None

    @classmethod
    def from_dict(cls, data: Any) -> SystemStats:
        data = _ensure_mapping(data, "system stats")
        stats = data.get("stats")
        detail = None
        if stats:
            stats = _ensure_mapping(stats, "stats")
            detail = StatsDetail(
                cpu=_float(stats, "cpu"),
                mp=_float(stats, "mp"),
                dp=_float(stats, "dp"),
                ns=_float(stats, "ns"),
                nr=_float(stats, "nr"),
            )
        return cls(
            id=_require(data, "id", (str,)),
            created=_require(data, "created", (str,)),
            type=_optional(data, "type", (str,)),
            stats=detail,
        )


@dataclass(frozen=True)
class ContainerStats:
    id: str
    system: str
    name: str | None = None
    cpu: float | None = None
    mem: float | None = None
    created: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ContainerStats:
        data = _ensure_mapping(data, "container stats")
        return cls(
            id=_require(data, "id", (str,)),
            system=_require(data, "system", (str,)),
            name=_optional(data, "name", (str,)),
            cpu=_float(data, "cpu"),
            mem=_float(data, "mem"),
            created=_optional(data, "created", (str,)),
        )

    @property
    def container_id(self) -> str:
        return self.id


def _frozen_mapping(data: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class Snapshot:
    """Everything known about the selected hub, as of ``version``.

    Consumers treat it as read-only; the orchestrator publishes a new
    Snapshot for every change instead of mutating one.
    """

    version: int = 0
    instance_id: str | None = None
    systems: tuple[System, ...] = ()
    system_details: Mapping[str, SystemDetails] = field(default_factory=_frozen_mapping)
    containers: Mapping[str, tuple[Container, ...]] = field(default_factory=_frozen_mapping)
    active_alerts: tuple[Alert, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view used by the CLI's --json output."""
        from dataclasses import asdict

        return {
            "version": self.version,
            "instance_id": self.instance_id,
            "systems": [asdict(s) for s in self.systems],
            "system_details": {k: asdict(v) for k, v in self.system_details.items()},
            "containers": {k: [asdict(c) for c in v] for k, v in self.containers.items()},
            "active_alerts": [asdict(a) for a in self.active_alerts],
        }
