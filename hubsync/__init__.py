"""
hubsync - keep an up-to-date local view of Beszel/PocketBase monitoring hubs.

Design goals:
- One selected hub at a time; switching never shows another hub's data.
- Newest request wins; superseded fetches never overwrite fresher results.
- Credentials live in the OS keyring, never in the hub list on disk.
"""

from __future__ import annotations

from .cli import main
from .client import HubClient
from .exceptions import HubSyncError, UserError
from .models import Instance, Snapshot
from .orchestrator import ResourceKind, SyncOrchestrator
from .scheduler import PollScheduler

__all__ = [
    "HubClient",
    "HubSyncError",
    "Instance",
    "PollScheduler",
    "ResourceKind",
    "Snapshot",
    "SyncOrchestrator",
    "UserError",
    "main",
]
