"""hubsync constants."""

from __future__ import annotations

# Local data (overridable with HUBSYNC_HOME)
DATA_DIR_NAME = ".hubsync"
INSTANCES_FILE_NAME = "instances.json"
SELECTED_FILE_NAME = "selected_instance"
SETTINGS_FILE_NAME = "settings.json"
KEYRING_SERVICE = "hubsync"

# Hub API paths (PocketBase collections)
AUTH_PASSWORD_PATH = "/api/collections/users/auth-with-password"
AUTH_REFRESH_PATH = "/api/collections/users/auth-refresh"
SYSTEMS_PATH = "/api/collections/systems/records"
SYSTEM_DETAILS_PATH = "/api/collections/system_details/records"
SYSTEM_STATS_PATH = "/api/collections/system_stats/records"
CONTAINERS_PATH = "/api/collections/containers/records"
CONTAINER_STATS_PATH = "/api/collections/container_stats/records"
ALERTS_PATH = "/api/collections/alerts/records"

DEFAULT_PAGE_SIZE = 500
CONTAINER_STATS_PER_CONTAINER = 100
LATEST_ALERTS_LIMIT = 10
ENABLED_ALERTS_FILTER = "enabled = true"
JWT_PREFIX = "ey"

# requests timeout tuple: (connect, read)
CONNECT_TIMEOUT_S = 15
READ_TIMEOUT_S = 30

# Polling
DEFAULT_REFRESH_INTERVAL_S = 30
MIN_REFRESH_INTERVAL_S = 10
MAX_REFRESH_INTERVAL_S = 300
INTERVAL_DEBOUNCE_S = 0.5
SETTINGS_POLL_S = 1.0

FETCH_WORKERS = 8
STATUS_TIMEOUT_S = 60
