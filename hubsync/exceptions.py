"""hubsync exception classes."""

from __future__ import annotations


class HubSyncError(RuntimeError):
    """Base exception for hubsync errors."""


class UserError(HubSyncError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class CommandFailureError(HubSyncError):
    """Command failed - error message already printed, just need to exit."""

    def __init__(self, rc: int = 1):
        super().__init__("")
        self.rc = rc


class BadURLError(HubSyncError):
    """Hub base URL or request path could not form a valid URL."""


class AuthenticationRequiredError(HubSyncError):
    """No credential is configured for the hub."""


class AuthenticationFailedError(HubSyncError):
    """The hub rejected the login, token refresh, or retried request."""


class HubHTTPError(HubSyncError):
    """Hub answered with an unexpected HTTP status."""

    def __init__(self, status: int, url: str):
        super().__init__(f"HTTP {status} error for {url}")
        self.status = status
        self.url = url


class DecodeError(HubSyncError):
    """Response body was not JSON or did not have the expected shape."""


class NetworkError(HubSyncError):
    """Transport failure or timeout talking to the hub."""


class OperationCancelled(HubSyncError):
    """Operation was superseded by a newer one.

    Never reported to users; callers filter it before any error path.
    """
