"""Per-hub authentication: one cached bearer token, one login at a time."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future

import requests

from .constants import AUTH_PASSWORD_PATH, AUTH_REFRESH_PATH
from .exceptions import AuthenticationFailedError, AuthenticationRequiredError, DecodeError
from .models import Instance, is_jwt
from .transport import DEFAULT_TIMEOUT, build_url, decode_json, send

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the bearer token for one hub instance.

    Callers that need a token while none is cached share a single in-flight
    authentication: the first caller performs it and the rest wait on the same
    future, so a burst of parallel fetches causes one login, not four.
    """

    def __init__(
        self,
        instance: Instance,
        http: requests.Session,
        *,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        self.instance = instance
        self.http = http
        self.timeout = timeout
        self._lock = threading.Lock()
        self._token: str | None = None
        self._inflight: Future[str] | None = None

    @property
    def cached_token(self) -> str | None:
        with self._lock:
            return self._token

    def invalidate(self) -> None:
        """Forget the cached token; the next call re-authenticates."""
        with self._lock:
            self._token = None

    def get_valid_token(self) -> str:
        """Return the cached token, authenticating first if there is none.

        Raises:
            AuthenticationRequiredError: No credential configured (no network call)
            AuthenticationFailedError: Hub rejected the login or refresh
            NetworkError, BadURLError, DecodeError: from the auth request
        """
        with self._lock:
            if self._token is not None:
                return self._token
            if self._inflight is not None:
                future = self._inflight
                owner = False
            else:
                future = Future()
                self._inflight = future
                owner = True

        if not owner:
            return future.result()

        try:
            token = self._authenticate()
        except BaseException as e:
            with self._lock:
                self._inflight = None
            future.set_exception(e)
            raise
        with self._lock:
            self._token = token
            self._inflight = None
        future.set_result(token)
        return token

    def _authenticate(self) -> str:
        credential = self.instance.credential
        if not credential:
            raise AuthenticationRequiredError(
                f"No credential configured for hub {self.instance.name!r}"
            )

        if is_jwt(credential):
            logger.debug("Refreshing token for %s", self.instance.url)
            url = build_url(self.instance.url, AUTH_REFRESH_PATH)
            response = send(
                self.http,
                "POST",
                url,
                headers={"Authorization": f"Bearer {credential}"},
                timeout=self.timeout,
            )
        else:
            logger.debug("Logging in to %s as %s", self.instance.url, self.instance.email)
            url = build_url(self.instance.url, AUTH_PASSWORD_PATH)
            response = send(
                self.http,
                "POST",
                url,
                json={"identity": self.instance.email, "password": credential},
                timeout=self.timeout,
            )

        if response.status_code != 200:
            logger.debug("Authentication against %s returned %s", url, response.status_code)
            raise AuthenticationFailedError(
                f"Authentication failed for hub {self.instance.name!r} "
                f"(HTTP {response.status_code})"
            )

        data = decode_json(response, url)
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise DecodeError(f"Auth response from {url} has no token")
        return token
