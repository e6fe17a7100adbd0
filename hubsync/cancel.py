"""Cooperative cancellation for in-flight hub operations."""

from __future__ import annotations

import threading

from .exceptions import OperationCancelled


class CancelToken:
    """Flag shared between an operation and whoever may supersede it.

    Cancelling never interrupts a blocked call; the operation checks the token
    after each network round trip and before writing results.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("operation was superseded")


def check_cancelled(cancel: CancelToken | None) -> None:
    """Raise OperationCancelled if an optional token has been cancelled."""
    if cancel is not None:
        cancel.raise_if_cancelled()
