from __future__ import annotations

import threading
from typing import Optional

from scamcheck.core.errors import OperationCancelled


class CancellationToken:
    """
    Cooperative cancellation signal shared between a caller and a running request.
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
            raise OperationCancelled("operation cancelled")

    def sleep(self, seconds: float) -> None:
        # wakes early on cancel
        if seconds > 0 and self._event.wait(seconds):
            raise OperationCancelled("operation cancelled")


def check(cancel: Optional[CancellationToken]) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
