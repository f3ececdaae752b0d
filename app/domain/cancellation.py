"""
app/domain/cancellation.py

Caller-supplied cancellation and timeout bound for long-running ingestion.
"""

from __future__ import annotations

import threading
import time

from app.domain.errors import ImportCancelledError


class CancellationToken:
    """
    Cooperative cancellation flag with an optional monotonic deadline.

    Decoders and importers call ``raise_if_cancelled()`` between rows, so
    cleanup in their ``finally`` blocks still runs.
    """

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + max(0.0, seconds))

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ImportCancelledError("Import was cancelled by the caller.")
        if self.expired:
            raise ImportCancelledError("Import exceeded its time limit.")
