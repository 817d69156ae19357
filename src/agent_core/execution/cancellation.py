"""One-shot cooperative cancellation flag with subscriber callbacks."""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CancellationSignal:
    """Active -> Cancelled flag shared between a run and whoever may cancel it.

    Cancellation is cooperative: the executor polls :meth:`is_cancelled` at
    step boundaries, and callbacks registered with :meth:`on_cancelled` fire
    synchronously on the flow that calls :meth:`cancel`.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel once; repeated calls are no-ops."""

        if self._cancelled:
            return
        self._cancelled = True

        callbacks = self._callbacks
        self._callbacks = []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Error executing cancellation callback %r", callback)

    def on_cancelled(self, callback: Callable[[], None]) -> None:
        """Register ``callback``; runs immediately if already cancelled."""

        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def reset(self) -> None:
        """Return to Active and drop callbacks. Only call between runs."""

        self._cancelled = False
        self._callbacks = []
