"""
Engine Readiness Module (Headless).

Write-once state object tracking the asynchronous bootstrap of the mapping
engine. Widgets subscribe to it and get notified exactly once when the
bootstrap settles. Subscriptions can be cancelled, which is how a widget
that goes away before the engine is ready opts out of the result.

No Qt dependencies, so the state machine is testable on its own.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)


class EngineState(Enum):
    """Lifecycle of the engine bootstrap."""

    UNSET = "unset"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class EngineLoadError(RuntimeError):
    """Raised (and stored) when the mapping engine cannot be acquired."""


class Subscription:
    """
    Handle returned by EngineReadiness.subscribe().

    Call cancel() to stop receiving the settle notification.
    """

    def __init__(
        self,
        readiness: "EngineReadiness",
        callback: Callable[["EngineReadiness"], None],
    ) -> None:
        self._readiness = readiness
        self._callback = callback
        self.cancelled = False
        self.delivered = False

    @property
    def active(self) -> bool:
        """True while the notification can still be delivered."""
        return not (self.cancelled or self.delivered)

    def cancel(self) -> None:
        """Discards the pending notification. Safe to call repeatedly."""
        if self.active:
            self.cancelled = True
            self._readiness._remove(self)

    def _deliver(self) -> None:
        if not self.active:
            return
        self.delivered = True
        self._callback(self._readiness)


class EngineReadiness:
    """
    Two-phase readiness flag: pending, then ready or failed, forever.

    Attributes:
        state: Current EngineState.
        handle: The engine handle once READY, otherwise None.
        error: The failure once FAILED, otherwise None.
    """

    def __init__(self) -> None:
        self.state = EngineState.UNSET
        self.handle: Any = None
        self.error: Optional[BaseException] = None
        self._subscribers: List[Subscription] = []

    def __repr__(self) -> str:
        return f"<EngineReadiness state={self.state.value}>"

    @property
    def is_ready(self) -> bool:
        """True once the engine handle is available."""
        return self.state is EngineState.READY

    @property
    def is_settled(self) -> bool:
        """True once the bootstrap has either succeeded or failed."""
        return self.state in (EngineState.READY, EngineState.FAILED)

    @property
    def subscriber_count(self) -> int:
        """Number of subscribers still waiting for the result."""
        return len(self._subscribers)

    def subscribe(self, callback: Callable[["EngineReadiness"], None]) -> Subscription:
        """
        Registers a callback for the settle notification.

        If the bootstrap has already settled, the callback runs immediately.

        Args:
            callback: Called once with this readiness object.

        Returns:
            Subscription: Handle that can cancel the notification.
        """
        subscription = Subscription(self, callback)
        if self.is_settled:
            subscription._deliver()
        else:
            self._subscribers.append(subscription)
        return subscription

    def mark_pending(self) -> None:
        """Moves UNSET to PENDING. Any other state is left alone."""
        if self.state is EngineState.UNSET:
            self.state = EngineState.PENDING

    def resolve(self, handle: Any) -> None:
        """
        Records a successful bootstrap and notifies subscribers.

        Args:
            handle: The engine handle.

        Raises:
            RuntimeError: If the readiness has already settled.
        """
        self._settle(EngineState.READY, handle=handle)

    def reject(self, error: BaseException) -> None:
        """
        Records a failed bootstrap and notifies subscribers.

        Args:
            error: The failure.

        Raises:
            RuntimeError: If the readiness has already settled.
        """
        self._settle(EngineState.FAILED, error=error)

    def _settle(
        self,
        state: EngineState,
        handle: Any = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if self.is_settled:
            raise RuntimeError(f"Engine readiness already settled as {self.state.value}")

        self.state = state
        self.handle = handle
        self.error = error
        logger.debug(f"Engine readiness settled: {state.value}")

        subscribers, self._subscribers = self._subscribers, []
        for subscription in subscribers:
            try:
                subscription._deliver()
            except Exception:
                logger.exception("Error in engine readiness subscriber")

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)
