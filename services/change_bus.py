"""
Change notification bus.

A single content-free topic, ``reservationUpdated``, broadcast process-wide
whenever reservation data may have changed. It is a reload hint, not a data
carrier: subscribers re-read the mirror cache or the store and must be
idempotent, because redundant signals are expected.
"""
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List

from core.subscriptions import Subscription


logger = logging.getLogger(__name__)

RESERVATION_UPDATED = "reservationUpdated"

ChangeHandler = Callable[[], None]


class ChangeBus:
    """Publish/subscribe hub for the reservation change signal."""

    topic = RESERVATION_UPDATED

    def __init__(self):
        self._handlers: List[ChangeHandler] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: ChangeHandler) -> Subscription:
        """Register a handler; release it with ``unsubscribe()``."""
        self._handlers.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {self.topic}")

        def release() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)
                logger.debug(f"Unsubscribed {getattr(handler, '__name__', handler)} from {self.topic}")

        return Subscription(release)

    @contextmanager
    def subscription(self, handler: ChangeHandler) -> Iterator[Subscription]:
        """Hold a subscription for the lifetime of a ``with`` block."""
        sub = self.subscribe(handler)
        try:
            yield sub
        finally:
            sub.unsubscribe()

    def publish(self) -> int:
        """
        Broadcast the change signal.

        Errors in handlers are logged but don't stop other handlers.

        Returns:
            Number of handlers notified
        """
        handlers = list(self._handlers)
        logger.debug(f"Publishing {self.topic} to {len(handlers)} subscriber(s)")
        for handler in handlers:
            try:
                handler()
            except Exception as e:
                logger.error(
                    f"Error in {self.topic} handler {getattr(handler, '__name__', handler)}: {e}",
                    exc_info=True
                )
        return len(handlers)
