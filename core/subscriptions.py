"""Subscription handle shared by the realtime channel and the change bus."""

from typing import Callable, Optional


class Subscription:
    """Handle returned by ``subscribe`` calls.

    ``unsubscribe()`` releases the registration and is safe to call more than
    once. Also usable as a context manager.
    """

    def __init__(self, release: Callable[[], None]):
        self._release: Optional[Callable[[], None]] = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unsubscribe()
