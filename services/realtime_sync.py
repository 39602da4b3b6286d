"""
Realtime synchronization path.

Applies store change events made by any client to the mirror cache and
re-broadcasts them on the change bus, and watches the mirror cache files for
writes made by other processes.
"""
import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

from core.subscriptions import Subscription
from domain.enums import ChangeEventType
from domain.models import ChangeEvent, DisplayReservation, RealtimeUpdate
from services.change_bus import ChangeBus
from services.mirror_cache import CACHE_KEYS, JsonFileStore, MirrorCache
from services.reservation_format import to_display, to_display_list
from services.reservation_store import ReservationStore, ReservationStoreError


logger = logging.getLogger(__name__)

UpdateCallback = Callable[[RealtimeUpdate], Union[None, Awaitable[None]]]


async def load_all_reservations(store: ReservationStore) -> List[DisplayReservation]:
    """Fetch every reservation in display format; ``[]`` when the store fails."""
    try:
        records = await store.get_all()
    except ReservationStoreError as e:
        logger.error(f"Failed to load reservations: {e.message}")
        return []
    return to_display_list(records)


class StorageChangeWatcher:
    """Detects mirror cache writes made by other processes.

    Versions written by this process are ignored; any other change to one of
    the cache keys is re-emitted as a change signal.
    """

    def __init__(self, store: JsonFileStore, bus: ChangeBus, interval: float = 2.0):
        self.store = store
        self.bus = bus
        self.interval = interval
        self._versions: Dict[str, Optional[int]] = {}
        self._task: Optional[asyncio.Task] = None

    def snapshot(self) -> None:
        """Remember the current versions without signalling."""
        self._versions = {key: self.store.version(key) for key in CACHE_KEYS}

    def poll(self) -> bool:
        """Check every cache key once. Returns True when a signal was published."""
        changed = []
        for key in CACHE_KEYS:
            version = self.store.version(key)
            if version == self._versions.get(key):
                continue
            self._versions[key] = version
            if not self.store.is_own_version(key, version):
                changed.append(key)

        if not changed:
            return False
        logger.debug(f"External cache change detected in {changed}")
        self.bus.publish()
        return True

    async def run(self) -> None:
        while True:
            try:
                self.poll()
            except OSError as e:
                logger.warning(f"Cache watcher poll failed: {e}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is not None:
            return
        self.snapshot()
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


class ReservationRealtimeSync:
    """Keeps the mirror cache in step with store change events.

    The store is listened to once, however many callbacks are registered, so
    each event reconciles the cache and broadcasts at most once. Events
    tagged with ``local_origin`` are echoes of writes the local lifecycle
    controller already reconciled and broadcast; they only reach callbacks.
    """

    def __init__(
        self,
        store: ReservationStore,
        cache: MirrorCache,
        bus: ChangeBus,
        watcher: Optional[StorageChangeWatcher] = None,
        local_origin: Optional[str] = None,
    ):
        self.store = store
        self.cache = cache
        self.bus = bus
        self.watcher = watcher
        self.local_origin = local_origin
        self._callbacks: List[UpdateCallback] = []
        self._anonymous = 0
        self._store_subscription: Optional[Subscription] = None
        self._started = False

    @property
    def listening(self) -> bool:
        return self._store_subscription is not None

    def _listen(self) -> None:
        if self._store_subscription is None:
            self._store_subscription = self.store.subscribe(self._on_change)

    def _release_if_idle(self) -> None:
        idle = not (self._started or self._callbacks or self._anonymous)
        if idle and self._store_subscription is not None:
            self._store_subscription.unsubscribe()
            self._store_subscription = None

    def subscribe(self, callback: Optional[UpdateCallback] = None) -> Subscription:
        """
        Listen to every store change event.

        Events are applied in delivery order with no reordering or
        coalescing. ``callback`` receives a RealtimeUpdate per event.

        Args:
            callback: Optional sync or async callable

        Returns:
            Subscription releasing the callback
        """
        self._listen()
        if callback is None:
            self._anonymous += 1

            def release_anonymous() -> None:
                self._anonymous = max(0, self._anonymous - 1)
                self._release_if_idle()

            return Subscription(release_anonymous)

        self._callbacks.append(callback)

        def release() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
            self._release_if_idle()

        return Subscription(release)

    async def _on_change(self, event: ChangeEvent) -> None:
        update = self.apply(event)
        if update is None:
            return
        for callback in list(self._callbacks):
            try:
                result = callback(update)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Realtime callback failed for {update.type.value} "
                    f"{update.reservation_id}: {e}",
                    exc_info=True,
                )

    def apply(self, event: ChangeEvent) -> Optional[RealtimeUpdate]:
        """Apply one change event to the cache and broadcast it."""
        echo = self.local_origin is not None and event.origin == self.local_origin

        if event.event_type == ChangeEventType.DELETE:
            reservation_id = event.reservation_id
            if reservation_id is None:
                logger.warning("DELETE event without an id ignored")
                return None
            if not echo:
                self.cache.remove([reservation_id])
                self.bus.publish()
            return RealtimeUpdate(type=ChangeEventType.DELETE, id=reservation_id)

        if event.new is None:
            logger.warning(f"{event.event_type.value} event without a record ignored")
            return None

        record = to_display(event.new)
        if not echo:
            self.cache.reconcile(record.id, record)
            self.bus.publish()
        return RealtimeUpdate(type=event.event_type, data=record)

    def start(self) -> None:
        """Prepare the cache, follow store events and watch for external writes."""
        self.cache.initialize()
        self._started = True
        self._listen()
        if self.watcher is not None:
            self.watcher.start()
        logger.info("Realtime reservation sync started")

    async def stop(self) -> None:
        self._started = False
        self._callbacks.clear()
        self._anonymous = 0
        self._release_if_idle()
        if self.watcher is not None:
            await self.watcher.stop()
        logger.info("Realtime reservation sync stopped")
