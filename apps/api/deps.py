"""Service container and FastAPI dependencies."""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.config import Settings, settings as default_settings
from integrations.sms import SmsDispatcher, SmsProvider, build_sms_provider
from services.change_bus import ChangeBus
from services.chatbot_service import ChatbotReservationService
from services.mirror_cache import JsonFileStore, MirrorCache
from services.realtime_sync import ReservationRealtimeSync, StorageChangeWatcher
from services.reservation_lifecycle import ReservationLifecycleController
from services.reservation_store import SqlAlchemyReservationStore


logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything the routers need, wired once per application."""

    config: Settings
    store: SqlAlchemyReservationStore
    cache: MirrorCache
    bus: ChangeBus
    realtime: ReservationRealtimeSync
    lifecycle: ReservationLifecycleController
    chatbot: ChatbotReservationService


def build_container(
    session_factory: async_sessionmaker,
    config: Optional[Settings] = None,
    sms_provider: Optional[SmsProvider] = None,
    watch_storage: bool = True,
) -> ServiceContainer:
    """
    Wire the reservation services together.

    Args:
        session_factory: Async session factory of the reservation database
        config: Settings override, defaults to the global settings
        sms_provider: Provider override, defaults to Twilio when configured
        watch_storage: Poll the mirror cache for writes by other processes

    Returns:
        ServiceContainer
    """
    config = config or default_settings
    store = SqlAlchemyReservationStore(session_factory)
    file_store = JsonFileStore(config.cache_dir)
    cache = MirrorCache(file_store)
    bus = ChangeBus()
    watcher = None
    if watch_storage:
        watcher = StorageChangeWatcher(file_store, bus, config.storage_poll_interval_seconds)
    dispatcher = SmsDispatcher(sms_provider or build_sms_provider(config), config.shop_name)
    lifecycle = ReservationLifecycleController(store, cache, bus, dispatcher)

    return ServiceContainer(
        config=config,
        store=store,
        cache=cache,
        bus=bus,
        realtime=ReservationRealtimeSync(
            store, cache, bus, watcher, local_origin=lifecycle.origin
        ),
        lifecycle=lifecycle,
        chatbot=ChatbotReservationService(store, config),
    )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.services


def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(None),
) -> None:
    """Check the admin token when one is configured."""
    expected = request.app.state.services.config.admin_api_token
    if expected and x_admin_token != expected:
        logger.warning("Rejected admin request with missing or invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token",
        )
