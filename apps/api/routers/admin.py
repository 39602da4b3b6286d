"""Admin endpoints for managing reservations."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import ServiceContainer, get_container, require_admin
from core.utils_datetime import get_today_key
from domain.enums import ReservationStatus
from domain.models import BulkDeleteRequest, StatusChangeRequest
from services.reservation_format import to_display_list
from services.reservation_lifecycle import ALREADY_PROCESSING, ActionResult
from services.reservation_store import ReservationStoreError
from services.today_view import TodayReservationsView


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _result_or_error(result: ActionResult) -> Dict[str, Any]:
    if result.success:
        return result.to_dict()
    if result.error == ALREADY_PROCESSING:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.error)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)


@router.get("/reservations")
async def list_reservations(
    services: ServiceContainer = Depends(get_container),
) -> List[Dict[str, Any]]:
    """
    List all reservations in display format.

    Returns:
        List of camelCase reservation dicts
    """
    try:
        records = await services.store.get_all()
    except ReservationStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return [r.to_cache_dict() for r in to_display_list(records)]


@router.get("/reservations/today")
async def today_reservations(
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Today's reservations grouped by service, in shop time."""
    view = TodayReservationsView(
        services.store,
        services.realtime,
        tz_offset_minutes=services.config.shop_utc_offset_minutes,
    )
    await view.refresh()
    if view.error:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=view.error)

    return {
        "date": view.today_key,
        "total": len(view.reservations),
        "reservations": {
            service: [r.to_cache_dict() for r in items]
            for service, items in view.grouped().items()
        },
    }


@router.post("/reservations/{reservation_id}/status")
async def change_status(
    reservation_id: str,
    request: StatusChangeRequest,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Move a reservation to any stored status."""
    if request.status == ReservationStatus.DELETED:
        raise HTTPException(
            status_code=422,
            detail="Use DELETE to remove a reservation",
        )
    result = await services.lifecycle.change_status(reservation_id, request.status)
    return _result_or_error(result)


@router.post("/reservations/{reservation_id}/confirm")
async def confirm_reservation(
    reservation_id: str,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Confirm a reservation and text the owner."""
    return _result_or_error(await services.lifecycle.confirm(reservation_id))


@router.post("/reservations/{reservation_id}/complete")
async def complete_reservation(
    reservation_id: str,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return _result_or_error(await services.lifecycle.complete(reservation_id))


@router.post("/reservations/{reservation_id}/cancel")
async def cancel_reservation(
    reservation_id: str,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return _result_or_error(await services.lifecycle.cancel(reservation_id))


@router.delete("/reservations/{reservation_id}")
async def delete_reservation(
    reservation_id: str,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Hard delete a reservation regardless of its status."""
    return _result_or_error(await services.lifecycle.delete(reservation_id))


@router.post("/reservations/bulk-delete")
async def bulk_delete_reservations(
    request: BulkDeleteRequest,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Hard delete a multi-selection in one batch."""
    result = await services.lifecycle.delete_many(request.ids)
    response = _result_or_error(result)
    response["deleted"] = len(set(request.ids))
    return response


@router.get("/stats")
async def reservation_stats(
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, int]:
    """Dashboard counts from the mirror cache."""
    today_key = get_today_key(services.config.shop_utc_offset_minutes)
    return services.cache.stats(today_key)
