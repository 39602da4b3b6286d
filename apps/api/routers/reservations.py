"""Customer reservation form endpoint."""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from apps.api.deps import ServiceContainer, get_container
from domain.enums import ReservationStatus
from domain.models import ReservationCreate
from services.reservation_format import to_display
from services.reservation_store import ReservationStoreError


router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_reservation(
    data: ReservationCreate,
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """
    Submit a reservation from the booking form.

    New reservations always start as pending, whatever the payload says.

    Returns:
        Created reservation in display format
    """
    data = data.model_copy(update={"status": ReservationStatus.PENDING})
    try:
        record = await services.store.create(data)
    except ReservationStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return to_display(record).to_cache_dict()
