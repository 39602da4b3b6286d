"""Chatbot availability endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query

from apps.api.deps import ServiceContainer, get_container


router = APIRouter(prefix="/chatbot", tags=["chatbot"])


@router.get("/slots")
async def available_slots(
    date: str = Query(..., description="YYYY-MM-DD"),
    service: str = Query("grooming", description="hotel, grooming or daycare"),
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return await services.chatbot.get_available_slots(date, service)


@router.get("/status")
async def reservation_status(
    date: str = Query(..., description="YYYY-MM-DD"),
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    return await services.chatbot.get_reservation_status(date)


@router.post("/reservations/{service}")
async def create_reservation(
    service: str,
    data: Dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    """Chatbot intake; refused unless enabled in settings."""
    return await services.chatbot.create_reservation(service, data)
