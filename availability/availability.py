# availability/availability.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from availability.resolver import (
    ensure_span_within,
    free_dates_for_vehicle,
    free_vehicles_for_range,
    vehicle_is_reserved,
)
from catalog.store import CatalogStore, get_catalog
from core.config import AVAILABILITY_HORIZON_DAYS, CANCELLED_BLOCKS_AVAILABILITY
from core.errors import BookingError, to_http_exception
from models.reservation import ReservationType
from models.vehicle import Vehicle
from reservations.store import ReservationStore, get_reservation_store

router = APIRouter(prefix="/api/availability", tags=["availability"])

IGNORE_CANCELLED = not CANCELLED_BLOCKS_AVAILABILITY


class VehicleDayStatus(BaseModel):
    vehicle_id: str
    date: date
    reserved: bool


class FreeDates(BaseModel):
    vehicle_id: str
    horizon_days: int
    free_dates: List[date]


async def _car_reservations(store: ReservationStore):
    try:
        return await store.select_all(ReservationType.CAR, "pickup_date")
    except BookingError as exc:
        raise to_http_exception(exc)


@router.get("/vehicles", response_model=List[Vehicle])
async def free_vehicles(
    start: date,
    end: Optional[date] = None,
    catalog: CatalogStore = Depends(get_catalog),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Vehicles with no reservation on any day from start to end inclusive."""
    try:
        ensure_span_within(start, end, "end")
    except BookingError as exc:
        raise to_http_exception(exc)
    reservations = await _car_reservations(store)
    return free_vehicles_for_range(start, end, reservations, catalog.list_vehicles(), ignore_cancelled=IGNORE_CANCELLED)


@router.get("/vehicles/{vehicle_id}", response_model=VehicleDayStatus)
async def vehicle_status(
    vehicle_id: str,
    day: date = Query(alias="date"),
    catalog: CatalogStore = Depends(get_catalog),
    store: ReservationStore = Depends(get_reservation_store),
):
    try:
        vehicle = catalog.get_vehicle(vehicle_id)
    except BookingError as exc:
        raise to_http_exception(exc)
    reservations = await _car_reservations(store)
    reserved = vehicle_is_reserved(vehicle.id, day, reservations, ignore_cancelled=IGNORE_CANCELLED)
    return VehicleDayStatus(vehicle_id=vehicle.id, date=day, reserved=reserved)


@router.get("/vehicles/{vehicle_id}/free-dates", response_model=FreeDates)
async def vehicle_free_dates(
    vehicle_id: str,
    horizon: int = Query(default=AVAILABILITY_HORIZON_DAYS, ge=1, le=365),
    catalog: CatalogStore = Depends(get_catalog),
    store: ReservationStore = Depends(get_reservation_store),
):
    try:
        vehicle = catalog.get_vehicle(vehicle_id)
    except BookingError as exc:
        raise to_http_exception(exc)
    reservations = await _car_reservations(store)
    dates = list(free_dates_for_vehicle(vehicle.id, horizon, reservations, ignore_cancelled=IGNORE_CANCELLED))
    return FreeDates(vehicle_id=vehicle.id, horizon_days=horizon, free_dates=dates)
