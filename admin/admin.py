# admin/admin.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from admin.aggregation import (
    busy_dates,
    events_on,
    fleet_availability,
    merge_reservations,
    summary_stats,
    update_status,
)
from auth.dependencies import require_admin_session
from auth.sessions import AdminSession
from catalog.store import CatalogStore, get_catalog
from core.config import ADMIN_REFRESH_SECONDS, CANCELLED_BLOCKS_AVAILABILITY
from core.errors import BookingError, to_http_exception
from models.admin import AdminEvent, SummaryStats
from models.reservation import ReservationType, StatusUpdate
from reservations.store import ReservationStore, get_reservation_store

router = APIRouter(prefix="/api/admin", tags=["admin"])


class FleetSlot(BaseModel):
    id: str
    name: str
    model: str
    reserved: bool


class Dashboard(BaseModel):
    selected_date: date
    events: List[AdminEvent]
    busy_dates: List[date]
    selected_day_events: List[AdminEvent]
    fleet: List[FleetSlot]
    stats: SummaryStats
    refresh_interval_seconds: int


async def _load(store: ReservationStore):
    try:
        return await store.fetch_admin_reservations()
    except BookingError as exc:
        raise to_http_exception(exc)


@router.get("/dashboard", response_model=Dashboard)
async def dashboard(
    day: Optional[date] = Query(default=None, alias="date"),
    store: ReservationStore = Depends(get_reservation_store),
    catalog: CatalogStore = Depends(get_catalog),
    session: AdminSession = Depends(require_admin_session),
):
    """Calendar, selected-day reservations, fleet occupancy and counters in one read."""
    today = date.today()
    selected = day or today
    data = await _load(store)
    events = merge_reservations(data.car_reservations, data.excursion_reservations, data.airport_reservations)
    return Dashboard(
        selected_date=selected,
        events=events,
        busy_dates=busy_dates(events),
        selected_day_events=events_on(events, selected),
        fleet=fleet_availability(
            selected, data.car_reservations, catalog.list_vehicles(),
            ignore_cancelled=not CANCELLED_BLOCKS_AVAILABILITY,
        ),
        stats=summary_stats(events, today),
        refresh_interval_seconds=ADMIN_REFRESH_SECONDS,
    )


@router.get("/events", response_model=List[AdminEvent])
async def list_events(
    store: ReservationStore = Depends(get_reservation_store),
    session: AdminSession = Depends(require_admin_session),
):
    data = await _load(store)
    return merge_reservations(data.car_reservations, data.excursion_reservations, data.airport_reservations)


@router.patch("/reservations/{kind}/{reservation_id}/status")
async def change_status(
    kind: ReservationType,
    reservation_id: str,
    payload: StatusUpdate,
    store: ReservationStore = Depends(get_reservation_store),
    session: AdminSession = Depends(require_admin_session),
):
    try:
        await update_status(store, kind, reservation_id, payload.status)
    except BookingError as exc:
        raise to_http_exception(exc)
    return {"message": f"Reservation marked as {payload.status.value}", "refetch": True}
