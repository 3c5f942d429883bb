"""
Normalize the three reservation collections into one calendar timeline.

Day matching reuses the availability helpers so the dashboard and the
availability endpoints agree on which days a reservation occupies.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Set

from availability.resolver import date_range_overlaps, expand_range, reserved_vehicle_ids
from core.errors import TransitionError
from models.admin import AdminEvent, SummaryStats
from models.reservation import (
    AirportTransferReservationRow,
    CarReservationRow,
    ExcursionReservationRow,
    ReservationStatus,
    ReservationType,
)
from models.vehicle import Vehicle

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ReservationStatus, Set[ReservationStatus]] = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED},
    ReservationStatus.CONFIRMED: {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED},
    ReservationStatus.COMPLETED: set(),
    ReservationStatus.CANCELLED: set(),
}


def can_transition(current: ReservationStatus, new: ReservationStatus) -> bool:
    return ReservationStatus(new) in ALLOWED_TRANSITIONS[ReservationStatus(current)]


def allowed_next_statuses(current: ReservationStatus) -> List[ReservationStatus]:
    return sorted(ALLOWED_TRANSITIONS[ReservationStatus(current)], key=lambda status: status.value)


def _car_event(row: CarReservationRow) -> AdminEvent:
    return AdminEvent(
        id=row.id,
        reference=row.reference_code,
        type=ReservationType.CAR,
        title=row.car_name,
        subtitle=f"{row.pickup_location} → {row.return_location or row.pickup_location}",
        start_date=row.pickup_date,
        end_date=row.return_date,
        status=row.status,
        payment_method=row.payment_method,
        customer=row.customer_name,
        total_price=row.total_price,
    )


def _excursion_event(row: ExcursionReservationRow) -> AdminEvent:
    return AdminEvent(
        id=row.id,
        reference=row.reference_code,
        type=ReservationType.EXCURSION,
        title=row.excursion_title,
        subtitle=f"{row.persons} guests • {row.car_type}",
        start_date=row.date,
        end_date=row.date,
        status=row.status,
        payment_method=row.payment_method,
        customer=row.customer_name,
        total_price=row.total_price,
    )


def _airport_event(row: AirportTransferReservationRow) -> AdminEvent:
    return AdminEvent(
        id=row.id,
        reference=row.reference_code,
        type=ReservationType.AIRPORT,
        title=f"{row.airport.upper()} Transfer",
        subtitle=f"{row.pickup_location} • {row.time}",
        start_date=row.date,
        end_date=row.date,
        status=row.status,
        payment_method=row.payment_method,
        customer=row.customer_name,
        total_price=row.total_price,
    )


def merge_reservations(
    car_rows: Iterable[CarReservationRow],
    excursion_rows: Iterable[ExcursionReservationRow],
    airport_rows: Iterable[AirportTransferReservationRow],
) -> List[AdminEvent]:
    events = (
        [_car_event(row) for row in car_rows]
        + [_excursion_event(row) for row in excursion_rows]
        + [_airport_event(row) for row in airport_rows]
    )
    return sorted(events, key=lambda event: event.start_date)


def events_on(events: Iterable[AdminEvent], target: date) -> List[AdminEvent]:
    return [event for event in events if date_range_overlaps(target, event.start_date, event.end_date)]


def busy_dates(events: Iterable[AdminEvent]) -> List[date]:
    days: Set[date] = set()
    for event in events:
        days.update(expand_range(event.start_date, event.end_date))
    return sorted(days)


def fleet_availability(
    target: date,
    car_rows: Iterable[CarReservationRow],
    catalog: Iterable[Vehicle],
    ignore_cancelled: bool = False,
) -> List[dict]:
    reserved = reserved_vehicle_ids(target, car_rows, ignore_cancelled)
    return [
        {"id": vehicle.id, "name": vehicle.name, "model": vehicle.model, "reserved": vehicle.id in reserved}
        for vehicle in catalog
    ]


def summary_stats(events: Iterable[AdminEvent], today: date) -> SummaryStats:
    events = list(events)
    return SummaryStats(
        pending=sum(1 for event in events if event.status == ReservationStatus.PENDING),
        today=len(events_on(events, today)),
        upcoming=sum(1 for event in events if event.start_date >= today),
    )


async def update_status(store, kind: ReservationType, reservation_id: str, new_status: ReservationStatus) -> None:
    """
    Apply an admin status change through the type-specific store call.

    Nothing is mutated locally; callers re-fetch the aggregated view.
    """
    new_status = ReservationStatus(new_status)
    current = await store.get(kind, reservation_id)
    if not can_transition(current.status, new_status):
        raise TransitionError(f"Cannot change a {current.status.value} reservation to {new_status.value}.")
    await store.update_status(kind, reservation_id, new_status)
    logger.info("Reservation %s (%s) moved %s -> %s", reservation_id, kind.value, current.status.value, new_status.value)
