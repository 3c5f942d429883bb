"""
Day-level availability derived from a snapshot of car reservations.

All ranges are inclusive on both ends; a reservation without an end date
occupies its start day only.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Set, Union

from core.config import MAX_RANGE_DAYS
from core.errors import ValidationError
from models.reservation import CarReservationRow, ReservationStatus
from models.vehicle import Vehicle

DateLike = Union[date, str]


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def date_range_overlaps(target: DateLike, range_start: DateLike, range_end: Optional[DateLike] = None) -> bool:
    target = to_date(target)
    start = to_date(range_start)
    end = to_date(range_end) if range_end is not None else start
    return start <= target <= end


def expand_range(range_start: DateLike, range_end: Optional[DateLike] = None) -> List[date]:
    start = to_date(range_start)
    end = to_date(range_end) if range_end is not None else start
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def _blocking(reservations: Iterable[CarReservationRow], ignore_cancelled: bool) -> Iterator[CarReservationRow]:
    for reservation in reservations:
        if ignore_cancelled and reservation.status == ReservationStatus.CANCELLED:
            continue
        yield reservation


def vehicle_is_reserved(
    vehicle_id: str,
    target: DateLike,
    reservations: Iterable[CarReservationRow],
    ignore_cancelled: bool = False,
) -> bool:
    return any(
        reservation.car_id == vehicle_id
        and date_range_overlaps(target, reservation.pickup_date, reservation.return_date)
        for reservation in _blocking(reservations, ignore_cancelled)
    )


def reserved_vehicle_ids(
    target: DateLike,
    reservations: Iterable[CarReservationRow],
    ignore_cancelled: bool = False,
) -> Set[str]:
    return {
        reservation.car_id
        for reservation in _blocking(reservations, ignore_cancelled)
        if date_range_overlaps(target, reservation.pickup_date, reservation.return_date)
    }


def reservation_overlaps_range(reservation: CarReservationRow, range_start: DateLike, range_end: Optional[DateLike] = None) -> bool:
    start = to_date(range_start)
    end = to_date(range_end) if range_end is not None else start
    reserved_until = reservation.return_date or reservation.pickup_date
    return reservation.pickup_date <= end and start <= reserved_until


def free_vehicles_for_range(
    range_start: DateLike,
    range_end: Optional[DateLike],
    reservations: Iterable[CarReservationRow],
    catalog: Iterable[Vehicle],
    ignore_cancelled: bool = False,
) -> List[Vehicle]:
    """
    Vehicles with no reservation touching any day of the requested span.

    Each reservation is compared as one interval, so the cost does not grow
    with the length of the span.
    """
    start = to_date(range_start)
    end = to_date(range_end) if range_end is not None else start
    if end < start:
        return list(catalog)
    occupied = {
        reservation.car_id
        for reservation in _blocking(reservations, ignore_cancelled)
        if reservation_overlaps_range(reservation, start, end)
    }
    return [vehicle for vehicle in catalog if vehicle.id not in occupied]


def free_dates_for_vehicle(
    vehicle_id: str,
    horizon_days: int,
    reservations: Iterable[CarReservationRow],
    today: Optional[date] = None,
    ignore_cancelled: bool = False,
) -> Iterator[date]:
    """Lazily yield the free days among the next `horizon_days` days, starting today."""
    reservations = list(reservations)
    start = today or date.today()
    for offset in range(max(0, horizon_days)):
        day = start + timedelta(days=offset)
        if not vehicle_is_reserved(vehicle_id, day, reservations, ignore_cancelled):
            yield day


def ensure_span_within(range_start: DateLike, range_end: Optional[DateLike], field: str, max_days: int = MAX_RANGE_DAYS) -> None:
    """Reject inverted spans and spans longer than `max_days` inclusive days."""
    start = to_date(range_start)
    end = to_date(range_end) if range_end is not None else start
    if end < start:
        raise ValidationError(f"{field} must not be before the start date", fields=[field])
    if (end - start).days + 1 > max_days:
        raise ValidationError(f"Date range is limited to {max_days} days", fields=[field])
