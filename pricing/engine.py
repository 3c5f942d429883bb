"""
Pricing rules for car rentals, excursions and airport transfers.

Every function here is pure: identical inputs always produce the identical
integer total, so callers may recompute on every change without caching.
"""

import math
from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel

from catalog.store import ADD_ONS, CatalogStore, normalize_add_ons
from core.errors import ValidationError
from models.configuration import (
    AirportTransferConfiguration,
    CarRentalConfiguration,
    ExcursionConfiguration,
)
from models.vehicle import ExcursionPackage, Vehicle

EXCURSION_CLASS_UPGRADE = {"sedan": 0, "suv": 20, "minivan": 35}

AIRPORT_BASE_FARE = {"tunis-carthage": 80, "enfidha": 40, "monastir": 30}
TRANSFER_CLASS_SURCHARGE = {"sedan": 0, "suv": 15, "minivan": 25}

AIRPORT_LABELS = {
    "tunis-carthage": "Tunis-Carthage",
    "enfidha": "Enfidha-Hammamet",
    "monastir": "Monastir",
}
VEHICLE_CLASS_LABELS = {"sedan": "Sedan", "suv": "SUV", "minivan": "Minivan"}

LARGE_GROUP_THRESHOLD = 3


class Quote(BaseModel):
    type: str
    total: int
    base_price: int
    add_ons_total: int = 0
    surcharge: int = 0
    days: Optional[int] = None
    daily_rate: Optional[int] = None
    add_ons: List[str] = []


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _lookup(table: dict, key: str, what: str) -> int:
    try:
        return table[key]
    except KeyError:
        raise ValidationError(f"Unknown {what} '{key}'", fields=[what])


def _add_on_prices(add_ons: Iterable[str], service: str) -> List[int]:
    prices = []
    for key in normalize_add_ons(add_ons):
        addon = ADD_ONS.get(key)
        if addon is None or addon.service != service:
            raise ValidationError(f"Add-on '{key}' is not available for {service} bookings", fields=["add_ons"])
        prices.append(addon.price)
    return prices


def rental_days(pickup_date: date, return_date: date) -> int:
    """Both the pickup and the return day are billable; never less than one day."""
    return max(1, (return_date - pickup_date).days + 1)


def daily_rate(vehicle: Vehicle) -> int:
    if vehicle.discount:
        return round_half_up(vehicle.price * (1 - vehicle.discount / 100))
    return vehicle.price


def car_rental_price(vehicle: Vehicle, pickup_date: date, return_date: date, add_ons: Iterable[str] = ()) -> int:
    days = rental_days(pickup_date, return_date)
    return daily_rate(vehicle) * days + sum(price * days for price in _add_on_prices(add_ons, "car"))


def excursion_base_price(package: ExcursionPackage, persons: int) -> int:
    # Flat per-booking rate; the large-group tier only exists when price3 is set.
    if persons <= LARGE_GROUP_THRESHOLD:
        return package.price
    return package.price3 if package.price3 is not None else package.price


def excursion_price(package: ExcursionPackage, persons: int, vehicle_class: str, add_ons: Iterable[str] = ()) -> int:
    upgrade = _lookup(EXCURSION_CLASS_UPGRADE, vehicle_class, "vehicle_class")
    return excursion_base_price(package, persons) + upgrade + sum(_add_on_prices(add_ons, "excursion"))


def airport_transfer_price(airport: str, vehicle_class: str) -> int:
    return _lookup(AIRPORT_BASE_FARE, airport, "airport") + _lookup(TRANSFER_CLASS_SURCHARGE, vehicle_class, "vehicle_class")


def quote_configuration(config, catalog: CatalogStore) -> Quote:
    """Price any service configuration, with a breakdown for display."""
    if isinstance(config, CarRentalConfiguration):
        vehicle = catalog.get_vehicle(config.car_id)
        days = rental_days(config.pickup_date, config.return_date)
        add_ons = normalize_add_ons(config.add_ons)
        rate = daily_rate(vehicle)
        return Quote(
            type=config.type,
            total=car_rental_price(vehicle, config.pickup_date, config.return_date, add_ons),
            base_price=rate * days,
            add_ons_total=sum(_add_on_prices(add_ons, "car")) * days,
            days=days,
            daily_rate=rate,
            add_ons=add_ons,
        )
    if isinstance(config, ExcursionConfiguration):
        package = catalog.get_excursion(config.excursion_id)
        add_ons = normalize_add_ons(config.add_ons)
        return Quote(
            type=config.type,
            total=excursion_price(package, config.persons, config.car_type, add_ons),
            base_price=excursion_base_price(package, config.persons),
            add_ons_total=sum(_add_on_prices(add_ons, "excursion")),
            surcharge=EXCURSION_CLASS_UPGRADE[config.car_type],
            add_ons=add_ons,
        )
    if isinstance(config, AirportTransferConfiguration):
        return Quote(
            type=config.type,
            total=airport_transfer_price(config.airport, config.car_preference),
            base_price=AIRPORT_BASE_FARE[config.airport],
            surcharge=TRANSFER_CLASS_SURCHARGE[config.car_preference],
        )
    raise TypeError(f"Unsupported service configuration: {type(config).__name__}")


def price_configuration(config, catalog: CatalogStore) -> int:
    return quote_configuration(config, catalog).total
