"""
Parse the query-string contract that configuration pages use to hand a
booking over to checkout (`/booking?type=car&carId=...`).

Display values such as the rental length are re-derived from the raw
parameters; the handed-off `totalPrice` is kept only for comparison.
"""

import re
from typing import Mapping, NamedTuple, Optional, Union
from urllib.parse import parse_qsl

from pydantic import ValidationError as PydanticValidationError

from catalog.store import CatalogStore, normalize_add_ons
from core.errors import NotFoundError, ValidationError
from models.configuration import (
    AirportTransferConfiguration,
    CarRentalConfiguration,
    ExcursionConfiguration,
)

DEFAULT_AIRPORT = "tunis-carthage"


class Handoff(NamedTuple):
    configuration: object
    handed_off_total: Optional[int]


def _int_param(value: Optional[str], default: Optional[int]) -> Optional[int]:
    # parseInt semantics: leading digits count, anything else falls back.
    match = re.match(r"\s*(-?\d+)", value or "")
    return int(match.group(1)) if match else default


def _split(value: Optional[str]):
    return normalize_add_ons((value or "").split(","))


def parse_handoff(params: Union[str, Mapping[str, str]], catalog: CatalogStore) -> Handoff:
    if isinstance(params, str):
        params = dict(parse_qsl(params.lstrip("?"), keep_blank_values=True))
    if not params:
        raise NotFoundError("No booking data found. Please start a new reservation.", redirect_to="/fleet")

    booking_type = params.get("type") or "car"
    handed_off_total = _int_param(params.get("totalPrice"), None)
    try:
        if booking_type == "car":
            vehicle = catalog.get_vehicle(params.get("carId"))
            pickup_date = params.get("pickupDate")
            if not pickup_date:
                raise ValidationError("A pickup date is required.", fields=["pickupDate"])
            config = CarRentalConfiguration(
                car_id=vehicle.id,
                pickup_date=pickup_date,
                return_date=params.get("returnDate") or pickup_date,
                pickup_location=params.get("pickupLocation") or "",
                return_location=params.get("returnLocation") or "",
                add_ons=_split(params.get("addOns")),
            )
        elif booking_type == "excursion":
            package = catalog.get_excursion(params.get("excursionId"))
            config = ExcursionConfiguration(
                excursion_id=package.id,
                date=params.get("date") or None,
                persons=_int_param(params.get("persons"), 1),
                car_type=params.get("carType") or "sedan",
                add_ons=_split(params.get("addOns")),
            )
        elif booking_type == "airport-transfer":
            config = AirportTransferConfiguration(
                airport=params.get("airport") or DEFAULT_AIRPORT,
                pickup_location=params.get("pickupLocation") or "",
                date=params.get("date") or None,
                time=params.get("time") or "",
                passengers=_int_param(params.get("passengers"), 1),
                car_preference=params.get("carPreference") or "sedan",
            )
        else:
            raise NotFoundError(f"Unknown booking type '{booking_type}'", redirect_to="/")
    except PydanticValidationError as exc:
        fields = [".".join(str(part) for part in error["loc"]) or "configuration" for error in exc.errors()]
        raise ValidationError("Booking data is incomplete. Please restart your reservation.", fields=fields)
    return Handoff(config, handed_off_total)
