from datetime import date
from typing import List, Literal, Union

from pydantic import BaseModel, Field, model_validator

from core.config import MAX_RANGE_DAYS

VehicleClass = Literal["sedan", "suv", "minivan"]
AirportCode = Literal["tunis-carthage", "enfidha", "monastir"]


class CarRentalConfiguration(BaseModel):
    type: Literal["car"] = "car"
    car_id: str
    pickup_date: date
    return_date: date
    pickup_location: str = ""
    return_location: str = ""
    add_ons: List[str] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.return_date < self.pickup_date:
            raise ValueError("return_date must not be before pickup_date")
        if (self.return_date - self.pickup_date).days + 1 > MAX_RANGE_DAYS:
            raise ValueError(f"rentals are limited to {MAX_RANGE_DAYS} days")
        return self


class ExcursionConfiguration(BaseModel):
    type: Literal["excursion"] = "excursion"
    excursion_id: str
    date: date
    persons: int = Field(default=1, ge=1)
    car_type: VehicleClass = "sedan"
    add_ons: List[str] = []


class AirportTransferConfiguration(BaseModel):
    type: Literal["airport-transfer"] = "airport-transfer"
    airport: AirportCode
    pickup_location: str = ""
    date: date
    time: str = ""
    passengers: int = Field(default=1, ge=1)
    car_preference: VehicleClass = "sedan"


AnyConfiguration = Union[CarRentalConfiguration, ExcursionConfiguration, AirportTransferConfiguration]
