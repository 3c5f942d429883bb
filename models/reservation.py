from pydantic import BaseModel, EmailStr
from typing import List, Optional
from datetime import date, datetime
from enum import Enum


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CARD = "card"
    AGENCY = "agency"


class ReservationType(str, Enum):
    CAR = "car"
    EXCURSION = "excursion"
    AIRPORT = "airport"

    @property
    def collection(self) -> str:
        return f"{self.value}_reservations"

    @property
    def date_field(self) -> str:
        return "pickup_date" if self is ReservationType.CAR else "date"


class ReservationBase(BaseModel):
    reference_code: str
    total_price: int
    customer_name: str
    customer_email: EmailStr
    customer_phone: str
    payment_method: PaymentMethod
    status: ReservationStatus = ReservationStatus.PENDING


class CarReservationCreate(ReservationBase):
    car_id: str
    car_name: str
    pickup_date: date
    return_date: Optional[date] = None
    pickup_location: str = ""
    return_location: Optional[str] = None
    add_ons: List[str] = []
    driver_license: Optional[str] = None


class ExcursionReservationCreate(ReservationBase):
    excursion_id: str
    excursion_title: str
    date: date
    persons: int
    car_type: str
    add_ons: List[str] = []


class AirportTransferReservationCreate(ReservationBase):
    airport: str
    pickup_location: str = ""
    date: date
    time: str = ""
    passengers: int = 1
    car_preference: str = "sedan"


class StoredReservation(BaseModel):
    id: str
    created_at: datetime


class CarReservationRow(CarReservationCreate, StoredReservation):
    pass


class ExcursionReservationRow(ExcursionReservationCreate, StoredReservation):
    pass


class AirportTransferReservationRow(AirportTransferReservationCreate, StoredReservation):
    pass


class StatusUpdate(BaseModel):
    status: ReservationStatus
