from pydantic import BaseModel
from typing import Optional
from datetime import date

from models.reservation import PaymentMethod, ReservationStatus, ReservationType


class AdminEvent(BaseModel):
    id: str
    reference: str
    type: ReservationType
    title: str
    subtitle: str
    start_date: date
    end_date: Optional[date] = None
    status: ReservationStatus
    payment_method: PaymentMethod
    customer: str
    total_price: int


class SummaryStats(BaseModel):
    pending: int
    today: int
    upcoming: int
