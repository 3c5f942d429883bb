from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

Transmission = Literal["Automatic", "Manual"]
Fuel = Literal["Petrol", "Diesel", "Electric", "Hybrid"]
Duration = Literal["Half Day", "Full Day", "Multi-Day"]


class Vehicle(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    brand: str
    model: str
    year: int
    price: int  # per day
    transmission: Transmission
    fuel: Fuel
    seats: int
    luggage: int
    horsepower: int
    consumption: str
    features: List[str] = []
    discount: Optional[int] = Field(default=None, ge=0, le=100)
    description: str = ""
    image: Optional[str] = None
    images: List[str] = []
    available: bool = True


class ExcursionPackage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    destination: str
    duration: Duration
    price: int
    price3: Optional[int] = None  # flat rate for groups larger than three
    highlights: List[str] = []
    included: List[str] = []
    description: str = ""
    image: Optional[str] = None


class AddOn(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    price: int
    service: Literal["car", "excursion"]
    per_day: bool
