# catalog/catalog.py

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from availability.resolver import ensure_span_within, free_vehicles_for_range
from catalog.search import search_vehicles, vehicle_category
from catalog.store import CatalogStore, add_ons_for, get_catalog, ADD_ONS
from core.config import CANCELLED_BLOCKS_AVAILABILITY
from core.errors import BookingError, to_http_exception
from models.reservation import ReservationType
from models.vehicle import AddOn, ExcursionPackage, Vehicle
from pricing.engine import daily_rate, rental_days
from reservations.store import ReservationStore, get_reservation_store

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


class VehicleListing(BaseModel):
    vehicle: Vehicle
    category: str
    daily_rate: int
    days: int
    total_price: int


@router.get("/vehicles", response_model=List[Vehicle])
async def list_vehicles(catalog: CatalogStore = Depends(get_catalog)):
    return catalog.list_vehicles()


@router.get("/vehicles/{vehicle_id}", response_model=Vehicle)
async def get_vehicle(vehicle_id: str, catalog: CatalogStore = Depends(get_catalog)):
    try:
        return catalog.get_vehicle(vehicle_id)
    except BookingError as exc:
        raise to_http_exception(exc)


@router.get("/excursions", response_model=List[ExcursionPackage])
async def list_excursions(catalog: CatalogStore = Depends(get_catalog)):
    return catalog.list_excursions()


@router.get("/excursions/{excursion_id}", response_model=ExcursionPackage)
async def get_excursion(excursion_id: str, catalog: CatalogStore = Depends(get_catalog)):
    try:
        return catalog.get_excursion(excursion_id)
    except BookingError as exc:
        raise to_http_exception(exc)


@router.get("/add-ons", response_model=List[AddOn])
async def list_add_ons(service: Optional[Literal["car", "excursion"]] = None):
    return add_ons_for(service) if service else list(ADD_ONS.values())


@router.get("/search", response_model=List[VehicleListing])
async def search(
    pickup_date: Optional[date] = None,
    return_date: Optional[date] = None,
    category: Optional[str] = Query(default="all"),
    transmission: Optional[str] = Query(default="all"),
    min_seats: Optional[int] = None,
    sort_by: Literal["price", "name"] = "price",
    catalog: CatalogStore = Depends(get_catalog),
    store: ReservationStore = Depends(get_reservation_store),
):
    """
    Searches the fleet; with a pickup date only vehicles free for the whole
    span are listed, priced for the inclusive number of rental days.
    """
    vehicles = catalog.list_vehicles()
    days = 1
    try:
        if pickup_date:
            end = return_date or pickup_date
            ensure_span_within(pickup_date, end, "return_date")
            days = rental_days(pickup_date, end)
            reservations = await store.select_all(ReservationType.CAR, "pickup_date")
            vehicles = free_vehicles_for_range(
                pickup_date, end, reservations, vehicles,
                ignore_cancelled=not CANCELLED_BLOCKS_AVAILABILITY,
            )
    except BookingError as exc:
        raise to_http_exception(exc)

    results = search_vehicles(vehicles, category, transmission, min_seats, sort_by)
    return [
        VehicleListing(
            vehicle=vehicle,
            category=vehicle_category(vehicle),
            daily_rate=daily_rate(vehicle),
            days=days,
            total_price=daily_rate(vehicle) * days,
        )
        for vehicle in results
    ]
