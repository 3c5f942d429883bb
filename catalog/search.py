from typing import Iterable, List, Optional

from models.vehicle import Vehicle
from pricing.engine import daily_rate

SORT_KEYS = ("price", "name")


def vehicle_category(vehicle: Vehicle) -> str:
    if vehicle.seats > 5:
        return "SUV"
    name = vehicle.name.lower()
    if "wagon" in name or "variant" in name:
        return "Station Wagon"
    return "Sedan"


def _matches_category(vehicle: Vehicle, category: str) -> bool:
    name = vehicle.name.lower()
    if category == "sedan":
        return "sedan" in name or vehicle.seats <= 5
    if category == "suv":
        return "suv" in name or vehicle.seats > 5
    if category == "wagon":
        return "wagon" in name or "variant" in name
    return True


def search_vehicles(
    vehicles: Iterable[Vehicle],
    category: Optional[str] = None,
    transmission: Optional[str] = None,
    min_seats: Optional[int] = None,
    sort_by: Optional[str] = "price",
) -> List[Vehicle]:
    """Filter the fleet like the search results page and sort by daily rate or name."""
    results = list(vehicles)
    if category and category != "all":
        results = [v for v in results if _matches_category(v, category)]
    if transmission and transmission != "all":
        results = [v for v in results if v.transmission.lower() == transmission.lower()]
    if min_seats:
        results = [v for v in results if v.seats >= min_seats]
    if sort_by == "price":
        results.sort(key=daily_rate)
    elif sort_by == "name":
        results.sort(key=lambda v: v.name.lower())
    return results
