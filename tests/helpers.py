"""
Builders for catalog entries and stored reservation rows used across tests.
"""
from datetime import datetime

from models.reservation import (
    AirportTransferReservationRow,
    CarReservationCreate,
    CarReservationRow,
    ExcursionReservationRow,
)
from models.vehicle import ExcursionPackage, Vehicle

_counter = {"n": 0}


def _next_id():
    _counter["n"] += 1
    return f"{_counter['n']:024x}"


def _common(status, payment_method, total_price, customer):
    return dict(
        id=_next_id(),
        created_at=datetime(2025, 4, 1, 9, 0),
        reference_code=f"TND{_counter['n']:06d}",
        total_price=total_price,
        customer_name=customer,
        customer_email="guest@gmail.com",
        customer_phone="+21620000000",
        payment_method=payment_method,
        status=status,
    )


def car_row(car_id, pickup, ret=None, status="pending", payment_method="agency", total_price=300, customer="Amira"):
    return CarReservationRow(
        car_id=car_id,
        car_name=f"{car_id} Model",
        pickup_date=pickup,
        return_date=ret,
        pickup_location="hammamet",
        return_location=None,
        **_common(status, payment_method, total_price, customer),
    )


def excursion_row(day, persons=2, status="pending", total_price=85, customer="Yassine"):
    return ExcursionReservationRow(
        excursion_id="sidi-bou-said",
        excursion_title="Sidi Bou Said & Carthage",
        date=day,
        persons=persons,
        car_type="suv",
        **_common(status, "agency", total_price, customer),
    )


def airport_row(day, status="confirmed", total_price=65, customer="Sarah"):
    return AirportTransferReservationRow(
        airport="enfidha",
        pickup_location="Hammamet",
        date=day,
        time="14:30",
        passengers=3,
        car_preference="minivan",
        **_common(status, "card", total_price, customer),
    )



def make_vehicle(price=120, discount=None, vehicle_id="v1"):
    return Vehicle(
        id=vehicle_id, name="Test Car", brand="Brand", model="Model", year=2023,
        price=price, transmission="Automatic", fuel="Petrol", seats=5, luggage=2,
        horsepower=100, consumption="5L/100km", discount=discount,
    )


def make_excursion(price=85, price3=65):
    return ExcursionPackage(
        id="e1", title="Carthage", destination="Tunis", duration="Full Day",
        price=price, price3=price3,
    )


def car_record(pickup, **overrides):
    values = dict(
        reference_code="TNDABC123", total_price=270, customer_name="Karim",
        customer_email="karim@gmail.com", customer_phone="+21622000000", payment_method="agency",
        car_id="clio-5", car_name="Renault Clio Clio V", pickup_date=pickup, return_date=pickup,
    )
    values.update(overrides)
    return CarReservationCreate(**values)
