"""
Query-string handoff from the configuration pages into checkout.
"""
import unittest
from datetime import date

from bookings.handoff import parse_handoff
from catalog.store import CatalogStore
from core.errors import NotFoundError, ValidationError
from models.configuration import (
    AirportTransferConfiguration,
    CarRentalConfiguration,
    ExcursionConfiguration,
)


class ParseHandoffTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.catalog = CatalogStore.from_directory()

    def test_car_handoff(self):
        handoff = parse_handoff(
            "?type=car&carId=polo-8&pickupDate=2025-06-01&returnDate=2025-06-03"
            "&pickupLocation=hammamet&addOns=gps,babySeat&totalPrice=309",
            self.catalog,
        )
        config = handoff.configuration
        self.assertIsInstance(config, CarRentalConfiguration)
        self.assertEqual(config.car_id, "polo-8")
        self.assertEqual(config.pickup_date, date(2025, 6, 1))
        self.assertEqual(config.return_date, date(2025, 6, 3))
        self.assertEqual(config.add_ons, ["gps", "babySeat"])
        self.assertEqual(handoff.handed_off_total, 309)

    def test_type_defaults_to_car_and_return_defaults_to_pickup(self):
        handoff = parse_handoff({"carId": "clio-5", "pickupDate": "2025-06-01"}, self.catalog)
        self.assertEqual(handoff.configuration.return_date, date(2025, 6, 1))
        self.assertIsNone(handoff.handed_off_total)

    def test_car_without_pickup_date_is_incomplete(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_handoff({"type": "car", "carId": "clio-5"}, self.catalog)
        self.assertEqual(ctx.exception.fields, ["pickupDate"])

    def test_return_before_pickup_is_rejected(self):
        with self.assertRaises(ValidationError):
            parse_handoff(
                {"carId": "clio-5", "pickupDate": "2025-06-05", "returnDate": "2025-06-01"},
                self.catalog,
            )

    def test_unknown_vehicle_redirects_to_fleet(self):
        with self.assertRaises(NotFoundError) as ctx:
            parse_handoff({"carId": "batmobile", "pickupDate": "2025-06-01"}, self.catalog)
        self.assertEqual(ctx.exception.redirect_to, "/fleet")

    def test_excursion_handoff_parses_integers_leniently(self):
        handoff = parse_handoff(
            "type=excursion&excursionId=sidi-bou-said&date=2025-07-14&persons=4guests"
            "&carType=suv&addOns=guide,airport",
            self.catalog,
        )
        config = handoff.configuration
        self.assertIsInstance(config, ExcursionConfiguration)
        self.assertEqual(config.persons, 4)
        self.assertEqual(config.car_type, "suv")
        self.assertEqual(config.add_ons, ["guide", "airportDropoff"])

    def test_excursion_missing_persons_defaults_to_one(self):
        handoff = parse_handoff(
            {"type": "excursion", "excursionId": "kairouan", "date": "2025-07-14", "persons": "many"},
            self.catalog,
        )
        self.assertEqual(handoff.configuration.persons, 1)

    def test_unknown_excursion_redirects_to_excursions(self):
        with self.assertRaises(NotFoundError) as ctx:
            parse_handoff({"type": "excursion", "excursionId": "atlantis", "date": "2025-07-14"}, self.catalog)
        self.assertEqual(ctx.exception.redirect_to, "/excursions")

    def test_airport_transfer_handoff(self):
        handoff = parse_handoff(
            "type=airport-transfer&pickupLocation=Sousse&date=2025-08-02&time=09:15"
            "&passengers=3&carPreference=minivan&totalPrice=105",
            self.catalog,
        )
        config = handoff.configuration
        self.assertIsInstance(config, AirportTransferConfiguration)
        self.assertEqual(config.airport, "tunis-carthage")
        self.assertEqual(config.time, "09:15")
        self.assertEqual(config.passengers, 3)
        self.assertEqual(handoff.handed_off_total, 105)

    def test_airport_transfer_without_date_is_incomplete(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_handoff({"type": "airport-transfer", "airport": "enfidha"}, self.catalog)
        self.assertIn("date", ctx.exception.fields)

    def test_empty_query_has_no_booking(self):
        with self.assertRaises(NotFoundError):
            parse_handoff("", self.catalog)
        with self.assertRaises(NotFoundError):
            parse_handoff({}, self.catalog)

    def test_unknown_type_redirects_home(self):
        with self.assertRaises(NotFoundError) as ctx:
            parse_handoff({"type": "helicopter"}, self.catalog)
        self.assertEqual(ctx.exception.redirect_to, "/")


if __name__ == "__main__":
    unittest.main()
