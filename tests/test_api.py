"""
End-to-end HTTP tests against the FastAPI app with an in-memory database.
"""
import asyncio
import unittest

from fastapi.testclient import TestClient

from auth.sessions import ensure_admin_user
from bookings.session import SessionRegistry
from main import app
from tests.fakes import FakeDatabase

ADMIN_EMAIL = "dispatch@gmail.com"
ADMIN_PASSWORD = "calendar-2025"

CAR_QUERY = (
    "?type=car&carId=polo-8&pickupDate=2025-06-01&returnDate=2025-06-03"
    "&pickupLocation=hammamet&addOns=gps&totalPrice=285"
)
CUSTOMER = {
    "name": "Amira Ben Salah",
    "email": "amira.bensalah@gmail.com",
    "phone": "20123456",
    "driver_license": "TN-0042",
}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        # Startup hooks only run inside a `with TestClient(...)` block, so the
        # database and session registry are attached by hand.
        app.mongodb = FakeDatabase()
        app.booking_sessions = SessionRegistry()
        asyncio.run(ensure_admin_user(app.mongodb, ADMIN_EMAIL, ADMIN_PASSWORD))
        self.client = TestClient(app)

    def sign_in(self):
        response = self.client.post("/api/auth/sign-in", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def book_car(self, query=CAR_QUERY, payment_method="agency"):
        session = self.client.post("/api/bookings/sessions/from-query", json={"query": query}).json()
        path = f"/api/bookings/sessions/{session['id']}"
        self.client.post(f"{path}/advance")
        self.client.post(f"{path}/details", json=CUSTOMER)
        response = self.client.post(f"{path}/confirm", json={"payment_method": payment_method})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()


class CatalogApiTests(ApiTestCase):
    def test_list_and_get(self):
        vehicles = self.client.get("/api/catalog/vehicles").json()
        self.assertEqual(len(vehicles), 8)
        response = self.client.get("/api/catalog/excursions/sidi-bou-said")
        self.assertEqual(response.json()["price3"], 65)

    def test_unknown_vehicle(self):
        response = self.client.get("/api/catalog/vehicles/batmobile")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["redirect_to"], "/fleet")

    def test_add_ons_by_service(self):
        keys = [addon["key"] for addon in self.client.get("/api/catalog/add-ons", params={"service": "excursion"}).json()]
        self.assertEqual(keys, ["guide", "lunch", "airportDropoff"])

    def test_search_prices_the_span_and_hides_reserved_vehicles(self):
        self.book_car()
        listings = self.client.get(
            "/api/catalog/search", params={"pickup_date": "2025-06-02", "return_date": "2025-06-04"},
        ).json()
        ids = [listing["vehicle"]["id"] for listing in listings]
        self.assertNotIn("polo-8", ids)
        clio = next(listing for listing in listings if listing["vehicle"]["id"] == "clio-5")
        self.assertEqual((clio["days"], clio["total_price"]), (3, 270))
        rates = [listing["daily_rate"] for listing in listings]
        self.assertEqual(rates, sorted(rates))


class PricingApiTests(ApiTestCase):
    def test_quote_each_service(self):
        car = self.client.post("/api/pricing/quote", json={
            "type": "car", "car_id": "polo-8", "pickup_date": "2025-06-01", "return_date": "2025-06-03",
            "add_ons": ["gps"],
        })
        self.assertEqual(car.json()["total"], 285)
        excursion = self.client.post("/api/pricing/quote", json={
            "type": "excursion", "excursion_id": "sidi-bou-said", "date": "2025-07-14", "persons": 2,
            "car_type": "suv",
        })
        self.assertEqual(excursion.json()["total"], 105)
        transfer = self.client.post("/api/pricing/quote", json={
            "type": "airport-transfer", "airport": "enfidha", "date": "2025-08-02", "car_preference": "minivan",
        })
        self.assertEqual(transfer.json()["total"], 65)

    def test_unknown_airport_is_rejected(self):
        response = self.client.post("/api/pricing/quote", json={
            "type": "airport-transfer", "airport": "djerba", "date": "2025-08-02",
        })
        self.assertEqual(response.status_code, 422)


class BookingApiTests(ApiTestCase):
    def test_full_checkout(self):
        session = self.client.post("/api/bookings/sessions/from-query", json={"query": CAR_QUERY}).json()
        self.assertEqual(session["step"], "reviewing")
        self.assertEqual(session["quote"]["total"], 285)
        self.assertFalse(session["price_mismatch"])

        confirmed = self.book_car(payment_method="card")
        self.assertEqual(confirmed["step"], "confirmed")
        self.assertTrue(confirmed["reference_code"].startswith("TND"))

        receipt = self.client.get(f"/api/bookings/sessions/{confirmed['id']}/receipt").json()
        self.assertEqual(receipt["total_price"], 285)
        self.assertEqual(receipt["payment_method"], "card")

        stored = app.mongodb["car_reservations"].docs
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]["status"], "confirmed")

    def test_incomplete_details_keep_session_at_details(self):
        session = self.client.post("/api/bookings/sessions/from-query", json={"query": CAR_QUERY}).json()
        path = f"/api/bookings/sessions/{session['id']}"
        self.client.post(f"{path}/advance")
        response = self.client.post(f"{path}/details", json={**CUSTOMER, "driver_license": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["fields"], ["driver_license"])
        self.assertEqual(self.client.get(path).json()["step"], "details_capture")

    def test_skipping_a_step_conflicts(self):
        session = self.client.post("/api/bookings/sessions", json={
            "type": "airport-transfer", "airport": "monastir", "date": "2025-08-02",
        }).json()
        response = self.client.post(f"/api/bookings/sessions/{session['id']}/confirm", json={})
        self.assertEqual(response.status_code, 409)

    def test_missing_session_and_empty_handoff(self):
        self.assertEqual(self.client.get("/api/bookings/sessions/unknown").status_code, 404)
        response = self.client.post("/api/bookings/sessions/from-query", json={"query": ""})
        self.assertEqual(response.status_code, 404)

    def test_country_codes(self):
        codes = self.client.get("/api/bookings/country-codes").json()
        self.assertEqual(codes[0], {"code": "+216", "country": "Tunisia"})


class AvailabilityApiTests(ApiTestCase):
    def test_reserved_vehicle_is_not_free(self):
        self.book_car()
        free = [v["id"] for v in self.client.get(
            "/api/availability/vehicles", params={"start": "2025-06-03", "end": "2025-06-05"},
        ).json()]
        self.assertNotIn("polo-8", free)
        self.assertEqual(len(free), 7)

        status = self.client.get("/api/availability/vehicles/polo-8", params={"date": "2025-06-02"}).json()
        self.assertTrue(status["reserved"])
        status = self.client.get("/api/availability/vehicles/polo-8", params={"date": "2025-06-04"}).json()
        self.assertFalse(status["reserved"])

    def test_free_dates_horizon(self):
        response = self.client.get("/api/availability/vehicles/clio-5/free-dates", params={"horizon": 5})
        self.assertEqual(len(response.json()["free_dates"]), 5)

    def test_inverted_range_is_rejected(self):
        response = self.client.get("/api/availability/vehicles", params={"start": "2025-06-05", "end": "2025-06-01"})
        self.assertEqual(response.status_code, 400)

    def test_range_longer_than_limit_is_rejected(self):
        response = self.client.get("/api/availability/vehicles", params={"start": "0001-01-01", "end": "9999-12-31"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["fields"], ["end"])
        response = self.client.get(
            "/api/catalog/search", params={"pickup_date": "2025-01-01", "return_date": "2027-01-01"},
        )
        self.assertEqual(response.status_code, 400)


class AdminApiTests(ApiTestCase):
    def test_dashboard_requires_session(self):
        self.assertEqual(self.client.get("/api/admin/dashboard").status_code, 401)
        self.assertIsNone(self.client.get("/api/auth/session").json())

    def test_wrong_password(self):
        response = self.client.post("/api/auth/sign-in", json={"email": ADMIN_EMAIL, "password": "nope"})
        self.assertEqual(response.status_code, 401)

    def test_dashboard_and_status_change(self):
        confirmed = self.book_car()
        headers = self.sign_in()

        dashboard = self.client.get("/api/admin/dashboard", params={"date": "2025-06-02"}, headers=headers).json()
        self.assertEqual(dashboard["selected_date"], "2025-06-02")
        self.assertEqual(len(dashboard["selected_day_events"]), 1)
        self.assertEqual(dashboard["busy_dates"], ["2025-06-01", "2025-06-02", "2025-06-03"])
        self.assertEqual(dashboard["stats"]["pending"], 1)
        polo = next(slot for slot in dashboard["fleet"] if slot["id"] == "polo-8")
        self.assertTrue(polo["reserved"])

        path = f"/api/admin/reservations/car/{confirmed['reservation_id']}/status"
        response = self.client.patch(path, json={"status": "confirmed"}, headers=headers)
        self.assertEqual(response.json(), {"message": "Reservation marked as confirmed", "refetch": True})
        events = self.client.get("/api/admin/events", headers=headers).json()
        self.assertEqual(events[0]["status"], "confirmed")

        response = self.client.patch(path, json={"status": "pending"}, headers=headers)
        self.assertEqual(response.status_code, 409)

    def test_sign_out_ends_session(self):
        headers = self.sign_in()
        self.assertEqual(self.client.get("/api/auth/session", headers=headers).json()["admin"]["email"], ADMIN_EMAIL)
        self.client.post("/api/auth/sign-out", headers=headers)
        self.assertEqual(self.client.get("/api/admin/events", headers=headers).status_code, 401)


if __name__ == "__main__":
    unittest.main()
