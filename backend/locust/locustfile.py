"""
Locust Load Test Suite

Tokens are minted locally with the server's SECRET_KEY, so export the same
value before running.

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overbooking
  locust -f locustfile.py --tags throughput   # Test cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
import uuid
from datetime import datetime, timezone, timedelta

from jose import jwt
from locust import HttpUser, task, between, tag

SECRET_KEY = os.environ.get("SECRET_KEY", "super-secret-key-change-in-production")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None


def bearer(user_id: uuid.UUID, is_admin: bool = False) -> dict:
    token = jwt.encode(
        {
            "sub": str(user_id),
            "is_admin": is_admin,
            "email": f"load_{user_id.hex[:8]}@example.com",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        SECRET_KEY,
        algorithm=ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


def event_payload(total_seats: int, title: str) -> dict:
    return {
        "title": title,
        "description": "Load test event",
        "event_date": (datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
        "location": "Load Hall",
        "total_seats": total_seats,
        "price": "10.00",
    }


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users → 10 seats

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT SUM(seats_booked) FROM bookings
      WHERE event_id = X AND booking_status = 'confirmed';
    Should be ≤ 10, and available_seats + that sum = 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = bearer(uuid.uuid4())

        if not CONCURRENCY_EVENT_ID:
            resp = self.client.post(
                "/api/v1/events/",
                json=event_payload(10, "Concurrency Test Event"),
                headers=bearer(uuid.uuid4(), is_admin=True),
            )
            if resp.status_code == 201:
                globals()["CONCURRENCY_EVENT_ID"] = resp.json()["id"]
                print(f"\n✓ Created event {CONCURRENCY_EVENT_ID} with 10 seats\n")

    @tag("concurrency")
    @task
    def book_limited_seats(self):
        """All users fight for same 10 seats."""
        if not CONCURRENCY_EVENT_ID:
            return

        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": CONCURRENCY_EVENT_ID, "seats_booked": 1},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # sold out, or this user already holds a seat
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the server, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        resp = self.client.get(
            f"/api/v1/events/?page={page}&page_size=20",
            name="/api/v1/events/ [cached]",
        )
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @tag("throughput", "read")
    @task(3)
    def get_availability(self):
        if EVENT_IDS:
            self.client.get(
                f"/api/v1/events/{random.choice(EVENT_IDS)}/availability",
                name="/api/v1/events/{id}/availability",
            )

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = bearer(uuid.uuid4())

    def expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": str(uuid.uuid4()), "seats_booked": 1},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [404])

    @tag("edge")
    @task
    def non_positive_seats(self):
        if not EVENT_IDS:
            return
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": random.choice(EVENT_IDS), "seats_booked": random.choice([0, -5])},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [422])

    @tag("edge")
    @task
    def huge_seats(self):
        if not EVENT_IDS:
            return
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": random.choice(EVENT_IDS), "seats_booked": 999999},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [409])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings/",
            data="not json at all",
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self.expect(resp, [422])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"event_id": str(uuid.uuid4()), "seats_booked": 1},
            catch_response=True,
        ) as resp:
            self.expect(resp, [401])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some booking and cancelling.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = bearer(uuid.uuid4())
        self.booking_ids = []

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events/?page=1&page_size=20")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @task(10)
    def book_seats(self):
        if not EVENT_IDS:
            return
        resp = self.client.post(
            "/api/v1/bookings/",
            json={"event_id": random.choice(EVENT_IDS), "seats_booked": random.randint(1, 3)},
            headers=self.headers,
        )
        if resp.status_code == 201:
            self.booking_ids.append(resp.json()["id"])

    @task(4)
    def cancel_booking(self):
        if self.booking_ids:
            booking_id = self.booking_ids.pop(random.randrange(len(self.booking_ids)))
            self.client.delete(f"/api/v1/bookings/{booking_id}", headers=self.headers, name="/api/v1/bookings/{id}")

    @task(5)
    def my_bookings(self):
        self.client.get("/api/v1/bookings/", headers=self.headers)
