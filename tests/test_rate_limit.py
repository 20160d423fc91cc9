"""Rate limiter tests."""

import pytest

from timetrack.main import app
from timetrack.rate_limit import RateLimiter


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_counts_within_window():
    clock = FakeClock()
    limiter = RateLimiter(window_seconds=60, max_requests=2, clock=clock)

    assert limiter.hit("1.2.3.4").count == 1
    assert limiter.hit("1.2.3.4").count == 2
    assert limiter.hit("5.6.7.8").count == 1


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = RateLimiter(window_seconds=60, max_requests=2, clock=clock)
    limiter.hit("1.2.3.4")
    limiter.hit("1.2.3.4")

    clock.now += 61
    assert limiter.hit("1.2.3.4").count == 1


@pytest.fixture
def strict_limiter(client):
    """Swap in a limiter allowing two requests per minute, with a fake clock."""
    original = app.state.rate_limiter
    clock = FakeClock()
    app.state.rate_limiter = RateLimiter(window_seconds=60, max_requests=2, clock=clock)
    yield clock
    app.state.rate_limiter = original


def test_auth_routes_are_rate_limited(client, strict_limiter):
    payload = {"email": "nobody@example.com", "password": "wrongpass123"}

    first = client.post("/auth/login", json=payload)
    assert first.status_code == 401
    assert first.headers["X-RateLimit-Limit"] == "2"
    assert first.headers["X-RateLimit-Remaining"] == "1"

    assert client.post("/auth/login", json=payload).status_code == 401

    response = client.post("/auth/login", json=payload)
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert response.json()["error"] == {
        "code": "TOO_MANY_REQUESTS",
        "message": "Rate limit exceeded. Try again in 60 seconds.",
    }

    strict_limiter.now += 61
    assert client.post("/auth/login", json=payload).status_code == 401


def test_other_routes_are_not_rate_limited(client, strict_limiter):
    for _ in range(5):
        assert client.get("/healthz").status_code == 200


def test_limit_headers_on_every_status(client, strict_limiter):
    app.state.rate_limiter.max_requests = 10
    payload = {"email": "limits@example.com", "password": "password123"}

    created = client.post("/auth/register", json=payload)
    duplicate = client.post("/auth/register", json=payload)
    invalid = client.post("/auth/register", json={"email": "limits@example.com"})

    assert [r.status_code for r in (created, duplicate, invalid)] == [201, 409, 400]
    assert [r.headers["X-RateLimit-Remaining"] for r in (created, duplicate, invalid)] == [
        "9",
        "8",
        "7",
    ]
    assert all(r.headers["X-RateLimit-Limit"] == "10" for r in (created, duplicate, invalid))
    assert all("X-RateLimit-Reset" in r.headers for r in (created, duplicate, invalid))


def test_rejected_request_reports_zero_remaining(client, strict_limiter):
    payload = {"email": "nobody@example.com", "password": "wrongpass123"}
    for _ in range(2):
        client.post("/auth/login", json=payload)

    response = client.post("/auth/login", json=payload)
    assert response.status_code == 429
    assert response.headers["X-RateLimit-Remaining"] == "0"


def test_other_routes_carry_no_limit_headers(client, strict_limiter):
    response = client.get("/healthz")
    assert "X-RateLimit-Limit" not in response.headers
