"""Error envelope and health check tests."""

import sqlite3

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError

from timetrack.errors import (
    AppError,
    ErrorCode,
    conflict,
    constraint_name,
    register_exception_handlers,
    too_many_requests,
    unauthorized,
    validation_fields,
)
from timetrack.models.time_entry import USER_DATE_CONSTRAINT
from timetrack.models.user import EMAIL_CONSTRAINT, User


def integrity_error(message):
    return IntegrityError("INSERT ...", {}, sqlite3.IntegrityError(message))


def test_health_check(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["timestamp"]
    assert data["uptime"] >= 0


def test_unknown_route(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {
        "error": {"code": "NOT_FOUND", "message": "Route GET /nope not found"}
    }


def test_malformed_json_body(client):
    response = client.post(
        "/auth/login", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BAD_REQUEST"


def test_validation_envelope_lists_every_field(client):
    response = client.post("/auth/register", json={})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["message"] == "Validation failed for fields: email, password"
    assert [f["path"] for f in error["details"]["fields"]] == ["email", "password"]


def test_unauthorized_sets_www_authenticate(client):
    response = client.get("/subjects")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_app_error_status_codes():
    assert unauthorized("x").status_code == 401
    assert conflict("x").status_code == 409
    assert too_many_requests("x", 30).headers == {"Retry-After": "30"}


def test_validation_fields_strip_location():
    errors = [
        {"loc": ("body", "duration_minutes"), "msg": "too small"},
        {"loc": ("query", "limit"), "msg": "too big"},
        {"loc": ("body",), "msg": "missing subject"},
    ]
    assert validation_fields(errors) == [
        {"path": "duration_minutes", "message": "too small"},
        {"path": "limit", "message": "too big"},
        {"path": "", "message": "missing subject"},
    ]


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        (
            "UNIQUE constraint failed: time_entries.user_id, time_entries.date",
            USER_DATE_CONSTRAINT,
        ),
        ("UNIQUE constraint failed: index 'uq_subjects_user_name'", "uq_subjects_user_name"),
        ("UNIQUE constraint failed: users.email", "users_email_key"),
        ("NOT NULL constraint failed: subjects.name", None),
    ],
)
def test_constraint_name(message, expected):
    assert constraint_name(integrity_error(message)) == expected


@pytest.fixture
def bare_client():
    """A throwaway app wired with the same handlers, for failure paths."""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.get("/duplicate-entry")
    def duplicate_entry():
        raise integrity_error("UNIQUE constraint failed: time_entries.user_id, time_entries.date")

    @app.get("/unmapped-integrity")
    def unmapped_integrity():
        raise integrity_error("CHECK constraint failed: something_else")

    @app.get("/app-error")
    def app_error():
        raise AppError(ErrorCode.FORBIDDEN, "nope", details={"reason": "test"})

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def test_unhandled_exception_is_internal(bare_client):
    response = bare_client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {
        "error": {"code": "INTERNAL", "message": "Internal server error"}
    }


def test_integrity_error_maps_known_constraint(bare_client):
    response = bare_client.get("/duplicate-entry")
    assert response.status_code == 409
    assert response.json()["error"]["message"] == "Latest entry exists on this date"


def test_unmapped_integrity_error_is_internal(bare_client):
    response = bare_client.get("/unmapped-integrity")
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL"


def test_app_error_includes_details(bare_client):
    response = bare_client.get("/app-error")
    assert response.status_code == 403
    assert response.json() == {
        "error": {"code": "FORBIDDEN", "message": "nope", "details": {"reason": "test"}}
    }


class FakeDiag:
    constraint_name = "users_email_key"


class FakePostgresError(Exception):
    diag = FakeDiag()


def test_constraint_name_prefers_driver_diagnostics():
    exc = IntegrityError("INSERT ...", {}, FakePostgresError("duplicate key value"))
    assert constraint_name(exc) == EMAIL_CONSTRAINT


def test_user_email_uniqueness_uses_named_constraint():
    table = User.__table__
    unique_names = {c.name for c in table.constraints if isinstance(c, UniqueConstraint)}
    assert EMAIL_CONSTRAINT in unique_names
    assert all(not index.unique for index in table.indexes)
