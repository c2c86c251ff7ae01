from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import salon.models  # noqa: F401
from salon.data import shop_settings
from salon.db import get_session
from salon.main import app

# a Tuesday; day_of_week 2 in Sunday-first numbering
DAY = date(2030, 1, 15)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    monkeypatch.setitem(shop_settings, "open_hour", 9)
    monkeypatch.setitem(shop_settings, "close_hour", 17)
    monkeypatch.setitem(shop_settings, "slot_minutes", 15)
    monkeypatch.setitem(shop_settings, "strict_closing", False)
    monkeypatch.setitem(shop_settings, "enforce_staff_schedule", False)


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client, email, password, role, headers=None, staff_id=None):
    payload = {"email": email, "password": password, "role": role, "staff_id": staff_id}
    resp = client.post("/users", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", data={"username": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "admin@brightcuts.com", "front-desk-1", "admin")


def make_service(client, headers, **overrides):
    payload = {
        "name": "Haircut",
        "description": "Classic cut and style",
        "duration": 30,
        "price": "35.00",
        "category": "haircuts",
        "active": True,
    }
    payload.update(overrides)
    resp = client.post("/services", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def make_staff(client, headers, service_ids, **overrides):
    payload = {
        "name": "Sarah Johnson",
        "email": "sarah@brightcuts.com",
        "phone": "(555) 123-4567",
        "role": "stylist",
        "service_ids": service_ids,
        "schedule": [
            {"day_of_week": 2, "start_time": "10:00", "end_time": "14:00"},
        ],
        "active": True,
    }
    payload.update(overrides)
    resp = client.post("/staff", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def haircut(client, admin_headers):
    return make_service(client, admin_headers)


@pytest.fixture
def coloring(client, admin_headers):
    return make_service(
        client, admin_headers,
        name="Hair Color", description="Full color", duration=90, price="80.00", category="color",
    )


@pytest.fixture
def stylist(client, admin_headers, haircut, coloring):
    return make_staff(client, admin_headers, [haircut["id"], coloring["id"]])


# the stylist's own login
@pytest.fixture
def staff_headers(client, admin_headers, stylist):
    return _login(
        client, "sarah.chair@brightcuts.com", "chair-pass-1", "staff", headers=admin_headers, staff_id=stylist["id"],
    )
