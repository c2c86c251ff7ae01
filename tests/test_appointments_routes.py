from datetime import datetime

import pytest

from conftest import DAY, make_service, make_staff
from salon.data import shop_settings
from salon.models import Appointment
from salon.repository import AppointmentRepository


def book(client, headers, service, staff, hhmm, client_name="Jane Smith", day=DAY):
    return client.post(
        "/appointments",
        json={
            "client_name": client_name,
            "service_id": service["id"],
            "staff_id": staff["id"],
            "start_time": f"{day.isoformat()}T{hhmm}:00",
            "notes": None,
        },
        headers=headers,
    )


def test_book_appointment(client, admin_headers, haircut, stylist):
    resp = book(client, admin_headers, haircut, stylist, "09:00")
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["status"] == "scheduled"
    assert body["duration"] == 30
    assert body["start_time"] == f"{DAY.isoformat()}T09:00:00"
    assert body["end_time"] == f"{DAY.isoformat()}T09:30:00"


def test_overlap_is_conflict_with_details(client, admin_headers, haircut, stylist):
    assert book(client, admin_headers, haircut, stylist, "09:00").status_code == 201

    resp = book(client, admin_headers, haircut, stylist, "09:15")
    assert resp.status_code == 409
    assert resp.json()["detail"] == {
        "message": "Appointment overlaps an existing appointment",
        "conflict_start": f"{DAY.isoformat()}T09:00:00",
        "conflict_end": f"{DAY.isoformat()}T09:30:00",
    }


def test_adjacent_booking_is_accepted(client, admin_headers, haircut, stylist):
    assert book(client, admin_headers, haircut, stylist, "09:00").status_code == 201
    assert book(client, admin_headers, haircut, stylist, "09:30").status_code == 201


def test_other_staff_member_can_take_same_time(client, admin_headers, haircut, stylist):
    other = make_staff(client, admin_headers, [haircut["id"]], name="John Smith", email="john@brightcuts.com")
    assert book(client, admin_headers, haircut, stylist, "11:00").status_code == 201
    assert book(client, admin_headers, haircut, other, "11:00").status_code == 201


@pytest.mark.parametrize("hhmm", ["08:45", "17:00", "19:30"])
def test_outside_business_hours(client, admin_headers, haircut, stylist, hhmm):
    resp = book(client, admin_headers, haircut, stylist, hhmm)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Appointment must start within business hours"


def test_late_start_spilling_past_closing(client, admin_headers, coloring, stylist, monkeypatch):
    assert book(client, admin_headers, coloring, stylist, "16:30").status_code == 201

    monkeypatch.setitem(shop_settings, "strict_closing", True)
    resp = book(client, admin_headers, coloring, stylist, "16:30", day=DAY.replace(day=16))
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Appointment must end by closing time"


def test_cancelled_booking_frees_the_slot(client, admin_headers, haircut, stylist):
    first = book(client, admin_headers, haircut, stylist, "14:00").json()
    resp = client.patch(f"/appointments/{first['id']}/status", json={"status": "cancelled"}, headers=admin_headers)
    assert resp.status_code == 200
    assert book(client, admin_headers, haircut, stylist, "14:15").status_code == 201


def test_previous_evening_booking_does_not_block_next_morning(client, admin_headers, stylist, haircut):
    assert book(client, admin_headers, haircut, stylist, "16:45").status_code == 201
    assert book(client, admin_headers, haircut, stylist, "09:00", day=DAY.replace(day=16)).status_code == 201


def test_next_morning_booking_blocks_long_evening_start(client, admin_headers, haircut):
    marathon = make_service(
        client, admin_headers,
        name="Bridal Package", description="Trial, color and styling", duration=1000, price="450.00", category="styling",
    )
    member = make_staff(client, admin_headers, [haircut["id"], marathon["id"]], email="ana@brightcuts.com")
    next_day = DAY.replace(day=16)
    assert book(client, admin_headers, haircut, member, "09:00", day=next_day).status_code == 201

    # 16:45 plus 1000 minutes runs to 09:25 the next morning
    resp = book(client, admin_headers, marathon, member, "16:45")
    assert resp.status_code == 409
    assert resp.json()["detail"]["conflict_start"] == f"{next_day.isoformat()}T09:00:00"


def test_required_fields(client, admin_headers):
    resp = client.post("/appointments", json={"notes": "walk-in"}, headers=admin_headers)
    assert resp.status_code == 422
    assert {v["field"] for v in resp.json()["detail"]} == {"client_name", "service_id", "staff_id", "start_time"}


def test_unqualified_staff_rejected(client, admin_headers, haircut, coloring):
    barber = make_staff(client, admin_headers, [haircut["id"]], role="barber")
    resp = book(client, admin_headers, coloring, barber, "10:00")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Staff member does not perform this service"


def test_inactive_service_and_staff_rejected(client, admin_headers, haircut, stylist):
    client.patch(f"/services/{haircut['id']}/toggle-active", headers=admin_headers)
    assert book(client, admin_headers, haircut, stylist, "10:00").json()["detail"] == "Service not available"

    client.patch(f"/services/{haircut['id']}/toggle-active", headers=admin_headers)
    client.patch(f"/staff/{stylist['id']}/toggle-active", headers=admin_headers)
    assert book(client, admin_headers, haircut, stylist, "10:00").json()["detail"] == "Staff member not available"


def test_staff_schedule_enforced_when_enabled(client, admin_headers, haircut, stylist, monkeypatch):
    monkeypatch.setitem(shop_settings, "enforce_staff_schedule", True)
    resp = book(client, admin_headers, haircut, stylist, "09:00")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Appointment must be within the staff member's working hours"
    assert book(client, admin_headers, haircut, stylist, "10:00").status_code == 201


def test_offset_is_dropped_to_wall_clock(client, admin_headers, haircut, stylist, session):
    resp = client.post(
        "/appointments",
        json={
            "client_name": "Jane Smith",
            "service_id": haircut["id"],
            "staff_id": stylist["id"],
            "start_time": f"{DAY.isoformat()}T09:00:00+02:00",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["start_time"] == f"{DAY.isoformat()}T09:00:00"

    stored = session.get(Appointment, resp.json()["id"])
    session.refresh(stored)
    assert stored.start_time == datetime(2030, 1, 15, 9, 0)
    assert stored.start_time.tzinfo is None


def test_duration_is_fixed_at_booking(client, admin_headers, haircut, stylist):
    appt = book(client, admin_headers, haircut, stylist, "09:00").json()
    payload = {k: v for k, v in haircut.items() if k != "id"}
    payload["duration"] = 60
    client.put(f"/services/{haircut['id']}", json=payload, headers=admin_headers)

    assert client.get(f"/appointments/{appt['id']}", headers=admin_headers).json()["duration"] == 30
    assert book(client, admin_headers, haircut, stylist, "09:30").status_code == 201


def test_status_lifecycle(client, admin_headers, staff_headers, haircut, stylist):
    appt = book(client, admin_headers, haircut, stylist, "12:00").json()
    url = f"/appointments/{appt['id']}/status"

    for status in ("confirmed", "in-progress", "completed"):
        resp = client.patch(url, json={"status": status}, headers=staff_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == status

    resp = client.patch(url, json={"status": "cancelled"}, headers=staff_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Appointment is already completed"


def test_skipping_a_state_is_rejected(client, admin_headers, haircut, stylist):
    appt = book(client, admin_headers, haircut, stylist, "12:00").json()
    resp = client.patch(f"/appointments/{appt['id']}/status", json={"status": "completed"}, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot change status from 'scheduled' to 'completed'"


def test_staff_account_cannot_update_another_members_appointment(client, admin_headers, staff_headers, haircut):
    other = make_staff(client, admin_headers, [haircut["id"]], name="John Smith", email="john@brightcuts.com")
    appt = book(client, admin_headers, haircut, other, "12:00").json()
    url = f"/appointments/{appt['id']}/status"

    resp = client.patch(url, json={"status": "confirmed"}, headers=staff_headers)
    assert resp.status_code == 403
    assert client.get(f"/appointments/{appt['id']}", headers=admin_headers).json()["status"] == "scheduled"

    assert client.patch(url, json={"status": "confirmed"}, headers=admin_headers).status_code == 200


def test_unknown_status_and_missing_appointment(client, admin_headers):
    assert client.patch("/appointments/1/status", json={"status": "no-show"}, headers=admin_headers).status_code == 422
    assert client.patch("/appointments/1/status", json={"status": "confirmed"}, headers=admin_headers).status_code == 404
    assert client.get("/appointments/1", headers=admin_headers).status_code == 404


def test_list_filters(client, admin_headers, haircut, stylist):
    other = make_staff(client, admin_headers, [haircut["id"]], name="John Smith", email="john@brightcuts.com")
    a = book(client, admin_headers, haircut, stylist, "11:00").json()
    book(client, admin_headers, haircut, stylist, "09:00")
    book(client, admin_headers, haircut, other, "10:00")
    book(client, admin_headers, haircut, stylist, "10:00", day=DAY.replace(day=16))
    client.patch(f"/appointments/{a['id']}/status", json={"status": "cancelled"}, headers=admin_headers)

    day_list = client.get("/appointments", params={"on_date": DAY.isoformat()}, headers=admin_headers).json()
    assert [x["start_time"][11:16] for x in day_list] == ["09:00", "10:00", "11:00"]

    mine = client.get(
        "/appointments", params={"on_date": DAY.isoformat(), "staff_id": stylist["id"]}, headers=admin_headers
    ).json()
    assert [x["start_time"][11:16] for x in mine] == ["09:00", "11:00"]

    cancelled = client.get("/appointments", params={"status": "cancelled"}, headers=admin_headers).json()
    assert [x["id"] for x in cancelled] == [a["id"]]

    assert len(client.get("/appointments", headers=admin_headers).json()) == 4


def test_booking_with_other_service_catalog(client, admin_headers):
    trim = make_service(client, admin_headers, name="Beard Trim", duration=20, price="15.00", category="grooming")
    barber = make_staff(client, admin_headers, [trim["id"]], role="barber")
    assert book(client, admin_headers, trim, barber, "09:00").status_code == 201
    assert book(client, admin_headers, trim, barber, "09:20").status_code == 201
    assert book(client, admin_headers, trim, barber, "09:30").status_code == 409


def test_appointments_are_cancelled_not_deleted(client, admin_headers, haircut, stylist):
    appt = book(client, admin_headers, haircut, stylist, "09:00").json()
    assert client.delete(f"/appointments/{appt['id']}", headers=admin_headers).status_code == 405
    assert not hasattr(AppointmentRepository, "delete")
