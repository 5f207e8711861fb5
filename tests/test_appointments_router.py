from datetime import date

import pytest
from fastapi.testclient import TestClient

from clinic_booking.application.services.slot_reservation import SlotReservation
from clinic_booking.application.services.time_slots_service import TimeSlotsService
from clinic_booking.auth import create_jwt_token
from clinic_booking.dependencies import get_appointments_service, get_time_slots_service
from clinic_booking.main import app

from conftest import add_slot

DAY = date(2030, 1, 10)


@pytest.fixture
def client(service, coordinator):
    app.dependency_overrides[get_appointments_service] = lambda: service
    app.dependency_overrides[get_time_slots_service] = lambda: TimeSlotsService(coordinator, SlotReservation())
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {create_jwt_token({'sub': 'user-admin'})}"}


def body(directory, slot_id, **extra):
    data = {
        "patient_id": directory.patient_id,
        "doctor_id": directory.doctor_id,
        "time_slot_id": slot_id,
        "reason_for_visit": "Persistent cough",
    }
    data.update(extra)
    return data


def test_book_and_fetch(client, auth, engine, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)

    created = client.post("/appointments/", json=body(directory, slot_id), headers=auth)
    assert created.status_code == 201
    appt = created.json()
    assert appt["status"] == "scheduled"
    assert appt["doctor"]["last_name"] == "Silva"

    fetched = client.get(f"/appointments/{appt['id']}", headers=auth)
    assert fetched.status_code == 200
    assert fetched.json()["time_slot_id"] == slot_id


def test_double_booking_returns_409(client, auth, engine, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    assert client.post("/appointments/", json=body(directory, slot_id), headers=auth).status_code == 201

    res = client.post("/appointments/", json=body(directory, slot_id), headers=auth)
    assert res.status_code == 409
    assert res.json()["success"] is False
    assert "already booked" in res.json()["error"]


def test_invalid_transition_returns_409(client, auth, engine, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    appt_id = client.post("/appointments/", json=body(directory, slot_id), headers=auth).json()["id"]

    res = client.patch(f"/appointments/{appt_id}", json={"status": "completed"}, headers=auth)
    assert res.status_code == 409


def test_unknown_patch_field_is_rejected(client, auth, engine, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    appt_id = client.post("/appointments/", json=body(directory, slot_id), headers=auth).json()["id"]

    res = client.patch(f"/appointments/{appt_id}", json={"doctor_id": directory.other_doctor_id}, headers=auth)
    assert res.status_code == 422


def test_cancel_endpoint_frees_slot(client, auth, engine, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    appt_id = client.post("/appointments/", json=body(directory, slot_id), headers=auth).json()["id"]

    res = client.post(f"/appointments/{appt_id}/cancel", json={"reason": "Travelling"}, headers=auth)
    assert res.status_code == 200
    assert res.json()["cancel_reason"] == "Travelling"
    assert client.get(f"/time-slots/{slot_id}", headers=auth).json()["status"] == "available"


def test_missing_appointment_returns_404(client, auth):
    assert client.get("/appointments/00000000-0000-0000-0000-000000000000", headers=auth).status_code == 404
    assert client.delete("/appointments/00000000-0000-0000-0000-000000000000", headers=auth).status_code == 404


def test_malformed_id_returns_400(client, auth):
    res = client.get("/appointments/doctors/not-an-id/upcoming", headers=auth)
    assert res.status_code == 400


def test_requests_without_token_are_rejected(client):
    assert client.get("/appointments/").status_code == 401


def test_list_is_paginated(client, auth, engine, directory):
    for start, end in (("09:00", "09:30"), ("10:00", "10:30")):
        client.post("/appointments/", json=body(directory, add_slot(engine, directory.doctor_id, DAY, start, end)), headers=auth)

    res = client.get("/appointments/", params={"limit": 1, "page": 1}, headers=auth)
    assert res.status_code == 200
    assert res.json()["total"] == 2
    assert res.json()["total_pages"] == 2
    assert len(res.json()["items"]) == 1
