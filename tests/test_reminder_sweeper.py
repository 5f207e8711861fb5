from datetime import date

from sqlmodel import Session, select

from clinic_booking.application.services.reminder_sweeper import ReminderSweeper
from clinic_booking.db.models import AppointmentReminder
from clinic_booking.schemas.appointments.appointment import AppointmentCreate

from conftest import add_slot


def book(engine, service, directory, day, start, end):
    slot_id = add_slot(engine, directory.doctor_id, day, start, end)
    return service.create_appointment(AppointmentCreate(
        patient_id=directory.patient_id,
        doctor_id=directory.doctor_id,
        time_slot_id=slot_id,
        reason_for_visit="Checkup",
    ), "user-admin")


def sweeper(coordinator, notifier, clock):
    return ReminderSweeper(coordinator=coordinator, notifier=notifier, channels=["email", "in-app"], window_hours=24, clock=clock)


def reminder_rows(engine):
    with Session(engine) as s:
        return [(r.appointment_id, r.channel) for r in s.exec(select(AppointmentReminder)).all()]


def test_reminds_only_appointments_inside_window(engine, service, coordinator, notifier, directory, clock):
    due = book(engine, service, directory, date(2030, 1, 10), "15:00", "15:30")
    edge = book(engine, service, directory, date(2030, 1, 11), "09:00", "09:30")
    book(engine, service, directory, date(2030, 1, 12), "10:00", "10:30")
    book(engine, service, directory, date(2030, 1, 10), "08:00", "08:30")
    notifier.sent.clear()

    assert sweeper(coordinator, notifier, clock).schedule_appointment_reminders() == 2

    reminded = {s.payload["related_id"] for s in notifier.of_kind("reminder")}
    assert reminded == {due.id, edge.id}
    assert {s.channel for s in notifier.of_kind("reminder")} == {"email", "in-app"}
    assert sorted(reminder_rows(engine)) == sorted([
        (due.id, "email"), (due.id, "in-app"), (edge.id, "email"), (edge.id, "in-app"),
    ])


def test_second_run_sends_nothing(engine, service, coordinator, notifier, directory, clock):
    book(engine, service, directory, date(2030, 1, 10), "15:00", "15:30")
    sweep = sweeper(coordinator, notifier, clock)
    assert sweep.schedule_appointment_reminders() == 1
    sent = len(notifier.of_kind("reminder"))

    assert sweep.schedule_appointment_reminders() == 0
    assert len(notifier.of_kind("reminder")) == sent


def test_undelivered_channel_is_retried_next_run(engine, service, coordinator, notifier, directory, clock):
    appt = book(engine, service, directory, date(2030, 1, 10), "15:00", "15:30")
    notifier.undelivered_channels.add("email")
    sweep = sweeper(coordinator, notifier, clock)

    assert sweep.schedule_appointment_reminders() == 1
    assert reminder_rows(engine) == [(appt.id, "in-app")]

    notifier.undelivered_channels.clear()
    assert sweep.schedule_appointment_reminders() == 1
    assert [s.channel for s in notifier.of_kind("reminder")] == ["in-app", "email"]
    assert sorted(reminder_rows(engine)) == [(appt.id, "email"), (appt.id, "in-app")]


def test_failure_for_one_appointment_does_not_stop_sweep(engine, service, coordinator, notifier, directory, clock):
    broken = book(engine, service, directory, date(2030, 1, 10), "15:00", "15:30")
    healthy = book(engine, service, directory, date(2030, 1, 10), "16:00", "16:30")
    notifier.raise_for.add(broken.id)

    assert sweeper(coordinator, notifier, clock).schedule_appointment_reminders() == 1
    assert {s.payload["related_id"] for s in notifier.of_kind("reminder")} == {healthy.id}


def test_cancelled_appointments_are_not_reminded(engine, service, coordinator, notifier, directory, clock):
    appt = book(engine, service, directory, date(2030, 1, 10), "15:00", "15:30")
    service.cancel_appointment(appt.id, "user-admin")

    assert sweeper(coordinator, notifier, clock).schedule_appointment_reminders() == 0
    assert notifier.of_kind("reminder") == []
