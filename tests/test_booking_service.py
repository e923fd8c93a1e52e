import threading
from datetime import time
from uuid import uuid4

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.time_slot import TimeSlot
from app.services.booking.booking_service import SLOT_TAKEN, BookingService
from app.services.catalog.service_catalog_service import ServiceCatalogService
from app.services.provider.provider_service import ProviderService
from app.services.slot.slot_service import SlotService


def slot_available(db, slot_id):
    db.expire_all()
    return db.get(TimeSlot, slot_id).is_available


def test_book_claims_slot_and_publishes(db, booking, events, provider, service, slot, client_id):
    appointment = booking.book(client_id, provider.id, service.id, slot.id, notes="first visit")

    assert appointment.status == AppointmentStatus.CONFIRMED.value
    assert appointment.time_slot_id == slot.id
    assert appointment.appointment_date == slot.day
    assert appointment.start_time == time(9, 0)
    assert not slot_available(db, slot.id)

    assert [event["type"] for event in events] == ["appointment.booked"]
    assert events[0]["payload"]["id"] == str(appointment.id)
    assert events[0]["payload"]["time_slot_id"] == str(slot.id)


def test_booking_a_taken_slot_conflicts(db, booking, events, provider, service, slot, client_id, other_client_id):
    booking.book(client_id, provider.id, service.id, slot.id)

    with pytest.raises(ConflictError) as exc_info:
        booking.book(other_client_id, provider.id, service.id, slot.id)

    assert exc_info.value.message == SLOT_TAKEN
    assert db.query(Appointment).count() == 1
    assert len(events) == 1


def test_concurrent_bookings_only_one_wins(session_factory, notifier, provider, service, slot):
    attempts = 8
    provider_id, service_id, slot_id = provider.id, service.id, slot.id
    barrier = threading.Barrier(attempts)
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt():
        session = session_factory()
        try:
            barrier.wait()
            try:
                BookingService(session, notifier).book(uuid4(), provider_id, service_id, slot_id)
                outcome = "booked"
            except ConflictError:
                outcome = "conflict"
            with outcomes_lock:
                outcomes.append(outcome)
        finally:
            session.close()

    threads = [threading.Thread(target=attempt) for _ in range(attempts)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert outcomes.count("booked") == 1
    assert outcomes.count("conflict") == attempts - 1

    check = session_factory()
    try:
        active = check.query(Appointment).filter(
            Appointment.time_slot_id == slot_id,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        ).count()
        assert active == 1
        assert check.get(TimeSlot, slot_id).is_available is False
    finally:
        check.close()


def test_unknown_slot_is_not_found_and_creates_nothing(db, booking, events, provider, service, client_id):
    with pytest.raises(NotFoundError):
        booking.book(client_id, provider.id, service.id, uuid4())

    assert db.query(Appointment).count() == 0
    assert events == []


def test_slot_of_another_provider_is_forbidden(db, booking, service, slot, client_id):
    other = ProviderService.create_profile(db, user_id=uuid4(), display_name="Someone Else")

    with pytest.raises(ForbiddenError):
        booking.book(client_id, other.id, service.id, slot.id)

    assert slot_available(db, slot.id)


def test_slot_for_another_service_is_rejected(db, booking, provider, slot, client_id):
    massage = ServiceCatalogService.create_service(db, provider.id, "Massage", duration_minutes=60)

    with pytest.raises(ValidationError):
        booking.book(client_id, provider.id, massage.id, slot.id)

    assert slot_available(db, slot.id)


def test_cancel_frees_slot_for_rebooking(db, booking, events, provider, service, slot, client_id, other_client_id):
    appointment = booking.book(client_id, provider.id, service.id, slot.id)

    cancelled = booking.cancel(appointment.id, requester_id=client_id, reason="sick")

    assert cancelled.status == AppointmentStatus.CANCELLED.value
    assert cancelled.cancellation_reason == "sick"
    assert cancelled.cancelled_at is not None
    assert slot_available(db, slot.id)

    rebooked = booking.book(other_client_id, provider.id, service.id, slot.id)
    assert rebooked.id != appointment.id
    assert [event["type"] for event in events] == [
        "appointment.booked",
        "appointment.cancelled",
        "appointment.booked",
    ]


def test_second_cancel_does_not_release_rebooked_slot(db, booking, provider, service, slot, client_id, other_client_id):
    first = booking.book(client_id, provider.id, service.id, slot.id)
    booking.cancel(first.id, requester_id=client_id)
    booking.book(other_client_id, provider.id, service.id, slot.id)

    with pytest.raises(NotFoundError):
        booking.cancel(first.id, requester_id=client_id)

    assert not slot_available(db, slot.id)


def test_provider_may_cancel_but_strangers_may_not(db, booking, provider, service, slot, client_id):
    appointment = booking.book(client_id, provider.id, service.id, slot.id)

    with pytest.raises(ForbiddenError):
        booking.cancel(appointment.id, requester_id=uuid4())
    assert not slot_available(db, slot.id)

    cancelled = booking.cancel(appointment.id, requester_id=provider.user_id)
    assert cancelled.status == AppointmentStatus.CANCELLED.value


def test_cancel_unknown_appointment(booking, client_id):
    with pytest.raises(NotFoundError):
        booking.cancel(uuid4(), requester_id=client_id)


def test_reschedule_moves_booking(db, booking, events, provider, service, slot, second_slot, client_id):
    original = booking.book(client_id, provider.id, service.id, slot.id, notes="bring forms")

    moved = booking.reschedule(original.id, new_slot_id=second_slot.id, requester_id=client_id)

    assert moved.id != original.id
    assert moved.time_slot_id == second_slot.id
    assert moved.notes == "bring forms"
    assert moved.start_time == time(10, 0)
    assert db.get(Appointment, original.id).status == AppointmentStatus.CANCELLED.value
    assert slot_available(db, slot.id)
    assert not slot_available(db, second_slot.id)
    assert [event["type"] for event in events] == [
        "appointment.booked",
        "appointment.cancelled",
        "appointment.booked",
    ]


def test_failed_reschedule_keeps_original_booking(
        db, booking, events, provider, service, slot, second_slot, client_id, other_client_id
):
    original = booking.book(client_id, provider.id, service.id, slot.id)
    booking.book(other_client_id, provider.id, service.id, second_slot.id)

    with pytest.raises(ConflictError):
        booking.reschedule(original.id, new_slot_id=second_slot.id, requester_id=client_id)

    db.expire_all()
    assert db.get(Appointment, original.id).status == AppointmentStatus.CONFIRMED.value
    assert not slot_available(db, slot.id)
    assert len(events) == 2


def test_reschedule_onto_same_slot_is_rejected(db, booking, provider, service, slot, client_id):
    original = booking.book(client_id, provider.id, service.id, slot.id)

    with pytest.raises(ValidationError):
        booking.reschedule(original.id, new_slot_id=slot.id, requester_id=client_id)

    db.expire_all()
    assert db.get(Appointment, original.id).status == AppointmentStatus.CONFIRMED.value
    assert not slot_available(db, slot.id)


def test_pending_appointment_confirmed_by_provider(db, notifier, events, provider, service, slot, client_id):
    booking = BookingService(db, notifier, auto_confirm=False)
    appointment = booking.book(client_id, provider.id, service.id, slot.id)
    assert appointment.status == AppointmentStatus.PENDING.value

    with pytest.raises(ForbiddenError):
        booking.confirm(appointment.id, requester_id=client_id)

    confirmed = booking.confirm(appointment.id, requester_id=provider.user_id)
    assert confirmed.status == AppointmentStatus.CONFIRMED.value
    assert events[-1]["type"] == "appointment.confirmed"

    with pytest.raises(ConflictError):
        booking.confirm(appointment.id, requester_id=provider.user_id)


def test_deleted_slot_leaves_cancelled_history(db, booking, provider, service, slot, client_id):
    appointment = booking.book(client_id, provider.id, service.id, slot.id)
    booking.cancel(appointment.id, requester_id=client_id)

    SlotService.delete_slot(db, slot.id, provider.id)

    db.expire_all()
    history = db.get(Appointment, appointment.id)
    assert history.time_slot_id is None
    assert history.start_time == time(9, 0)
