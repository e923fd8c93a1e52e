from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ConflictError, NotFoundError, TransientStoreError
from app.core.transactions import unit_of_work
from app.models.appointment import Appointment
from app.models.provider import Provider
from app.models.time_slot import TimeSlot
from app.services.appointment.appointment_service import AppointmentService
from app.services.booking.booking_service import SLOT_TAKEN


def lock_timeout(*args, **kwargs):
    raise OperationalError("INSERT INTO appointments", {}, Exception("canceling statement due to lock timeout"))


def test_store_timeout_becomes_transient_error_and_rolls_back(db):
    with pytest.raises(TransientStoreError):
        with unit_of_work(db, "create_provider"):
            db.add(Provider(user_id=uuid4(), display_name="Ghost"))
            db.flush()
            lock_timeout()

    assert db.query(Provider).count() == 0


def test_failed_flush_mid_booking_releases_claim(db, booking, events, provider, service, slot, client_id, monkeypatch):
    monkeypatch.setattr(db, "flush", lock_timeout)

    with pytest.raises(TransientStoreError):
        booking.book(client_id, provider.id, service.id, slot.id)

    monkeypatch.undo()
    db.expire_all()
    assert db.get(TimeSlot, slot.id).is_available is True
    assert db.query(Appointment).count() == 0
    assert events == []


def test_second_active_appointment_hits_unique_index(db, booking, provider, service, slot, client_id, other_client_id):
    booking.book(client_id, provider.id, service.id, slot.id)

    # Bypass the claim and insert straight into the store
    with pytest.raises(ConflictError) as exc_info:
        with unit_of_work(db, "book", SLOT_TAKEN):
            AppointmentService.create_appointment(
                db, other_client_id, slot.id, service.id, provider.id
            )

    assert exc_info.value.message == SLOT_TAKEN
    assert db.query(Appointment).count() == 1


def test_cancelled_appointment_does_not_hold_slot_index(db, booking, provider, service, slot, client_id, other_client_id):
    appointment = booking.book(client_id, provider.id, service.id, slot.id)
    booking.cancel(appointment.id, requester_id=client_id)

    with unit_of_work(db, "book"):
        AppointmentService.create_appointment(db, other_client_id, slot.id, service.id, provider.id)

    assert db.query(Appointment).count() == 2


def test_booking_errors_pass_through_unchanged(db):
    with pytest.raises(NotFoundError):
        with unit_of_work(db, "lookup"):
            raise NotFoundError("Slot not found")

    assert not db.in_transaction()
