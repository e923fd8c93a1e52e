from uuid import uuid4

from sqlalchemy.exc import OperationalError

from app.models.provider import UserRole
from app.services.slot.slot_service import SlotService


def book(client, auth, user_id, provider, service, slot_id):
    return client.post(
        "/api/v1/appointments",
        json={"providerId": str(provider.id), "serviceId": str(service.id), "slotId": str(slot_id)},
        headers=auth(user_id),
    )


def test_booking_scenario_over_http(client, auth, events):
    provider_user = uuid4()
    provider_headers = auth(provider_user, UserRole.PROVIDER)
    alice, bob = uuid4(), uuid4()

    response = client.post("/api/v1/providers", json={"displayName": "Dr. Ada"}, headers=provider_headers)
    assert response.status_code == 201
    provider_id = response.json()["id"]

    response = client.post(
        "/api/v1/services",
        json={"name": "Consultation", "durationMinutes": 30, "price": 40},
        headers=provider_headers,
    )
    assert response.status_code == 201
    service_id = response.json()["id"]
    assert response.json()["formatted_duration"] == "30m"

    response = client.post(
        "/api/v1/slots",
        json={"serviceId": service_id, "day": "2030-01-15", "startTime": "09:00", "endTime": "09:30"},
        headers=provider_headers,
    )
    assert response.status_code == 201
    slot_id = response.json()["id"]
    assert response.json()["is_available"] is True

    booking = {"providerId": provider_id, "serviceId": service_id, "slotId": slot_id}

    response = client.post("/api/v1/appointments", json=booking, headers=auth(alice))
    assert response.status_code == 201
    appointment_id = response.json()["id"]
    assert response.json()["status"] == "confirmed"

    response = client.post("/api/v1/appointments", json=booking, headers=auth(bob))
    assert response.status_code == 409
    assert response.json() == {"detail": "slot already booked"}

    response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=auth(alice))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = client.post("/api/v1/appointments", json=booking, headers=auth(bob))
    assert response.status_code == 201

    assert [event["type"] for event in events] == [
        "appointment.booked",
        "appointment.cancelled",
        "appointment.booked",
    ]


def test_provider_slot_listing_is_ordered(client, auth, provider, service, slot, second_slot):
    response = client.get(f"/api/v1/slots/{provider.id}", headers=auth(uuid4()))

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [str(slot.id), str(second_slot.id)]


def test_slot_listing_for_unknown_provider(client, auth):
    response = client.get(f"/api/v1/slots/{uuid4()}", headers=auth(uuid4()))
    assert response.status_code == 404


def test_search_hides_booked_slots(client, auth, provider, service, slot, second_slot, client_id):
    book(client, auth, client_id, provider, service, slot.id)

    response = client.get("/api/v1/slots", params={"providerId": str(provider.id)}, headers=auth(client_id))

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [str(second_slot.id)]


def test_invalid_window_is_bad_request(client, auth, provider, service):
    response = client.post(
        "/api/v1/slots",
        json={"serviceId": str(service.id), "day": "2030-01-15", "startTime": "10:00", "endTime": "09:00"},
        headers=auth(provider.user_id, UserRole.PROVIDER),
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "Start time must be before end time"}


def test_clients_cannot_publish_slots(client, auth, service):
    response = client.post(
        "/api/v1/slots",
        json={"serviceId": str(service.id), "day": "2030-01-15", "startTime": "09:00", "endTime": "09:30"},
        headers=auth(uuid4()),
    )
    assert response.status_code == 403


def test_provider_without_profile_gets_not_found(client, auth):
    response = client.get("/api/v1/providers/me", headers=auth(uuid4(), UserRole.PROVIDER))
    assert response.status_code == 404


def test_second_profile_conflicts(client, auth, provider):
    response = client.post(
        "/api/v1/providers",
        json={"display_name": "Again"},
        headers=auth(provider.user_id, UserRole.PROVIDER),
    )
    assert response.status_code == 409


def test_cancel_by_stranger_is_forbidden(client, auth, provider, service, slot, client_id):
    appointment_id = book(client, auth, client_id, provider, service, slot.id).json()["id"]

    response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=auth(uuid4()))
    assert response.status_code == 403

    response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=auth(client_id))
    assert response.status_code == 200

    response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=auth(client_id))
    assert response.status_code == 404


def test_booking_unknown_slot_is_not_found(client, auth, provider, service, client_id):
    response = book(client, auth, client_id, provider, service, uuid4())
    assert response.status_code == 404


def test_appointments_are_scoped_and_newest_first(
        client, auth, provider, service, slot, second_slot, client_id, other_client_id
):
    first = book(client, auth, client_id, provider, service, slot.id).json()["id"]
    second = book(client, auth, client_id, provider, service, second_slot.id).json()["id"]

    response = client.get("/api/v1/appointments", headers=auth(client_id))
    assert [a["id"] for a in response.json()] == [second, first]

    response = client.get("/api/v1/appointments", headers=auth(other_client_id))
    assert response.json() == []

    response = client.get("/api/v1/appointments", headers=auth(provider.user_id, UserRole.PROVIDER))
    assert [a["id"] for a in response.json()] == [second, first]

    response = client.get(f"/api/v1/appointments/{first}", headers=auth(other_client_id))
    assert response.status_code == 404


def test_reschedule_endpoint(client, auth, provider, service, slot, second_slot, client_id):
    original = book(client, auth, client_id, provider, service, slot.id).json()["id"]

    response = client.post(
        f"/api/v1/appointments/{original}/reschedule",
        json={"slotId": str(second_slot.id)},
        headers=auth(client_id),
    )

    assert response.status_code == 200
    assert response.json()["time_slot_id"] == str(second_slot.id)

    response = client.get(
        "/api/v1/appointments", params={"status": "cancelled"}, headers=auth(client_id)
    )
    assert [a["id"] for a in response.json()] == [original]


def test_service_in_use_cannot_be_deleted(client, auth, provider, service, slot):
    headers = auth(provider.user_id, UserRole.PROVIDER)

    response = client.delete(f"/api/v1/services/{service.id}", headers=headers)
    assert response.status_code == 409

    assert client.delete(f"/api/v1/slots/{slot.id}", headers=headers).status_code == 200
    response = client.delete(f"/api/v1/services/{service.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Consultation"


def test_service_search(client, auth, provider, service):
    response = client.get("/api/v1/services", params={"q": "consult"}, headers=auth(uuid4()))

    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [str(service.id)]


def test_bad_token_is_rejected(client):
    response = client.get("/api/v1/appointments", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers

    response = client.get("/health/detailed")
    assert response.json()["overall"] == "healthy"


def test_store_timeout_is_service_unavailable(client, auth, provider, service, slot, client_id, monkeypatch):
    def timed_out(*args, **kwargs):
        raise OperationalError("UPDATE time_slots", {}, Exception("canceling statement due to lock timeout"))

    monkeypatch.setattr(SlotService, "claim_slot", staticmethod(timed_out))

    response = book(client, auth, client_id, provider, service, slot.id)

    assert response.status_code == 503
    assert response.json() == {"detail": "Storage temporarily unavailable, please retry"}
