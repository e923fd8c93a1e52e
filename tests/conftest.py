import os

# Settings are read once at import time; point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["NOTIFICATION_BACKEND"] = "memory"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["AUTO_CONFIRM_APPOINTMENTS"] = "true"
os.environ["ENFORCE_SERVICE_DURATION"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"

from datetime import date, time
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.dependencies import create_access_token
from app.config.database import build_engine, get_db
from app.main import create_app
from app.models import Base
from app.models.provider import UserRole
from app.services.booking.booking_service import BookingService
from app.services.catalog.service_catalog_service import ServiceCatalogService
from app.services.notification.notification_service import LocalBroadcaster
from app.services.provider.provider_service import ProviderService
from app.services.slot.slot_service import SlotService

SLOT_DAY = date(2030, 1, 15)


@pytest.fixture
def engine(tmp_path):
    # File database so worker threads share one store
    engine = build_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    notifier = LocalBroadcaster()
    notifier.start()
    yield notifier
    notifier.close()


@pytest.fixture
def events(notifier):
    received = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def booking(db, notifier):
    return BookingService(db, notifier, auto_confirm=True)


@pytest.fixture
def client_id():
    return uuid4()


@pytest.fixture
def other_client_id():
    return uuid4()


@pytest.fixture
def provider(db):
    return ProviderService.create_profile(db, user_id=uuid4(), display_name="Dr. Ada Byron")


@pytest.fixture
def service(db, provider):
    return ServiceCatalogService.create_service(
        db, provider_id=provider.id, name="Consultation", duration_minutes=30, price=50
    )


@pytest.fixture
def slot(db, provider, service):
    return SlotService.create_slot(
        db,
        provider_id=provider.id,
        service_id=service.id,
        day=SLOT_DAY,
        start_time=time(9, 0),
        end_time=time(9, 30),
    )


@pytest.fixture
def second_slot(db, provider, service):
    return SlotService.create_slot(
        db,
        provider_id=provider.id,
        service_id=service.id,
        day=SLOT_DAY,
        start_time=time(10, 0),
        end_time=time(10, 30),
    )


def auth_headers(user_id, role=UserRole.CLIENT):
    token = create_access_token({"sub": str(user_id), "role": role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(session_factory, notifier):
    app = create_app(notifier=notifier)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth():
    return auth_headers
