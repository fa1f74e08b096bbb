import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("NETOPIA_AUTH_TOKEN", "test-token")
os.environ.setdefault("NETOPIA_POS_SIGNATURE", "TEST-POS")

import pytest
from fastapi.testclient import TestClient

from app.db.session import Base, SessionLocal, engine, get_db
from app.main import app
from app.services.adventure_service import ingest_adventure
from app.services.user_service import get_or_create_booker

# Import all models so create_all sees them
from app.models.user import User  # noqa: F401
from app.models.adventure import Adventure, AdventureDate  # noqa: F401
from app.models.adventure_category import AdventureCategory  # noqa: F401
from app.models.coupon import Coupon  # noqa: F401
from app.models.payment_intent import PaymentIntent  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.order import Order  # noqa: F401
from app.models.voucher_purchase import VoucherPurchase  # noqa: F401
from app.models.audit_log import AuditLog  # noqa: F401


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return get_or_create_booker(db, "Ana@Example.ro", "Ana Popescu")


class FakeNetopia:
    """Records card/start calls instead of hitting the gateway."""

    def __init__(self, fail: Exception | None = None):
        self.calls = []
        self.fail = fail

    def start_card_payment(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail:
            raise self.fail
        return {"payment": {"paymentURL": f"https://sandbox.example/pay/{kwargs['order_id']}"}}


@pytest.fixture
def fake_netopia(monkeypatch):
    fake = FakeNetopia()
    monkeypatch.setattr("app.services.payment_intent_service.netopia_client", lambda: fake)
    monkeypatch.setattr("app.services.voucher_service.netopia_client", lambda: fake)
    return fake


@pytest.fixture
def snagov(db):
    """Adventure with all vessel types, a 14:00 same-day cutoff and dates in July 2030."""
    return ingest_adventure(db, {
        "title": "Caiac pe Snagov",
        "price": 100,
        "location": "Snagov",
        "meetingPoint": "Debarcader",
        "difficulty": "easy",
        "duration": {"value": 3, "unit": "hours"},
        "advancePaymentPercentage": 30,
        "bookingCutoffHour": 14,
        "availableKayakTypes": {"caiacSingle": True, "caiacDublu": True, "placaSUP": True},
        "dates": [
            {"startDate": "2030-07-10T10:00:00+03:00", "endDate": "2030-07-10T13:00:00+03:00"},
            {"startDate": "2030-07-20T10:00:00+03:00", "endDate": "2030-07-20T13:00:00+03:00"},
        ],
    })
