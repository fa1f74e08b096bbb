from datetime import datetime
from zoneinfo import ZoneInfo

from app.services.payment_intent_service import create_payment_intent, get_intent
from app.services.pricing_service import VesselSelection
from app.tasks import worker_jobs

TZ = ZoneInfo("Europe/Bucharest")


def test_expire_payment_intents_job(db, snagov, user, monkeypatch):
    now = datetime(2030, 7, 15, 12, 0, tzinfo=TZ)
    intent_id = create_payment_intent(
        db, snagov.id, user, "2030-07-20T10:00:00+03:00", VesselSelection(caiac_single=1), now=now
    ).intent_id
    monkeypatch.setattr(worker_jobs, "SessionLocal", lambda: db)

    assert worker_jobs.expire_payment_intents(now=datetime(2030, 7, 15, 12, 10, tzinfo=TZ)) == {"expired": 0}
    assert worker_jobs.expire_payment_intents(now=datetime(2030, 7, 15, 13, 0, tzinfo=TZ)) == {"expired": 1}
    assert get_intent(db, intent_id).payment_status == "expired"


def test_expire_payment_intents_job_without_tables():
    assert worker_jobs.expire_payment_intents() == {"skipped": True, "reason": "missing_tables"}
