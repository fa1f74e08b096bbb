import logging
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from app.db.session import SessionLocal
from app.core.logging import configure_logging
from app.models.adventure import Adventure
from app.models.adventure_category import AdventureCategory
from app.services.adventure_service import ingest_adventure
from app.services.category_service import create_category
from app.services.coupon_service import create_coupon, get_coupon
from app.services.date_range_service import now_local

logger = logging.getLogger(__name__)


def _adventures(today: datetime) -> list[dict]:
    """One adventure per stored date shape, so every read path has data locally."""
    day = today.replace(hour=10, minute=0, second=0, microsecond=0)
    return [
        {
            "title": "Tură de caiac pe Lacul Snagov",
            "category": "tururi-de-o-zi",
            "price": 150,
            "location": "Snagov",
            "meetingPoint": "Debarcader Snagov Parc",
            "difficulty": "easy",
            "duration": {"value": 3, "unit": "hours"},
            "advancePaymentPercentage": 30,
            "bookingCutoffHour": 9,
            "availableKayakTypes": {"caiacSingle": True, "caiacDublu": True, "placaSUP": True},
            "includedItems": ["Caiac", "Vestă de salvare", "Ghid"],
            "dates": [
                {"startDate": (day + timedelta(days=d)).isoformat(), "endDate": (day + timedelta(days=d, hours=3)).isoformat()}
                for d in (3, 10, 17)
            ],
        },
        {
            "title": "Expediție pe Dunăre",
            "category": "expeditii",
            "price": 450,
            "location": "Delta Dunării",
            "difficulty": "moderate",
            "duration": {"value": 2, "unit": "days"},
            "advancePaymentPercentage": 50,
            # legacy parallel arrays
            "dates": [(day + timedelta(days=14)).isoformat(), (day + timedelta(days=28)).isoformat()],
            "endDates": [(day + timedelta(days=16)).isoformat()],
        },
        {
            "title": "SUP la apus pe Herăstrău",
            "price": 120,
            "location": "București",
            "difficulty": "easy",
            # legacy single date, no vessel types: single kayaks only
            "date": (day + timedelta(days=5)).isoformat(),
        },
        {
            "title": "Caiac în fiecare weekend",
            "price": 100,
            "location": "Comana",
            "difficulty": "easy",
            "duration": {"value": 4, "unit": "hours"},
            "isRecurring": True,
            "recurringPattern": {"daysOfWeek": [0, 6], "year": today.year, "startTime": "09:00"},
            "availableKayakTypes": {"caiacSingle": True, "caiacDublu": True, "placaSUP": False},
        },
    ]


def run(db=None):
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM adventures LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("adventures table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        if db.query(AdventureCategory).first() is None:
            create_category(db, "Tururi de o zi", description="Ieșiri scurte pe lacuri și râuri")
            create_category(db, "Expediții", description="Aventuri de mai multe zile")

        if db.query(Adventure).first() is None:
            for doc in _adventures(now_local()):
                ingest_adventure(db, doc)

        if not get_coupon(db, "VARA20"):
            create_coupon(db, "VARA20", "percentage", 20, description="Reducere de vară 20%")
            db.commit()
        logger.info("Seed complete")
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run()
