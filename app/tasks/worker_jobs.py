import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, ProgrammingError
from app.db.session import SessionLocal
from app.services.payment_intent_service import expire_stale_intents

logger = logging.getLogger(__name__)


def expire_payment_intents(now=None) -> dict:
    """Mark unconverted pending/processing intents past expires_at as expired."""
    db: Session = SessionLocal()
    try:
        try:
            expired = expire_stale_intents(db, now)
        except (ProgrammingError, OperationalError):
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            logger.warning("payment_intents table missing, skipping expiry run")
            return {"skipped": True, "reason": "missing_tables"}
        if expired:
            logger.info("Expired %d payment intents", expired)
        return {"expired": expired}
    finally:
        db.close()
