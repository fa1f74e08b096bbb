from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.booking import BookingStatusIn
from app.services.audit_service import audit_trail
from app.services.booking_service import booking_to_dict, get_booking, update_booking_status
from app.services.status_service import normalize_status

router = APIRouter(tags=["bookings"])


def _out(db: Session, b) -> dict:
    return {
        **booking_to_dict(b),
        **normalize_status(b.status).to_dict(),
        "history": audit_trail(db, "booking", b.order_id),
    }


@router.get("/bookings/{order_id}")
def get_booking_detail(order_id: str, db: Session = Depends(get_db)):
    b = get_booking(db, order_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    return _out(db, b)


@router.patch("/bookings/{order_id}/status")
def set_booking_status(order_id: str, body: BookingStatusIn, db: Session = Depends(get_db)):
    """Staff confirmation step after capacity check (awaiting confirmation -> confirmed, cancelled, completed)."""
    b = get_booking(db, order_id)
    if not b:
        raise HTTPException(status_code=404, detail="Not found")
    try:
        b = update_booking_status(db, b, body.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _out(db, b)
