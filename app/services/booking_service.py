import logging
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.booking import Booking
from app.models.order import Order
from app.models.payment_intent import PaymentIntent
from app.services.audit_service import log_audit
from app.services.date_range_service import to_local
from app.services.netopia_client import map_payment_status, transaction_details
from app.services.payment_intent_service import get_intent, intent_to_dict, record_pricing, selection_of
from app.services.status_service import BOOKING_STATUSES, CanonicalStatus, normalize_status

logger = logging.getLogger(__name__)

# intents still worth showing next to bookings until they convert
VISIBLE_INTENT_STATUSES = ("pending", "processing", "declined", "expired", "error")


def booking_to_dict(b: Booking) -> dict:
    return {
        "id": b.id,
        "orderId": b.order_id,
        "adventureId": b.adventure_id,
        "adventureTitle": b.adventure_title,
        "username": b.username,
        "startDate": to_local(b.start_date).isoformat(),
        "endDate": to_local(b.end_date).isoformat(),
        "price": b.price,
        "kayakSelections": selection_of(b).to_dict(),
        "advancePaymentPercentage": b.advance_payment_percentage,
        "couponCode": b.coupon_code,
        "statusMessage": b.status_message or "",
        "location": b.location,
        "meetingPoint": b.meeting_point,
        "phoneNumber": b.phone_number,
        "comments": b.comments,
        **record_pricing(b),
    }


def list_user_reservations(db: Session, user_id: str) -> list[dict]:
    bookings = db.query(Booking).filter(Booking.user_id == user_id).all()
    intents = (
        db.query(PaymentIntent)
        .filter(
            PaymentIntent.user_id == user_id,
            PaymentIntent.converted_to_booking_id.is_(None),
            PaymentIntent.payment_status.in_(VISIBLE_INTENT_STATUSES),
        )
        .all()
    )

    rows = []
    for b in bookings:
        item = booking_to_dict(b)
        item.update(normalize_status(b.status).to_dict())
        item["isPaymentIntent"] = False
        rows.append((b.created_at, item))
    for i in intents:
        item = intent_to_dict(i)
        item.update(normalize_status(i.payment_status).to_dict())
        item["isPaymentIntent"] = True
        rows.append((i.created_at, item))
    rows.sort(key=lambda r: to_local(r[0]), reverse=True)
    return [item for _, item in rows]


def payment_result(db: Session, intent_id: str) -> dict | None:
    intent = get_intent(db, intent_id)
    if not intent:
        return None
    status = normalize_status(intent.payment_status)
    out = {
        "intentId": intent.intent_id,
        "adventureTitle": intent.adventure_title,
        "paymentStatus": intent.payment_status,
        "statusMessage": intent.status_message or "",
        **status.to_dict(),
        **record_pricing(intent),
        "bookingOrderId": None,
        "refreshAfterSeconds": None,
    }
    if intent.converted_to_booking_id:
        b = db.get(Booking, intent.converted_to_booking_id)
        out["bookingOrderId"] = b.order_id if b else None
    if status.canonical == CanonicalStatus.PENDING_PAYMENT:
        out["refreshAfterSeconds"] = settings.PAYMENT_RESULT_REFRESH_SECONDS
    return out


def get_booking(db: Session, order_id: str) -> Booking | None:
    return db.query(Booking).filter(Booking.order_id == order_id).first()


def update_booking_status(db: Session, booking: Booking, status: str, actor: str = "staff") -> Booking:
    value = (status or "").strip().lower()
    if value not in BOOKING_STATUSES:
        raise ValueError(f"Invalid booking status: {status}")
    previous = booking.status
    booking.status = value
    order = db.query(Order).filter(Order.order_id == booking.order_id).first()
    if order:
        order.status = value
    log_audit(db, actor_user_id=actor, action="booking.status_changed", entity_type="booking",
              entity_id=booking.order_id, details={"from": previous, "to": value})
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s status %s -> %s", booking.order_id, previous, value)
    return booking


def apply_provider_status_to_booking(db: Session, booking: Booking, payment: dict) -> Booking:
    """Notifications for orders created before payment intents carried the booking order id."""
    status, message = map_payment_status(payment.get("status"), payment.get("code"), payment.get("message"))
    booking.status = status
    booking.status_message = message[:255]
    booking.transaction_details = transaction_details(payment)
    log_audit(db, actor_user_id="netopia", action="booking.webhook", entity_type="booking",
              entity_id=booking.order_id, details={"status": status, "raw": payment.get("status")})
    db.commit()
    return booking
