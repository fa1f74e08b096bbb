import uuid
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.adventure import Adventure
from app.models.booking import Booking
from app.models.order import Order
from app.models.payment_intent import PaymentIntent
from app.models.user import User
from app.services.adventure_service import (
    adventure_ranges, check_vessels_available, get_adventure, is_bookable_date, resolve_booking_end,
)
from app.services.audit_service import log_audit
from app.services.coupon_service import increment_coupon_usage, validate_coupon
from app.services.date_range_service import now_local, parse_datetime, to_local, to_utc
from app.services.netopia_client import NetopiaClient, NetopiaError, map_payment_status, netopia_client, transaction_details
from app.services.pricing_service import VesselSelection, price_booking, require_units, round_half_up
from app.services.user_service import normalize_phone

logger = logging.getLogger(__name__)

CONVERTIBLE_STATUSES = ("confirmed", "awaiting confirmation")
EXPIRABLE_STATUSES = ("pending", "processing")


def make_intent_id() -> str:
    return "INT-" + uuid.uuid4().hex[:8].upper()


def selection_of(record) -> VesselSelection:
    return VesselSelection(
        caiac_single=record.caiac_single or 0,
        caiac_dublu=record.caiac_dublu or 0,
        placa_sup=record.placa_sup or 0,
    )


def record_pricing(record) -> dict:
    """Amounts as agreed at checkout, for an intent or a booking."""
    selection = selection_of(record)
    base = record.original_price if record.original_price is not None else (
        price_booking(record.price, selection).base_price
    )
    discount = record.coupon_discount or 0
    total = max(0, base - discount)
    advance = record.advance_payment_amount or 0
    return {
        "basePrice": base,
        "discount": discount,
        "totalPrice": total,
        "advancePaymentAmount": advance,
        "remainingAmount": max(0, round_half_up(total - advance)),
        "totalPeople": selection.total_people,
    }


def create_payment_intent(
    db: Session,
    adventure_id: str,
    user: User,
    booking_date,
    selection: VesselSelection,
    coupon_code: str | None = None,
    comments: str | None = None,
    now: datetime | None = None,
) -> PaymentIntent:
    now = to_local(now) if now else now_local()
    adventure: Adventure | None = get_adventure(db, adventure_id)
    if not adventure:
        raise LookupError("Adventure not found")

    check_vessels_available(adventure, selection)
    require_units(selection)

    start = parse_datetime(booking_date)
    if start is None:
        raise ValueError("Invalid booking date")
    is_bookable_date(adventure, start, now)

    coupon = None
    base = price_booking(adventure.price, selection).base_price
    if coupon_code:
        check = validate_coupon(db, coupon_code, adventure.id, base, now)
        if not check.valid:
            raise ValueError(check.message)
        coupon = check.coupon

    summary = price_booking(
        adventure.price,
        selection,
        adventure.advance_payment_percentage,
        coupon.type if coupon else None,
        coupon.value if coupon else None,
    )
    end = resolve_booking_end(adventure, start, adventure_ranges(db, adventure, now))

    intent = PaymentIntent(
        id=str(uuid.uuid4()),
        intent_id=make_intent_id(),
        user_id=user.id,
        adventure_id=adventure.id,
        adventure_title=adventure.title,
        start_date=to_utc(start),
        end_date=to_utc(end),
        price=adventure.price,
        caiac_single=selection.caiac_single,
        caiac_dublu=selection.caiac_dublu,
        placa_sup=selection.placa_sup,
        advance_payment_percentage=adventure.advance_payment_percentage,
        advance_payment_amount=summary.advance_payment_amount,
        coupon_code=coupon.code if coupon else None,
        coupon_type=coupon.type if coupon else None,
        coupon_value=coupon.value if coupon else None,
        coupon_discount=summary.discount if coupon else None,
        original_price=summary.base_price if coupon else None,
        payment_status="pending",
        comments=comments,
        adventure_image=(adventure.images or [None])[0],
        location=adventure.location,
        meeting_point=adventure.meeting_point,
        difficulty=adventure.difficulty,
        expires_at=to_utc(now) + timedelta(minutes=settings.PAYMENT_INTENT_EXPIRY_MINUTES),
    )
    db.add(intent)
    log_audit(db, actor_user_id=user.id, action="payment_intent.created", entity_type="payment_intent",
              entity_id=intent.intent_id, details=summary.to_dict())
    db.commit()
    db.refresh(intent)
    logger.info("Created payment intent %s for %s", intent.intent_id, adventure.slug)
    return intent


def get_intent(db: Session, intent_id: str) -> PaymentIntent | None:
    return db.query(PaymentIntent).filter(
        (PaymentIntent.intent_id == intent_id) | (PaymentIntent.id == intent_id)
    ).first()


def update_phone(db: Session, intent: PaymentIntent, phone: str) -> PaymentIntent:
    intent.phone_number = normalize_phone(phone)
    db.commit()
    db.refresh(intent)
    return intent


def _billing(user: User | None, phone: str | None) -> dict:
    name = ((user.full_name if user else "") or "").split(" ", 1)
    return {
        "email": user.email if user else "",
        "phone": phone or (user.phone if user else "") or "",
        "firstName": name[0],
        "lastName": name[1] if len(name) > 1 else "",
        "city": "",
        "state": "",
        "postalCode": "",
        "details": "",
    }


def initiate_payment(
    db: Session,
    intent: PaymentIntent,
    phone: str | None = None,
    client: NetopiaClient | None = None,
) -> PaymentIntent:
    """Start the card payment for the advance amount. Provider failures mark the intent as error and re-raise."""
    if intent.converted_to_booking_id:
        raise ValueError("Payment intent was already converted to a booking")
    if intent.payment_status not in ("pending", "processing", "error", "declined"):
        raise ValueError(f"Cannot start payment for status: {intent.payment_status}")
    if phone:
        intent.phone_number = normalize_phone(phone)
    intent.payment_attempt = (intent.payment_attempt or 0) + 1

    if settings.NETOPIA_SANDBOX_BYPASS:
        logger.warning("NETOPIA_SANDBOX_BYPASS enabled, confirming %s without provider", intent.intent_id)
        intent.payment_status = "confirmed"
        intent.status_message = "Sandbox bypass"
        log_audit(db, actor_user_id="system", action="payment_intent.bypass_confirmed", entity_type="payment_intent",
                  entity_id=intent.intent_id)
        db.commit()
        convert_to_booking(db, intent)
        db.refresh(intent)
        return intent

    db.commit()
    user = db.get(User, intent.user_id)
    try:
        client = client or netopia_client()
        data = client.start_card_payment(
            order_id=intent.intent_id,
            amount=intent.advance_payment_amount,
            description=f"Rezervare {intent.adventure_title} ({intent.intent_id})",
            billing=_billing(user, intent.phone_number),
            notify_url=f"{settings.API_PUBLIC_URL.rstrip('/')}/api/v1/webhooks/netopia",
            redirect_url=f"{settings.APP_PUBLIC_URL.rstrip('/')}/booking/payment-result?intentId={intent.intent_id}",
        )
    except NetopiaError as e:
        logger.error("Netopia start failed for %s: %s", intent.intent_id, e)
        intent.payment_status = "error"
        intent.status_message = str(e)[:255]
        log_audit(db, actor_user_id="netopia", action="payment_intent.start_failed", entity_type="payment_intent",
                  entity_id=intent.intent_id, details={"error": str(e)})
        db.commit()
        raise

    intent.payment_url = data["payment"]["paymentURL"]
    intent.payment_status = "processing"
    intent.status_message = ""
    db.commit()
    db.refresh(intent)
    return intent


def apply_provider_status(db: Session, intent: PaymentIntent, payment: dict) -> PaymentIntent:
    """Apply a Netopia notification. Conversion to a booking happens at most once."""
    status, message = map_payment_status(payment.get("status"), payment.get("code"), payment.get("message"))
    intent.payment_status = status
    intent.status_message = message[:255]
    intent.transaction_details = transaction_details(payment)
    log_audit(db, actor_user_id="netopia", action="payment_intent.webhook", entity_type="payment_intent",
              entity_id=intent.intent_id, details={"status": status, "raw": payment.get("status")})
    db.commit()
    logger.info("Payment intent %s -> %s", intent.intent_id, status)

    if status in CONVERTIBLE_STATUSES and not intent.converted_to_booking_id:
        convert_to_booking(db, intent)
    return intent


def _summary_line(selection: VesselSelection) -> str:
    parts = []
    if selection.caiac_single:
        parts.append(f"{selection.caiac_single} Caiac Single")
    if selection.caiac_dublu:
        parts.append(f"{selection.caiac_dublu} Caiac Dublu")
    if selection.placa_sup:
        parts.append(f"{selection.placa_sup} Placă SUP")
    return ", ".join(parts)


def convert_to_booking(db: Session, intent: PaymentIntent) -> Booking:
    if intent.payment_status not in CONVERTIBLE_STATUSES:
        raise ValueError(f"Cannot convert payment intent with status: {intent.payment_status}")

    order_id = f"ADV-{intent.intent_id}"
    existing = db.query(Booking).filter(Booking.order_id == order_id).first()
    if existing:
        if not intent.converted_to_booking_id:
            intent.converted_to_booking_id = existing.id
            db.commit()
        return existing

    user = db.get(User, intent.user_id)
    if not user:
        raise LookupError(f"User {intent.user_id} not found for payment intent {intent.intent_id}")
    username = (user.full_name or "").strip() or user.email.split("@")[0]

    selection = selection_of(intent)
    pricing = record_pricing(intent)
    booking = Booking(
        id=str(uuid.uuid4()),
        order_id=order_id,
        adventure_id=intent.adventure_id,
        user_id=intent.user_id,
        username=username,
        adventure_title=intent.adventure_title,
        start_date=intent.start_date,
        end_date=intent.end_date,
        price=intent.price,
        caiac_single=selection.caiac_single,
        caiac_dublu=selection.caiac_dublu,
        placa_sup=selection.placa_sup,
        advance_payment_percentage=intent.advance_payment_percentage,
        advance_payment_amount=intent.advance_payment_amount,
        coupon_code=intent.coupon_code,
        coupon_type=intent.coupon_type,
        coupon_value=intent.coupon_value,
        coupon_discount=intent.coupon_discount,
        original_price=intent.original_price,
        status="awaiting confirmation",
        status_message=intent.status_message or "",
        transaction_details=intent.transaction_details,
        comments=intent.comments,
        location=intent.location,
        meeting_point=intent.meeting_point,
        phone_number=intent.phone_number,
    )
    db.add(booking)
    db.add(Order(
        id=str(uuid.uuid4()),
        user_id=intent.user_id,
        order_id=order_id,
        adventure_title=intent.adventure_title,
        products=[{
            "id": intent.adventure_id,
            "title": intent.adventure_title,
            "price": intent.price,
            "description": _summary_line(selection),
            "quantity": selection.total_people,
        }],
        total=pricing["totalPrice"],
        advance_payment=pricing["advancePaymentAmount"],
        remaining_payment=pricing["remainingAmount"],
        status="awaiting confirmation",
        start_date=intent.start_date,
        end_date=intent.end_date,
    ))
    intent.converted_to_booking_id = booking.id
    if intent.coupon_code:
        increment_coupon_usage(db, intent.coupon_code)
    log_audit(db, actor_user_id="system", action="payment_intent.converted", entity_type="booking",
              entity_id=order_id, details={"intentId": intent.intent_id})
    db.commit()
    db.refresh(booking)
    logger.info("Converted payment intent %s into booking %s", intent.intent_id, order_id)
    return booking


def expire_stale_intents(db: Session, now: datetime | None = None) -> int:
    now = to_utc(now) if now else datetime.now(timezone.utc)
    stale = (
        db.query(PaymentIntent)
        .filter(
            PaymentIntent.payment_status.in_(EXPIRABLE_STATUSES),
            PaymentIntent.converted_to_booking_id.is_(None),
            PaymentIntent.expires_at < now,
        )
        .all()
    )
    for intent in stale:
        intent.payment_status = "expired"
        intent.status_message = "Payment intent expired"
        log_audit(db, actor_user_id="system", action="payment_intent.expired", entity_type="payment_intent",
                  entity_id=intent.intent_id)
    db.commit()
    return len(stale)


def intent_to_dict(intent: PaymentIntent) -> dict:
    return {
        "id": intent.id,
        "intentId": intent.intent_id,
        "adventureId": intent.adventure_id,
        "adventureTitle": intent.adventure_title,
        "startDate": to_local(intent.start_date).isoformat(),
        "endDate": to_local(intent.end_date).isoformat(),
        "price": intent.price,
        "kayakSelections": selection_of(intent).to_dict(),
        "advancePaymentPercentage": intent.advance_payment_percentage,
        "couponCode": intent.coupon_code,
        "couponType": intent.coupon_type,
        "couponValue": intent.coupon_value,
        "paymentStatus": intent.payment_status,
        "statusMessage": intent.status_message or "",
        "paymentUrl": intent.payment_url,
        "phoneNumber": intent.phone_number,
        "location": intent.location,
        "meetingPoint": intent.meeting_point,
        "expiresAt": to_local(intent.expires_at).isoformat() if intent.expires_at else None,
        "convertedToBookingId": intent.converted_to_booking_id,
        **record_pricing(intent),
    }
