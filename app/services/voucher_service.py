import uuid
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.user import User
from app.models.voucher_purchase import VoucherPurchase
from app.services.audit_service import log_audit
from app.services.coupon_service import create_coupon, get_coupon
from app.services.date_range_service import to_utc
from app.services.netopia_client import NetopiaClient, NetopiaError, map_payment_status, netopia_client, transaction_details
from app.services.user_service import normalize_phone

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = ("pending_payment", "pending", "processing", "error", "declined")


def make_voucher_order_id() -> str:
    return "VCH-" + uuid.uuid4().hex[:8].upper()


def make_voucher_code() -> str:
    return "VOUCHER-" + uuid.uuid4().hex[:8].upper()


def create_voucher_purchase(db: Session, user: User, amount: int, phone: str | None = None) -> VoucherPurchase:
    if amount not in settings.voucher_amounts:
        allowed = ", ".join(str(a) for a in settings.voucher_amounts)
        raise ValueError(f"Voucher amount must be one of: {allowed} lei")
    fee = settings.VOUCHER_PROCESSING_FEE
    purchase = VoucherPurchase(
        id=str(uuid.uuid4()),
        order_id=make_voucher_order_id(),
        user_id=user.id,
        username=user.full_name or user.email.split("@")[0],
        email=user.email,
        voucher_amount=amount,
        processing_fee=fee,
        total_amount=amount + fee,
        status="pending_payment",
        phone_number=normalize_phone(phone) if phone else None,
    )
    db.add(purchase)
    log_audit(db, actor_user_id=user.id, action="voucher.created", entity_type="voucher_purchase",
              entity_id=purchase.order_id, details={"amount": amount, "fee": fee})
    db.commit()
    db.refresh(purchase)
    return purchase


def get_voucher_purchase(db: Session, order_id: str) -> VoucherPurchase | None:
    return db.query(VoucherPurchase).filter(VoucherPurchase.order_id == order_id).first()


def initiate_voucher_payment(
    db: Session,
    purchase: VoucherPurchase,
    phone: str | None = None,
    client: NetopiaClient | None = None,
) -> VoucherPurchase:
    if purchase.status not in PAYABLE_STATUSES:
        raise ValueError(f"Cannot start payment for voucher with status: {purchase.status}")
    if phone:
        purchase.phone_number = normalize_phone(phone)
    purchase.payment_attempt = (purchase.payment_attempt or 0) + 1

    if settings.NETOPIA_SANDBOX_BYPASS:
        logger.warning("NETOPIA_SANDBOX_BYPASS enabled, confirming %s without provider", purchase.order_id)
        purchase.status = "payment_confirmed"
        purchase.status_message = "Sandbox bypass"
        db.commit()
        generate_voucher_coupon(db, purchase)
        return purchase

    db.commit()
    name = (purchase.username or "").split(" ", 1)
    try:
        client = client or netopia_client()
        data = client.start_card_payment(
            order_id=purchase.order_id,
            amount=purchase.total_amount,
            description=f"Voucher purchase: {purchase.voucher_amount} lei + {purchase.processing_fee} lei processing fee",
            billing={
                "email": purchase.email,
                "phone": purchase.phone_number or "",
                "firstName": name[0],
                "lastName": name[1] if len(name) > 1 else "",
            },
            notify_url=f"{settings.API_PUBLIC_URL.rstrip('/')}/api/v1/webhooks/netopia",
            redirect_url=f"{settings.APP_PUBLIC_URL.rstrip('/')}/vouchere/rezultat?orderId={purchase.order_id}",
        )
    except NetopiaError as e:
        logger.error("Netopia start failed for %s: %s", purchase.order_id, e)
        purchase.status = "error"
        purchase.status_message = str(e)[:255]
        db.commit()
        raise

    purchase.payment_url = data["payment"]["paymentURL"]
    purchase.status = "processing"
    db.commit()
    db.refresh(purchase)
    return purchase


def apply_voucher_provider_status(db: Session, purchase: VoucherPurchase, payment: dict) -> VoucherPurchase:
    status, message = map_payment_status(payment.get("status"), payment.get("code"), payment.get("message"))
    if status == "awaiting confirmation":
        # vouchers need no capacity check
        status = "payment_confirmed"
    if purchase.generated_coupon_code:
        logger.info("Voucher %s already fulfilled, ignoring status %s", purchase.order_id, status)
        return purchase
    purchase.status = status
    purchase.status_message = message[:255]
    purchase.transaction_details = transaction_details(payment)
    log_audit(db, actor_user_id="netopia", action="voucher.webhook", entity_type="voucher_purchase",
              entity_id=purchase.order_id, details={"status": status, "raw": payment.get("status")})
    db.commit()
    if status == "payment_confirmed":
        generate_voucher_coupon(db, purchase)
    return purchase


def generate_voucher_coupon(db: Session, purchase: VoucherPurchase, now: datetime | None = None) -> str:
    """Create the one-time fixed coupon for a paid voucher. Safe to call more than once."""
    if purchase.generated_coupon_code:
        return purchase.generated_coupon_code
    if purchase.status != "payment_confirmed":
        raise ValueError(f"Voucher {purchase.order_id} is not paid")
    now = to_utc(now) if now else datetime.now(timezone.utc)

    code = make_voucher_code()
    while get_coupon(db, code):
        code = make_voucher_code()
    create_coupon(
        db,
        code=code,
        coupon_type="fixed",
        value=purchase.voucher_amount,
        description=f"Gift voucher {purchase.voucher_amount} lei - generated from purchase {purchase.order_id}",
        start_date=now,
        end_date=now + timedelta(days=settings.VOUCHER_VALIDITY_DAYS),
        max_uses=1,
    )
    purchase.generated_coupon_code = code
    purchase.status = "completed"
    log_audit(db, actor_user_id="system", action="voucher.coupon_generated", entity_type="voucher_purchase",
              entity_id=purchase.order_id, details={"couponCode": code})
    db.commit()
    db.refresh(purchase)
    logger.info("Generated voucher coupon %s for %s", code, purchase.order_id)
    return code


def voucher_to_dict(p: VoucherPurchase) -> dict:
    return {
        "orderId": p.order_id,
        "voucherAmount": p.voucher_amount,
        "processingFee": p.processing_fee,
        "totalAmount": p.total_amount,
        "status": p.status,
        "statusMessage": p.status_message or "",
        "couponCode": p.generated_coupon_code,
        "paymentUrl": p.payment_url,
        "createdAt": p.created_at.isoformat() if p.created_at else None,
    }
