import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.payments import NetopiaNotification
from app.services.booking_service import apply_provider_status_to_booking, get_booking
from app.services.payment_intent_service import apply_provider_status, get_intent
from app.services.voucher_service import apply_voucher_provider_status, get_voucher_purchase

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])


@router.post("/webhooks/netopia")
def netopia_webhook(body: NetopiaNotification, db: Session = Depends(get_db)):
    """Netopia IPN. orderID prefix decides the record: VCH- voucher, INT- payment intent, else booking order id."""
    order_id = body.order.orderID if body.order else None
    if not order_id or not body.payment or body.payment.status is None:
        raise HTTPException(status_code=400, detail="Invalid webhook payload")
    payment = body.payment.model_dump()
    logger.info("Netopia notification for %s status=%s", order_id, payment.get("status"))

    if order_id.startswith("VCH-"):
        purchase = get_voucher_purchase(db, order_id)
        if not purchase:
            raise HTTPException(status_code=404, detail=f"Voucher purchase not found for orderId: {order_id}")
        purchase = apply_voucher_provider_status(db, purchase, payment)
        return {"success": True, "orderId": order_id, "voucherStatus": purchase.status}

    if order_id.startswith("INT-"):
        intent = get_intent(db, order_id)
        if not intent:
            raise HTTPException(status_code=404, detail=f"Payment intent not found for intentId: {order_id}")
        intent = apply_provider_status(db, intent, payment)
        return {
            "success": True,
            "orderId": order_id,
            "bookingStatus": intent.payment_status,
            "bookingId": intent.converted_to_booking_id,
        }

    booking = get_booking(db, order_id)
    if not booking:
        raise HTTPException(status_code=404, detail=f"Booking not found for orderId: {order_id}")
    booking = apply_provider_status_to_booking(db, booking, payment)
    return {"success": True, "orderId": order_id, "bookingStatus": booking.status, "bookingId": booking.id}
