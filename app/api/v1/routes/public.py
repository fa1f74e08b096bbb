from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models.user import User
from app.schemas.adventure import AdventureFacetsOut, AdventureOut, CategoryAdventuresOut, CategoryOut
from app.schemas.booking import CouponValidateIn, PayIn, PaymentIntentCreate, PhoneIn, PricingSummaryOut, QuoteRequest
from app.services.adventure_service import (
    adventure_facets, adventure_ranges, adventure_to_dict, check_vessels_available, get_adventure, list_adventures,
)
from app.services.booking_service import list_user_reservations, payment_result
from app.services.category_service import adventures_by_category_slug, adventures_grouped_by_category, list_categories
from app.services.coupon_service import validate_coupon
from app.services.netopia_client import NetopiaError
from app.services.payment_intent_service import (
    create_payment_intent, get_intent, initiate_payment, intent_to_dict, update_phone,
)
from app.services.pricing_service import VesselSelection, base_price, price_booking
from app.services.user_service import get_or_create_booker

router = APIRouter(tags=["public"])


@router.get("/public/adventures", response_model=list[AdventureOut])
def get_adventures(
    q: Optional[str] = None,
    location: Optional[str] = None,
    difficulty: Optional[str] = None,
    category: Optional[str] = None,
    duration: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Catalog with search. Each adventure carries its next occurrence and all date ranges."""
    return list_adventures(
        db, q=q, location=location, difficulty=difficulty, category=category, duration=duration,
    )


@router.get("/public/adventures/facets", response_model=AdventureFacetsOut)
def get_adventure_facets(db: Session = Depends(get_db)):
    return adventure_facets(db)


@router.get("/public/categories", response_model=list[CategoryOut])
def get_categories(db: Session = Depends(get_db)):
    return list_categories(db)


@router.get("/public/adventures/by-category", response_model=list[CategoryAdventuresOut])
def get_grouped_adventures(db: Session = Depends(get_db)):
    return adventures_grouped_by_category(db)


@router.get("/public/categories/{slug}/adventures", response_model=CategoryAdventuresOut)
def get_category_adventures(slug: str, db: Session = Depends(get_db)):
    out = adventures_by_category_slug(db, slug)
    if out is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return out


@router.get("/public/adventures/{slug}", response_model=AdventureOut)
def get_adventure_detail(slug: str, db: Session = Depends(get_db)):
    a = get_adventure(db, slug)
    if not a:
        raise HTTPException(status_code=404, detail="Adventure not found")
    return adventure_to_dict(a, adventure_ranges(db, a))


@router.post("/public/adventures/{adventure_id}/quote", response_model=PricingSummaryOut)
def quote(adventure_id: str, body: QuoteRequest, db: Session = Depends(get_db)):
    """Price a vessel selection. The coupon discount is re-derived from the current base price on every call."""
    a = get_adventure(db, adventure_id)
    if not a:
        raise HTTPException(status_code=404, detail="Adventure not found")
    selection = VesselSelection.from_dict(body.kayakSelections.model_dump())
    try:
        check_vessels_available(a, selection)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    coupon, coupon_valid, coupon_message = None, None, None
    if body.couponCode:
        check = validate_coupon(db, body.couponCode, a.id, base_price(a.price, selection))
        coupon_valid, coupon_message = check.valid, check.message
        coupon = check.coupon if check.valid else None
    summary = price_booking(
        a.price,
        selection,
        a.advance_payment_percentage,
        coupon.type if coupon else None,
        coupon.value if coupon else None,
    )
    return PricingSummaryOut(**summary.to_dict(), couponValid=coupon_valid, couponMessage=coupon_message)


@router.post("/public/coupons/validate")
def coupons_validate(body: CouponValidateIn, db: Session = Depends(get_db)):
    result = validate_coupon(db, body.code, body.adventureId, body.amount)
    return result.to_dict(base_price=body.amount)


@router.post("/public/payment-intents")
def create_intent(body: PaymentIntentCreate, db: Session = Depends(get_db)):
    try:
        booker = get_or_create_booker(db, body.bookerEmail, body.bookerName)
        intent = create_payment_intent(
            db,
            adventure_id=body.adventureId,
            user=booker,
            booking_date=body.bookingDate,
            selection=VesselSelection.from_dict(body.kayakSelections.model_dump()),
            coupon_code=body.couponCode,
            comments=body.comments,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return intent_to_dict(intent)


@router.get("/public/payment-intents/{intent_id}")
def get_payment_intent(intent_id: str, db: Session = Depends(get_db)):
    intent = get_intent(db, intent_id)
    if not intent:
        raise HTTPException(status_code=404, detail="Payment intent not found")
    return intent_to_dict(intent)


@router.post("/public/payment-intents/{intent_id}/phone")
def set_intent_phone(intent_id: str, body: PhoneIn, db: Session = Depends(get_db)):
    intent = get_intent(db, intent_id)
    if not intent:
        raise HTTPException(status_code=404, detail="Payment intent not found")
    try:
        intent = update_phone(db, intent, body.phoneNumber)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return intent_to_dict(intent)


@router.post("/public/payment-intents/{intent_id}/pay")
def pay_intent(intent_id: str, body: PayIn, db: Session = Depends(get_db)):
    """Start the Netopia card payment for the advance amount and return the redirect URL."""
    intent = get_intent(db, intent_id)
    if not intent:
        raise HTTPException(status_code=404, detail="Payment intent not found")
    try:
        intent = initiate_payment(db, intent, phone=body.phoneNumber)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NetopiaError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {
        "paymentUrl": intent.payment_url,
        "intentId": intent.intent_id,
        "paymentStatus": intent.payment_status,
        "bookingId": intent.converted_to_booking_id,
    }


@router.get("/public/payment-result")
def get_payment_result(intentId: str, db: Session = Depends(get_db)):
    """Status snapshot for the result page. refreshAfterSeconds is set while the payment is still in flight."""
    out = payment_result(db, intentId)
    if out is None:
        raise HTTPException(status_code=404, detail="Payment intent not found")
    return out


@router.get("/public/users/{user_id}/reservations")
def user_reservations(user_id: str, db: Session = Depends(get_db)):
    if not db.get(User, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return {"items": list_user_reservations(db, user_id)}
