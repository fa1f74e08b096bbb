import uuid
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from app.models.coupon import Coupon
from app.services.date_range_service import to_utc
from app.services.pricing_service import compute_discount

logger = logging.getLogger(__name__)


@dataclass
class CouponValidation:
    valid: bool
    coupon: Coupon | None = None
    message: str = ""

    def to_dict(self, base_price: float | None = None) -> dict:
        out = {"valid": self.valid, "message": self.message}
        if self.coupon:
            out["coupon"] = coupon_to_dict(self.coupon)
            if self.valid and base_price is not None:
                out["discount"] = compute_discount(self.coupon.type, self.coupon.value, base_price)
        return out


def coupon_to_dict(c: Coupon) -> dict:
    return {
        "code": c.code,
        "type": c.type,
        "value": c.value,
        "description": c.description or "",
        "minPurchase": c.min_purchase,
        "appliesTo": c.applies_to,
    }


def get_coupon(db: Session, code: str) -> Coupon | None:
    return db.query(Coupon).filter(Coupon.code == (code or "").strip().upper()).first()


def validate_coupon(
    db: Session,
    code: str,
    adventure_id: str | None = None,
    base_price: float | None = None,
    now: datetime | None = None,
) -> CouponValidation:
    """Check a code against an adventure and price. Never raises for a bad code."""
    now = to_utc(now) if now else datetime.now(timezone.utc)
    coupon = get_coupon(db, code)
    if not coupon:
        return CouponValidation(False, None, "Coupon not found")
    if not coupon.is_active:
        return CouponValidation(False, coupon, "This coupon is no longer active")
    if coupon.start_date and to_utc(_aware(coupon.start_date)) > now:
        return CouponValidation(False, coupon, "This coupon is not valid yet")
    if coupon.end_date and to_utc(_aware(coupon.end_date)) < now:
        return CouponValidation(False, coupon, "This coupon has expired")
    if coupon.max_uses and (coupon.used_count or 0) >= coupon.max_uses:
        return CouponValidation(False, coupon, "This coupon has reached its maximum number of uses")
    if coupon.applies_to == "specific" and adventure_id:
        if adventure_id not in (coupon.applicable_adventures or []):
            return CouponValidation(False, coupon, "This coupon is not applicable to this adventure")
    if coupon.min_purchase and base_price is not None and base_price < coupon.min_purchase:
        return CouponValidation(False, coupon, f"This coupon requires a minimum purchase of {coupon.min_purchase:g} lei")
    return CouponValidation(True, coupon, "")


def _aware(dt: datetime) -> datetime:
    # SQLite hands back naive UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def increment_coupon_usage(db: Session, code: str) -> Coupon | None:
    coupon = get_coupon(db, code)
    if not coupon:
        logger.warning("Usage increment for missing coupon %s", code)
        return None
    coupon.used_count = (coupon.used_count or 0) + 1
    if coupon.max_uses and coupon.used_count >= coupon.max_uses:
        coupon.is_active = False
    return coupon


def create_coupon(
    db: Session,
    code: str,
    coupon_type: str,
    value: float,
    description: str = "",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    max_uses: int | None = None,
    min_purchase: float | None = None,
    applicable_adventures: list[str] | None = None,
) -> Coupon:
    code = (code or "").strip().upper()
    if not code:
        raise ValueError("Coupon code is required")
    if coupon_type not in ("percentage", "fixed"):
        raise ValueError("Coupon type must be percentage or fixed")
    if value < 0 or (coupon_type == "percentage" and value > 100):
        raise ValueError("Percentage coupons must be between 0 and 100")
    if get_coupon(db, code):
        raise ValueError("Coupon code already exists")
    coupon = Coupon(
        id=str(uuid.uuid4()),
        code=code,
        type=coupon_type,
        value=value,
        description=description,
        start_date=to_utc(start_date) if start_date else datetime.now(timezone.utc),
        end_date=to_utc(end_date) if end_date else None,
        max_uses=max_uses,
        used_count=0,
        min_purchase=min_purchase,
        applies_to="specific" if applicable_adventures else "all",
        applicable_adventures=applicable_adventures or [],
        is_active=True,
    )
    db.add(coupon)
    return coupon
