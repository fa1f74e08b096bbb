from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from app.core.config import settings

VESSEL_FIELDS = ("caiacSingle", "caiacDublu", "placaSUP")


@dataclass
class VesselSelection:
    caiac_single: int = 0
    caiac_dublu: int = 0  # double kayak: 2 person-slots, 2x rate
    placa_sup: int = 0

    @classmethod
    def from_dict(cls, data: dict | None) -> "VesselSelection":
        data = data or {}
        return cls(
            caiac_single=int(data.get("caiacSingle") or 0),
            caiac_dublu=int(data.get("caiacDublu") or 0),
            placa_sup=int(data.get("placaSUP") or 0),
        )

    def to_dict(self) -> dict:
        return {"caiacSingle": self.caiac_single, "caiacDublu": self.caiac_dublu, "placaSUP": self.placa_sup}

    @property
    def total_units(self) -> int:
        return self.caiac_single + self.caiac_dublu + self.placa_sup

    @property
    def total_people(self) -> int:
        return self.caiac_single + self.caiac_dublu * 2 + self.placa_sup


@dataclass
class PricingSummary:
    base_price: float
    discount: float
    total_price: float
    advance_payment_amount: int
    remaining_amount: int
    total_people: int

    def to_dict(self) -> dict:
        return {
            "basePrice": self.base_price,
            "discount": self.discount,
            "totalPrice": self.total_price,
            "advancePaymentAmount": self.advance_payment_amount,
            "remainingAmount": self.remaining_amount,
            "totalPeople": self.total_people,
        }


def round_half_up(value: float) -> int:
    """Whole-lei rounding with halves going up (2.5 -> 3), unlike Python's round()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def base_price(rate: float, selection: VesselSelection) -> float:
    if min(selection.caiac_single, selection.caiac_dublu, selection.placa_sup) < 0:
        raise ValueError("Vessel counts cannot be negative")
    return (
        selection.caiac_single * rate
        + selection.caiac_dublu * rate * 2
        + selection.placa_sup * rate
    )


def compute_discount(coupon_type: str, value: float, base: float) -> float:
    """Discount for the current base price. Recompute on every selection change."""
    if base <= 0 or value <= 0:
        return 0
    if coupon_type == "percentage":
        return min(round_half_up(base * value / 100), base)
    if coupon_type == "fixed":
        return min(value, base)
    return 0


def split_advance_payment(total: float, percentage: int | None = None) -> tuple[int, int]:
    if percentage is None:
        percentage = settings.DEFAULT_ADVANCE_PAYMENT_PERCENTAGE
    percentage = max(0, min(100, int(percentage)))
    advance = round_half_up(total * percentage / 100)
    remaining = round_half_up(total - advance)
    return advance, remaining


def price_booking(
    rate: float,
    selection: VesselSelection,
    advance_payment_percentage: int | None = None,
    coupon_type: str | None = None,
    coupon_value: float | None = None,
) -> PricingSummary:
    base = base_price(rate, selection)
    discount = compute_discount(coupon_type, coupon_value or 0, base) if coupon_type else 0
    total = max(0, base - discount)
    advance, remaining = split_advance_payment(total, advance_payment_percentage)
    return PricingSummary(
        base_price=base,
        discount=discount,
        total_price=total,
        advance_payment_amount=advance,
        remaining_amount=remaining,
        total_people=selection.total_people,
    )


def require_units(selection: VesselSelection):
    if selection.total_units <= 0:
        raise ValueError("Trebuie să selectezi cel puțin o ambarcațiune pentru a face o rezervare.")
