import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class CanonicalStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    PENDING_PAYMENT = "pending_payment"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    UNKNOWN = "unknown"


# Every raw value a booking or payment intent may carry
BOOKING_STATUSES = (
    "pending", "confirmed", "cancelled", "completed", "awaiting confirmation",
    "pending_payment", "payment_confirmed", "declined", "expired", "error", "processing",
)

COLORS = {
    CanonicalStatus.CONFIRMED: "green",
    CanonicalStatus.PENDING: "yellow",
    CanonicalStatus.PENDING_PAYMENT: "blue",
    CanonicalStatus.DECLINED: "red",
    CanonicalStatus.CANCELLED: "red",
    CanonicalStatus.COMPLETED: "blue",
    CanonicalStatus.UNKNOWN: "gray",
}

# Labels follow the raw value where it is more specific than the canonical one
RAW_LABELS = {
    "confirmed": "Confirmată",
    "pending": "În așteptare",
    "awaiting confirmation": "În așteptarea confirmării",
    "cancelled": "Anulată",
    "completed": "Finalizată",
    "pending_payment": "Plată în curs",
    "payment_confirmed": "Plată confirmată",
    "declined": "Plată respinsă",
    "expired": "Plată expirată",
    "error": "Eroare plată",
    "processing": "Procesare plată",
}


@dataclass(frozen=True)
class NormalizedStatus:
    canonical: CanonicalStatus
    raw: str
    color: str
    label: str

    def to_dict(self) -> dict:
        return {"status": self.canonical.value, "rawStatus": self.raw, "color": self.color, "label": self.label}


def canonical_status(raw: str | None) -> CanonicalStatus:
    s = (raw or "").strip().lower()
    if s in ("confirmed", "payment_confirmed"):
        return CanonicalStatus.CONFIRMED
    if s == "pending" or "awaiting" in s:
        return CanonicalStatus.PENDING
    if s in ("pending_payment", "processing"):
        return CanonicalStatus.PENDING_PAYMENT
    if s in ("declined", "expired", "error"):
        return CanonicalStatus.DECLINED
    if s == "cancelled":
        return CanonicalStatus.CANCELLED
    if s == "completed":
        return CanonicalStatus.COMPLETED
    if s != CanonicalStatus.UNKNOWN.value:
        logger.warning("Unknown status value %r", raw)
    return CanonicalStatus.UNKNOWN


def status_label(raw: str | None) -> str:
    s = (raw or "").strip().lower()
    if s in RAW_LABELS:
        return RAW_LABELS[s]
    if "awaiting" in s:
        return RAW_LABELS["awaiting confirmation"]
    return s.replace("_", " ")


def normalize_status(raw: str | None) -> NormalizedStatus:
    canonical = canonical_status(raw)
    return NormalizedStatus(
        canonical=canonical,
        raw=raw or "",
        color=COLORS[canonical],
        label=status_label(raw),
    )
