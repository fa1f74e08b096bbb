import re
import uuid
import logging
from datetime import datetime, date, time, timedelta
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.core.config import settings
from app.models.adventure import Adventure, AdventureDate
from app.models.adventure_category import AdventureCategory
from app.services.date_range_service import (
    DateRange, local_tz, mark_past, next_occurrence, now_local, resolve_date_ranges, to_local, to_utc,
)
from app.services.pricing_service import VesselSelection

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "moderate", "hard", "extreme")
DEFAULT_START = time(10, 0)
DEFAULT_END = time(18, 0)
UNCATEGORIZED = "uncategorized"

# Filter buckets offered by the catalog; hours use [min, max), days use [min, max]
DURATION_BUCKETS = (
    {"label": "Sub 6 ore", "value": "under-6h", "unit": "hours", "min": 0, "max": 6},
    {"label": "6-12 ore", "value": "6-12h", "unit": "hours", "min": 6, "max": 12},
    {"label": "1-2 zile", "value": "1-2d", "unit": "days", "min": 1, "max": 2},
    {"label": "3+ zile", "value": "3d-plus", "unit": "days", "min": 3, "max": None},
)

_RO_CHARS = str.maketrans({"ă": "a", "â": "a", "î": "i", "ș": "s", "ş": "s", "ț": "t", "ţ": "t"})


def _slugify(text: str | None) -> str:
    s = (text or "").lower().translate(_RO_CHARS)
    s = re.sub(r"[^\w\s-]", "", s)
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"-+", "-", s)
    return s.strip("-")


def make_slug(title: str) -> str:
    return _slugify(title) or "aventura"


def _unique_slug(db: Session, title: str) -> str:
    base = make_slug(title)
    slug, counter = base, 1
    while db.query(Adventure).filter(Adventure.slug == slug).first():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def _parse_hhmm(value: str | None) -> time | None:
    if not value:
        return None
    hours, minutes = value.split(":")[:2]
    return time(int(hours), int(minutes))


def generate_recurring_dates(
    days_of_week: list[int],
    year: int,
    start_time: str | None = None,
    end_time: str | None = None,
    duration: dict | None = None,
) -> list[dict]:
    """Every matching day of `year`. days_of_week uses 0 = Sunday .. 6 = Saturday."""
    tz = local_tz()
    start_t = _parse_hhmm(start_time) or DEFAULT_START
    end_t = _parse_hhmm(end_time)
    out = []
    d = date(year, 1, 1)
    while d.year == year:
        if (d.weekday() + 1) % 7 in days_of_week:
            start = datetime.combine(d, start_t, tzinfo=tz)
            if end_t:
                end = datetime.combine(d, end_t, tzinfo=tz)
            elif duration and duration.get("unit") == "hours":
                end = start + timedelta(hours=duration.get("value") or 0)
            elif duration:
                end = datetime.combine(d + timedelta(days=duration.get("value") or 0), DEFAULT_END, tzinfo=tz)
            else:
                end = datetime.combine(d, DEFAULT_END, tzinfo=tz)
            out.append({"startDate": start, "endDate": end})
        d += timedelta(days=1)
    return out


def ingest_adventure(db: Session, document: dict) -> Adventure:
    """Store an adventure from any legacy shape. Dates are resolved once here."""
    title = (document.get("title") or "").strip()
    if not title:
        raise ValueError("title is required")
    try:
        price = float(document.get("price"))
    except (TypeError, ValueError):
        raise ValueError("price must be a number")
    if price < 0:
        raise ValueError("price must be >= 0")

    difficulty = (document.get("difficulty") or "easy").lower()
    if difficulty not in DIFFICULTIES:
        logger.warning("Unknown difficulty %r for %s, using easy", difficulty, title)
        difficulty = "easy"

    duration = document.get("duration") or {}
    advance_pct = document.get("advancePaymentPercentage")
    if advance_pct is None:
        advance_pct = settings.DEFAULT_ADVANCE_PAYMENT_PERCENTAGE
    advance_pct = int(advance_pct)
    if not 0 <= advance_pct <= 100:
        raise ValueError("advancePaymentPercentage must be between 0 and 100")

    cutoff = document.get("bookingCutoffHour")
    if cutoff is not None:
        cutoff = int(cutoff)
        if not 0 <= cutoff <= 23:
            raise ValueError("bookingCutoffHour must be between 0 and 23")

    # legacy documents without vessel types only offered single kayaks
    kayak_types = document.get("availableKayakTypes") or {"caiacSingle": True, "caiacDublu": False, "placaSUP": False}

    pattern = document.get("recurringPattern") or {}
    if document.get("isRecurring") and pattern.get("daysOfWeek"):
        source = {
            "title": title,
            "dates": generate_recurring_dates(
                pattern["daysOfWeek"],
                int(pattern.get("year") or now_local().year),
                pattern.get("startTime"),
                pattern.get("endTime"),
                duration or None,
            ),
        }
    else:
        source = document
    ranges = resolve_date_ranges(source, booking_cutoff_hour=cutoff)
    if not ranges:
        logger.warning("Adventure %s stored without dates", title)

    category_ref = document.get("category")
    category = get_category(db, category_ref) if category_ref else None
    if category_ref and not category:
        logger.warning("Unknown category %r for %s, storing uncategorized", category_ref, title)

    adventure = Adventure(
        id=str(uuid.uuid4()),
        category_id=category.id if category else None,
        slug=document.get("slug") or _unique_slug(db, title),
        title=title,
        images=list(document.get("images") or []),
        price=price,
        included_items=list(document.get("includedItems") or []),
        additional_info=list(document.get("additionalInfo") or []),
        short_description=document.get("shortDescription") or "",
        location=document.get("location") or "",
        meeting_point=document.get("meetingPoint"),
        difficulty=difficulty,
        duration_value=int(duration.get("value") or 1),
        duration_unit=duration.get("unit") if duration.get("unit") in ("hours", "days") else "hours",
        advance_payment_percentage=advance_pct,
        booking_cutoff_hour=cutoff,
        caiac_single=bool(kayak_types.get("caiacSingle")),
        caiac_dublu=bool(kayak_types.get("caiacDublu")),
        placa_sup=bool(kayak_types.get("placaSUP")),
        is_recurring=bool(document.get("isRecurring")),
    )
    db.add(adventure)
    for r in ranges:
        db.add(AdventureDate(
            id=str(uuid.uuid4()),
            adventure_id=adventure.id,
            start_date=to_utc(r.start_date),
            end_date=to_utc(r.end_date),
        ))
    db.commit()
    db.refresh(adventure)
    logger.info("Ingested adventure %s with %d dates", adventure.slug, len(ranges))
    return adventure


def get_category(db: Session, id_or_slug: str) -> AdventureCategory | None:
    return db.query(AdventureCategory).filter(
        or_(AdventureCategory.id == id_or_slug, AdventureCategory.slug == id_or_slug)
    ).first()


def get_adventure(db: Session, id_or_slug: str) -> Adventure | None:
    return db.query(Adventure).filter(or_(Adventure.id == id_or_slug, Adventure.slug == id_or_slug)).first()


def adventure_ranges(db: Session, adventure: Adventure, now: datetime | None = None) -> list[DateRange]:
    rows = (
        db.query(AdventureDate)
        .filter(AdventureDate.adventure_id == adventure.id)
        .order_by(AdventureDate.start_date.asc())
        .all()
    )
    return mark_past([DateRange(r.start_date, r.end_date) for r in rows], adventure.booking_cutoff_hour, now)


def available_vessels(adventure: Adventure) -> dict:
    return {"caiacSingle": adventure.caiac_single, "caiacDublu": adventure.caiac_dublu, "placaSUP": adventure.placa_sup}


def check_vessels_available(adventure: Adventure, selection: VesselSelection):
    if selection.caiac_single > 0 and not adventure.caiac_single:
        raise ValueError("Caiac Single nu este disponibil pentru această aventură. Te rugăm să ajustezi selecția.")
    if selection.caiac_dublu > 0 and not adventure.caiac_dublu:
        raise ValueError("Caiac Dublu nu este disponibil pentru această aventură. Te rugăm să ajustezi selecția.")
    if selection.placa_sup > 0 and not adventure.placa_sup:
        raise ValueError("Placă SUP nu este disponibilă pentru această aventură. Te rugăm să ajustezi selecția.")


def is_bookable_date(adventure: Adventure, booking_date: datetime, now: datetime | None = None):
    """Raise ValueError with a customer-facing message when the date cannot be booked."""
    now = to_local(now) if now else now_local()
    start = to_local(booking_date)
    if start.date() < now.date():
        raise ValueError("Nu se pot face rezervări pentru zile trecute. Te rugăm să selectezi o dată în viitor.")
    if start.date() == now.date():
        cutoff = adventure.booking_cutoff_hour
        if cutoff is not None and now.hour >= cutoff:
            raise ValueError(f"Rezervările pentru ziua curentă se pot face doar până la ora {cutoff}:00.")
        if start <= now:
            raise ValueError(
                "Nu se pot face rezervări pentru aventuri care au început deja. "
                "Te rugăm să selectezi o dată și oră în viitor."
            )


def resolve_booking_end(adventure: Adventure, start: datetime, ranges: list[DateRange]) -> datetime:
    start = to_local(start)
    for r in ranges:
        if to_local(r.start_date).date() == start.date():
            return to_local(r.end_date)
    if adventure.duration_unit == "days":
        return start + timedelta(days=adventure.duration_value or 1)
    if adventure.duration_unit == "hours" and adventure.duration_value:
        return start + timedelta(hours=adventure.duration_value)
    return start + timedelta(days=1)


def adventure_to_dict(adventure: Adventure, ranges: list[DateRange], now: datetime | None = None) -> dict:
    nxt = next_occurrence(ranges, now)
    return {
        "id": adventure.id,
        "slug": adventure.slug,
        "title": adventure.title,
        "images": adventure.images or [],
        "price": adventure.price,
        "includedItems": adventure.included_items or [],
        "additionalInfo": adventure.additional_info or [],
        "shortDescription": adventure.short_description or "",
        "location": adventure.location,
        "meetingPoint": adventure.meeting_point,
        "difficulty": adventure.difficulty,
        "duration": {"value": adventure.duration_value, "unit": adventure.duration_unit},
        "advancePaymentPercentage": adventure.advance_payment_percentage,
        "bookingCutoffHour": adventure.booking_cutoff_hour,
        "availableKayakTypes": available_vessels(adventure),
        "isRecurring": adventure.is_recurring,
        "categoryId": adventure.category_id,
        "nextDate": nxt.to_dict() if nxt else None,
        "dates": [r.to_dict() for r in ranges],
    }


def location_value(location: str | None) -> str:
    return _slugify(location)


def duration_bucket(value: int | None, unit: str | None) -> str | None:
    value = value or 0
    for bucket in DURATION_BUCKETS:
        if unit != bucket["unit"] or value < bucket["min"]:
            continue
        if bucket["max"] is None:
            return bucket["value"]
        if unit == "hours" and value < bucket["max"]:
            return bucket["value"]
        if unit == "days" and value <= bucket["max"]:
            return bucket["value"]
    return None


def list_adventures(
    db: Session,
    q: str | None = None,
    location: str | None = None,
    difficulty: str | None = None,
    category: str | None = None,
    duration: str | None = None,
    now: datetime | None = None,
) -> list[dict]:
    """Catalog search. `location` matches by name or by facet value, `category` is a slug or "uncategorized"."""
    query = db.query(Adventure)
    if q:
        like = f"%{q.strip()}%"
        query = query.filter(or_(Adventure.title.ilike(like), Adventure.location.ilike(like)))
    if difficulty:
        query = query.filter(Adventure.difficulty == difficulty.lower())
    if category == UNCATEGORIZED:
        query = query.filter(Adventure.category_id.is_(None))
    elif category:
        c = get_category(db, category)
        if not c:
            return []
        query = query.filter(Adventure.category_id == c.id)

    adventures = query.all()
    if location:
        wanted = location_value(location)
        adventures = [a for a in adventures if wanted and wanted in location_value(a.location)]
    if duration:
        adventures = [a for a in adventures if duration_bucket(a.duration_value, a.duration_unit) == duration]

    rows = []
    for a in adventures:
        ranges = adventure_ranges(db, a, now)
        nxt = next_occurrence(ranges, now)
        rows.append((nxt.start_date if nxt else None, adventure_to_dict(a, ranges, now)))

    # soonest upcoming first; adventures without dates last
    rows.sort(key=lambda r: (r[0] is None, r[0] or now_local()))
    return [item for _, item in rows]


def adventure_facets(db: Session) -> dict:
    """Filter options that match at least one adventure."""
    rows = db.query(Adventure.location, Adventure.duration_value, Adventure.duration_unit).all()
    locations = sorted({loc for loc, _, _ in rows if loc}, key=str.lower)
    buckets = {duration_bucket(value, unit) for _, value, unit in rows}
    return {
        "locations": [{"label": loc, "value": location_value(loc)} for loc in locations],
        "durations": [
            {"label": b["label"], "value": b["value"]} for b in DURATION_BUCKETS if b["value"] in buckets
        ],
    }
