"""Date Range Resolver.

Adventures arrive with dates in one of three shapes:

(a) ``dates: [{"startDate": ..., "endDate": ...}, ...]``
(b) legacy parallel arrays ``dates: [start, ...]`` + ``endDates: [end, ...]``
(c) a single ``date`` / ``endDate`` pair

``resolve_date_ranges`` turns any of them into an ordered list of ``DateRange``.
Bad values are logged and replaced, never raised. All datetimes returned are
timezone-aware in ``settings.TIMEZONE``.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_DURATION = timedelta(days=1)


@dataclass
class DateRange:
    start_date: datetime
    end_date: datetime
    is_past: bool = False

    def to_dict(self) -> dict:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "isPast": self.is_past,
        }


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def now_local() -> datetime:
    return datetime.now(local_tz())


def to_local(dt: datetime) -> datetime:
    """Naive values coming back from the database are UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(local_tz())


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=local_tz())
    return dt.astimezone(timezone.utc)


def parse_datetime(value) -> datetime | None:
    """Best-effort parse of a date value. Naive inputs are local time. None when unusable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone(local_tz())
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=local_tz())
    try:
        return dt.astimezone(local_tz())
    except OverflowError:
        return None


def _start_or_now(value, now: datetime, context: str) -> datetime:
    dt = parse_datetime(value)
    if dt is None:
        logger.warning("Unparseable start date %r in %s, using current date", value, context)
        return now
    return dt


def _default_end(start: datetime, context: str) -> datetime:
    try:
        return start + DEFAULT_DURATION
    except OverflowError:
        logger.warning("Start %s in %s is too late for a default end, using start", start, context)
        return start


def _end_or_default(value, start: datetime, context: str) -> datetime:
    dt = parse_datetime(value)
    if dt is None:
        if value not in (None, ""):
            logger.warning("Unparseable end date %r in %s, using start + 1 day", value, context)
        return _default_end(start, context)
    if dt < start:
        logger.warning("End date %s before start %s in %s, using start + 1 day", dt, start, context)
        return _default_end(start, context)
    return dt


def _cutoff_hour(value, context: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        hour = int(value)
    except (TypeError, ValueError, OverflowError):
        hour = None
    if hour is None or not 0 <= hour <= 23:
        logger.warning("Ignoring bookingCutoffHour %r in %s", value, context)
        return None
    return hour


def is_past(start: datetime, booking_cutoff_hour: int | None = None, now: datetime | None = None) -> bool:
    now = to_local(now) if now else now_local()
    start = to_local(start)
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if start < start_of_today:
        return True
    if booking_cutoff_hour is not None and start.date() == now.date():
        return now.hour >= booking_cutoff_hour
    return False


def resolve_date_ranges(
    adventure: dict,
    booking_cutoff_hour: int | None = None,
    now: datetime | None = None,
) -> list[DateRange]:
    now = to_local(now) if now else now_local()
    context = str(adventure.get("_id") or adventure.get("id") or adventure.get("title") or "adventure")
    if booking_cutoff_hour is None:
        booking_cutoff_hour = adventure.get("bookingCutoffHour")
    booking_cutoff_hour = _cutoff_hour(booking_cutoff_hour, context)

    pairs: list[tuple[datetime, datetime]] = []
    dates = adventure.get("dates")
    if isinstance(dates, dict):
        dates = [dates]
    elif dates not in (None, "") and not isinstance(dates, list):
        logger.warning("dates in %s is not a list, reading %r as a single start date", context, dates)
        dates = [dates]
    if dates:
        if all(isinstance(d, dict) for d in dates):
            for d in dates:
                start = _start_or_now(d.get("startDate"), now, context)
                pairs.append((start, _end_or_default(d.get("endDate"), start, context)))
        else:
            end_dates = adventure.get("endDates")
            if not isinstance(end_dates, list):
                if end_dates not in (None, ""):
                    logger.warning("Ignoring endDates %r in %s, not a list", end_dates, context)
                end_dates = []
            if len(end_dates) < len(dates):
                logger.warning("%s has %d dates but %d endDates", context, len(dates), len(end_dates))
            for i, value in enumerate(dates):
                if isinstance(value, dict):
                    start = _start_or_now(value.get("startDate"), now, context)
                    end_value = value.get("endDate")
                else:
                    start = _start_or_now(value, now, context)
                    end_value = end_dates[i] if i < len(end_dates) else None
                pairs.append((start, _end_or_default(end_value, start, context)))
    elif adventure.get("date") not in (None, ""):
        start = _start_or_now(adventure.get("date"), now, context)
        pairs.append((start, _end_or_default(adventure.get("endDate"), start, context)))
    else:
        logger.warning("%s has no date fields", context)

    pairs.sort(key=lambda p: p[0])
    return [DateRange(s, e, is_past(s, booking_cutoff_hour, now)) for s, e in pairs]


def mark_past(ranges: list[DateRange], booking_cutoff_hour: int | None = None, now: datetime | None = None) -> list[DateRange]:
    """Recompute is_past for ranges loaded from storage."""
    return [
        DateRange(to_local(r.start_date), to_local(r.end_date), is_past(r.start_date, booking_cutoff_hour, now))
        for r in ranges
    ]


def next_occurrence(ranges: list[DateRange], now: datetime | None = None) -> DateRange | None:
    """Earliest bookable range starting at or after now.

    Falls back to the earliest upcoming range when all of them are past the
    booking cutoff, then to the earliest range overall.
    """
    if not ranges:
        return None
    now = to_local(now) if now else now_local()
    ordered = sorted(ranges, key=lambda r: to_local(r.start_date))
    upcoming = [r for r in ordered if to_local(r.start_date) >= now]
    for r in upcoming:
        if not r.is_past:
            return r
    return upcoming[0] if upcoming else ordered[0]
