from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from app.models.adventure import AdventureDate
from app.services.adventure_service import (
    adventure_facets, adventure_ranges, check_vessels_available, duration_bucket, generate_recurring_dates,
    get_adventure, ingest_adventure, is_bookable_date, list_adventures, make_slug, resolve_booking_end,
)
from app.services.category_service import create_category
from app.services.pricing_service import VesselSelection

TZ = ZoneInfo("Europe/Bucharest")


def local(*args) -> datetime:
    return datetime(*args, tzinfo=TZ)


def test_make_slug_strips_romanian_diacritics():
    assert make_slug("Tură de caiac pe Lacul Snagov!") == "tura-de-caiac-pe-lacul-snagov"
    assert make_slug("Expediție  pe   Dunăre") == "expeditie-pe-dunare"


def test_slugs_are_unique(db):
    a = ingest_adventure(db, {"title": "Caiac", "price": 10, "date": "2030-01-01"})
    b = ingest_adventure(db, {"title": "Caiac", "price": 10, "date": "2030-01-01"})
    assert (a.slug, b.slug) == ("caiac", "caiac-1")


def test_ingest_stores_normalized_dates_once(db):
    a = ingest_adventure(db, {
        "title": "Dunăre",
        "price": 450,
        "dates": ["2030-08-01T09:00:00", "2030-08-10T09:00:00"],
        "endDates": ["2030-08-03T18:00:00"],
    })
    rows = db.query(AdventureDate).filter(AdventureDate.adventure_id == a.id).count()
    assert rows == 2
    ranges = adventure_ranges(db, a, now=local(2030, 7, 1))
    assert ranges[0].start_date == local(2030, 8, 1, 9)
    assert ranges[0].end_date == local(2030, 8, 3, 18)
    assert ranges[1].end_date == local(2030, 8, 11, 9)


def test_ingest_defaults_legacy_vessels_to_single_kayak(db):
    a = ingest_adventure(db, {"title": "Legacy", "price": 100, "date": "2030-01-01"})
    assert (a.caiac_single, a.caiac_dublu, a.placa_sup) == (True, False, False)
    assert a.advance_payment_percentage == 30


@pytest.mark.parametrize("doc", [
    {"price": 10},
    {"title": "x", "price": "abc"},
    {"title": "x", "price": 10, "advancePaymentPercentage": 120},
    {"title": "x", "price": 10, "bookingCutoffHour": 24},
])
def test_ingest_rejects_bad_documents(db, doc):
    with pytest.raises(ValueError):
        ingest_adventure(db, doc)


def test_generate_recurring_dates_weekends():
    dates = generate_recurring_dates([0, 6], 2030)
    # 2030 starts on a Tuesday and has 52 Saturdays and 52 Sundays
    assert len(dates) == 104
    first = dates[0]
    assert first["startDate"] == local(2030, 1, 5, 10)
    assert first["startDate"].weekday() == 5  # Saturday
    assert first["endDate"] == local(2030, 1, 5, 18)


def test_generate_recurring_dates_with_durations():
    hours = generate_recurring_dates([1], 2030, start_time="09:30", duration={"value": 3, "unit": "hours"})
    assert hours[0]["startDate"] == local(2030, 1, 7, 9, 30)  # first Monday
    assert hours[0]["endDate"] == local(2030, 1, 7, 12, 30)

    days = generate_recurring_dates([5], 2030, duration={"value": 2, "unit": "days"})
    assert days[0]["startDate"] == local(2030, 1, 4, 10)  # first Friday
    assert days[0]["endDate"] == local(2030, 1, 6, 18)

    explicit = generate_recurring_dates([5], 2030, end_time="20:00", duration={"value": 2, "unit": "days"})
    assert explicit[0]["endDate"] == local(2030, 1, 4, 20)


def test_ingest_recurring_adventure(db):
    a = ingest_adventure(db, {
        "title": "Weekend",
        "price": 100,
        "isRecurring": True,
        "recurringPattern": {"daysOfWeek": [0], "year": 2030},
    })
    assert a.is_recurring
    assert db.query(AdventureDate).filter(AdventureDate.adventure_id == a.id).count() == 52


def test_vessel_availability(snagov, db):
    legacy = ingest_adventure(db, {"title": "Legacy", "price": 100, "date": "2030-01-01"})
    check_vessels_available(snagov, VesselSelection(caiac_single=1, caiac_dublu=1, placa_sup=1))
    with pytest.raises(ValueError, match="Caiac Dublu"):
        check_vessels_available(legacy, VesselSelection(caiac_dublu=1))
    with pytest.raises(ValueError, match="Placă SUP"):
        check_vessels_available(legacy, VesselSelection(placa_sup=1))


def test_booking_gate_rejects_past_day(snagov):
    with pytest.raises(ValueError, match="zile trecute"):
        is_bookable_date(snagov, local(2030, 7, 14, 10), now=local(2030, 7, 15, 8))


def test_booking_gate_same_day_cutoff(snagov):
    with pytest.raises(ValueError, match="până la ora 14:00"):
        is_bookable_date(snagov, local(2030, 7, 15, 18), now=local(2030, 7, 15, 14, 5))
    is_bookable_date(snagov, local(2030, 7, 15, 18), now=local(2030, 7, 15, 13, 59))


def test_booking_gate_started_adventure(snagov):
    snagov.booking_cutoff_hour = None
    with pytest.raises(ValueError, match="au început deja"):
        is_bookable_date(snagov, local(2030, 7, 15, 10), now=local(2030, 7, 15, 11))


def test_booking_gate_future_day_ignores_cutoff(snagov):
    is_bookable_date(snagov, local(2030, 7, 16, 10), now=local(2030, 7, 15, 23))


def test_resolve_booking_end(snagov, db):
    ranges = adventure_ranges(db, snagov)
    assert resolve_booking_end(snagov, local(2030, 7, 10, 10), ranges) == local(2030, 7, 10, 13)
    # no matching pair: start + duration (3 hours)
    assert resolve_booking_end(snagov, local(2030, 7, 11, 10), ranges) == local(2030, 7, 11, 13)
    snagov.duration_unit = "days"
    snagov.duration_value = 2
    assert resolve_booking_end(snagov, local(2030, 7, 11, 10), ranges) == local(2030, 7, 13, 10)


def test_get_adventure_by_id_or_slug(snagov, db):
    assert get_adventure(db, snagov.id).id == snagov.id
    assert get_adventure(db, "caiac-pe-snagov").id == snagov.id
    assert get_adventure(db, "missing") is None


def test_list_adventures_orders_by_next_occurrence(snagov, db):
    ingest_adventure(db, {"title": "Dunăre", "price": 450, "location": "Tulcea", "date": "2030-07-12T10:00:00"})
    ingest_adventure(db, {"title": "Trecut", "price": 50, "location": "Comana", "date": "2024-01-01"})
    items = list_adventures(db, now=local(2030, 7, 11))
    # past-only adventures fall back to their earliest date
    assert [i["title"] for i in items] == ["Trecut", "Dunăre", "Caiac pe Snagov"]

    snagov_item = items[2]
    assert snagov_item["nextDate"]["startDate"].startswith("2030-07-20")
    assert [d["isPast"] for d in snagov_item["dates"]] == [True, False]
    assert items[0]["dates"][0]["isPast"] is True


def test_list_adventures_filters(snagov, db):
    ingest_adventure(db, {"title": "Dunăre", "price": 450, "location": "Tulcea", "difficulty": "hard", "date": "2030-07-12"})
    assert [i["title"] for i in list_adventures(db, q="snagov")] == ["Caiac pe Snagov"]
    assert [i["title"] for i in list_adventures(db, location="tulcea")] == ["Dunăre"]
    assert [i["title"] for i in list_adventures(db, difficulty="HARD")] == ["Dunăre"]


@pytest.mark.parametrize("value,unit,bucket", [
    (3, "hours", "under-6h"),
    (6, "hours", "6-12h"),
    (12, "hours", None),
    (1, "days", "1-2d"),
    (2, "days", "1-2d"),
    (3, "days", "3d-plus"),
    (10, "days", "3d-plus"),
])
def test_duration_bucket(value, unit, bucket):
    assert duration_bucket(value, unit) == bucket


def test_list_adventures_by_category_and_duration(snagov, db):
    delta = create_category(db, "Expediții")
    ingest_adventure(db, {
        "title": "Dunăre", "price": 450, "location": "Delta Dunării", "category": delta.slug,
        "duration": {"value": 2, "unit": "days"}, "date": "2030-07-12",
    })
    assert [i["title"] for i in list_adventures(db, category="expeditii")] == ["Dunăre"]
    assert [i["title"] for i in list_adventures(db, category=delta.id)] == ["Dunăre"]
    assert [i["title"] for i in list_adventures(db, category="uncategorized")] == ["Caiac pe Snagov"]
    assert list_adventures(db, category="nope") == []

    assert [i["title"] for i in list_adventures(db, duration="1-2d")] == ["Dunăre"]
    assert [i["title"] for i in list_adventures(db, duration="under-6h")] == ["Caiac pe Snagov"]
    assert [i["title"] for i in list_adventures(db, location="delta-dunarii")] == ["Dunăre"]
    assert list_adventures(db, category="expeditii")[0]["categoryId"] == delta.id


def test_ingest_with_unknown_category_stays_uncategorized(db):
    a = ingest_adventure(db, {"title": "Fără", "price": 10, "category": "nu-exista", "date": "2030-07-12"})
    assert a.category_id is None


def test_adventure_facets(snagov, db):
    ingest_adventure(db, {
        "title": "Dunăre", "price": 450, "location": "Delta Dunării",
        "duration": {"value": 4, "unit": "days"}, "date": "2030-07-12",
    })
    ingest_adventure(db, {"title": "Tot Snagov", "price": 90, "location": "Snagov", "date": "2030-07-13"})
    assert adventure_facets(db) == {
        "locations": [
            {"label": "Delta Dunării", "value": "delta-dunarii"},
            {"label": "Snagov", "value": "snagov"},
        ],
        "durations": [
            {"label": "Sub 6 ore", "value": "under-6h"},
            {"label": "3+ zile", "value": "3d-plus"},
        ],
    }
