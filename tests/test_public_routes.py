from app.services.adventure_service import ingest_adventure
from app.services.category_service import create_category
from app.services.coupon_service import create_coupon
from app.services.netopia_client import NetopiaError
from app.services.user_service import get_or_create_booker

API = "/api/v1"


def _book(client, snagov, **overrides):
    body = {
        "adventureId": snagov.id,
        "bookingDate": "2030-07-20T10:00:00+03:00",
        "kayakSelections": {"caiacSingle": 2, "caiacDublu": 1, "placaSUP": 0},
        "bookerEmail": "ion@example.ro",
        "bookerName": "Ion Ionescu",
    }
    body.update(overrides)
    return client.post(f"{API}/public/payment-intents", json=body)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_and_detail(client, snagov):
    items = client.get(f"{API}/public/adventures").json()
    assert [a["slug"] for a in items] == ["caiac-pe-snagov"]
    assert items[0]["availableKayakTypes"] == {"caiacSingle": True, "caiacDublu": True, "placaSUP": True}
    assert len(items[0]["dates"]) == 2

    detail = client.get(f"{API}/public/adventures/caiac-pe-snagov").json()
    assert detail["id"] == snagov.id
    assert detail["bookingCutoffHour"] == 14
    assert client.get(f"{API}/public/adventures/nope").status_code == 404


def test_list_filters_by_category_and_duration(client, snagov, db):
    exp = create_category(db, "Expediții")
    ingest_adventure(db, {
        "title": "Dunăre", "price": 450, "location": "Delta Dunării", "category": exp.slug,
        "duration": {"value": 2, "unit": "days"}, "date": "2030-07-12",
    })
    by_cat = client.get(f"{API}/public/adventures", params={"category": "expeditii"}).json()
    assert [a["title"] for a in by_cat] == ["Dunăre"]
    assert by_cat[0]["categoryId"] == exp.id
    by_duration = client.get(f"{API}/public/adventures", params={"duration": "under-6h"}).json()
    assert [a["title"] for a in by_duration] == ["Caiac pe Snagov"]


def test_facets_endpoint(client, snagov):
    r = client.get(f"{API}/public/adventures/facets")
    assert r.status_code == 200
    assert r.json() == {
        "locations": [{"label": "Snagov", "value": "snagov"}],
        "durations": [{"label": "Sub 6 ore", "value": "under-6h"}],
    }


def test_categories_endpoints(client, snagov, db):
    exp = create_category(db, "Expediții", description="Mai multe zile")
    ingest_adventure(db, {"title": "Dunăre", "price": 450, "category": exp.id, "date": "2030-07-12"})

    cats = client.get(f"{API}/public/categories").json()
    assert cats == [{"id": exp.id, "slug": "expeditii", "title": "Expediții", "description": "Mai multe zile", "image": ""}]

    one = client.get(f"{API}/public/categories/expeditii/adventures").json()
    assert one["category"]["slug"] == "expeditii"
    assert [a["title"] for a in one["adventures"]] == ["Dunăre"]

    rest = client.get(f"{API}/public/categories/uncategorized/adventures").json()
    assert [a["slug"] for a in rest["adventures"]] == ["caiac-pe-snagov"]

    groups = client.get(f"{API}/public/adventures/by-category").json()
    assert [g["category"]["slug"] for g in groups] == ["expeditii", "uncategorized"]

    assert client.get(f"{API}/public/categories/nope/adventures").status_code == 404


def test_quote_without_coupon(client, snagov):
    r = client.post(f"{API}/public/adventures/{snagov.id}/quote", json={
        "kayakSelections": {"caiacSingle": 1, "caiacDublu": 1, "placaSUP": 1},
    })
    assert r.status_code == 200
    assert r.json() == {
        "basePrice": 400,
        "discount": 0,
        "totalPrice": 400,
        "advancePaymentAmount": 120,
        "remainingAmount": 280,
        "totalPeople": 4,
        "couponValid": None,
        "couponMessage": None,
    }


def test_quote_recomputes_percentage_coupon(client, snagov, db):
    create_coupon(db, "VARA20", "percentage", 20)
    db.commit()
    url = f"{API}/public/adventures/{snagov.id}/quote"

    one = client.post(url, json={"kayakSelections": {"caiacSingle": 1}, "couponCode": "VARA20"}).json()
    assert (one["discount"], one["totalPrice"], one["advancePaymentAmount"]) == (20, 80, 24)

    more = client.post(url, json={"kayakSelections": {"caiacSingle": 1, "caiacDublu": 1}, "couponCode": "VARA20"}).json()
    assert (more["discount"], more["totalPrice"], more["advancePaymentAmount"]) == (60, 240, 72)
    assert more["couponValid"] is True


def test_quote_reports_invalid_coupon(client, snagov):
    r = client.post(f"{API}/public/adventures/{snagov.id}/quote", json={
        "kayakSelections": {"caiacSingle": 1}, "couponCode": "NOPE",
    }).json()
    assert r["couponValid"] is False
    assert r["couponMessage"] == "Coupon not found"
    assert r["discount"] == 0


def test_quote_rejects_unavailable_vessel(client, db):
    legacy = ingest_adventure(db, {"title": "Legacy", "price": 100, "date": "2030-01-01"})
    r = client.post(f"{API}/public/adventures/{legacy.id}/quote", json={"kayakSelections": {"placaSUP": 1}})
    assert r.status_code == 400
    assert "Placă SUP" in r.json()["detail"]


def test_quote_rejects_negative_counts(client, snagov):
    r = client.post(f"{API}/public/adventures/{snagov.id}/quote", json={"kayakSelections": {"caiacSingle": -1}})
    assert r.status_code == 422


def test_validate_coupon_endpoint(client, snagov, db):
    create_coupon(db, "FIX50", "fixed", 50, min_purchase=200)
    db.commit()
    ok = client.post(f"{API}/public/coupons/validate", json={"code": "fix50", "adventureId": snagov.id, "amount": 300}).json()
    assert ok["valid"] is True
    assert ok["discount"] == 50
    assert ok["coupon"]["code"] == "FIX50"

    low = client.post(f"{API}/public/coupons/validate", json={"code": "FIX50", "amount": 100}).json()
    assert low["valid"] is False
    assert low["message"] == "This coupon requires a minimum purchase of 200 lei"


def test_checkout_flow(client, snagov, fake_netopia):
    r = _book(client, snagov)
    assert r.status_code == 200
    intent = r.json()
    assert intent["advancePaymentAmount"] == 120
    assert intent["paymentStatus"] == "pending"
    intent_id = intent["intentId"]

    bad_phone = client.post(f"{API}/public/payment-intents/{intent_id}/phone", json={"phoneNumber": "123"})
    assert bad_phone.status_code == 400

    pay = client.post(f"{API}/public/payment-intents/{intent_id}/pay", json={"phoneNumber": "0722123456"}).json()
    assert pay["paymentStatus"] == "processing"
    assert pay["paymentUrl"].endswith(intent_id)
    assert pay["bookingId"] is None

    result = client.get(f"{API}/public/payment-result", params={"intentId": intent_id}).json()
    assert result["status"] == "pending_payment"
    assert result["refreshAfterSeconds"] == 5

    client.post(f"{API}/webhooks/netopia", json={
        "order": {"orderID": intent_id}, "payment": {"status": 3, "code": "00", "amount": 120},
    })
    result = client.get(f"{API}/public/payment-result", params={"intentId": intent_id}).json()
    assert result["status"] == "pending"
    assert result["rawStatus"] == "awaiting confirmation"
    assert result["refreshAfterSeconds"] is None
    assert result["bookingOrderId"] == f"ADV-{intent_id}"


def test_create_intent_errors(client, snagov):
    assert _book(client, snagov, adventureId="missing").status_code == 404
    r = _book(client, snagov, kayakSelections={"caiacSingle": 0})
    assert r.status_code == 400
    assert "cel puțin o ambarcațiune" in r.json()["detail"]
    assert _book(client, snagov, bookingDate="2020-01-01T10:00:00").status_code == 400
    assert _book(client, snagov, bookerEmail="not-an-email").status_code == 400


def test_unknown_intent_is_404(client):
    assert client.get(f"{API}/public/payment-intents/INT-NOPE").status_code == 404
    assert client.post(f"{API}/public/payment-intents/INT-NOPE/pay", json={}).status_code == 404
    assert client.get(f"{API}/public/payment-result", params={"intentId": "INT-NOPE"}).status_code == 404


def test_pay_provider_failure_is_502(client, snagov, fake_netopia):
    fake_netopia.fail = NetopiaError("Netopia API Error 500: down")
    intent_id = _book(client, snagov).json()["intentId"]
    r = client.post(f"{API}/public/payment-intents/{intent_id}/pay", json={})
    assert r.status_code == 502
    assert client.get(f"{API}/public/payment-intents/{intent_id}").json()["paymentStatus"] == "error"


def test_user_reservations_merge_bookings_and_intents(client, snagov, fake_netopia, db):
    paid = _book(client, snagov).json()
    client.post(f"{API}/webhooks/netopia", json={"order": {"orderID": paid["intentId"]}, "payment": {"status": 3, "code": "00"}})
    declined = _book(client, snagov).json()
    client.post(f"{API}/webhooks/netopia", json={"order": {"orderID": declined["intentId"]}, "payment": {"status": 5}})

    user_id = get_or_create_booker(db, "ion@example.ro").id
    items = client.get(f"{API}/public/users/{user_id}/reservations").json()["items"]
    assert len(items) == 2
    by_kind = {i["isPaymentIntent"]: i for i in items}
    assert by_kind[False]["orderId"] == f"ADV-{paid['intentId']}"
    assert by_kind[False]["label"] == "În așteptarea confirmării"
    assert by_kind[True]["status"] == "declined"
    assert by_kind[True]["color"] == "red"

    assert client.get(f"{API}/public/users/nope/reservations").status_code == 404
