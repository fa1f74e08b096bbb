from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import settings
from app.services.coupon_service import get_coupon, validate_coupon
from app.services.netopia_client import NetopiaError
from app.services.voucher_service import (
    apply_voucher_provider_status, create_voucher_purchase, generate_voucher_coupon, initiate_voucher_payment,
    voucher_to_dict,
)


def test_create_voucher_purchase_adds_fee(db, user):
    purchase = create_voucher_purchase(db, user, 200, phone="0722-123-456")
    assert purchase.order_id.startswith("VCH-")
    assert (purchase.voucher_amount, purchase.processing_fee, purchase.total_amount) == (200, 20, 220)
    assert purchase.status == "pending_payment"
    assert purchase.phone_number == "0722123456"
    assert purchase.username == "Ana Popescu"


def test_create_voucher_purchase_rejects_other_amounts(db, user):
    with pytest.raises(ValueError, match="100, 200, 300, 400, 500"):
        create_voucher_purchase(db, user, 150)


def test_initiate_voucher_payment_charges_total(db, user, fake_netopia):
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 100))
    assert purchase.status == "processing"
    call = fake_netopia.calls[0]
    assert call["amount"] == 120
    assert call["order_id"] == purchase.order_id
    assert call["redirect_url"].endswith(f"/vouchere/rezultat?orderId={purchase.order_id}")


def test_initiate_voucher_payment_error(db, user, fake_netopia):
    fake_netopia.fail = NetopiaError("timeout")
    purchase = create_voucher_purchase(db, user, 100)
    with pytest.raises(NetopiaError):
        initiate_voucher_payment(db, purchase)
    assert purchase.status == "error"


def test_paid_voucher_generates_single_use_coupon(db, user, fake_netopia):
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 300))
    apply_voucher_provider_status(db, purchase, {"status": 3, "code": "00"})

    assert purchase.status == "completed"
    code = purchase.generated_coupon_code
    assert code.startswith("VOUCHER-")
    coupon = get_coupon(db, code)
    assert (coupon.type, coupon.value, coupon.max_uses) == ("fixed", 300, 1)
    assert coupon.applies_to == "all"
    end = coupon.end_date.replace(tzinfo=timezone.utc) if coupon.end_date.tzinfo is None else coupon.end_date
    assert end > datetime.now(timezone.utc) + timedelta(days=settings.VOUCHER_VALIDITY_DAYS - 1)

    check = validate_coupon(db, code, base_price=400)
    assert check.valid
    assert check.to_dict(base_price=400)["discount"] == 300
    assert voucher_to_dict(purchase)["couponCode"] == code


def test_repeated_notifications_do_not_regenerate(db, user, fake_netopia):
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 100))
    apply_voucher_provider_status(db, purchase, {"status": 3, "code": "00"})
    code = purchase.generated_coupon_code
    apply_voucher_provider_status(db, purchase, {"status": 3, "code": "00"})
    apply_voucher_provider_status(db, purchase, {"status": 5})
    assert purchase.generated_coupon_code == code
    assert purchase.status == "completed"
    assert generate_voucher_coupon(db, purchase) == code


def test_declined_voucher_has_no_coupon(db, user, fake_netopia):
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 100))
    apply_voucher_provider_status(db, purchase, {"status": 5})
    assert purchase.status == "declined"
    assert purchase.generated_coupon_code is None
    with pytest.raises(ValueError, match="not paid"):
        generate_voucher_coupon(db, purchase)

    # a declined voucher can be paid again
    assert initiate_voucher_payment(db, purchase).status == "processing"


def test_completed_voucher_cannot_be_paid_again(db, user, fake_netopia):
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 100))
    apply_voucher_provider_status(db, purchase, {"status": 3, "code": "00"})
    with pytest.raises(ValueError, match="completed"):
        initiate_voucher_payment(db, purchase)


def test_sandbox_bypass_completes_voucher(db, user, fake_netopia, monkeypatch):
    monkeypatch.setattr(settings, "NETOPIA_SANDBOX_BYPASS", True)
    purchase = initiate_voucher_payment(db, create_voucher_purchase(db, user, 500))
    assert fake_netopia.calls == []
    assert purchase.status == "completed"
    assert get_coupon(db, purchase.generated_coupon_code).value == 500
