from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.schemas.voucher import VoucherCreate, VoucherOut, VoucherPayIn
from app.services.netopia_client import NetopiaError
from app.services.user_service import get_or_create_booker
from app.services.voucher_service import (
    create_voucher_purchase, get_voucher_purchase, initiate_voucher_payment, voucher_to_dict,
)

router = APIRouter(tags=["vouchers"])


@router.post("/public/vouchers", response_model=VoucherOut)
def create_voucher(body: VoucherCreate, db: Session = Depends(get_db)):
    try:
        buyer = get_or_create_booker(db, body.buyerEmail, body.buyerName)
        purchase = create_voucher_purchase(db, buyer, body.amount, body.phoneNumber)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return voucher_to_dict(purchase)


@router.post("/public/vouchers/{order_id}/pay", response_model=VoucherOut)
def pay_voucher(order_id: str, body: VoucherPayIn, db: Session = Depends(get_db)):
    purchase = get_voucher_purchase(db, order_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Voucher purchase not found")
    try:
        purchase = initiate_voucher_payment(db, purchase, phone=body.phoneNumber)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NetopiaError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return voucher_to_dict(purchase)


@router.get("/public/vouchers/{order_id}", response_model=VoucherOut)
def get_voucher(order_id: str, db: Session = Depends(get_db)):
    purchase = get_voucher_purchase(db, order_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Voucher purchase not found")
    return voucher_to_dict(purchase)
