from pydantic import BaseModel
from typing import Optional


class VoucherCreate(BaseModel):
    amount: int
    buyerEmail: str
    buyerName: str = ""
    phoneNumber: Optional[str] = None


class VoucherPayIn(BaseModel):
    phoneNumber: Optional[str] = None


class VoucherOut(BaseModel):
    orderId: str
    voucherAmount: int
    processingFee: int
    totalAmount: int
    status: str
    statusMessage: str = ""
    couponCode: Optional[str] = None
    paymentUrl: Optional[str] = None
    createdAt: Optional[str] = None
