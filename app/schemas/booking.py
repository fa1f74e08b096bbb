from pydantic import BaseModel, Field
from typing import Optional

class VesselSelectionIn(BaseModel):
    caiacSingle: int = Field(default=0, ge=0)
    caiacDublu: int = Field(default=0, ge=0)
    placaSUP: int = Field(default=0, ge=0)

class QuoteRequest(BaseModel):
    kayakSelections: VesselSelectionIn
    couponCode: Optional[str] = None

class PricingSummaryOut(BaseModel):
    basePrice: float
    discount: float
    totalPrice: float
    advancePaymentAmount: int
    remainingAmount: int
    totalPeople: int
    couponValid: Optional[bool] = None
    couponMessage: Optional[str] = None

class CouponValidateIn(BaseModel):
    code: str
    adventureId: Optional[str] = None
    amount: Optional[float] = None

class PaymentIntentCreate(BaseModel):
    adventureId: str
    bookingDate: str  # ISO datetime of the chosen start
    kayakSelections: VesselSelectionIn
    bookerEmail: str  # plain str to allow .local and other dev domains
    bookerName: str = ""
    couponCode: Optional[str] = None
    comments: Optional[str] = None

class PhoneIn(BaseModel):
    phoneNumber: str

class PayIn(BaseModel):
    phoneNumber: Optional[str] = None

class BookingStatusIn(BaseModel):
    status: str
