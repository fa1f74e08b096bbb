from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class VoucherPurchase(Base):
    __tablename__ = "voucher_purchases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(20), unique=True, index=True)  # VCH-XXXXXXXX
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    username: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(320))

    voucher_amount: Mapped[int] = mapped_column(Integer)  # face value of the generated coupon
    processing_fee: Mapped[int] = mapped_column(Integer, default=20)
    total_amount: Mapped[int] = mapped_column(Integer)  # voucher_amount + processing_fee

    status: Mapped[str] = mapped_column(String(30), default="pending_payment", index=True)
    status_message: Mapped[str] = mapped_column(String(255), default="")
    generated_coupon_code: Mapped[str] = mapped_column(String(40), unique=True, nullable=True)

    payment_url: Mapped[str] = mapped_column(String(512), nullable=True)
    payment_attempt: Mapped[int] = mapped_column(Integer, default=0)
    transaction_details: Mapped[dict] = mapped_column(JSON, nullable=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
