from sqlalchemy import String, Integer, Float, DateTime, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(24), unique=True, index=True)  # ADV-<intent id>
    adventure_id: Mapped[str] = mapped_column(String(36), index=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    username: Mapped[str] = mapped_column(String(200), default="")
    adventure_title: Mapped[str] = mapped_column(String(200))

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    price: Mapped[float] = mapped_column(Float)  # per person
    caiac_single: Mapped[int] = mapped_column(Integer, default=0)
    caiac_dublu: Mapped[int] = mapped_column(Integer, default=0)
    placa_sup: Mapped[int] = mapped_column(Integer, default=0)

    advance_payment_percentage: Mapped[int] = mapped_column(Integer, default=30)
    advance_payment_amount: Mapped[int] = mapped_column(Integer, default=0)

    coupon_code: Mapped[str] = mapped_column(String(40), nullable=True)
    coupon_type: Mapped[str] = mapped_column(String(12), nullable=True)
    coupon_value: Mapped[float] = mapped_column(Float, nullable=True)
    coupon_discount: Mapped[float] = mapped_column(Float, nullable=True)
    original_price: Mapped[float] = mapped_column(Float, nullable=True)

    # textual, see app.services.status_service for the full domain
    status: Mapped[str] = mapped_column(String(30), default="awaiting confirmation", index=True)
    status_message: Mapped[str] = mapped_column(String(255), default="")
    transaction_details: Mapped[dict] = mapped_column(JSON, nullable=True)

    comments: Mapped[str] = mapped_column(Text, nullable=True)
    location: Mapped[str] = mapped_column(String(200), nullable=True)
    meeting_point: Mapped[str] = mapped_column(String(200), nullable=True)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
