from sqlalchemy import String, Integer, Float, DateTime, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Coupon(Base):
    __tablename__ = "coupons"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(40), unique=True, index=True)  # stored upper-case
    type: Mapped[str] = mapped_column(String(12))  # percentage|fixed
    value: Mapped[float] = mapped_column(Float)
    description: Mapped[str] = mapped_column(String(255), default="")

    min_purchase: Mapped[float] = mapped_column(Float, nullable=True)
    max_uses: Mapped[int] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, default=0)

    applies_to: Mapped[str] = mapped_column(String(12), default="all")  # all|specific
    applicable_adventures: Mapped[list] = mapped_column(JSON, default=list)

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
