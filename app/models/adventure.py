from sqlalchemy import String, Integer, Float, DateTime, Boolean, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Adventure(Base):
    __tablename__ = "adventures"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200))
    images: Mapped[list] = mapped_column(JSON, default=list)

    price: Mapped[float] = mapped_column(Float)  # per person, lei
    included_items: Mapped[list] = mapped_column(JSON, default=list)
    additional_info: Mapped[list] = mapped_column(JSON, default=list)
    short_description: Mapped[str] = mapped_column(Text, default="")

    location: Mapped[str] = mapped_column(String(200))
    meeting_point: Mapped[str] = mapped_column(String(200), nullable=True)
    difficulty: Mapped[str] = mapped_column(String(12), default="easy")  # easy|moderate|hard|extreme
    duration_value: Mapped[int] = mapped_column(Integer, default=1)
    duration_unit: Mapped[str] = mapped_column(String(8), default="hours")  # hours|days

    advance_payment_percentage: Mapped[int] = mapped_column(Integer, default=30)  # 0-100
    booking_cutoff_hour: Mapped[int] = mapped_column(Integer, nullable=True)  # 0-23, same-day only

    # Vessel types offered
    caiac_single: Mapped[bool] = mapped_column(Boolean, default=True)
    caiac_dublu: Mapped[bool] = mapped_column(Boolean, default=False)
    placa_sup: Mapped[bool] = mapped_column(Boolean, default=False)

    category_id: Mapped[str] = mapped_column(String(36), nullable=True, index=True)  # adventure_categories.id
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class AdventureDate(Base):
    __tablename__ = "adventure_dates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    adventure_id: Mapped[str] = mapped_column(String(36), index=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
