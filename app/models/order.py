from sqlalchemy import String, Float, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from app.db.session import Base

class Order(Base):
    """Per-user purchase history shown in the control panel. Not a pricing source."""
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    order_id: Mapped[str] = mapped_column(String(24), unique=True, index=True)
    adventure_title: Mapped[str] = mapped_column(String(200))
    products: Mapped[list] = mapped_column(JSON, default=list)  # [{id, title, price, description, quantity}]
    total: Mapped[float] = mapped_column(Float, default=0)
    advance_payment: Mapped[float] = mapped_column(Float, default=0)
    remaining_payment: Mapped[float] = mapped_column(Float, default=0)
    status: Mapped[str] = mapped_column(String(30), default="awaiting confirmation")
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
