from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.db import Base
from src.utils.time import utc_now_naive


SYMBOL_MAX_LENGTH = 10
ASSET_NAME_MAX_LENGTH = 100
ASSET_TYPE_MAX_LENGTH = 20
QUANTITY_PRECISION = (18, 8)
PRICE_PRECISION = (18, 2)


class HoldingRecord(Base):
    __tablename__ = "holdings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    symbol: Mapped[str] = mapped_column(String(SYMBOL_MAX_LENGTH), nullable=False, index=True)
    asset_name: Mapped[str] = mapped_column(String(ASSET_NAME_MAX_LENGTH), nullable=False)
    asset_type: Mapped[str] = mapped_column(String(ASSET_TYPE_MAX_LENGTH), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(*QUANTITY_PRECISION), nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(*PRICE_PRECISION), nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    current_price: Mapped[Decimal | None] = mapped_column(Numeric(*PRICE_PRECISION), nullable=True)
    last_price_update: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now_naive, nullable=False)
