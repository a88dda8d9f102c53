from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from src.utils.time import to_naive_utc


ASSET_TYPES: tuple[str, ...] = ("Stock", "ETF", "Crypto", "Bond")


class Holding(BaseModel):
    """One purchased position. Money fields are Decimal; timestamps naive UTC."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    symbol: str | None = None
    asset_name: str = ""
    asset_type: str = ""
    quantity: Decimal
    purchase_price: Decimal
    purchase_date: datetime
    current_price: Decimal | None = None
    last_price_update: datetime | None = None
    created_at: datetime | None = None

    @field_validator("purchase_date", "last_price_update", "created_at")
    @classmethod
    def _as_naive_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return to_naive_utc(value)

    @computed_field
    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * self.purchase_price

    @computed_field
    @property
    def current_value(self) -> Decimal | None:
        if self.current_price is None:
            return None
        return self.quantity * self.current_price

    @computed_field
    @property
    def gain_loss(self) -> Decimal | None:
        current_value = self.current_value
        if current_value is None:
            return None
        return current_value - self.cost_basis

    @computed_field
    @property
    def gain_loss_percent(self) -> Decimal | None:
        gain_loss = self.gain_loss
        cost_basis = self.cost_basis
        if gain_loss is None or cost_basis <= 0:
            return None
        return gain_loss / cost_basis * 100
