from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from src.models.holding import Holding


class PortfolioSummary(BaseModel):
    total_invested: Decimal = Decimal("0")
    current_value: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    total_gain_loss_percent: Decimal = Decimal("0")
    holdings_count: int = 0
    holdings_with_prices: int = 0
    top_holdings: list[Holding] = Field(default_factory=list)
    best_performer: Holding | None = None
    worst_performer: Holding | None = None


class AssetAllocation(BaseModel):
    asset_type: str
    holdings_count: int
    total_invested: Decimal
    current_value: Decimal
    weight_percent: Decimal
