from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal

from src.models.holding import ASSET_TYPES, Holding
from src.models.portfolio import AssetAllocation, PortfolioSummary
from src.storage.repository import HoldingRepository
from src.utils.time import utc_now_naive
from src.utils.validation import normalize_symbol, validate_holding, validate_price

logger = logging.getLogger(__name__)

TOP_HOLDINGS_LIMIT = 5
_ZERO = Decimal("0")


def summarize_holdings(holdings: Iterable[Holding]) -> PortfolioSummary:
    """Portfolio-wide statistics over the given holdings, in their given order."""
    rows = list(holdings)

    total_invested = sum((h.cost_basis for h in rows), _ZERO)
    current_value = sum((h.current_value for h in rows if h.current_value is not None), _ZERO)
    total_gain_loss = current_value - total_invested
    total_gain_loss_percent = total_gain_loss / total_invested * 100 if total_invested > 0 else _ZERO

    # sorted() is stable with reverse=True, so ties keep their input order.
    priced = [h for h in rows if h.current_value is not None]
    top_holdings = sorted(priced, key=lambda h: h.current_value, reverse=True)[:TOP_HOLDINGS_LIMIT]

    performers = [h for h in rows if h.gain_loss_percent is not None]
    best = max(performers, key=lambda h: h.gain_loss_percent, default=None)
    worst = min(performers, key=lambda h: h.gain_loss_percent, default=None)

    return PortfolioSummary(
        total_invested=total_invested,
        current_value=current_value,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_percent,
        holdings_count=len(rows),
        holdings_with_prices=sum(1 for h in rows if h.current_price is not None),
        top_holdings=top_holdings,
        best_performer=best,
        worst_performer=worst,
    )


def allocate_by_asset_type(holdings: Iterable[Holding]) -> list[AssetAllocation]:
    rows = list(holdings)
    portfolio_value = sum((h.current_value for h in rows if h.current_value is not None), _ZERO)

    allocations: list[AssetAllocation] = []
    known_types = list(ASSET_TYPES) + sorted({h.asset_type for h in rows} - set(ASSET_TYPES))
    for asset_type in known_types:
        group = [h for h in rows if h.asset_type == asset_type]
        if not group:
            continue
        invested = sum((h.cost_basis for h in group), _ZERO)
        value = sum((h.current_value for h in group if h.current_value is not None), _ZERO)
        allocations.append(
            AssetAllocation(
                asset_type=asset_type,
                holdings_count=len(group),
                total_invested=invested,
                current_value=value,
                weight_percent=value / portfolio_value * 100 if portfolio_value > 0 else _ZERO,
            )
        )
    return allocations


class PortfolioService:
    def __init__(self, repository: HoldingRepository) -> None:
        self.repository = repository

    @staticmethod
    def _prepare_for_write(holding: Holding) -> None:
        holding.symbol = normalize_symbol(holding.symbol)
        validate_holding(holding)
        if holding.current_price is None:
            holding.last_price_update = None
        elif holding.last_price_update is None:
            holding.last_price_update = utc_now_naive()

    def get_all_holdings(self) -> list[Holding]:
        return self.repository.list_all()

    def get_holding(self, holding_id: int) -> Holding | None:
        return self.repository.get_by_id(holding_id)

    def holding_exists(self, holding_id: int) -> bool:
        return self.repository.exists(holding_id)

    def add_holding(self, holding: Holding) -> Holding:
        self._prepare_for_write(holding)
        holding.id = None
        holding.created_at = utc_now_naive()
        created = self.repository.insert(holding)
        logger.info("Holding created", extra={"holding_id": created.id, "symbol": created.symbol})
        return created

    def update_holding(self, holding: Holding) -> Holding:
        self._prepare_for_write(holding)
        updated = self.repository.update(holding)
        logger.info("Holding updated", extra={"holding_id": updated.id, "symbol": updated.symbol})
        return updated

    def update_price(self, holding_id: int, new_price: Decimal) -> Holding:
        validate_price(new_price)
        updated = self.repository.update_price(holding_id, new_price)
        logger.info(
            "Holding price updated",
            extra={"holding_id": holding_id, "symbol": updated.symbol, "price": str(updated.current_price)},
        )
        return updated

    def delete_holding(self, holding_id: int) -> bool:
        deleted = self.repository.delete(holding_id)
        if deleted:
            logger.info("Holding deleted", extra={"holding_id": holding_id})
        return deleted

    def get_portfolio_summary(self) -> PortfolioSummary:
        return summarize_holdings(self.repository.list_all())

    def get_allocation(self) -> list[AssetAllocation]:
        return allocate_by_asset_type(self.repository.list_all())
