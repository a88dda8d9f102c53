from __future__ import annotations

import logging
import math
import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.config import get_settings
from src.errors import HoldingNotFoundError, HoldingValidationError, PriceLookupError
from src.integrations.market_data.yfinance_client import YFinanceClient
from src.models.holding import Holding
from src.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


class PriceRefreshService:
    """Pulls latest closes from Yahoo Finance into holdings' current prices."""

    def __init__(
        self,
        portfolio: PortfolioService,
        client: YFinanceClient | None = None,
        pause_between_symbols_seconds: float = 0.0,
    ) -> None:
        settings = get_settings()
        self.portfolio = portfolio
        self.client = client or YFinanceClient()
        self.period = settings.price_history_period
        self.quote_currency = settings.crypto_quote_currency
        self.pause_between_symbols_seconds = max(0.0, pause_between_symbols_seconds)

    def market_symbol(self, holding: Holding) -> str:
        symbol = (holding.symbol or "").strip().upper()
        if holding.asset_type == "Crypto" and "-" not in symbol:
            return f"{symbol}-{self.quote_currency}"
        return symbol

    def fetch_price(self, market_symbol: str) -> Decimal:
        try:
            close = self.client.fetch_latest_close(market_symbol, period=self.period)
        except Exception as exc:
            raise PriceLookupError(market_symbol, f"Failed to fetch price for {market_symbol}: {exc}") from exc

        if close is None or math.isnan(close) or math.isinf(close) or close < 0:
            raise PriceLookupError(market_symbol, f"Unusable price for {market_symbol}: {close}")
        try:
            return Decimal(str(close)).quantize(_CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise PriceLookupError(market_symbol, f"Unusable price for {market_symbol}: {close}") from exc

    def refresh_price(self, holding_id: int) -> Holding:
        holding = self.portfolio.get_holding(holding_id)
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        price = self.fetch_price(self.market_symbol(holding))
        return self.portfolio.update_price(holding_id, price)

    def refresh_prices(self) -> dict[str, int]:
        summary = {"processed": 0, "updated": 0, "failed": 0}
        prices: dict[str, Decimal | None] = {}

        for holding in self.portfolio.get_all_holdings():
            summary["processed"] += 1
            symbol = self.market_symbol(holding)

            if symbol not in prices:
                if prices and self.pause_between_symbols_seconds > 0:
                    time.sleep(self.pause_between_symbols_seconds)
                try:
                    prices[symbol] = self.fetch_price(symbol)
                except PriceLookupError as exc:
                    prices[symbol] = None
                    logger.warning("Price refresh failed", extra={"symbol": symbol, "error": str(exc)})

            price = prices[symbol]
            if price is None:
                summary["failed"] += 1
                continue

            try:
                self.portfolio.update_price(holding.id, price)
            except (HoldingValidationError, HoldingNotFoundError) as exc:
                summary["failed"] += 1
                logger.warning(
                    "Price refresh could not store price",
                    extra={"holding_id": holding.id, "symbol": symbol, "error": str(exc)},
                )
                continue
            summary["updated"] += 1

        logger.info("Price refresh finished", extra=summary)
        return summary
