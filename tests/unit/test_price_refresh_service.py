from __future__ import annotations

from decimal import Decimal

import pytest

from src.errors import HoldingNotFoundError, PriceLookupError
from src.services.portfolio_service import PortfolioService
from src.services.price_service import PriceRefreshService
from src.storage.repository import HoldingRepository


class FakeQuoteClient:
    def __init__(self, closes: dict[str, float]) -> None:
        self.closes = closes
        self.requested: list[str] = []

    def fetch_latest_close(self, symbol: str, period: str = "5d") -> float:
        self.requested.append(symbol)
        if symbol not in self.closes:
            raise ValueError(f"No price data returned for {symbol}")
        return self.closes[symbol]


@pytest.fixture
def portfolio(db_session) -> PortfolioService:
    return PortfolioService(repository=HoldingRepository(db=db_session))


def test_market_symbol_adds_quote_currency_for_crypto(portfolio, make_holding) -> None:
    refresher = PriceRefreshService(portfolio=portfolio, client=FakeQuoteClient({}))

    assert refresher.market_symbol(make_holding(symbol="btc", asset_type="Crypto")) == "BTC-USD"
    assert refresher.market_symbol(make_holding(symbol="ETH-EUR", asset_type="Crypto")) == "ETH-EUR"
    assert refresher.market_symbol(make_holding(symbol="VOO", asset_type="ETF")) == "VOO"


def test_refresh_prices_updates_each_holding_once_per_symbol(portfolio, make_holding) -> None:
    portfolio.add_holding(make_holding(symbol="AAPL"))
    portfolio.add_holding(make_holding(symbol="AAPL", quantity=Decimal("3")))
    portfolio.add_holding(make_holding(symbol="BTC", asset_type="Crypto", asset_name="Bitcoin"))
    portfolio.add_holding(make_holding(symbol="GONE", asset_name="Delisted"))
    client = FakeQuoteClient({"AAPL": 187.456, "BTC-USD": 64000.0})

    result = PriceRefreshService(portfolio=portfolio, client=client).refresh_prices()

    assert result == {"processed": 4, "updated": 3, "failed": 1}
    assert sorted(client.requested) == ["AAPL", "BTC-USD", "GONE"]
    prices = {(h.symbol, h.quantity): h.current_price for h in portfolio.get_all_holdings()}
    assert prices[("AAPL", Decimal("10"))] == Decimal("187.46")
    assert prices[("AAPL", Decimal("3"))] == Decimal("187.46")
    assert prices[("BTC", Decimal("10"))] == Decimal("64000.00")
    assert prices[("GONE", Decimal("10"))] is None


def test_refresh_price_single_holding(portfolio, make_holding) -> None:
    created = portfolio.add_holding(make_holding(symbol="MSFT", asset_name="Microsoft"))
    refresher = PriceRefreshService(portfolio=portfolio, client=FakeQuoteClient({"MSFT": 410.0}))

    updated = refresher.refresh_price(created.id)

    assert updated.current_price == Decimal("410.00")
    assert updated.last_price_update is not None


def test_refresh_price_errors(portfolio, make_holding) -> None:
    refresher = PriceRefreshService(portfolio=portfolio, client=FakeQuoteClient({"NAN": float("nan")}))

    with pytest.raises(HoldingNotFoundError):
        refresher.refresh_price(999)

    created = portfolio.add_holding(make_holding(symbol="NAN", asset_name="Broken quote"))
    with pytest.raises(PriceLookupError):
        refresher.refresh_price(created.id)


def test_refresh_prices_counts_unstorable_quote_as_failed(portfolio, make_holding) -> None:
    portfolio.add_holding(make_holding(symbol="AAPL"))
    portfolio.add_holding(make_holding(symbol="MSFT", asset_name="Microsoft"))
    client = FakeQuoteClient({"AAPL": 1e17, "MSFT": 10.0})

    result = PriceRefreshService(portfolio=portfolio, client=client).refresh_prices()

    assert result == {"processed": 2, "updated": 1, "failed": 1}
    prices = {h.symbol: h.current_price for h in portfolio.get_all_holdings()}
    assert prices["AAPL"] is None
    assert prices["MSFT"] == Decimal("10.00")
