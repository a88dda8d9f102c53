from __future__ import annotations

from decimal import Decimal


class PortfolioError(Exception):
    """Base class for portfolio domain failures."""


class HoldingValidationError(PortfolioError, ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class InvalidPriceError(PortfolioError, ValueError):
    def __init__(self, price: Decimal, message: str = "Price cannot be negative.") -> None:
        super().__init__(message)
        self.price = price
        self.message = message


class HoldingNotFoundError(PortfolioError, LookupError):
    def __init__(self, holding_id: int | None) -> None:
        super().__init__(f"Holding not found: {holding_id}")
        self.holding_id = holding_id


class PriceLookupError(PortfolioError, RuntimeError):
    def __init__(self, symbol: str, message: str) -> None:
        super().__init__(message)
        self.symbol = symbol
