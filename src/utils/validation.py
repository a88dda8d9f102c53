from __future__ import annotations

from decimal import Decimal

from src.errors import HoldingValidationError, InvalidPriceError
from src.models.holding import ASSET_TYPES, Holding
from src.utils.time import utc_now_naive


def normalize_symbol(symbol: str | None) -> str:
    return (symbol or "").upper()


def validate_holding(holding: Holding) -> None:
    """Raise HoldingValidationError for the first rule the holding breaks.

    Rules are checked in a fixed order: symbol, asset_name, quantity,
    purchase_price, purchase_date, asset_type. Length limits are left to
    storage.
    """
    if not (holding.symbol or "").strip():
        raise HoldingValidationError("symbol", "Symbol is required.")

    if not (holding.asset_name or "").strip():
        raise HoldingValidationError("asset_name", "Asset name is required.")

    if holding.quantity <= 0:
        raise HoldingValidationError("quantity", "Quantity must be greater than zero.")

    if holding.purchase_price <= 0:
        raise HoldingValidationError("purchase_price", "Purchase price must be greater than zero.")

    if holding.purchase_date > utc_now_naive():
        raise HoldingValidationError("purchase_date", "Purchase date cannot be in the future.")

    if holding.asset_type not in ASSET_TYPES:
        raise HoldingValidationError("asset_type", f"Asset type must be one of: {', '.join(ASSET_TYPES)}")


def validate_price(price: Decimal) -> Decimal:
    if price < 0:
        raise InvalidPriceError(price)
    return price
