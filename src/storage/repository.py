from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from src.errors import HoldingNotFoundError, HoldingValidationError
from src.models.holding import Holding
from src.models.tables import (
    ASSET_NAME_MAX_LENGTH,
    ASSET_TYPE_MAX_LENGTH,
    PRICE_PRECISION,
    QUANTITY_PRECISION,
    SYMBOL_MAX_LENGTH,
    HoldingRecord,
)
from src.utils.time import to_naive_utc, utc_now_naive


def _fit_decimal(field: str, value: Decimal, precision: tuple[int, int]) -> Decimal:
    digits, scale = precision
    limit = Decimal(10) ** (digits - scale)
    if abs(value) >= limit:
        raise HoldingValidationError(field, f"Value exceeds storage precision ({digits},{scale}).")
    quantized = Decimal(value).quantize(Decimal(1).scaleb(-scale), rounding=ROUND_HALF_UP)
    if abs(quantized) >= limit:
        raise HoldingValidationError(field, f"Value exceeds storage precision ({digits},{scale}).")
    return quantized


def _fit_text(field: str, value: str, max_length: int) -> str:
    if len(value) > max_length:
        raise HoldingValidationError(field, f"Must be at most {max_length} characters.")
    return value


class HoldingRepository:
    """Storage gateway for holdings.

    Mirrors what the database columns would enforce (text length, numeric
    precision) so the same rules hold on backends that ignore them, like SQLite.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _to_holding(row: HoldingRecord) -> Holding:
        return Holding.model_validate(row)

    @staticmethod
    def _column_values(holding: Holding) -> dict[str, Any]:
        return {
            "symbol": _fit_text("symbol", holding.symbol or "", SYMBOL_MAX_LENGTH),
            "asset_name": _fit_text("asset_name", holding.asset_name, ASSET_NAME_MAX_LENGTH),
            "asset_type": _fit_text("asset_type", holding.asset_type, ASSET_TYPE_MAX_LENGTH),
            "quantity": _fit_decimal("quantity", holding.quantity, QUANTITY_PRECISION),
            "purchase_price": _fit_decimal("purchase_price", holding.purchase_price, PRICE_PRECISION),
            "purchase_date": to_naive_utc(holding.purchase_date),
            "current_price": (
                _fit_decimal("current_price", holding.current_price, PRICE_PRECISION)
                if holding.current_price is not None
                else None
            ),
            "last_price_update": (
                to_naive_utc(holding.last_price_update) if holding.last_price_update is not None else None
            ),
        }

    def _get_row(self, holding_id: int | None) -> HoldingRecord:
        row = self.db.get(HoldingRecord, holding_id) if holding_id is not None else None
        if row is None:
            raise HoldingNotFoundError(holding_id)
        return row

    def list_all(self) -> list[Holding]:
        rows = self.db.execute(
            select(HoldingRecord).order_by(HoldingRecord.symbol.asc(), HoldingRecord.id.asc())
        ).scalars().all()
        return [self._to_holding(row) for row in rows]

    def get_by_id(self, holding_id: int) -> Holding | None:
        row = self.db.get(HoldingRecord, holding_id)
        if row is None:
            return None
        return self._to_holding(row)

    def insert(self, holding: Holding) -> Holding:
        row = HoldingRecord(**self._column_values(holding))
        row.created_at = to_naive_utc(holding.created_at) if holding.created_at is not None else utc_now_naive()
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_holding(row)

    def update(self, holding: Holding) -> Holding:
        row = self._get_row(holding.id)
        for column, value in self._column_values(holding).items():
            setattr(row, column, value)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_holding(row)

    def update_price(self, holding_id: int, price: Decimal) -> Holding:
        row = self._get_row(holding_id)
        row.current_price = _fit_decimal("current_price", price, PRICE_PRECISION)
        row.last_price_update = utc_now_naive()
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._to_holding(row)

    def delete(self, holding_id: int) -> bool:
        result = self.db.execute(delete(HoldingRecord).where(HoldingRecord.id == holding_id))
        self.db.commit()
        return result.rowcount > 0

    def exists(self, holding_id: int) -> bool:
        count = self.db.execute(
            select(func.count(HoldingRecord.id)).where(HoldingRecord.id == holding_id)
        ).scalar_one()
        return count > 0
