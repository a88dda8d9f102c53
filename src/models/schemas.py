from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingCreateRequest(BaseModel):
    symbol: Optional[str] = None
    asset_name: str = ""
    asset_type: str = ""
    quantity: Decimal
    purchase_price: Decimal
    purchase_date: dt.datetime
    current_price: Optional[Decimal] = None


class HoldingUpdateRequest(HoldingCreateRequest):
    last_price_update: Optional[dt.datetime] = None


class PriceUpdateRequest(BaseModel):
    price: Decimal


class DeleteResponse(BaseModel):
    id: int
    deleted: bool


class PriceRefreshResponse(BaseModel):
    processed: int
    updated: int
    failed: int


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
