from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from src.errors import HoldingNotFoundError, HoldingValidationError, InvalidPriceError, PriceLookupError
from src.integrations.market_data.yfinance_client import YFinanceClient
from src.models.db import get_db_session
from src.models.holding import Holding
from src.models.portfolio import AssetAllocation, PortfolioSummary
from src.models.schemas import (
    DeleteResponse,
    HoldingCreateRequest,
    HoldingUpdateRequest,
    PriceRefreshResponse,
    PriceUpdateRequest,
    ValidationErrorDetail,
)
from src.services.portfolio_service import PortfolioService
from src.services.price_service import PriceRefreshService
from src.storage.repository import HoldingRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["investment-portfolio-tracker"])

market_client = YFinanceClient()


def get_portfolio_service(db: Session = Depends(get_db_session)) -> PortfolioService:
    return PortfolioService(repository=HoldingRepository(db=db))


def _validation_http_error(exc: HoldingValidationError) -> HTTPException:
    detail = ValidationErrorDetail(field=exc.field, message=exc.message)
    return HTTPException(status_code=400, detail=detail.model_dump())


def _not_found(holding_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Holding {holding_id} not found")


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/holdings", response_model=list[Holding])
def list_holdings(service: PortfolioService = Depends(get_portfolio_service)):
    return service.get_all_holdings()


@router.get("/holdings/{holding_id}", response_model=Holding)
def get_holding(holding_id: int, service: PortfolioService = Depends(get_portfolio_service)):
    holding = service.get_holding(holding_id)
    if holding is None:
        raise _not_found(holding_id)
    return holding


@router.head("/holdings/{holding_id}")
def holding_exists(holding_id: int, service: PortfolioService = Depends(get_portfolio_service)) -> Response:
    if not service.holding_exists(holding_id):
        return Response(status_code=404)
    return Response(status_code=200)


@router.post("/holdings", response_model=Holding, status_code=201)
def create_holding(payload: HoldingCreateRequest, service: PortfolioService = Depends(get_portfolio_service)):
    try:
        return service.add_holding(Holding(**payload.model_dump()))
    except HoldingValidationError as exc:
        raise _validation_http_error(exc) from exc
    except Exception as exc:
        logger.exception("Failed to create holding", extra={"symbol": payload.symbol})
        raise HTTPException(status_code=500, detail="Failed to create holding") from exc


@router.put("/holdings/{holding_id}", response_model=Holding)
def update_holding(
    holding_id: int,
    payload: HoldingUpdateRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    try:
        return service.update_holding(Holding(id=holding_id, **payload.model_dump()))
    except HoldingValidationError as exc:
        raise _validation_http_error(exc) from exc
    except HoldingNotFoundError as exc:
        raise _not_found(holding_id) from exc
    except Exception as exc:
        logger.exception("Failed to update holding", extra={"holding_id": holding_id})
        raise HTTPException(status_code=500, detail="Failed to update holding") from exc


@router.patch("/holdings/{holding_id}/price", response_model=Holding)
def update_holding_price(
    holding_id: int,
    payload: PriceUpdateRequest,
    service: PortfolioService = Depends(get_portfolio_service),
):
    try:
        return service.update_price(holding_id, payload.price)
    except InvalidPriceError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except HoldingValidationError as exc:
        raise _validation_http_error(exc) from exc
    except HoldingNotFoundError as exc:
        raise _not_found(holding_id) from exc
    except Exception as exc:
        logger.exception("Failed to update holding price", extra={"holding_id": holding_id})
        raise HTTPException(status_code=500, detail="Failed to update holding price") from exc


@router.delete("/holdings/{holding_id}", response_model=DeleteResponse)
def delete_holding(holding_id: int, service: PortfolioService = Depends(get_portfolio_service)):
    try:
        deleted = service.delete_holding(holding_id)
    except Exception as exc:
        logger.exception("Failed to delete holding", extra={"holding_id": holding_id})
        raise HTTPException(status_code=500, detail="Failed to delete holding") from exc
    if not deleted:
        raise _not_found(holding_id)
    return DeleteResponse(id=holding_id, deleted=True)


@router.post("/holdings/refresh-prices", response_model=PriceRefreshResponse)
def refresh_prices(service: PortfolioService = Depends(get_portfolio_service)):
    refresher = PriceRefreshService(portfolio=service, client=market_client)
    try:
        return PriceRefreshResponse(**refresher.refresh_prices())
    except Exception as exc:
        logger.exception("Price refresh failed")
        raise HTTPException(status_code=500, detail="Price refresh failed") from exc


@router.post("/holdings/{holding_id}/refresh-price", response_model=Holding)
def refresh_holding_price(holding_id: int, service: PortfolioService = Depends(get_portfolio_service)):
    refresher = PriceRefreshService(portfolio=service, client=market_client)
    try:
        return refresher.refresh_price(holding_id)
    except HoldingNotFoundError as exc:
        raise _not_found(holding_id) from exc
    except (PriceLookupError, HoldingValidationError) as exc:
        logger.warning("Single price refresh failed", extra={"holding_id": holding_id, "error": str(exc)})
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Single price refresh failed", extra={"holding_id": holding_id})
        raise HTTPException(status_code=500, detail="Price refresh failed") from exc


@router.get("/portfolio/summary", response_model=PortfolioSummary)
def portfolio_summary(service: PortfolioService = Depends(get_portfolio_service)):
    return service.get_portfolio_summary()


@router.get("/portfolio/allocation", response_model=list[AssetAllocation])
def portfolio_allocation(service: PortfolioService = Depends(get_portfolio_service)):
    return service.get_allocation()
