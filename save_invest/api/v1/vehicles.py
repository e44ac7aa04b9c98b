"""Investment vehicle catalog endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from save_invest.api.v1.schemas import VehicleListResponse, VehicleRefreshRequest, VehicleSchema
from save_invest.api.dependencies import get_market_data_client, get_request_id, get_store
from save_invest.domain.vehicles import DEFAULT_TICKERS, merge_refreshed
from save_invest.infrastructure.clients.market_data import MarketDataClient
from save_invest.infrastructure.database.store import FinanceStore

router = APIRouter()


@router.get("/vehicles", response_model=VehicleListResponse)
def list_vehicles(store: FinanceStore = Depends(get_store)):
    """Stored vehicles, or the built-in catalog when nothing is stored"""
    return VehicleListResponse(
        vehicles=[VehicleSchema.model_validate(v) for v in store.load_investment_vehicles()]
    )


@router.post("/vehicles/refresh", response_model=VehicleListResponse)
async def refresh_vehicles(
    request_body: VehicleRefreshRequest,
    request: Request,
    store: FinanceStore = Depends(get_store),
    market_data: MarketDataClient = Depends(get_market_data_client),
):
    """
    Recompute vehicle metrics from market data and store them.

    Tickers that fail to refresh keep their previous record (or the built-in
    default); the call only fails when nothing could be produced at all.
    """
    request_id = get_request_id(request)
    tickers = [t.upper() for t in (request_body.tickers or DEFAULT_TICKERS)]

    metrics = await market_data.refresh(tickers)
    vehicles = merge_refreshed(tickers, metrics, store.load_investment_vehicles(), store.risk_free_rate)

    if not vehicles:
        logging.error("Vehicle refresh produced no vehicles", extra={"request_id": request_id, "tickers": tickers})
        raise HTTPException(status_code=503, detail="Market data unavailable")

    if not store.save_investment_vehicles(vehicles):
        logging.warning("Refreshed vehicles were not stored", extra={"request_id": request_id})

    logging.info(
        "Vehicles refreshed",
        extra={"request_id": request_id, "refreshed": sorted(metrics), "vehicle_count": len(vehicles)},
    )
    return VehicleListResponse(vehicles=[VehicleSchema.model_validate(v) for v in vehicles])
