"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from save_invest.config import settings
from save_invest.domain.classifier import NecessityClassifier, OverrideTableRegistry
from save_invest.infrastructure.clients.market_data import MarketDataClient
from save_invest.infrastructure.database.session import get_db
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.utils.date_utils import one_month_window


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(db: Session = Depends(get_db)) -> FinanceStore:
    """Provide the persistence collaborator bound to this request's session"""
    return FinanceStore(db)


def get_override_registry(request: Request) -> OverrideTableRegistry:
    """Process-wide override tables live on the application state"""
    return request.app.state.override_tables


def get_market_data_client(request: Request) -> MarketDataClient:
    """Shared client so the per-ticker cache survives across requests"""
    return request.app.state.market_data


def build_classifier(user_id: str, registry: OverrideTableRegistry, store: FinanceStore) -> NecessityClassifier:
    """Classifier over the user's override table, loading it from storage on first use"""
    return NecessityClassifier(overrides=registry.table_for(user_id, store.try_load_overrides))


def resolve_window(window_start: Optional[date], window_end: Optional[date]) -> Tuple[date, date]:
    """Explicit bounds win; missing ones come from the rolling analysis window"""
    default_start, default_end = one_month_window(window_end, settings.analysis_window_months)
    start = window_start or default_start
    end = window_end or default_end
    if start > end:
        raise HTTPException(status_code=422, detail="window_start must not be after window_end")
    return start, end
