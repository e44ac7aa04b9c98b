"""POST /v1/plan - Savings and investment plan endpoint"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from save_invest.api.v1.schemas import PlanRequest, PlanResponse
from save_invest.api.v1.savings import load_aggregate
from save_invest.api.dependencies import get_request_id, get_store, resolve_window
from save_invest.config import settings
from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.planner import create_savings_and_investment_plan
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.infrastructure.observability.logging import log_plan
from save_invest.infrastructure.observability.metrics import record_plan

router = APIRouter()


@router.post("/plan", response_model=PlanResponse)
def create_plan(
    request_body: PlanRequest,
    request: Request,
    store: FinanceStore = Depends(get_store),
):
    """
    Build a savings and investment plan from the user's discretionary spending.

    Flow:
    1. Aggregate the analysis window and select discretionary transactions
    2. Compute savings potential and the monthly target
    3. Allocate the target across vehicles for the risk tolerance
    4. Project allocations and the whole portfolio over 1/5/10/20 years
    """
    start_time = time.time()
    request_id = get_request_id(request)
    window_start, window_end = resolve_window(request_body.window_start, request_body.window_end)

    try:
        spending = load_aggregate(store, request_body.user_id, window_start, window_end)
        plan = create_savings_and_investment_plan(
            spending.discretionary_transactions,
            store.load_investment_vehicles(),
            risk_tolerance=request_body.risk_tolerance,
            savings_target=request_body.savings_target,
            reference_return=settings.portfolio_reference_return,
            default_savings_percent=settings.default_savings_percent,
            guard_ratio=settings.savings_pattern_guard_ratio,
        )
    except InvalidInputError as e:
        logging.warning(f"Invalid plan input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_plan(plan.risk_tolerance.value, len(plan.allocations))
    log_plan(
        request_id,
        request_body.user_id,
        plan.risk_tolerance.value,
        plan.monthly_target,
        len(plan.allocations),
        duration_ms,
    )

    return PlanResponse.model_validate(plan)
