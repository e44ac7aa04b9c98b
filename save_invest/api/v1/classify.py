"""Classification endpoints - necessity decisions, overrides and category preferences"""

import logging
from functools import partial

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from save_invest.api.v1.schemas import (
    CategoryPreferenceRequest,
    CategoryPreferenceResponse,
    CategorySuggestionRequest,
    CategorySuggestionResponse,
    ClassifyRequest,
    ClassifyResponse,
    OverrideRequest,
    OverrideResponse,
)
from save_invest.api.dependencies import build_classifier, get_override_registry, get_request_id, get_store
from save_invest.domain.categories import get_category_info, suggest_category
from save_invest.domain.classifier import OverrideTableRegistry
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.infrastructure.observability.logging import log_classification
from save_invest.infrastructure.observability.metrics import record_classification

router = APIRouter()


@router.post("/classify", response_model=ClassifyResponse)
def classify_expense(
    request_body: ClassifyRequest,
    request: Request,
    store: FinanceStore = Depends(get_store),
    registry: OverrideTableRegistry = Depends(get_override_registry),
):
    """
    Decide whether an expense is necessary.

    Never fails on bad amounts: they are clamped to 0 and reported in warnings.
    """
    request_id = get_request_id(request)
    classifier = build_classifier(request_body.user_id, registry, store)

    result = classifier.classify_detailed(request_body.title, request_body.amount, request_body.category)

    record_classification(result.source.value, result.is_necessary, len(result.warnings))
    log_classification(request_id, request_body.user_id, result.is_necessary, result.source.value, result.warnings)

    return ClassifyResponse(
        is_necessary=result.is_necessary,
        source=result.source.value,
        normalized_title=result.normalized_title,
        keyword_matches=result.keyword_matches,
        warnings=result.warnings,
    )


@router.put("/overrides", response_model=OverrideResponse)
def record_override(
    request_body: OverrideRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    store: FinanceStore = Depends(get_store),
    registry: OverrideTableRegistry = Depends(get_override_registry),
):
    """
    Remember a manual classification for a title.

    The in-memory table is updated before responding; persistence runs
    after the response and a failed write only logs.
    """
    classifier = build_classifier(request_body.user_id, registry, store)
    key = classifier.record_override(request_body.title, request_body.is_necessary)

    background_tasks.add_task(classifier.overrides.flush, key, partial(store.save_override, request_body.user_id))

    logging.info(
        "Override recorded",
        extra={"request_id": get_request_id(request), "user_id": request_body.user_id, "title": key},
    )
    return OverrideResponse(normalized_title=key, is_necessary=request_body.is_necessary)


@router.put("/category-preferences", response_model=CategoryPreferenceResponse)
def set_category_preference(
    request_body: CategoryPreferenceRequest,
    store: FinanceStore = Depends(get_store),
):
    """Set (or clear, with null) a category-wide necessity preference"""
    saved = store.save_category_preference(request_body.user_id, request_body.category, request_body.is_necessary)
    return CategoryPreferenceResponse(
        category=request_body.category,
        is_necessary=request_body.is_necessary,
        saved=saved,
    )


@router.post("/categories/suggest", response_model=CategorySuggestionResponse)
def suggest_expense_category(request_body: CategorySuggestionRequest):
    category = suggest_category(request_body.title, request_body.amount)
    info = get_category_info(category)
    return CategorySuggestionResponse(
        category=category,
        typically_necessary=info.typically_necessary,
        icon=info.icon,
    )
