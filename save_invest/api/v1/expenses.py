"""Expense logging endpoints"""

import logging
from dataclasses import replace
from functools import partial

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response

from save_invest.api.v1.schemas import ExpenseCreateRequest, ExpenseResponse, ExpenseUpdateRequest
from save_invest.api.dependencies import build_classifier, get_override_registry, get_request_id, get_store
from save_invest.domain.classifier import ClassificationSource, OverrideTableRegistry
from save_invest.domain.models import Transaction
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.infrastructure.observability.logging import log_classification
from save_invest.infrastructure.observability.metrics import record_classification

router = APIRouter()


@router.post("/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    request_body: ExpenseCreateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    store: FinanceStore = Depends(get_store),
    registry: OverrideTableRegistry = Depends(get_override_registry),
):
    """
    Log an expense.

    Flow:
    1. Without an explicit is_necessary flag, classify the expense
    2. With one, treat it as a manual classification and remember it for the title
    3. Persist the expense (503 if storage is unavailable)
    4. Persist the override after the response
    """
    request_id = get_request_id(request)
    classifier = build_classifier(request_body.user_id, registry, store)

    if request_body.is_necessary is None:
        result = classifier.classify_detailed(request_body.title, request_body.amount, request_body.category)
        is_necessary = result.is_necessary
        source = result.source.value
        record_classification(source, is_necessary, len(result.warnings))
        log_classification(request_id, request_body.user_id, is_necessary, source, result.warnings)
    else:
        is_necessary = request_body.is_necessary
        source = ClassificationSource.OVERRIDE.value
        key = classifier.record_override(request_body.title, is_necessary)
        background_tasks.add_task(classifier.overrides.flush, key, partial(store.save_override, request_body.user_id))

    transaction = Transaction(
        title=request_body.title,
        amount=request_body.amount,
        date=request_body.date,
        category=request_body.category,
        is_necessary=is_necessary,
        owner_id=request_body.user_id,
        notes=request_body.notes,
    )

    if not store.add_transaction(transaction):
        logging.error("Expense could not be stored", extra={"request_id": request_id, "user_id": request_body.user_id})
        raise HTTPException(status_code=503, detail="Storage unavailable")

    return ExpenseResponse(
        id=transaction.id,
        title=transaction.title,
        amount=transaction.amount,
        date=transaction.date,
        category=transaction.category,
        is_necessary=transaction.is_necessary,
        notes=transaction.notes,
        classification_source=source,
    )


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    request_body: ExpenseUpdateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    store: FinanceStore = Depends(get_store),
    registry: OverrideTableRegistry = Depends(get_override_registry),
):
    """
    Edit a logged expense.

    An explicit is_necessary is a manual reclassification: it rewrites the
    stored flag and is remembered as an override for the (new) title.
    Without one the stored flag is kept as is.
    """
    request_id = get_request_id(request)
    existing = store.get_transaction(request_body.user_id, expense_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Expense not found")

    updated = replace(
        existing,
        title=request_body.title if request_body.title is not None else existing.title,
        amount=request_body.amount if request_body.amount is not None else existing.amount,
        date=request_body.expense_date or existing.date,
        category=request_body.category or existing.category,
        notes=request_body.notes if "notes" in request_body.model_fields_set else existing.notes,
    )

    source = None
    if request_body.is_necessary is not None:
        updated.is_necessary = request_body.is_necessary
        source = ClassificationSource.OVERRIDE.value
        classifier = build_classifier(request_body.user_id, registry, store)
        key = classifier.record_override(updated.title, updated.is_necessary)
        background_tasks.add_task(classifier.overrides.flush, key, partial(store.save_override, request_body.user_id))

    if not store.update_transaction(updated):
        logging.error("Expense could not be updated", extra={"request_id": request_id, "user_id": request_body.user_id})
        raise HTTPException(status_code=503, detail="Storage unavailable")

    logging.info(
        "Expense updated",
        extra={"request_id": request_id, "user_id": request_body.user_id, "reclassified": source is not None},
    )
    return ExpenseResponse(
        id=updated.id,
        title=updated.title,
        amount=updated.amount,
        date=updated.date,
        category=updated.category,
        is_necessary=updated.is_necessary,
        notes=updated.notes,
        classification_source=source,
    )


@router.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: str, user_id: str, store: FinanceStore = Depends(get_store)):
    if not store.delete_transaction(user_id, expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return Response(status_code=204)
