"""
Persistence collaborator used by the API layer.

Every call may fail. Reads fall back to "no data" (empty mappings and lists,
the built-in vehicle catalog) and writes report False, so storage outages
never reach classification or planning logic.
"""

from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from save_invest.config import settings
from save_invest.domain.models import ExpenseCategory, InvestmentVehicle, Transaction
from save_invest.domain.vehicles import default_vehicles
from save_invest.infrastructure.database.repositories import (
    ExpenseRepository,
    OverrideRepository,
    PreferenceRepository,
    VehicleRepository,
    to_transaction,
    to_vehicle,
)
from save_invest.infrastructure.observability.logging import log_store_failure
from save_invest.infrastructure.observability.metrics import override_write_counter, store_fallback_counter


class FinanceStore:
    """SQLAlchemy-backed storage with fail-soft semantics"""

    def __init__(self, db: Session, risk_free_rate: float | None = None):
        self.db = db
        self.risk_free_rate = settings.risk_free_rate if risk_free_rate is None else risk_free_rate

    def _fallback(self, operation: str, error: Exception, **context) -> None:
        self.db.rollback()
        store_fallback_counter.labels(operation=operation).inc()
        log_store_failure(operation, error, **context)

    # Overrides

    def try_load_overrides(self, user_id: str) -> Optional[Dict[str, bool]]:
        """Like load_overrides, but None when storage failed so callers can retry"""
        try:
            return OverrideRepository(self.db).get_overrides(user_id)
        except SQLAlchemyError as e:
            self._fallback("load_overrides", e, user_id=user_id)
            return None

    def load_overrides(self, user_id: str) -> Dict[str, bool]:
        overrides = self.try_load_overrides(user_id)
        return overrides if overrides is not None else {}

    def save_override(self, user_id: str, normalized_title: str, is_necessary: bool) -> bool:
        try:
            OverrideRepository(self.db).upsert_override(user_id, normalized_title, is_necessary)
            self.db.commit()
        except SQLAlchemyError as e:
            override_write_counter.labels(status="failed").inc()
            self._fallback("save_override", e, user_id=user_id)
            return False
        override_write_counter.labels(status="saved").inc()
        return True

    # Category preferences

    def load_category_preferences(self, user_id: str) -> Dict[ExpenseCategory, bool]:
        try:
            return PreferenceRepository(self.db).get_preferences(user_id)
        except SQLAlchemyError as e:
            self._fallback("load_category_preferences", e, user_id=user_id)
            return {}

    def save_category_preference(self, user_id: str, category: ExpenseCategory, is_necessary: bool | None) -> bool:
        """None clears the preference so the per-transaction flag applies again"""
        try:
            repo = PreferenceRepository(self.db)
            if is_necessary is None:
                repo.delete_preference(user_id, category)
            else:
                repo.upsert_preference(user_id, category, is_necessary)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fallback("save_category_preference", e, user_id=user_id)
            return False
        return True

    # Transactions

    def add_transaction(self, transaction: Transaction) -> bool:
        try:
            ExpenseRepository(self.db).create_expense(transaction)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fallback("add_transaction", e, user_id=transaction.owner_id)
            return False
        return True

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        try:
            record = ExpenseRepository(self.db).get_expense(user_id, transaction_id)
        except SQLAlchemyError as e:
            self._fallback("get_transaction", e, user_id=user_id)
            return None
        return to_transaction(record) if record is not None else None

    def update_transaction(self, transaction: Transaction) -> bool:
        try:
            updated = ExpenseRepository(self.db).update_expense(transaction)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fallback("update_transaction", e, user_id=transaction.owner_id)
            return False
        return updated

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        try:
            deleted = ExpenseRepository(self.db).delete_expense(user_id, transaction_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fallback("delete_transaction", e, user_id=user_id)
            return False
        return deleted

    def load_transactions(self, user_id: str, start: date, end: date) -> List[Transaction]:
        try:
            records = ExpenseRepository(self.db).get_expenses_by_date_range(user_id, start, end)
        except SQLAlchemyError as e:
            self._fallback("load_transactions", e, user_id=user_id)
            return []
        return [to_transaction(r) for r in records]

    # Investment vehicles

    def load_investment_vehicles(self) -> List[InvestmentVehicle]:
        try:
            records = VehicleRepository(self.db).get_vehicles()
        except SQLAlchemyError as e:
            self._fallback("load_investment_vehicles", e)
            records = []
        if not records:
            return default_vehicles(self.risk_free_rate)
        return [to_vehicle(r, self.risk_free_rate) for r in records]

    def save_investment_vehicles(self, vehicles: Sequence[InvestmentVehicle]) -> bool:
        try:
            VehicleRepository(self.db).save_vehicles(vehicles)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fallback("save_investment_vehicles", e)
            return False
        return True
