"""Data access layer for expenses, overrides, preferences, and vehicles"""

from datetime import date
from typing import Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
from save_invest.infrastructure.database.models import (
    CategoryPreferenceRecord,
    ClassificationOverrideRecord,
    ExpenseRecord,
    InvestmentVehicleRecord,
)
from save_invest.domain.models import (
    DEFAULT_RISK_FREE_RATE,
    ExpenseCategory,
    InvestmentType,
    InvestmentVehicle,
    RiskLevel,
    Transaction,
    YearlyReturn,
)


def to_transaction(record: ExpenseRecord) -> Transaction:
    return Transaction(
        id=record.id,
        title=record.title,
        amount=record.amount,
        date=record.date,
        category=ExpenseCategory.parse(record.category) or ExpenseCategory.OTHER,
        is_necessary=record.is_necessary,
        owner_id=record.user_id,
        notes=record.notes,
    )


def to_vehicle(record: InvestmentVehicleRecord, risk_free_rate: float = DEFAULT_RISK_FREE_RATE) -> InvestmentVehicle:
    return InvestmentVehicle(
        id=record.id,
        name=record.name,
        ticker=record.ticker,
        type=InvestmentType(record.type),
        risk_level=RiskLevel(record.risk_level),
        annualized_return=record.annualized_return,
        volatility=record.volatility,
        historical_returns=[
            YearlyReturn(year=item["year"], return_percent=item["return_percent"])
            for item in (record.historical_returns or [])
        ],
        risk_free_rate=risk_free_rate,
    )


class ExpenseRepository:
    """Repository for logged expenses"""

    def __init__(self, db: Session):
        self.db = db

    def create_expense(self, transaction: Transaction) -> ExpenseRecord:
        """Persist an expense"""
        record = ExpenseRecord(
            id=transaction.id,
            user_id=transaction.owner_id,
            title=transaction.title,
            amount=transaction.amount,
            date=transaction.date,
            category=transaction.category.value,
            is_necessary=transaction.is_necessary,
            notes=transaction.notes,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get_expenses_by_date_range(self, user_id: str, start: date, end: date) -> List[ExpenseRecord]:
        """Fetch a user's expenses within [start, end], oldest first"""
        return (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.user_id == user_id)
            .filter(ExpenseRecord.date >= start, ExpenseRecord.date <= end)
            .order_by(ExpenseRecord.date.asc())
            .all()
        )

    def get_expense(self, user_id: str, expense_id: str) -> Optional[ExpenseRecord]:
        return (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.user_id == user_id, ExpenseRecord.id == expense_id)
            .first()
        )

    def update_expense(self, transaction: Transaction) -> bool:
        """Overwrite a stored expense's editable fields; False if the owner has no such expense"""
        record = self.get_expense(transaction.owner_id, transaction.id)
        if record is None:
            return False
        record.title = transaction.title
        record.amount = transaction.amount
        record.date = transaction.date
        record.category = transaction.category.value
        record.is_necessary = transaction.is_necessary
        record.notes = transaction.notes
        self.db.flush()
        return True

    def delete_expense(self, user_id: str, expense_id: str) -> bool:
        deleted = (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.user_id == user_id, ExpenseRecord.id == expense_id)
            .delete()
        )
        return deleted > 0


class OverrideRepository:
    """Repository for classification overrides"""

    def __init__(self, db: Session):
        self.db = db

    def get_overrides(self, user_id: str) -> Dict[str, bool]:
        records = self.db.query(ClassificationOverrideRecord).filter(ClassificationOverrideRecord.user_id == user_id).all()
        return {r.normalized_title: r.is_necessary for r in records}

    def upsert_override(self, user_id: str, normalized_title: str, is_necessary: bool) -> ClassificationOverrideRecord:
        record = (
            self.db.query(ClassificationOverrideRecord)
            .filter(
                ClassificationOverrideRecord.user_id == user_id,
                ClassificationOverrideRecord.normalized_title == normalized_title,
            )
            .first()
        )
        if record is None:
            record = ClassificationOverrideRecord(
                user_id=user_id,
                normalized_title=normalized_title,
                is_necessary=is_necessary,
            )
            self.db.add(record)
        else:
            record.is_necessary = is_necessary
        self.db.flush()
        return record


class PreferenceRepository:
    """Repository for category-level necessity preferences"""

    def __init__(self, db: Session):
        self.db = db

    def get_preferences(self, user_id: str) -> Dict[ExpenseCategory, bool]:
        records = self.db.query(CategoryPreferenceRecord).filter(CategoryPreferenceRecord.user_id == user_id).all()
        preferences = {}
        for r in records:
            category = ExpenseCategory.parse(r.category)
            if category is not None:
                preferences[category] = r.is_necessary
        return preferences

    def upsert_preference(self, user_id: str, category: ExpenseCategory, is_necessary: bool) -> CategoryPreferenceRecord:
        record = (
            self.db.query(CategoryPreferenceRecord)
            .filter(CategoryPreferenceRecord.user_id == user_id, CategoryPreferenceRecord.category == category.value)
            .first()
        )
        if record is None:
            record = CategoryPreferenceRecord(user_id=user_id, category=category.value, is_necessary=is_necessary)
            self.db.add(record)
        else:
            record.is_necessary = is_necessary
        self.db.flush()
        return record

    def delete_preference(self, user_id: str, category: ExpenseCategory) -> None:
        (
            self.db.query(CategoryPreferenceRecord)
            .filter(CategoryPreferenceRecord.user_id == user_id, CategoryPreferenceRecord.category == category.value)
            .delete()
        )


class VehicleRepository:
    """Repository for investment vehicle metadata"""

    def __init__(self, db: Session):
        self.db = db

    def get_vehicles(self) -> List[InvestmentVehicleRecord]:
        return self.db.query(InvestmentVehicleRecord).order_by(InvestmentVehicleRecord.ticker.asc()).all()

    def get_vehicle(self, vehicle_id: str) -> Optional[InvestmentVehicleRecord]:
        return self.db.get(InvestmentVehicleRecord, vehicle_id)

    def save_vehicles(self, vehicles: Sequence[InvestmentVehicle]) -> None:
        """Insert or update each vehicle by id"""
        for vehicle in vehicles:
            record = self.get_vehicle(vehicle.id)
            if record is None:
                record = InvestmentVehicleRecord(id=vehicle.id)
                self.db.add(record)
            record.name = vehicle.name
            record.ticker = vehicle.ticker
            record.type = vehicle.type.value
            record.risk_level = vehicle.risk_level.value
            record.annualized_return = vehicle.annualized_return
            record.volatility = vehicle.volatility
            record.sharpe_ratio = vehicle.sharpe_ratio
            record.historical_returns = [
                {"year": r.year, "return_percent": r.return_percent} for r in vehicle.historical_returns
            ]
        self.db.flush()
