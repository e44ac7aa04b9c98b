"""SQLAlchemy ORM models for expenses, overrides, preferences, and vehicles"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Text, JSON, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ExpenseRecord(Base):
    """Logged expense"""

    __tablename__ = "expense"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    category = Column(String(32), nullable=False)
    is_necessary = Column(Boolean, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class ClassificationOverrideRecord(Base):
    """User correction keyed by normalized expense title"""

    __tablename__ = "classification_override"
    __table_args__ = (UniqueConstraint("user_id", "normalized_title", name="uq_override_user_title"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    normalized_title = Column(Text, nullable=False)
    is_necessary = Column(Boolean, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class CategoryPreferenceRecord(Base):
    """User-level necessity override for a whole category"""

    __tablename__ = "category_preference"
    __table_args__ = (UniqueConstraint("user_id", "category", name="uq_preference_user_category"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    category = Column(String(32), nullable=False)
    is_necessary = Column(Boolean, nullable=False)


class InvestmentVehicleRecord(Base):
    """Cached investment vehicle metadata and market metrics"""

    __tablename__ = "investment_vehicle"

    id = Column(String(32), primary_key=True)
    name = Column(Text, nullable=False)
    ticker = Column(String(16), nullable=False, unique=True)
    type = Column(String(16), nullable=False)
    risk_level = Column(String(16), nullable=False)
    annualized_return = Column(Float, nullable=False)
    volatility = Column(Float, nullable=False)
    sharpe_ratio = Column(Float, nullable=False)  # Denormalized for reporting; recomputed on load
    historical_returns = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
