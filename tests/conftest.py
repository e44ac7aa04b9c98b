"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Dict, Generator, List, Sequence
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from save_invest.api.main import create_app
from save_invest.api.dependencies import get_market_data_client
from save_invest.infrastructure.database.models import Base
from save_invest.infrastructure.database.session import get_db
from save_invest.domain.models import (
    ExpenseCategory,
    InvestmentType,
    InvestmentVehicle,
    RiskLevel,
    Transaction,
    VehicleMetrics,
    YearlyReturn,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeMarketDataClient:
    """Stands in for the HTTP market data client; tickers not in `metrics` fail"""

    def __init__(self, metrics: Dict[str, VehicleMetrics] | None = None):
        self.metrics = metrics or {}
        self.requested: List[str] = []

    async def refresh(self, tickers: Sequence[str]) -> Dict[str, VehicleMetrics]:
        self.requested.extend(tickers)
        return {t: self.metrics[t] for t in tickers if t in self.metrics}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def market_data() -> FakeMarketDataClient:
    return FakeMarketDataClient(
        {
            "SPY": VehicleMetrics(
                ticker="SPY",
                yearly_returns=[YearlyReturn(2024, 24.0), YearlyReturn(2023, 26.0)],
                annualized_return=12.0,
                volatility=16.0,
            )
        }
    )


@pytest.fixture
def client(db: Session, market_data: FakeMarketDataClient) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_market_data_client] = lambda: market_data
    return TestClient(app)


def make_transaction(
    title: str,
    amount: float,
    category: ExpenseCategory,
    is_necessary: bool,
    day: date = date(2025, 4, 10),
    owner_id: str = "user_1",
) -> Transaction:
    return Transaction(
        title=title,
        amount=amount,
        date=day,
        category=category,
        is_necessary=is_necessary,
        owner_id=owner_id,
    )


def make_vehicle(
    ticker: str,
    risk_level: RiskLevel,
    annualized_return: float,
    volatility: float,
    historical_returns: List[YearlyReturn] | None = None,
) -> InvestmentVehicle:
    return InvestmentVehicle(
        id=ticker.lower(),
        name=f"{ticker} Fund",
        ticker=ticker,
        type=InvestmentType.ETF,
        risk_level=risk_level,
        annualized_return=annualized_return,
        volatility=volatility,
        historical_returns=historical_returns or [],
    )


@pytest.fixture
def sample_transactions() -> List[Transaction]:
    """One month of mixed spending for a single user"""
    return [
        make_transaction("Monthly rent", 1500.0, ExpenseCategory.HOUSING, True, date(2025, 4, 1)),
        make_transaction("Grocery run", 120.0, ExpenseCategory.FOOD, True, date(2025, 4, 3)),
        make_transaction("Restaurant dinner", 85.0, ExpenseCategory.FOOD, False, date(2025, 4, 5)),
        make_transaction("Netflix", 15.0, ExpenseCategory.ENTERTAINMENT, False, date(2025, 4, 7)),
        make_transaction("New shoes", 150.0, ExpenseCategory.SHOPPING, False, date(2025, 4, 12)),
        make_transaction("Electric bill", 90.0, ExpenseCategory.UTILITIES, True, date(2025, 4, 15)),
    ]


@pytest.fixture
def sample_vehicles() -> List[InvestmentVehicle]:
    return [
        make_vehicle("BND", RiskLevel.LOW, 4.0, 6.0),
        make_vehicle("TIP", RiskLevel.LOW, 3.5, 5.0),
        make_vehicle("SPY", RiskLevel.MEDIUM, 10.0, 17.5),
        make_vehicle("VTI", RiskLevel.MEDIUM, 9.5, 17.8),
        make_vehicle("QQQ", RiskLevel.HIGH, 15.0, 26.0),
        make_vehicle("ARKK", RiskLevel.HIGH, 12.0, 40.0),
    ]
