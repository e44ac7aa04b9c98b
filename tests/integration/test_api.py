"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from save_invest.api import main
from save_invest.infrastructure.database.repositories import OverrideRepository, PreferenceRepository
from save_invest.infrastructure.database.session import build_engine
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.domain.models import ExpenseCategory

WINDOW = {"window_start": "2025-04-01", "window_end": "2025-04-30"}


@pytest.fixture
def logged_expenses(client: TestClient):
    """One month of expenses logged through the API"""
    expenses = [
        ("Monthly rent", 1500.0, "housing", True),
        ("Grocery run", 120.0, "food", True),
        ("Restaurant dinner", 85.0, "food", False),
        ("Netflix", 15.0, "entertainment", False),
        ("New shoes", 150.0, "shopping", False),
    ]
    ids = []
    for day, (title, amount, category, necessary) in enumerate(expenses, start=1):
        response = client.post(
            "/v1/expenses",
            json={
                "user_id": "user_1",
                "title": title,
                "amount": amount,
                "date": f"2025-04-{day:02d}",
                "category": category,
                "is_necessary": necessary,
            },
        )
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_startup_creates_tables(tmp_path, monkeypatch):
    """Test the lifespan handler creates the schema when the app starts"""
    startup_engine = build_engine(f"sqlite:///{tmp_path / 'startup.db'}")
    monkeypatch.setattr(main, "engine", startup_engine)

    with TestClient(main.create_app()) as started:
        assert started.get("/health").status_code == 200

    assert set(inspect(startup_engine).get_table_names()) >= {
        "expense",
        "classification_override",
        "category_preference",
        "investment_vehicle",
    }
    startup_engine.dispose()


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "save_invest_classification_total" in response.text


def test_classify_endpoint(client: TestClient):
    """Test POST /v1/classify with a keyword decision"""
    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "Restaurant with friends", "amount": 45, "category": "food"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_necessary"] is False
    assert data["source"] == "keyword"
    assert data["warnings"] == []


def test_classify_housing_outlier(client: TestClient):
    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "Landlord payment", "amount": 4000, "category": "housing"},
    )

    assert response.json()["is_necessary"] is False
    assert response.json()["source"] == "amount_outlier"


def test_classify_bad_amount_returns_warning(client: TestClient):
    """Test unparseable amounts are reported, not rejected"""
    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "Landlord payment", "amount": "lots", "category": "housing"},
    )

    assert response.status_code == 200
    assert response.json()["is_necessary"] is True
    assert len(response.json()["warnings"]) == 1


def test_classify_requires_category(client: TestClient):
    response = client.post("/v1/classify", json={"user_id": "user_1", "title": "Rent", "amount": 10, "category": None})

    assert response.status_code == 422


def test_override_is_applied_and_persisted(client: TestClient, db: Session):
    """Test PUT /v1/overrides changes later classifications and is stored"""
    response = client.put("/v1/overrides", json={"user_id": "user_1", "title": " Coffee Beans ", "is_necessary": True})

    assert response.status_code == 200
    assert response.json()["normalized_title"] == "coffee beans"

    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "COFFEE BEANS", "amount": 18, "category": "food"},
    )
    assert response.json()["is_necessary"] is True
    assert response.json()["source"] == "override"

    assert OverrideRepository(db).get_overrides("user_1") == {"coffee beans": True}


def test_overrides_are_per_user(client: TestClient):
    client.put("/v1/overrides", json={"user_id": "user_1", "title": "Coffee", "is_necessary": True})

    response = client.post(
        "/v1/classify",
        json={"user_id": "user_2", "title": "Coffee", "amount": 5, "category": "food"},
    )

    assert response.json()["source"] == "keyword"
    assert response.json()["is_necessary"] is False


def test_stored_overrides_are_loaded(client: TestClient, db: Session):
    """Test overrides persisted earlier seed the in-memory table"""
    FinanceStore(db).save_override("user_3", "gym membership", True)

    response = client.post(
        "/v1/classify",
        json={"user_id": "user_3", "title": "Gym Membership", "amount": 40, "category": "other"},
    )

    assert response.json()["is_necessary"] is True
    assert response.json()["source"] == "override"


def test_suggest_category(client: TestClient):
    response = client.post("/v1/categories/suggest", json={"title": "Uber home", "amount": 23})

    assert response.status_code == 200
    assert response.json() == {"category": "transportation", "typically_necessary": True, "icon": "car"}


def test_create_expense_classifies_when_flag_missing(client: TestClient):
    response = client.post(
        "/v1/expenses",
        json={"user_id": "user_1", "title": "Hotel night", "amount": 180, "date": "2025-04-03", "category": "travel"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["is_necessary"] is False
    assert data["classification_source"] == "keyword"


def test_create_expense_with_flag_records_override(client: TestClient):
    """Test an explicit flag is remembered for the title"""
    response = client.post(
        "/v1/expenses",
        json={
            "user_id": "user_1",
            "title": "Hotel night",
            "amount": 180,
            "date": "2025-04-03",
            "category": "travel",
            "is_necessary": True,
        },
    )
    assert response.json()["classification_source"] == "override"

    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "hotel night", "amount": 200, "category": "travel"},
    )
    assert response.json()["is_necessary"] is True


def test_create_expense_rejects_non_positive_amount(client: TestClient):
    response = client.post(
        "/v1/expenses",
        json={"user_id": "user_1", "title": "Refund", "amount": -5, "date": "2025-04-03", "category": "other"},
    )

    assert response.status_code == 422


def test_create_expense_storage_unavailable(client: TestClient, monkeypatch):
    monkeypatch.setattr(FinanceStore, "add_transaction", lambda self, transaction: False)

    response = client.post(
        "/v1/expenses",
        json={"user_id": "user_1", "title": "Books", "amount": 30, "date": "2025-04-03", "category": "education"},
    )

    assert response.status_code == 503


def test_delete_expense(client: TestClient, logged_expenses):
    response = client.delete(f"/v1/expenses/{logged_expenses[0]}", params={"user_id": "user_1"})
    assert response.status_code == 204

    response = client.delete(f"/v1/expenses/{logged_expenses[0]}", params={"user_id": "user_1"})
    assert response.status_code == 404


def test_update_expense_reclassifies_and_records_override(client: TestClient, db: Session, logged_expenses):
    """Test PUT /v1/expenses/{id} with is_necessary rewrites the flag and remembers the title"""
    response = client.put(
        f"/v1/expenses/{logged_expenses[3]}",
        json={"user_id": "user_1", "is_necessary": True},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Netflix"
    assert data["is_necessary"] is True
    assert data["classification_source"] == "override"

    summary = client.get("/v1/spending/summary", params={"user_id": "user_1", **WINDOW}).json()
    assert summary["discretionary_spend"] == pytest.approx(235.0)

    response = client.post(
        "/v1/classify",
        json={"user_id": "user_1", "title": "netflix", "amount": 15, "category": "entertainment"},
    )
    assert response.json()["is_necessary"] is True
    assert response.json()["source"] == "override"
    assert OverrideRepository(db).get_overrides("user_1")["netflix"] is True


def test_update_expense_keeps_flag_when_not_given(client: TestClient, logged_expenses):
    response = client.put(
        f"/v1/expenses/{logged_expenses[2]}",
        json={"user_id": "user_1", "title": "Restaurant dinner for two", "amount": 100.0, "notes": "anniversary"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Restaurant dinner for two"
    assert data["is_necessary"] is False
    assert data["notes"] == "anniversary"
    assert data["date"] == "2025-04-03"
    assert data["classification_source"] is None

    summary = client.get("/v1/spending/summary", params={"user_id": "user_1", **WINDOW}).json()
    assert summary["discretionary_spend"] == pytest.approx(265.0)


def test_update_expense_not_found(client: TestClient, logged_expenses):
    response = client.put("/v1/expenses/missing", json={"user_id": "user_1", "amount": 10.0})
    assert response.status_code == 404

    response = client.put(f"/v1/expenses/{logged_expenses[0]}", json={"user_id": "user_2", "is_necessary": False})
    assert response.status_code == 404


def test_update_expense_rejects_non_positive_amount(client: TestClient, logged_expenses):
    response = client.put(f"/v1/expenses/{logged_expenses[0]}", json={"user_id": "user_1", "amount": 0})

    assert response.status_code == 422


def test_update_expense_storage_unavailable(client: TestClient, logged_expenses, monkeypatch):
    monkeypatch.setattr(FinanceStore, "update_transaction", lambda self, transaction: False)

    response = client.put(f"/v1/expenses/{logged_expenses[0]}", json={"user_id": "user_1", "amount": 1400.0})

    assert response.status_code == 503


def test_spending_summary(client: TestClient, logged_expenses):
    """Test GET /v1/spending/summary for an explicit window"""
    response = client.get("/v1/spending/summary", params={"user_id": "user_1", **WINDOW})

    assert response.status_code == 200
    data = response.json()
    assert data["transaction_count"] == 5
    assert data["total_spend"] == pytest.approx(1870.0)
    assert data["discretionary_spend"] == pytest.approx(250.0)
    assert data["per_category_total"][0] == {"category": "housing", "total": 1500.0}
    assert data["monthly"][0]["month"] == "2025-04"


def test_spending_summary_rejects_inverted_window(client: TestClient):
    response = client.get(
        "/v1/spending/summary",
        params={"user_id": "user_1", "window_start": "2025-05-01", "window_end": "2025-04-01"},
    )

    assert response.status_code == 422


def test_category_preference_changes_discretionary_set(client: TestClient, db: Session, logged_expenses):
    """Test a category preference overrides per-transaction flags"""
    response = client.put(
        "/v1/category-preferences",
        json={"user_id": "user_1", "category": "food", "is_necessary": False},
    )
    assert response.status_code == 200
    assert response.json()["saved"] is True
    assert PreferenceRepository(db).get_preferences("user_1") == {ExpenseCategory.FOOD: False}

    data = client.get("/v1/spending/summary", params={"user_id": "user_1", **WINDOW}).json()
    assert data["discretionary_spend"] == pytest.approx(370.0)

    client.put("/v1/category-preferences", json={"user_id": "user_1", "category": "food", "is_necessary": None})
    data = client.get("/v1/spending/summary", params={"user_id": "user_1", **WINDOW}).json()
    assert data["discretionary_spend"] == pytest.approx(250.0)


def test_savings_potential(client: TestClient, logged_expenses):
    response = client.get("/v1/savings/potential", params={"user_id": "user_1", **WINDOW})

    assert response.status_code == 200
    data = response.json()
    assert data["total_discretionary_spend"] == pytest.approx(250.0)
    assert data["savings_at_20_percent"] == pytest.approx(50.0)
    assert data["savings_at_50_percent"] == pytest.approx(125.0)
    assert data["savings_at_70_percent"] == pytest.approx(175.0)
    assert data["per_category_totals"]["shopping"] == pytest.approx(150.0)


def test_savings_potential_without_spending(client: TestClient):
    response = client.get("/v1/savings/potential", params={"user_id": "nobody", **WINDOW})

    assert response.status_code == 200
    assert response.json()["total_discretionary_spend"] == 0
    assert response.json()["specific_reduction_opportunities"] == []


def test_projection_endpoint(client: TestClient):
    response = client.post("/v1/projection", json={"monthly_contribution": 100, "annual_return_percent": 12, "years": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["future_value"] == pytest.approx(1268.25, abs=0.01)
    assert data["total_contributions"] == pytest.approx(1200.0)


def test_projection_rejects_negative_years(client: TestClient):
    response = client.post("/v1/projection", json={"monthly_contribution": 100, "annual_return_percent": 7, "years": -1})

    assert response.status_code == 422


def test_projection_schedule(client: TestClient):
    response = client.get(
        "/v1/projection/schedule",
        params={"monthly_contribution": 500, "annual_return_percent": 0, "years": 3},
    )

    assert response.status_code == 200
    schedule = response.json()
    assert [row["year"] for row in schedule] == [1, 2, 3]
    assert schedule[-1]["total_value"] == pytest.approx(18000.0)
    assert schedule[-1]["return_percent"] == pytest.approx(0.0)


def test_plan_endpoint(client: TestClient, logged_expenses):
    """Test POST /v1/plan over the default vehicle catalog"""
    response = client.post(
        "/v1/plan",
        json={"user_id": "user_1", "risk_tolerance": "conservative", **WINDOW},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["monthly_target"] == pytest.approx(125.0)
    assert data["risk_tolerance"] == "conservative"
    assert data["total_allocation_percent"] <= 100.0
    assert len(data["allocations"]) <= 4
    assert data["allocations"][0]["vehicle"]["ticker"] == "BND"
    assert [p["horizon_years"] for p in data["portfolio_projections"]] == [1, 5, 10, 20]


def test_plan_with_explicit_target(client: TestClient):
    response = client.post(
        "/v1/plan",
        json={"user_id": "user_1", "risk_tolerance": "aggressive", "savings_target": 1000, **WINDOW},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["monthly_target"] == 1000
    assert data["allocations"][0]["vehicle"]["risk_level"] == "high"
    assert sum(a["monthly_amount"] for a in data["allocations"]) <= 1000 + 1e-6


def test_plan_rejects_negative_target(client: TestClient):
    response = client.post("/v1/plan", json={"user_id": "user_1", "savings_target": -10})

    assert response.status_code == 422


def test_list_vehicles_defaults(client: TestClient):
    response = client.get("/v1/vehicles")

    assert response.status_code == 200
    tickers = {v["ticker"] for v in response.json()["vehicles"]}
    assert tickers == {"SPY", "QQQ", "BND", "VTI", "VWO"}


def test_refresh_vehicles(client: TestClient, market_data):
    """Test refreshed tickers are updated and failed ones fall back to defaults"""
    response = client.post("/v1/vehicles/refresh", json={"tickers": ["spy", "bnd", "zzzz"]})

    assert response.status_code == 200
    vehicles = {v["ticker"]: v for v in response.json()["vehicles"]}
    assert set(vehicles) == {"SPY", "BND"}
    assert vehicles["SPY"]["annualized_return"] == pytest.approx(12.0)
    assert vehicles["SPY"]["sharpe_ratio"] == pytest.approx(10.0 / 16.0)
    assert market_data.requested == ["SPY", "BND", "ZZZZ"]

    stored = client.get("/v1/vehicles").json()["vehicles"]
    assert [v["ticker"] for v in stored] == ["BND", "SPY"]


def test_refresh_vehicles_nothing_available(client: TestClient):
    response = client.post("/v1/vehicles/refresh", json={"tickers": ["ZZZZ"]})

    assert response.status_code == 503


def test_insights(client: TestClient, logged_expenses):
    response = client.get("/v1/insights", params={"user_id": "user_1", "today": "2025-04-30"})

    assert response.status_code == 200
    data = response.json()
    assert data["category_monthly_averages"]["housing"] > 0
    assert data["recurring_expenses"] == []
    categories = [c["category"] for c in data["opportunity_costs"]]
    assert categories == ["shopping", "food", "entertainment"]
    assert data["opportunity_costs"][0]["vehicle_id"] == "SPY"
    assert len(data["opportunity_costs"][0]["schedule"]) == 10


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]
