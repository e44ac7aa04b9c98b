"""Investment vehicle catalog and market metric derivation"""

import math
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from save_invest.domain.models import (
    DEFAULT_RISK_FREE_RATE,
    InvestmentType,
    InvestmentVehicle,
    RiskLevel,
    VehicleMetrics,
    YearlyReturn,
)

# Annualized volatility (percent) boundaries between risk levels
LOW_RISK_VOLATILITY = 15.0
MEDIUM_RISK_VOLATILITY = 25.0

LOOKBACK_MONTHS = 60

TICKER_METADATA: Mapping[str, Tuple[str, InvestmentType]] = {
    "SPY": ("S&P 500", InvestmentType.INDEX),
    "QQQ": ("NASDAQ-100", InvestmentType.INDEX),
    "BND": ("Total Bond Market", InvestmentType.BOND),
    "VTI": ("Total US Stock Market", InvestmentType.ETF),
    "AAPL": ("Apple Inc.", InvestmentType.STOCK),
    "MSFT": ("Microsoft Corp.", InvestmentType.STOCK),
    "AMZN": ("Amazon.com Inc.", InvestmentType.STOCK),
    "GOOGL": ("Alphabet Inc.", InvestmentType.STOCK),
    "VNQ": ("US Real Estate", InvestmentType.ETF),
    "VWO": ("Emerging Markets", InvestmentType.ETF),
    "VXUS": ("Total International Stock", InvestmentType.ETF),
    "VYM": ("High Dividend Yield", InvestmentType.ETF),
    "DIA": ("Dow Jones Industrial Average", InvestmentType.INDEX),
    "IWM": ("Russell 2000 Small Cap", InvestmentType.INDEX),
    "GLD": ("Gold", InvestmentType.ETF),
    "SLV": ("Silver", InvestmentType.ETF),
    "TLT": ("20+ Year Treasury Bonds", InvestmentType.BOND),
    "LQD": ("Corporate Bonds", InvestmentType.BOND),
}

DEFAULT_TICKERS = ("SPY", "QQQ", "BND", "VTI", "AAPL", "MSFT", "AMZN", "GOOGL", "VNQ", "VWO")


def risk_level_for_volatility(volatility: float) -> RiskLevel:
    if volatility < LOW_RISK_VOLATILITY:
        return RiskLevel.LOW
    elif volatility < MEDIUM_RISK_VOLATILITY:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _historical(
    ticker: str,
    returns: Sequence[Tuple[int, float]],
    volatility: float,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> InvestmentVehicle:
    name, vehicle_type = TICKER_METADATA[ticker]
    history = [YearlyReturn(year=y, return_percent=r) for y, r in returns]
    return InvestmentVehicle(
        id=ticker,
        name=name,
        ticker=ticker,
        type=vehicle_type,
        risk_level=risk_level_for_volatility(volatility),
        annualized_return=sum(r for _, r in returns) / len(returns),
        volatility=volatility,
        historical_returns=history,
        risk_free_rate=risk_free_rate,
    )


def default_vehicles(risk_free_rate: float = DEFAULT_RISK_FREE_RATE) -> List[InvestmentVehicle]:
    """Built-in fallback catalog used when storage and market data are unavailable"""
    return [
        _historical(
            "SPY",
            [(2018, -4.38), (2019, 31.49), (2020, 18.40), (2021, 28.71), (2022, -18.11), (2023, 24.23)],
            volatility=17.5,
            risk_free_rate=risk_free_rate,
        ),
        _historical(
            "QQQ",
            [(2018, -0.12), (2019, 39.12), (2020, 48.63), (2021, 27.51), (2022, -32.58), (2023, 54.03)],
            volatility=26.0,
            risk_free_rate=risk_free_rate,
        ),
        _historical(
            "BND",
            [(2018, -0.05), (2019, 8.71), (2020, 7.74), (2021, -1.67), (2022, -13.04), (2023, 5.08)],
            volatility=6.0,
            risk_free_rate=risk_free_rate,
        ),
        _historical(
            "VTI",
            [(2018, -5.13), (2019, 30.67), (2020, 21.03), (2021, 25.67), (2022, -19.51), (2023, 26.05)],
            volatility=17.8,
            risk_free_rate=risk_free_rate,
        ),
        _historical(
            "VWO",
            [(2018, -14.58), (2019, 20.40), (2020, 15.26), (2021, 1.28), (2022, -17.71), (2023, 9.31)],
            volatility=19.0,
            risk_free_rate=risk_free_rate,
        ),
    ]


def compute_vehicle_metrics(
    ticker: str,
    monthly_closes: Iterable[Tuple[date, float]],
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    lookback_months: int = LOOKBACK_MONTHS,
) -> Optional[VehicleMetrics]:
    """
    Derive return statistics from month-end closing prices.

    - yearly_returns: 12-month returns stepping back a year at a time
    - annualized_return: CAGR over the lookback window
    - volatility: population std-dev of monthly returns, annualized by sqrt(12)

    Returns None when fewer than two usable closes are available.
    """
    closes = sorted(
        ((d, float(p)) for d, p in monthly_closes if p is not None and float(p) > 0),
        key=lambda item: item[0],
        reverse=True,
    )[: lookback_months + 1]
    if len(closes) < 2:
        return None

    yearly_returns = []
    for i in range(0, len(closes) - 12, 12):
        current_date, current_price = closes[i]
        _, previous_price = closes[i + 12]
        yearly_returns.append(
            YearlyReturn(year=current_date.year, return_percent=(current_price - previous_price) / previous_price * 100)
        )

    newest_price = closes[0][1]
    oldest_price = closes[-1][1]
    years = (len(closes) - 1) / 12.0
    annualized_return = ((newest_price / oldest_price) ** (1.0 / years) - 1.0) * 100

    monthly_returns = [closes[i][1] / closes[i + 1][1] - 1.0 for i in range(len(closes) - 1)]
    mean = sum(monthly_returns) / len(monthly_returns)
    variance = sum((r - mean) ** 2 for r in monthly_returns) / len(monthly_returns)
    volatility = math.sqrt(variance) * math.sqrt(12) * 100

    return VehicleMetrics(
        ticker=ticker,
        yearly_returns=yearly_returns,
        annualized_return=annualized_return,
        volatility=volatility,
        risk_free_rate=risk_free_rate,
    )


def apply_metrics(vehicle: Optional[InvestmentVehicle], metrics: VehicleMetrics) -> InvestmentVehicle:
    """New vehicle record carrying refreshed metrics; risk level follows volatility"""
    if vehicle is None:
        name, vehicle_type = TICKER_METADATA.get(metrics.ticker, (metrics.ticker, InvestmentType.STOCK))
        vehicle = InvestmentVehicle(
            id=metrics.ticker,
            name=name,
            ticker=metrics.ticker,
            type=vehicle_type,
            risk_level=RiskLevel.MEDIUM,
            annualized_return=0.0,
            volatility=0.0,
        )

    return replace(
        vehicle,
        annualized_return=metrics.annualized_return,
        volatility=metrics.volatility,
        risk_level=risk_level_for_volatility(metrics.volatility),
        historical_returns=list(metrics.yearly_returns) or vehicle.historical_returns,
        risk_free_rate=metrics.risk_free_rate,
    )


def merge_refreshed(
    tickers: Sequence[str],
    metrics_by_ticker: Mapping[str, VehicleMetrics],
    existing: Sequence[InvestmentVehicle],
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> List[InvestmentVehicle]:
    """
    Combine a refresh result with what we already had.

    Per ticker: refreshed metrics if available, else the existing record,
    else the built-in default, else the ticker is dropped.
    """
    existing_by_ticker: Dict[str, InvestmentVehicle] = {v.ticker: v for v in existing}
    defaults_by_ticker = {v.ticker: v for v in default_vehicles(risk_free_rate)}

    merged = []
    for ticker in tickers:
        metrics = metrics_by_ticker.get(ticker)
        if metrics is not None:
            merged.append(apply_metrics(existing_by_ticker.get(ticker) or defaults_by_ticker.get(ticker), metrics))
        elif ticker in existing_by_ticker:
            merged.append(existing_by_ticker[ticker])
        elif ticker in defaults_by_ticker:
            merged.append(defaults_by_ticker[ticker])

    return merged
