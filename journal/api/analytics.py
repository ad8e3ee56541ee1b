"""Analytics API — dashboard metrics, performance breakdowns and chart data."""

import logging
import math
from dataclasses import asdict
from datetime import datetime
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from journal.config import settings
from journal.database import get_session
from journal.models.user import User
from journal.services import analytics
from journal.services.analytics import Dimension
from journal.services.trade_metrics import closed_trades, enrich_trades_with_calculations
from journal.services.trade_store import load_trades
from journal.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


class ChartType(str, Enum):
    EQUITY = "equity"
    DISTRIBUTION = "distribution"
    BREAKDOWN = "breakdown"
    MONTHLY = "monthly"
    TIME = "time"


# Breakdowns shown on the charts page, keyed by response field
_CHART_BREAKDOWNS = {
    "by_asset_type": Dimension.ASSET_TYPE,
    "by_strategy": Dimension.STRATEGY_NAME,
    "by_time_of_day": Dimension.TIME_OF_DAY,
    "by_market_conditions": Dimension.MARKET_CONDITIONS,
}


def _finite(value):
    """Replace inf/nan with None so JSON serialization doesn't blow up."""
    if isinstance(value, float) and (math.isinf(value) or math.isnan(value)):
        return None
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_finite(v) for v in value]
    return value


def _date_range(start_date: datetime | None, end_date: datetime | None) -> dict:
    return {
        "start": start_date.isoformat() if start_date else None,
        "end": end_date.isoformat() if end_date else None,
        "filtered": bool(start_date or end_date),
    }


def _closed_enriched(session: Session, user: User, start_date, end_date):
    raw = load_trades(session, user.id, start_date, end_date, closed_only=True)
    return closed_trades(enrich_trades_with_calculations(raw))


def _chart_rows(rows: list[analytics.DimensionPerformance]) -> list[dict]:
    return [
        {
            "name": row.value,
            "total_pnl": row.total_pnl,
            "trade_count": row.trades,
            "win_rate": row.win_rate,
        }
        for row in rows
    ]


@router.get("/dashboard")
def dashboard(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Headline statistics over the user's closed trades."""
    trades = _closed_enriched(session, user, start_date, end_date)

    try:
        basic = analytics.calculate_basic_metrics(trades)
        expectancy = analytics.calculate_expectancy(trades)
        sharpe = analytics.calculate_sharpe_ratio(trades, settings.risk_free_rate)
        drawdown = analytics.calculate_drawdown(trades)
        streaks = analytics.calculate_streaks(trades)
    except Exception as e:
        logger.exception(f"Dashboard metrics failed for user {user.id}")
        raise HTTPException(status_code=500, detail=f"Failed to calculate dashboard metrics: {e}")

    return _finite({
        "total_trades": basic.total_trades,
        "date_range": _date_range(start_date, end_date),
        "performance": {
            "total_pnl": basic.total_pnl,
            "average_pnl": basic.average_pnl,
            "win_rate": basic.win_rate,
            "loss_rate": basic.loss_rate,
            "breakeven_rate": basic.breakeven_rate,
            "profit_factor": basic.profit_factor,
        },
        "win_loss": {
            "winning_trades": basic.winning_trades,
            "losing_trades": basic.losing_trades,
            "breakeven_trades": basic.breakeven_trades,
            "average_win": basic.average_win,
            "average_loss": basic.average_loss,
            "largest_win": basic.largest_win,
            "largest_loss": basic.largest_loss,
        },
        "advanced": {**asdict(expectancy), **asdict(sharpe)},
        "drawdown": asdict(drawdown),
        "streaks": asdict(streaks),
    })


@router.get("/performance")
def performance(
    dimension: Dimension | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Breakdowns by one dimension, or by every dimension when none is given."""
    trades = _closed_enriched(session, user, start_date, end_date)
    dimensions = [dimension] if dimension else list(Dimension)

    try:
        breakdowns = {
            f"by_{dim.value}": [
                asdict(row) for row in analytics.calculate_performance_by_dimension(trades, dim)
            ]
            for dim in dimensions
        }
    except Exception as e:
        logger.exception(f"Performance breakdown failed for user {user.id}")
        raise HTTPException(status_code=500, detail=f"Failed to calculate performance: {e}")

    return _finite({
        "total_trades": len(trades),
        "date_range": _date_range(start_date, end_date),
        "performance": breakdowns,
    })


@router.get("/charts")
def charts(
    chart_type: ChartType | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Chart-ready series; all charts unless `chart_type` picks one."""
    trades = _closed_enriched(session, user, start_date, end_date)
    wanted = {chart_type} if chart_type else set(ChartType)
    data: dict = {}

    try:
        if ChartType.EQUITY in wanted:
            data["equity_curve"] = [asdict(p) for p in analytics.calculate_equity_curve(trades)]

        if ChartType.DISTRIBUTION in wanted:
            basic = analytics.calculate_basic_metrics(trades)
            data["distribution"] = {
                "wins": basic.winning_trades,
                "losses": basic.losing_trades,
                "breakeven": basic.breakeven_trades,
                "win_rate": basic.win_rate,
                "loss_rate": basic.loss_rate,
                "breakeven_rate": basic.breakeven_rate,
            }
            data["pnl_distribution"] = [
                asdict(b) for b in analytics.calculate_pnl_distribution(trades)
            ]

        if ChartType.BREAKDOWN in wanted:
            for key, dim in _CHART_BREAKDOWNS.items():
                data[key] = _chart_rows(analytics.calculate_performance_by_dimension(trades, dim))
            by_symbol = analytics.calculate_performance_by_dimension(trades, Dimension.SYMBOL)
            data["by_symbol"] = _chart_rows(by_symbol[:settings.top_symbols_limit])

        if ChartType.MONTHLY in wanted or ChartType.TIME in wanted:
            time_based = analytics.calculate_time_based_metrics(trades)
            if ChartType.MONTHLY in wanted:
                data["monthly_performance"] = _chart_rows(time_based.month)
            if ChartType.TIME in wanted:
                data["by_day_of_week"] = _chart_rows(time_based.day_of_week)
                data["by_hour"] = _chart_rows(time_based.hour)
    except Exception as e:
        logger.exception(f"Chart data failed for user {user.id}")
        raise HTTPException(status_code=500, detail=f"Failed to generate chart data: {e}")

    return _finite({
        "total_trades": len(trades),
        "date_range": _date_range(start_date, end_date),
        "charts": data,
    })
