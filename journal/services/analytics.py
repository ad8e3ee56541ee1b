"""Portfolio statistics over enriched, closed trades.

All functions are pure computation with no I/O or database access. Callers pass
closed trades only (see trade_metrics.closed_trades); nothing here filters
open trades out again. Zero denominators are branched on explicitly and map
to the documented sentinels (0 or inf) rather than raising.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import numpy as np

from journal.schemas.trade import TradeWithCalculations
from journal.services.trade_metrics import entry_sort_key
from journal.utils.constants import DAY_NAMES, PNL_BUCKETS, UNKNOWN_LABEL
from journal.utils.dates import align


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class BasicMetrics:
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0  # percent
    loss_rate: float = 0.0
    breakeven_rate: float = 0.0
    total_pnl: float = 0.0
    average_pnl: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0  # <= 0
    largest_win: float = 0.0
    largest_loss: float = 0.0  # <= 0
    profit_factor: float = 0.0  # inf when there are wins and no losses


@dataclass
class ExpectancyMetrics:
    expectancy: float = 0.0
    expectancy_percent: float = 0.0


@dataclass
class SharpeRatioMetrics:
    sharpe_ratio: float = 0.0
    average_return: float = 0.0
    standard_deviation: float = 0.0


@dataclass
class DrawdownPeriod:
    """One stretch of trades spent below the running equity peak."""
    start_index: int
    start_date: datetime
    peak: float
    trough: float
    end_index: int | None = None  # trade that recovered the peak; None while under water
    end_date: datetime | None = None
    drawdown: float = 0.0
    drawdown_percent: float = 0.0
    duration_days: float = 0.0


@dataclass
class DrawdownMetrics:
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    current_drawdown: float = 0.0
    current_drawdown_percent: float = 0.0
    average_drawdown: float = 0.0
    drawdown_periods: list[DrawdownPeriod] = field(default_factory=list)


@dataclass
class EquityCurvePoint:
    trade_number: int
    symbol: str
    equity: float
    pnl: float
    date: datetime


@dataclass
class DimensionPerformance:
    dimension: str
    value: str
    trades: int
    total_pnl: float
    average_pnl: float
    win_rate: float
    profit_factor: float


@dataclass
class TimeBasedMetrics:
    day_of_week: list[DimensionPerformance] = field(default_factory=list)
    month: list[DimensionPerformance] = field(default_factory=list)
    hour: list[DimensionPerformance] = field(default_factory=list)


@dataclass
class StreakMetrics:
    current_streak: int = 0  # > 0 wins in a row, < 0 losses in a row
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    average_win_streak: float = 0.0
    average_loss_streak: float = 0.0


@dataclass
class PnlBucket:
    range: str
    count: int = 0
    total_pnl: float = 0.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _net(trade: TradeWithCalculations) -> float:
    return trade.calculations.net_pnl


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _by_entry_date(trades: Sequence[TradeWithCalculations]) -> list[TradeWithCalculations]:
    return sorted(trades, key=entry_sort_key)


def _day_name(moment: datetime) -> str:
    # datetime.weekday() is Monday-based; DAY_NAMES starts on Sunday
    return DAY_NAMES[(moment.weekday() + 1) % 7]


# ---------------------------------------------------------------------------
# Basic metrics
# ---------------------------------------------------------------------------

def calculate_basic_metrics(trades: Sequence[TradeWithCalculations]) -> BasicMetrics:
    """Counts, rates, averages, extremes and profit factor over net P&L."""
    total = len(trades)
    if total == 0:
        return BasicMetrics()

    winners = [_net(t) for t in trades if t.calculations.is_winner]
    losers = [_net(t) for t in trades if t.calculations.is_loser]
    breakeven = sum(1 for t in trades if t.calculations.is_breakeven)

    total_pnl = sum(_net(t) for t in trades)
    gross_profit = sum(winners)
    gross_loss = abs(sum(losers))

    if not winners:
        profit_factor = 0.0
    elif not losers or gross_loss == 0:
        profit_factor = float("inf")
    else:
        profit_factor = gross_profit / gross_loss

    return BasicMetrics(
        total_trades=total,
        winning_trades=len(winners),
        losing_trades=len(losers),
        breakeven_trades=breakeven,
        win_rate=len(winners) / total * 100,
        loss_rate=len(losers) / total * 100,
        breakeven_rate=breakeven / total * 100,
        total_pnl=total_pnl,
        average_pnl=total_pnl / total,
        average_win=_mean(winners),
        average_loss=_mean(losers),
        largest_win=max(winners) if winners else 0.0,
        largest_loss=min(losers) if losers else 0.0,
        profit_factor=profit_factor,
    )


def calculate_expectancy(trades: Sequence[TradeWithCalculations]) -> ExpectancyMetrics:
    """Probability-weighted result per trade, in currency and in percent.

    average_loss is already negative, so adding the loss term subtracts it.
    """
    if not trades:
        return ExpectancyMetrics()

    average_trade_size = _mean([t.calculations.entry_value for t in trades])
    if average_trade_size <= 0:
        return ExpectancyMetrics()

    metrics = calculate_basic_metrics(trades)
    win_weight = metrics.win_rate / 100
    loss_weight = metrics.loss_rate / 100

    expectancy = win_weight * metrics.average_win + loss_weight * metrics.average_loss

    average_win_pct = _mean([t.calculations.pnl_percent for t in trades if t.calculations.is_winner])
    average_loss_pct = _mean([t.calculations.pnl_percent for t in trades if t.calculations.is_loser])
    expectancy_percent = win_weight * average_win_pct + loss_weight * average_loss_pct

    return ExpectancyMetrics(expectancy=expectancy, expectancy_percent=expectancy_percent)


def calculate_sharpe_ratio(
    trades: Sequence[TradeWithCalculations],
    risk_free_rate: float = 0.0,
) -> SharpeRatioMetrics:
    """Per-trade Sharpe ratio over pnl_percent, using the sample standard deviation."""
    if len(trades) < 2:
        return SharpeRatioMetrics()

    returns = np.array([t.calculations.pnl_percent for t in trades], dtype=float)
    average_return = float(np.mean(returns))
    std = float(np.std(returns, ddof=1))

    if std == 0 or np.isnan(std):
        sharpe = 0.0
    else:
        sharpe = (average_return - risk_free_rate) / std

    return SharpeRatioMetrics(
        sharpe_ratio=sharpe,
        average_return=average_return,
        standard_deviation=std,
    )


# ---------------------------------------------------------------------------
# Equity, drawdown, streaks
# ---------------------------------------------------------------------------

def _close_period(period: DrawdownPeriod, end_date: datetime) -> None:
    period.drawdown = period.peak - period.trough
    period.drawdown_percent = period.drawdown / period.peak * 100 if period.peak > 0 else 0.0
    end, start = align(end_date, period.start_date)
    period.duration_days = (end - start).total_seconds() / 86400


def calculate_drawdown(trades: Sequence[TradeWithCalculations]) -> DrawdownMetrics:
    """Peak-to-trough declines of cumulative net P&L in entry-date order.

    Equity starts from a 0 baseline, so a losing first trade is already a
    drawdown (with a 0% depth, since the peak is 0).
    """
    if not trades:
        return DrawdownMetrics()

    ordered = _by_entry_date(trades)

    equity = 0.0
    peak = 0.0
    max_drawdown = 0.0
    max_drawdown_percent = 0.0
    periods: list[DrawdownPeriod] = []
    open_period: DrawdownPeriod | None = None

    for i, trade in enumerate(ordered):
        equity += _net(trade)

        if equity >= peak:
            if open_period is not None:
                open_period.end_index = i
                open_period.end_date = trade.entry_date
                _close_period(open_period, trade.entry_date)
                open_period = None
            peak = equity
            continue

        if open_period is None:
            open_period = DrawdownPeriod(
                start_index=i, start_date=trade.entry_date, peak=peak, trough=equity
            )
            periods.append(open_period)
        else:
            open_period.trough = min(open_period.trough, equity)

        drawdown = peak - equity
        if drawdown > max_drawdown:
            max_drawdown = drawdown
            max_drawdown_percent = drawdown / peak * 100 if peak > 0 else 0.0

    if open_period is not None:
        _close_period(open_period, ordered[-1].entry_date)

    current_drawdown = peak - equity
    current_drawdown_percent = current_drawdown / peak * 100 if peak > 0 else 0.0

    return DrawdownMetrics(
        max_drawdown=max_drawdown,
        max_drawdown_percent=max_drawdown_percent,
        current_drawdown=current_drawdown,
        current_drawdown_percent=current_drawdown_percent,
        average_drawdown=_mean([p.drawdown for p in periods]),
        drawdown_periods=periods,
    )


def calculate_equity_curve(trades: Sequence[TradeWithCalculations]) -> list[EquityCurvePoint]:
    """Cumulative net P&L after each trade, numbered from 1 in entry-date order."""
    equity = 0.0
    curve = []
    for number, trade in enumerate(_by_entry_date(trades), start=1):
        equity += _net(trade)
        curve.append(EquityCurvePoint(
            trade_number=number,
            symbol=trade.symbol,
            equity=equity,
            pnl=_net(trade),
            date=trade.entry_date,
        ))
    return curve


def calculate_streaks(trades: Sequence[TradeWithCalculations]) -> StreakMetrics:
    """Consecutive win/loss runs in entry-date order; a breakeven trade ends either run."""
    current = 0
    win_runs: list[int] = []
    loss_runs: list[int] = []

    for trade in _by_entry_date(trades):
        previous = current
        if trade.calculations.is_winner:
            current = current + 1 if current > 0 else 1
        elif trade.calculations.is_loser:
            current = current - 1 if current < 0 else -1
        else:
            current = 0

        if previous > 0 and current <= 0:
            win_runs.append(previous)
        elif previous < 0 and current >= 0:
            loss_runs.append(-previous)

    if current > 0:
        win_runs.append(current)
    elif current < 0:
        loss_runs.append(-current)

    return StreakMetrics(
        current_streak=current,
        longest_win_streak=max(win_runs, default=0),
        longest_loss_streak=max(loss_runs, default=0),
        average_win_streak=_mean(win_runs),
        average_loss_streak=_mean(loss_runs),
    )


# ---------------------------------------------------------------------------
# Breakdowns
# ---------------------------------------------------------------------------

class Dimension(str, Enum):
    SYMBOL = "symbol"
    STRATEGY_NAME = "strategy_name"
    SETUP_TYPE = "setup_type"
    ASSET_TYPE = "asset_type"
    DIRECTION = "direction"
    TIME_OF_DAY = "time_of_day"
    MARKET_CONDITIONS = "market_conditions"
    EMOTIONAL_STATE_ENTRY = "emotional_state_entry"
    DAY_OF_WEEK = "day_of_week"


_DIMENSION_ACCESSORS: dict[Dimension, Callable[[TradeWithCalculations], object]] = {
    Dimension.SYMBOL: lambda t: t.symbol,
    Dimension.STRATEGY_NAME: lambda t: t.strategy_name,
    Dimension.SETUP_TYPE: lambda t: t.setup_type,
    Dimension.ASSET_TYPE: lambda t: t.asset_type,
    Dimension.DIRECTION: lambda t: t.direction,
    Dimension.TIME_OF_DAY: lambda t: t.time_of_day,
    Dimension.MARKET_CONDITIONS: lambda t: t.market_conditions,
    Dimension.EMOTIONAL_STATE_ENTRY: lambda t: t.emotional_state_entry,
    Dimension.DAY_OF_WEEK: lambda t: _day_name(t.entry_date),
}


def _label(value: object) -> str:
    if value is None:
        return UNKNOWN_LABEL
    text = str(value)
    return text if text.strip() else UNKNOWN_LABEL


def _group(
    trades: Sequence[TradeWithCalculations],
    key: Callable[[TradeWithCalculations], str],
) -> dict[str, list[TradeWithCalculations]]:
    groups: dict[str, list[TradeWithCalculations]] = {}
    for trade in trades:
        groups.setdefault(key(trade), []).append(trade)
    return groups


def _summarize(dimension: str, value: str, trades: Sequence[TradeWithCalculations]) -> DimensionPerformance:
    metrics = calculate_basic_metrics(trades)
    return DimensionPerformance(
        dimension=dimension,
        value=value,
        trades=metrics.total_trades,
        total_pnl=metrics.total_pnl,
        average_pnl=metrics.average_pnl,
        win_rate=metrics.win_rate,
        profit_factor=metrics.profit_factor,
    )


def calculate_performance_by_dimension(
    trades: Sequence[TradeWithCalculations],
    dimension: Dimension | str,
) -> list[DimensionPerformance]:
    """Per-value totals for one trade attribute, best total P&L first.

    Missing or blank values are grouped under "Unknown". Ties keep the order
    in which the values were first seen.
    """
    dimension = Dimension(dimension)
    accessor = _DIMENSION_ACCESSORS[dimension]

    groups = _group(trades, lambda t: _label(accessor(t)))
    results = [_summarize(dimension.value, value, group) for value, group in groups.items()]
    return sorted(results, key=lambda r: r.total_pnl, reverse=True)


def calculate_time_based_metrics(trades: Sequence[TradeWithCalculations]) -> TimeBasedMetrics:
    """Day-of-week, month (YYYY-MM) and hour-of-day breakdowns by entry time.

    Timestamps are bucketed as recorded, without any timezone conversion.
    Buckets come out in calendar order.
    """
    by_day = _group(trades, lambda t: _day_name(t.entry_date))
    by_month = _group(trades, lambda t: t.entry_date.strftime("%Y-%m"))
    by_hour = _group(trades, lambda t: f"{t.entry_date.hour:02d}:00")

    return TimeBasedMetrics(
        day_of_week=[
            _summarize("day_of_week", day, by_day[day]) for day in DAY_NAMES if day in by_day
        ],
        month=[_summarize("month", key, by_month[key]) for key in sorted(by_month)],
        hour=[_summarize("hour", key, by_hour[key]) for key in sorted(by_hour)],
    )


def calculate_pnl_distribution(trades: Sequence[TradeWithCalculations]) -> list[PnlBucket]:
    """Count trades into fixed net P&L bands, from the worst losses to the best wins."""
    buckets = {name: PnlBucket(range=name) for name in PNL_BUCKETS}

    for trade in trades:
        pnl = _net(trade)
        if pnl == 0:
            name = "Breakeven"
        elif pnl > 0:
            if pnl > 500:
                name = "Win > $500"
            elif pnl >= 100:
                name = "Win $100-$500"
            else:
                name = "Win $0-$100"
        else:
            if pnl < -500:
                name = "Loss > $500"
            elif pnl <= -100:
                name = "Loss $100-$500"
            else:
                name = "Loss $0-$100"

        bucket = buckets[name]
        bucket.count += 1
        bucket.total_pnl += pnl

    return list(buckets.values())
