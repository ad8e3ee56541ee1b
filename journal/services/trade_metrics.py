"""Per-trade calculations and the enricher that attaches them.

All functions are pure computation with no I/O or database access. Inputs are
never mutated; every call builds fresh results.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

import numpy as np

from journal.schemas.trade import (
    Outcome,
    SortField,
    SortOrder,
    TradeCalculations,
    TradeRead,
    TradeWithCalculations,
)
from journal.utils.dates import align, wall_clock

SECONDS_PER_HOUR = 3600.0


def _divide(numerator: float, denominator: float) -> float:
    """IEEE division: a zero denominator yields +/-inf or nan instead of raising."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


# ---------------------------------------------------------------------------
# Trade state
# ---------------------------------------------------------------------------

def is_trade_open(trade) -> bool:
    """A trade is open until it has an exit date, whatever its exit price."""
    return trade.exit_date is None


def entry_sort_key(trade) -> datetime:
    """Chronological key that orders naive and offset-aware entries together."""
    return wall_clock(trade.entry_date)


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

def calculate_trade_metrics(trade) -> TradeCalculations:
    """Derive P&L, holding period and outcome flags from one trade's raw fields.

    Open trades (no exit date or no exit price) only get an entry value; every
    other figure is None and no outcome flag is set.
    """
    entry_value = trade.entry_price * trade.quantity

    if trade.exit_date is None or trade.exit_price is None:
        return TradeCalculations(entry_value=entry_value)

    if trade.direction == "SHORT":
        pnl = (trade.entry_price - trade.exit_price) * trade.quantity
    else:
        pnl = (trade.exit_price - trade.entry_price) * trade.quantity

    pnl_percent = _divide(pnl, entry_value) * 100
    net_pnl = pnl - (trade.fees or 0)
    exit_value = trade.exit_price * trade.quantity

    # Negative when exit precedes entry; left for upstream validation to reject
    entry_date, exit_date = align(trade.entry_date, trade.exit_date)
    holding_period = (exit_date - entry_date).total_seconds() / SECONDS_PER_HOUR

    actual_risk_reward = None
    if trade.stop_loss is not None:
        risk = abs(trade.entry_price - trade.stop_loss) * trade.quantity
        if risk != 0:
            actual_risk_reward = abs(pnl) / risk

    return TradeCalculations(
        pnl=pnl,
        pnl_percent=pnl_percent,
        net_pnl=net_pnl,
        entry_value=entry_value,
        exit_value=exit_value,
        holding_period=holding_period,
        holding_period_days=holding_period / 24,
        is_winner=net_pnl > 0,
        is_loser=net_pnl < 0,
        is_breakeven=net_pnl == 0,
        actual_risk_reward=actual_risk_reward,
    )


# ---------------------------------------------------------------------------
# Enricher
# ---------------------------------------------------------------------------

def enrich_trade_with_calculations(trade) -> TradeWithCalculations:
    """Attach fresh calculations to a trade, keeping every field and relation."""
    data = TradeRead.model_validate(trade).model_dump(exclude={"calculations"})
    return TradeWithCalculations(**data, calculations=calculate_trade_metrics(trade))


def enrich_trades_with_calculations(trades: Iterable) -> list[TradeWithCalculations]:
    return [enrich_trade_with_calculations(t) for t in trades]


def closed_trades(trades: Iterable[TradeWithCalculations]) -> list[TradeWithCalculations]:
    """Drop open trades (and any without a net P&L) before aggregate statistics."""
    return [t for t in trades if not is_trade_open(t) and t.calculations.net_pnl is not None]


_OUTCOME_FLAGS = {
    Outcome.WINNING: "is_winner",
    Outcome.LOSING: "is_loser",
    Outcome.BREAKEVEN: "is_breakeven",
}


def filter_by_outcome(
    trades: Iterable[TradeWithCalculations],
    outcome: Outcome | str,
) -> list[TradeWithCalculations]:
    """Keep trades whose outcome flag matches; open trades never match."""
    flag = _OUTCOME_FLAGS[Outcome(outcome)]
    return [t for t in trades if getattr(t.calculations, flag)]


_SORT_KEYS = {
    SortField.DATE: entry_sort_key,
    SortField.SYMBOL: lambda t: t.symbol,
    SortField.PNL: lambda t: t.calculations.net_pnl,
    SortField.PNL_PERCENT: lambda t: t.calculations.pnl_percent,
}


def sort_trades(
    trades: Sequence[TradeWithCalculations],
    field: SortField | str = SortField.DATE,
    order: SortOrder | str = SortOrder.DESC,
) -> list[TradeWithCalculations]:
    """Stable sort; trades without a value for the field always come last."""
    key = _SORT_KEYS[SortField(field)]
    descending = SortOrder(order) == SortOrder.DESC

    valued = [t for t in trades if key(t) is not None]
    missing = [t for t in trades if key(t) is None]

    # sorted() keeps equal keys in input order even with reverse=True
    return sorted(valued, key=key, reverse=descending) + missing


# ---------------------------------------------------------------------------
# Planning helpers
# ---------------------------------------------------------------------------

def calculate_planned_rr(
    entry_price: float,
    stop_loss: float,
    take_profit: float,
    direction: str,
) -> float | None:
    """Planned reward/risk from the stop and target; None if the stop is on the wrong side."""
    if direction == "SHORT":
        risk = stop_loss - entry_price
        reward = entry_price - take_profit
    else:
        risk = entry_price - stop_loss
        reward = take_profit - entry_price

    if risk <= 0:
        return None
    return reward / risk


def calculate_position_size(
    account_balance: float,
    risk_percent: float,
    entry_price: float,
    stop_loss: float,
) -> float:
    """Units to buy so that hitting the stop loses `risk_percent` of the balance."""
    risk_per_unit = abs(entry_price - stop_loss)
    if risk_per_unit == 0:
        return 0.0
    risk_amount = account_balance * risk_percent / 100
    return risk_amount / risk_per_unit
