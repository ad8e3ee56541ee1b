"""Trade journal API — list, detail, create, update, delete."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from journal.config import settings
from journal.database import get_session
from journal.models.tag import Tag
from journal.models.trade import Trade
from journal.models.user import User
from journal.schemas.trade import (
    Outcome,
    SortField,
    SortOrder,
    TradeCreate,
    TradeListResponse,
    TradeStatus,
    TradeUpdate,
    TradeWithCalculations,
)
from journal.services.trade_metrics import (
    calculate_planned_rr,
    calculate_position_size,
    enrich_trade_with_calculations,
    enrich_trades_with_calculations,
    filter_by_outcome,
    sort_trades,
)
from journal.services.trade_store import resolve_tags
from journal.services.validation import validate_trade_dates, validate_trade_prices
from journal.utils.constants import DIRECTIONS
from journal.api.deps import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _get_owned_trade(session: Session, trade_id: int, user: User) -> Trade:
    trade = session.get(Trade, trade_id)
    if not trade or trade.user_id != user.id:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


_PLAN_FIELDS = {"entry_price", "stop_loss", "take_profit", "direction"}


def _fill_planned_rr(trade: Trade):
    """Derive the planned reward/risk from the stop and target when both are set."""
    if trade.stop_loss is None or trade.take_profit is None:
        return
    trade.risk_reward_ratio = calculate_planned_rr(
        trade.entry_price, trade.stop_loss, trade.take_profit, trade.direction
    )


def _log_price_warnings(trade: Trade):
    result = validate_trade_prices(
        trade.entry_price, trade.exit_price, trade.stop_loss, trade.take_profit
    )
    for warning in result.warnings:
        logger.warning(f"[trade {trade.id}] {warning}")


@router.get("", response_model=TradeListResponse)
def list_trades(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    symbol: str | None = None,
    asset_type: str | None = None,
    direction: str | None = None,
    strategy_name: str | None = None,
    setup_type: str | None = None,
    tags: list[str] | None = Query(default=None),
    outcome: Outcome | None = None,
    trade_status: TradeStatus | None = Query(default=None, alias="status"),
    sort_by: SortField = SortField.DATE,
    sort_order: SortOrder = SortOrder.DESC,
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    stmt = select(Trade).where(Trade.user_id == user.id)
    if start_date is not None:
        stmt = stmt.where(Trade.entry_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Trade.entry_date <= end_date)
    if symbol:
        stmt = stmt.where(Trade.symbol == symbol.strip().upper())
    if asset_type:
        stmt = stmt.where(Trade.asset_type == asset_type.upper())
    if direction:
        stmt = stmt.where(Trade.direction == direction.upper())
    if strategy_name:
        stmt = stmt.where(Trade.strategy_name == strategy_name)
    if setup_type:
        stmt = stmt.where(Trade.setup_type == setup_type)
    if tags:
        stmt = stmt.where(Trade.tags.any(Tag.name.in_(tags)))  # type: ignore[attr-defined]
    if trade_status == TradeStatus.OPEN:
        stmt = stmt.where(Trade.exit_date.is_(None))  # type: ignore[union-attr]
    elif trade_status == TradeStatus.CLOSED:
        stmt = stmt.where(Trade.exit_date.is_not(None))  # type: ignore[union-attr]

    trades = enrich_trades_with_calculations(session.exec(stmt.order_by(Trade.entry_date)).all())

    # Outcome and P&L ordering depend on calculated fields, so they run in Python
    if outcome is not None:
        trades = filter_by_outcome(trades, outcome)
    trades = sort_trades(trades, sort_by, sort_order)

    page = trades[offset:offset + limit]
    return TradeListResponse(
        trades=page,
        total=len(trades),
        limit=limit,
        offset=offset,
        has_more=offset + len(page) < len(trades),
    )


@router.get("/open", response_model=list[TradeWithCalculations])
def list_open_trades(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Trades still in progress, most recent entry first."""
    stmt = (
        select(Trade)
        .where(Trade.user_id == user.id, Trade.exit_date.is_(None))  # type: ignore[union-attr]
        .order_by(Trade.entry_date.desc())  # type: ignore[attr-defined]
    )
    return enrich_trades_with_calculations(session.exec(stmt).all())


@router.get("/plan")
def plan_trade(
    entry_price: float = Query(gt=0),
    stop_loss: float = Query(gt=0),
    direction: str = "LONG",
    take_profit: float | None = Query(default=None, gt=0),
    account_balance: float | None = Query(default=None, gt=0),
    risk_percent: float = Query(default=1.0, gt=0, le=100),
    user: User = Depends(get_current_user),
):
    """Planned reward/risk and a risk-based position size for a prospective trade."""
    direction = direction.upper()
    if direction not in DIRECTIONS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"direction must be one of: {', '.join(DIRECTIONS)}",
        )

    planned_rr = None
    if take_profit is not None:
        planned_rr = calculate_planned_rr(entry_price, stop_loss, take_profit, direction)

    position_size = None
    if account_balance is not None:
        position_size = calculate_position_size(account_balance, risk_percent, entry_price, stop_loss)

    return {
        "direction": direction,
        "risk_per_unit": abs(entry_price - stop_loss),
        "planned_risk_reward": planned_rr,
        "position_size": position_size,
    }


@router.get("/{trade_id}", response_model=TradeWithCalculations)
def get_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return enrich_trade_with_calculations(_get_owned_trade(session, trade_id, user))


@router.post("", response_model=TradeWithCalculations, status_code=status.HTTP_201_CREATED)
def create_trade(
    body: TradeCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = Trade(user_id=user.id, **body.model_dump(exclude={"tags"}))
    if body.risk_reward_ratio is None:
        _fill_planned_rr(trade)
    trade.tags = resolve_tags(session, user.id, body.tags)
    session.add(trade)
    session.commit()
    session.refresh(trade)

    _log_price_warnings(trade)
    logger.info(f"[trade {trade.id}] Created {trade.direction} {trade.symbol}")
    return enrich_trade_with_calculations(trade)


@router.put("/{trade_id}", response_model=TradeWithCalculations)
def update_trade(
    trade_id: int,
    body: TradeUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = _get_owned_trade(session, trade_id, user)

    updates = body.model_dump(exclude_unset=True, exclude={"tags"})
    for key, value in updates.items():
        setattr(trade, key, value)
    if "risk_reward_ratio" not in updates and _PLAN_FIELDS & updates.keys():
        _fill_planned_rr(trade)

    if (trade.exit_date is None) != (trade.exit_price is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="exit_date and exit_price must be provided together",
        )
    dates = validate_trade_dates(trade.entry_date, trade.exit_date)
    if not dates.valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=dates.errors[0],
        )

    if body.tags is not None:
        trade.tags = resolve_tags(session, user.id, body.tags)

    trade.updated_at = datetime.now(timezone.utc)
    session.add(trade)
    session.commit()
    session.refresh(trade)

    _log_price_warnings(trade)
    return enrich_trade_with_calculations(trade)


@router.delete("/{trade_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trade = _get_owned_trade(session, trade_id, user)
    session.delete(trade)
    session.commit()
    logger.info(f"[trade {trade_id}] Deleted")
