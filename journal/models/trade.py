"""Trade model — one journal entry, open until an exit date is recorded."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship

from journal.models.trade_tag import TradeTag

if TYPE_CHECKING:
    from journal.models.screenshot import Screenshot
    from journal.models.tag import Tag


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    symbol: str = Field(index=True)
    asset_type: str = "STOCK"  # "STOCK", "FOREX", "CRYPTO", "OPTIONS"
    currency: str = "USD"  # carried through, never converted
    entry_date: datetime = Field(index=True)
    entry_price: float
    exit_date: datetime | None = None  # None while the trade is open
    exit_price: float | None = None
    quantity: float
    direction: str  # "LONG" or "SHORT"
    fees: float | None = None

    # Plan
    setup_type: str | None = None
    strategy_name: str | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    risk_reward_ratio: float | None = None

    # Context
    time_of_day: str | None = None  # "PRE_MARKET", "MARKET_OPEN", "MID_DAY", "MARKET_CLOSE", "AFTER_HOURS"
    market_conditions: str | None = None  # "TRENDING", "RANGING", "VOLATILE", "CALM"
    emotional_state_entry: str | None = None
    emotional_state_exit: str | None = None
    notes: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    tags: list["Tag"] = Relationship(back_populates="trades", link_model=TradeTag)
    screenshots: list["Screenshot"] = Relationship(
        back_populates="trade",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
