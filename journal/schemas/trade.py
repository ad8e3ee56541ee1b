"""Pydantic schemas for Trade API and the enriched trade returned by the metrics engine."""

from datetime import datetime
from enum import Enum
import re

from pydantic import BaseModel, Field, field_validator, model_validator

from journal.services.validation import validate_trade_dates
from journal.utils.constants import ASSET_TYPES, DIRECTIONS, MARKET_CONDITIONS, TIMES_OF_DAY

_TAG_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class Outcome(str, Enum):
    WINNING = "winning"
    LOSING = "losing"
    BREAKEVEN = "breakeven"


class SortField(str, Enum):
    DATE = "date"
    PNL = "pnl"
    PNL_PERCENT = "pnl_percent"
    SYMBOL = "symbol"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


def _check_choice(value: str | None, allowed: list[str]) -> str | None:
    if value is None:
        return None
    text = value.strip().upper()
    if text not in allowed:
        raise ValueError(f"must be one of: {', '.join(allowed)}")
    return text


def _trim_optional(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


def _check_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        name = tag.strip()
        if not name or len(name) > 50 or not _TAG_RE.fullmatch(name):
            raise ValueError(
                "tag names must be 1-50 letters, numbers, hyphens or underscores"
            )
        if name not in cleaned:
            cleaned.append(name)
    return cleaned


# ---------------------------------------------------------------------------
# Derived figures
# ---------------------------------------------------------------------------

class TradeCalculations(BaseModel):
    """Per-trade figures; every P&L field is None while the trade is open."""

    pnl: float | None = None
    pnl_percent: float | None = None
    net_pnl: float | None = None
    entry_value: float
    exit_value: float | None = None
    holding_period: float | None = None  # hours
    holding_period_days: float | None = None
    is_winner: bool = False
    is_loser: bool = False
    is_breakeven: bool = False
    actual_risk_reward: float | None = None

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

class TagRead(BaseModel):
    id: int | None = None
    name: str

    model_config = {"from_attributes": True}


class ScreenshotRead(BaseModel):
    id: int | None = None
    url: str
    filename: str
    file_size: int | None = None
    mime_type: str | None = None
    uploaded_at: datetime | None = None

    model_config = {"from_attributes": True}


class TradeRead(BaseModel):
    id: int | None = None
    user_id: int | None = None
    symbol: str
    asset_type: str
    currency: str = "USD"
    entry_date: datetime
    entry_price: float
    exit_date: datetime | None = None
    exit_price: float | None = None
    quantity: float
    direction: str
    fees: float | None = None
    setup_type: str | None = None
    strategy_name: str | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    risk_reward_ratio: float | None = None
    time_of_day: str | None = None
    market_conditions: str | None = None
    emotional_state_entry: str | None = None
    emotional_state_exit: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tags: list[TagRead] = []
    screenshots: list[ScreenshotRead] = []

    model_config = {"from_attributes": True}


class TradeWithCalculations(TradeRead):
    calculations: TradeCalculations


class TradeListResponse(BaseModel):
    trades: list[TradeWithCalculations]
    total: int
    limit: int
    offset: int
    has_more: bool


# ---------------------------------------------------------------------------
# Write models
# ---------------------------------------------------------------------------

class TradeCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=32)
    asset_type: str = "STOCK"
    currency: str = Field(default="USD", min_length=3, max_length=5)
    entry_date: datetime
    entry_price: float = Field(gt=0)
    exit_date: datetime | None = None
    exit_price: float | None = Field(default=None, gt=0)
    quantity: float = Field(gt=0)
    direction: str
    fees: float | None = Field(default=None, ge=0)
    setup_type: str | None = Field(default=None, max_length=120)
    strategy_name: str | None = Field(default=None, max_length=120)
    stop_loss: float | None = None
    take_profit: float | None = None
    risk_reward_ratio: float | None = None
    time_of_day: str | None = None
    market_conditions: str | None = None
    emotional_state_entry: str | None = None
    emotional_state_exit: str | None = None
    notes: str | None = None
    tags: list[str] = []

    @field_validator("symbol", "currency")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("asset_type")
    @classmethod
    def _validate_asset_type(cls, value: str) -> str:
        return _check_choice(value, ASSET_TYPES)

    @field_validator("direction")
    @classmethod
    def _validate_direction(cls, value: str) -> str:
        return _check_choice(value, DIRECTIONS)

    @field_validator("time_of_day")
    @classmethod
    def _validate_time_of_day(cls, value: str | None) -> str | None:
        return _check_choice(value, TIMES_OF_DAY)

    @field_validator("market_conditions")
    @classmethod
    def _validate_market_conditions(cls, value: str | None) -> str | None:
        return _check_choice(value, MARKET_CONDITIONS)

    @field_validator(
        "setup_type", "strategy_name", "emotional_state_entry", "emotional_state_exit", "notes"
    )
    @classmethod
    def _trim_text(cls, value: str | None) -> str | None:
        return _trim_optional(value)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: list[str]) -> list[str]:
        return _check_tags(value)

    @model_validator(mode="after")
    def _validate_exit(self):
        if (self.exit_date is None) != (self.exit_price is None):
            raise ValueError("exit_date and exit_price must be provided together")
        result = validate_trade_dates(self.entry_date, self.exit_date)
        if not result.valid:
            raise ValueError(result.errors[0])
        return self


class TradeUpdate(BaseModel):
    symbol: str | None = Field(default=None, min_length=1, max_length=32)
    asset_type: str | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=5)
    entry_date: datetime | None = None
    entry_price: float | None = Field(default=None, gt=0)
    exit_date: datetime | None = None
    exit_price: float | None = Field(default=None, gt=0)
    quantity: float | None = Field(default=None, gt=0)
    direction: str | None = None
    fees: float | None = Field(default=None, ge=0)
    setup_type: str | None = Field(default=None, max_length=120)
    strategy_name: str | None = Field(default=None, max_length=120)
    stop_loss: float | None = None
    take_profit: float | None = None
    risk_reward_ratio: float | None = None
    time_of_day: str | None = None
    market_conditions: str | None = None
    emotional_state_entry: str | None = None
    emotional_state_exit: str | None = None
    notes: str | None = None
    tags: list[str] | None = None

    @field_validator("symbol", "currency")
    @classmethod
    def _normalize_optional_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("asset_type")
    @classmethod
    def _validate_optional_asset_type(cls, value: str | None) -> str | None:
        return _check_choice(value, ASSET_TYPES)

    @field_validator("direction")
    @classmethod
    def _validate_optional_direction(cls, value: str | None) -> str | None:
        return _check_choice(value, DIRECTIONS)

    @field_validator("time_of_day")
    @classmethod
    def _validate_optional_time_of_day(cls, value: str | None) -> str | None:
        return _check_choice(value, TIMES_OF_DAY)

    @field_validator("market_conditions")
    @classmethod
    def _validate_optional_market_conditions(cls, value: str | None) -> str | None:
        return _check_choice(value, MARKET_CONDITIONS)

    @field_validator(
        "setup_type", "strategy_name", "emotional_state_entry", "emotional_state_exit", "notes"
    )
    @classmethod
    def _trim_optional_text(cls, value: str | None) -> str | None:
        return _trim_optional(value)

    @field_validator("tags")
    @classmethod
    def _validate_optional_tags(cls, value: list[str] | None) -> list[str] | None:
        return _check_tags(value)
