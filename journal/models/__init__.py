"""Database models."""

from journal.models.user import User
from journal.models.trade_tag import TradeTag
from journal.models.tag import Tag
from journal.models.screenshot import Screenshot
from journal.models.trade import Trade

__all__ = [
    "User",
    "TradeTag",
    "Tag",
    "Screenshot",
    "Trade",
]
