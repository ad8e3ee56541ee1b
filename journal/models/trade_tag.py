"""Link table between trades and tags."""

from sqlmodel import SQLModel, Field


class TradeTag(SQLModel, table=True):
    __tablename__ = "trade_tag"

    trade_id: int | None = Field(default=None, foreign_key="trade.id", primary_key=True)
    tag_id: int | None = Field(default=None, foreign_key="tag.id", primary_key=True)
