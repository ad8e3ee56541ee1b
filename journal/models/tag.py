"""Tag model — free-form labels a user attaches to trades."""

from typing import TYPE_CHECKING

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from journal.models.trade_tag import TradeTag

if TYPE_CHECKING:
    from journal.models.trade import Trade


class Tag(SQLModel, table=True):
    __tablename__ = "tag"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tag_user_name"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    name: str = Field(max_length=50)

    trades: list["Trade"] = Relationship(back_populates="tags", link_model=TradeTag)
