"""Screenshot model — reference to a chart image stored elsewhere."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from journal.models.trade import Trade


class Screenshot(SQLModel, table=True):
    __tablename__ = "screenshot"

    id: int | None = Field(default=None, primary_key=True)
    trade_id: int = Field(foreign_key="trade.id", index=True)
    url: str
    filename: str
    file_size: int | None = None
    mime_type: str | None = None
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    trade: Optional["Trade"] = Relationship(back_populates="screenshots")
