"""Tag API — the current user's tags with usage counts."""

from fastapi import APIRouter, Depends
from sqlmodel import Session, select, func

from journal.database import get_session
from journal.models.tag import Tag
from journal.models.trade_tag import TradeTag
from journal.models.user import User
from journal.api.deps import get_current_user

router = APIRouter(prefix="/api/tags", tags=["tags"])


@router.get("")
def list_tags(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(Tag, func.count(TradeTag.trade_id))
        .join(TradeTag, TradeTag.tag_id == Tag.id, isouter=True)
        .where(Tag.user_id == user.id)
        .group_by(Tag.id)
        .order_by(Tag.name)
    ).all()
    return [{"id": tag.id, "name": tag.name, "trade_count": count} for tag, count in rows]
