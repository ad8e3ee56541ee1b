"""Trade loading shared by the analytics API and the CLI."""

from datetime import datetime

from sqlmodel import Session, select

from journal.models.tag import Tag
from journal.models.trade import Trade


def resolve_tags(session: Session, user_id: int, names: list[str]) -> list[Tag]:
    """Fetch the user's tags by name, creating any that do not exist yet."""
    if not names:
        return []

    existing = session.exec(
        select(Tag).where(Tag.user_id == user_id, Tag.name.in_(names))  # type: ignore[attr-defined]
    ).all()
    by_name = {tag.name: tag for tag in existing}

    tags = []
    for name in names:
        tag = by_name.get(name)
        if tag is None:
            tag = Tag(user_id=user_id, name=name)
            session.add(tag)
            by_name[name] = tag
        tags.append(tag)
    return tags


def load_trades(
    session: Session,
    user_id: int,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    closed_only: bool = False,
) -> list[Trade]:
    """One user's trades ordered by entry date, optionally limited to an entry-date range."""
    stmt = select(Trade).where(Trade.user_id == user_id)
    if closed_only:
        stmt = stmt.where(Trade.exit_date.is_not(None))  # type: ignore[union-attr]
    if start_date is not None:
        stmt = stmt.where(Trade.entry_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(Trade.entry_date <= end_date)
    stmt = stmt.order_by(Trade.entry_date)
    return list(session.exec(stmt).all())
