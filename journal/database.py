"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect
from sqlmodel import SQLModel, create_engine, Session

from journal.config import settings

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False; PostgreSQL does not
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.database_url,
    echo=False,
    connect_args=connect_args,
)

# Columns added after the first release: (table, column, DDL type)
_ADDED_COLUMNS = [
    ("trade", "currency", "VARCHAR NOT NULL DEFAULT 'USD'"),
    ("trade", "emotional_state_exit", "VARCHAR"),
    ("trade", "risk_reward_ratio", "FLOAT"),
    ("user", "updated_at", "TIMESTAMP"),
]


def _run_migrations(bind=None):
    """Run lightweight schema migrations for columns missing on older databases."""
    from sqlalchemy import text

    bind = bind or engine
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())

    for table, column, ddl in _ADDED_COLUMNS:
        if table not in tables:
            continue
        columns = {col["name"] for col in inspector.get_columns(table)}
        if column in columns:
            continue
        logger.info(f"Migrating: adding {table}.{column}")
        with bind.connect() as conn:
            conn.execute(text(f'ALTER TABLE "{table}" ADD COLUMN {column} {ddl}'))
            conn.commit()

    # Composite index used by every per-user, date-ordered trade query
    if "trade" in tables:
        existing_indexes = inspector.get_indexes("trade")
        if not any(idx["name"] == "ix_trade_user_entry_date" for idx in existing_indexes):
            with bind.connect() as conn:
                conn.execute(text(
                    "CREATE INDEX ix_trade_user_entry_date ON trade (user_id, entry_date)"
                ))
                conn.commit()


def create_db_and_tables(bind=None):
    """Create all tables. Called on startup."""
    import journal.models  # noqa: F401  (registers tables on the metadata)

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    _run_migrations(bind)


def get_session() -> Session:
    """Dependency that yields a database session."""
    with Session(engine) as session:
        yield session
