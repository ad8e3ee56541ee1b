"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'journal.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]  # Vite dev server

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 10080  # 7 days

    # Analytics
    risk_free_rate: float = 0.0  # per-trade return, in percent
    top_symbols_limit: int = 10

    # Trade listing
    default_page_size: int = 50
    max_page_size: int = 500

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()
