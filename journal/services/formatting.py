"""Display strings for amounts, percentages, dates and holding periods."""

from datetime import date, datetime

from journal.utils.constants import CURRENCY_SYMBOLS, DEFAULT_CURRENCY

PLACEHOLDER = "—"


def _as_datetime(value: datetime | date | str) -> datetime | date:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def format_currency(value: float | None, currency: str = DEFAULT_CURRENCY) -> str:
    """'$1,234.56' / '-$50.00'; codes without a known symbol go after the amount."""
    if value is None:
        return PLACEHOLDER

    code = (currency or DEFAULT_CURRENCY).upper()
    sign = "-" if value < 0 else ""
    amount = f"{abs(value):,.2f}"

    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{amount} {code}"
    return f"{sign}{symbol}{amount}"


def format_percent(value: float | None, decimals: int = 2) -> str:
    if value is None:
        return PLACEHOLDER
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:.{decimals}f}%"


def format_date(value: datetime | date | str | None) -> str:
    """e.g. 'Jan 15, 2024'."""
    if value is None:
        return PLACEHOLDER
    moment = _as_datetime(value)
    return f"{moment:%b} {moment.day}, {moment.year}"


def format_datetime(value: datetime | str | None) -> str:
    """e.g. 'Jan 15, 2024 10:30 AM'."""
    if value is None:
        return PLACEHOLDER
    moment = _as_datetime(value)
    hour = moment.hour % 12 or 12
    return f"{format_date(moment)} {hour}:{moment.minute:02d} {moment:%p}"


def format_holding_period(hours: float | None) -> str:
    if hours is None:
        return PLACEHOLDER
    if hours < 1:
        minutes = round(hours * 60)
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
    if hours < 24:
        return f"{hours:.1f} hours"
    return f"{hours / 24:.1f} days"
