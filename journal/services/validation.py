"""Trade input checks shared by the API schemas and the CLI.

These run upstream of the metrics engine: the engine itself never rejects a
trade, it only propagates whatever a malformed one produces.
"""

from dataclasses import dataclass, field
from datetime import datetime

from journal.utils.dates import align


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def validate_trade_dates(
    entry_date: datetime | str,
    exit_date: datetime | str | None,
) -> ValidationResult:
    """An exit, when present, must not precede the entry."""
    if exit_date is None:
        return ValidationResult(valid=True)

    entry, exit_ = align(_as_datetime(entry_date), _as_datetime(exit_date))

    if exit_ < entry:
        return ValidationResult(valid=False, errors=["Exit date must be after entry date"])
    return ValidationResult(valid=True)


def validate_trade_prices(
    entry_price: float,
    exit_price: float | None = None,
    stop_loss: float | None = None,
    take_profit: float | None = None,
) -> ValidationResult:
    """Entry/exit prices must be positive; odd stop or target levels only warn."""
    if entry_price <= 0 or (exit_price is not None and exit_price <= 0):
        return ValidationResult(valid=False, errors=["Prices must be positive"])

    warnings = []
    if stop_loss is not None and stop_loss <= 0:
        warnings.append("Stop loss should be positive")
    if take_profit is not None and take_profit <= 0:
        warnings.append("Take profit should be positive")

    return ValidationResult(valid=True, warnings=warnings)
