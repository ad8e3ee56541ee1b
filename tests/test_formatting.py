"""Tests for display formatting and the CLI summary that uses it."""

from datetime import date, datetime, timedelta

import pytest

from journal.cli import summary_lines
from journal.models.trade import Trade
from journal.services.formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_holding_period,
    format_percent,
)
from journal.services.trade_metrics import enrich_trades_with_calculations


# ---------------------------------------------------------------------------
# 1. Amounts and percentages
# ---------------------------------------------------------------------------

class TestFormatCurrency:
    def test_usd(self):
        assert format_currency(1234.56) == "$1,234.56"

    def test_negative_sign_precedes_symbol(self):
        assert format_currency(-50) == "-$50.00"

    def test_other_known_currency(self):
        assert format_currency(1234.5, "eur") == "€1,234.50"

    def test_unknown_code_goes_after_amount(self):
        assert format_currency(1234.56, "XYZ") == "1,234.56 XYZ"

    def test_none_is_placeholder(self):
        assert format_currency(None) == "—"


class TestFormatPercent:
    @pytest.mark.parametrize("value,expected", [
        (5.25, "+5.25%"),
        (-3.1, "-3.10%"),
        (0, "0.00%"),
    ])
    def test_signed(self, value, expected):
        assert format_percent(value) == expected

    def test_decimals(self):
        assert format_percent(12.3456, decimals=1) == "+12.3%"

    def test_none_is_placeholder(self):
        assert format_percent(None) == "—"


# ---------------------------------------------------------------------------
# 2. Dates and durations
# ---------------------------------------------------------------------------

class TestFormatDates:
    def test_date(self):
        assert format_date(datetime(2024, 1, 15, 10, 30)) == "Jan 15, 2024"
        assert format_date(date(2024, 3, 5)) == "Mar 5, 2024"

    def test_date_from_iso_string(self):
        assert format_date("2024-01-15T10:30:00Z") == "Jan 15, 2024"

    def test_datetime_morning(self):
        assert format_datetime(datetime(2024, 1, 15, 10, 30)) == "Jan 15, 2024 10:30 AM"

    def test_datetime_afternoon_and_midnight(self):
        assert format_datetime(datetime(2024, 1, 15, 13, 45)) == "Jan 15, 2024 1:45 PM"
        assert format_datetime(datetime(2024, 1, 15, 0, 5)) == "Jan 15, 2024 12:05 AM"

    def test_none_is_placeholder(self):
        assert format_date(None) == "—"
        assert format_datetime(None) == "—"


class TestFormatHoldingPeriod:
    @pytest.mark.parametrize("hours,expected", [
        (0.5, "30 minutes"),
        (1 / 60, "1 minute"),
        (12.5, "12.5 hours"),
        (48, "2.0 days"),
    ])
    def test_units(self, hours, expected):
        assert format_holding_period(hours) == expected

    def test_none_is_placeholder(self):
        assert format_holding_period(None) == "—"


# ---------------------------------------------------------------------------
# 3. CLI summary
# ---------------------------------------------------------------------------

def _closed(pnls):
    start = datetime(2024, 1, 15, 10, 0)
    return enrich_trades_with_calculations([
        Trade(
            id=i + 1, user_id=1, symbol="AAPL",
            entry_date=start + timedelta(days=i), entry_price=100.0,
            exit_date=start + timedelta(days=i, hours=1), exit_price=100.0 + pnl,
            quantity=1.0, direction="LONG",
        )
        for i, pnl in enumerate(pnls)
    ])


class TestSummaryLines:
    def test_no_trades(self):
        assert summary_lines([]) == ["No closed trades."]

    def test_summary_contents(self):
        lines = summary_lines(_closed([100, -50, 30]))
        text = "\n".join(lines)
        assert "Period:         Jan 15, 2024 - Jan 17, 2024" in text
        assert "Trades:         3 (2W / 1L / 0BE)" in text
        assert "Total P&L:      $80.00" in text
        assert "Max drawdown:   $50.00 (+50.00%)" in text
        assert "Current streak: +1" in text

    def test_infinite_profit_factor(self):
        text = "\n".join(summary_lines(_closed([10, 20])))
        assert "Profit factor:  ∞" in text
