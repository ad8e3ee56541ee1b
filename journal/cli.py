"""CLI tool for admin operations.

Usage:
    python -m journal.cli create-user
    python -m journal.cli summary <email>
"""

import sys
import getpass

from sqlmodel import Session, select

from journal.config import settings
from journal.database import engine, create_db_and_tables
from journal.models.user import User
from journal.services import analytics
from journal.services.auth import hash_password, password_problems
from journal.services.formatting import format_currency, format_date, format_percent
from journal.services.trade_metrics import (
    closed_trades,
    enrich_trades_with_calculations,
    entry_sort_key,
)
from journal.services.trade_store import load_trades
from journal.utils.logging import setup_logging


def create_user():
    """Create a journal user interactively."""
    create_db_and_tables()

    email = input("Email: ").strip().lower()
    if not email:
        print("Email cannot be empty.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing:
            print(f"User '{email}' already exists.")
            sys.exit(1)

    name = input("Name (optional): ").strip() or None
    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)

    problems = password_problems(password)
    if problems:
        print("Password " + "; ".join(problems) + ".")
        sys.exit(1)

    user = User(email=email, name=name, hashed_password=hash_password(password))
    with Session(engine) as session:
        session.add(user)
        session.commit()
        session.refresh(user)

    print(f"\nUser '{email}' created with id {user.id}.")


def format_profit_factor(value: float) -> str:
    return "∞" if value == float("inf") else f"{value:.2f}"


def summary_lines(trades, currency: str = "USD") -> list[str]:
    """Human-readable performance summary for closed, enriched trades."""
    basic = analytics.calculate_basic_metrics(trades)
    if basic.total_trades == 0:
        return ["No closed trades."]

    expectancy = analytics.calculate_expectancy(trades)
    sharpe = analytics.calculate_sharpe_ratio(trades, settings.risk_free_rate)
    drawdown = analytics.calculate_drawdown(trades)
    streaks = analytics.calculate_streaks(trades)
    ordered = sorted(trades, key=entry_sort_key)

    return [
        f"Period:         {format_date(ordered[0].entry_date)} - {format_date(ordered[-1].entry_date)}",
        f"Trades:         {basic.total_trades} "
        f"({basic.winning_trades}W / {basic.losing_trades}L / {basic.breakeven_trades}BE)",
        f"Win rate:       {format_percent(basic.win_rate)}",
        f"Total P&L:      {format_currency(basic.total_pnl, currency)}",
        f"Average win:    {format_currency(basic.average_win, currency)}",
        f"Average loss:   {format_currency(basic.average_loss, currency)}",
        f"Profit factor:  {format_profit_factor(basic.profit_factor)}",
        f"Expectancy:     {format_currency(expectancy.expectancy, currency)}",
        f"Sharpe ratio:   {sharpe.sharpe_ratio:.2f}",
        f"Max drawdown:   {format_currency(drawdown.max_drawdown, currency)} "
        f"({format_percent(drawdown.max_drawdown_percent)})",
        f"Current streak: {streaks.current_streak:+d} "
        f"(best {streaks.longest_win_streak}W, worst {streaks.longest_loss_streak}L)",
    ]


def summary(email: str):
    """Print a performance summary for one user's closed trades."""
    create_db_and_tables()

    with Session(engine) as session:
        user = session.exec(select(User).where(User.email == email.strip().lower())).first()
        if not user:
            print(f"User '{email}' not found.")
            sys.exit(1)

        trades = closed_trades(enrich_trades_with_calculations(
            load_trades(session, user.id, closed_only=True)
        ))

    currency = trades[0].currency if trades else "USD"
    for line in summary_lines(trades, currency):
        print(line)


def main():
    setup_logging()
    if len(sys.argv) < 2:
        print("Usage: python -m journal.cli <command>")
        print("Commands: create-user, summary <email>")
        sys.exit(1)

    command = sys.argv[1]
    if command == "create-user":
        create_user()
    elif command == "summary" and len(sys.argv) == 3:
        summary(sys.argv[2])
    else:
        print(f"Unknown command: {' '.join(sys.argv[1:])}")
        sys.exit(1)


if __name__ == "__main__":
    main()
