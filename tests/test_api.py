"""End-to-end tests for the auth, trade, tag and analytics endpoints."""

import logging

import pytest
from sqlalchemy import inspect, text

from journal.database import create_db_and_tables
from conftest import register


def _trade(**overrides) -> dict:
    payload = {
        "symbol": "AAPL",
        "asset_type": "STOCK",
        "entry_date": "2024-01-15T10:00:00",
        "entry_price": 100.0,
        "exit_date": "2024-01-16T10:00:00",
        "exit_price": 110.0,
        "quantity": 10,
        "direction": "LONG",
    }
    payload.update(overrides)
    return payload


def _create(client, headers, **overrides) -> dict:
    response = client.post("/api/trades", json=_trade(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# 1. Auth
# ---------------------------------------------------------------------------

class TestAuth:
    def test_register_and_me(self, client, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "trader@example.com"

    def test_duplicate_email_conflicts(self, client, auth_headers):
        response = client.post("/api/auth/register", json={
            "email": "Trader@Example.com", "password": "Secret123",
        })
        assert response.status_code == 409

    def test_weak_password_rejected(self, client):
        response = client.post("/api/auth/register", json={
            "email": "weak@example.com", "password": "password",
        })
        assert response.status_code == 422

    def test_login(self, client, auth_headers):
        ok = client.post("/api/auth/login", json={
            "email": "trader@example.com", "password": "Secret123",
        })
        assert ok.status_code == 200
        assert ok.json()["token_type"] == "bearer"

        bad = client.post("/api/auth/login", json={
            "email": "trader@example.com", "password": "Wrong1234",
        })
        assert bad.status_code == 401

    def test_invalid_token_rejected(self, client):
        response = client.get("/api/trades", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# 2. Trades
# ---------------------------------------------------------------------------

class TestTrades:
    def test_create_returns_calculations(self, client, auth_headers):
        trade = _create(client, auth_headers, fees=5.0, stop_loss=95.0, tags=["breakout"])
        calc = trade["calculations"]
        assert calc["pnl"] == pytest.approx(100.0)
        assert calc["net_pnl"] == pytest.approx(95.0)
        assert calc["holding_period"] == pytest.approx(24.0)
        assert calc["actual_risk_reward"] == pytest.approx(2.0)
        assert [t["name"] for t in trade["tags"]] == ["breakout"]

    def test_open_trade(self, client, auth_headers):
        trade = _create(client, auth_headers, exit_date=None, exit_price=None)
        assert trade["calculations"]["pnl"] is None

        open_trades = client.get("/api/trades/open", headers=auth_headers).json()
        assert [t["id"] for t in open_trades] == [trade["id"]]

    def test_exit_before_entry_rejected(self, client, auth_headers):
        response = client.post(
            "/api/trades",
            json=_trade(exit_date="2024-01-14T10:00:00"),
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_list_sort_filter_and_paginate(self, client, auth_headers):
        winner = _create(client, auth_headers, symbol="MSFT", exit_price=120.0)
        loser = _create(client, auth_headers, symbol="TSLA", exit_price=90.0)
        still_open = _create(client, auth_headers, exit_date=None, exit_price=None)

        response = client.get(
            "/api/trades", params={"sort_by": "pnl", "sort_order": "desc"}, headers=auth_headers,
        )
        body = response.json()
        assert body["total"] == 3
        assert [t["id"] for t in body["trades"]] == [winner["id"], loser["id"], still_open["id"]]

        losing = client.get("/api/trades", params={"outcome": "losing"}, headers=auth_headers).json()
        assert [t["id"] for t in losing["trades"]] == [loser["id"]]

        page = client.get("/api/trades", params={"limit": 2}, headers=auth_headers).json()
        assert len(page["trades"]) == 2
        assert page["has_more"] is True

    def test_filter_by_tag_and_status(self, client, auth_headers):
        tagged = _create(client, auth_headers, tags=["gap_up"])
        _create(client, auth_headers, exit_date=None, exit_price=None)

        by_tag = client.get("/api/trades", params={"tags": ["gap_up"]}, headers=auth_headers).json()
        assert [t["id"] for t in by_tag["trades"]] == [tagged["id"]]

        closed = client.get("/api/trades", params={"status": "closed"}, headers=auth_headers).json()
        assert [t["id"] for t in closed["trades"]] == [tagged["id"]]

    def test_update_closes_trade(self, client, auth_headers):
        trade = _create(client, auth_headers, exit_date=None, exit_price=None)
        response = client.put(
            f"/api/trades/{trade['id']}",
            json={"exit_date": "2024-01-15T16:00:00", "exit_price": 105.0},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["calculations"]["pnl"] == pytest.approx(50.0)

    def test_update_with_half_an_exit_rejected(self, client, auth_headers):
        trade = _create(client, auth_headers, exit_date=None, exit_price=None)
        response = client.put(
            f"/api/trades/{trade['id']}", json={"exit_price": 105.0}, headers=auth_headers,
        )
        assert response.status_code == 422

    def test_other_users_trades_are_hidden(self, client, auth_headers):
        trade = _create(client, auth_headers)
        other = register(client, "other@example.com")
        assert client.get(f"/api/trades/{trade['id']}", headers=other).status_code == 404
        assert client.get("/api/trades", headers=other).json()["total"] == 0

    def test_delete(self, client, auth_headers):
        trade = _create(client, auth_headers)
        assert client.delete(f"/api/trades/{trade['id']}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/trades/{trade['id']}", headers=auth_headers).status_code == 404


class TestTradePlanning:
    def test_create_fills_planned_risk_reward(self, client, auth_headers):
        trade = _create(client, auth_headers, stop_loss=95.0, take_profit=115.0)
        assert trade["risk_reward_ratio"] == pytest.approx(3.0)

    def test_explicit_ratio_is_kept(self, client, auth_headers):
        trade = _create(client, auth_headers, stop_loss=95.0, take_profit=115.0, risk_reward_ratio=2.5)
        assert trade["risk_reward_ratio"] == pytest.approx(2.5)

    def test_update_recomputes_after_stop_moves(self, client, auth_headers):
        trade = _create(client, auth_headers, stop_loss=95.0, take_profit=115.0)
        response = client.put(
            f"/api/trades/{trade['id']}", json={"stop_loss": 90.0}, headers=auth_headers,
        )
        assert response.json()["risk_reward_ratio"] == pytest.approx(1.5)

    def test_plan_endpoint(self, client, auth_headers):
        body = client.get("/api/trades/plan", params={
            "entry_price": 50.0, "stop_loss": 48.0, "take_profit": 56.0,
            "account_balance": 10_000.0, "risk_percent": 1.0,
        }, headers=auth_headers).json()
        assert body["planned_risk_reward"] == pytest.approx(3.0)
        assert body["position_size"] == pytest.approx(50.0)
        assert body["risk_per_unit"] == pytest.approx(2.0)

    def test_plan_short_with_stop_on_wrong_side(self, client, auth_headers):
        body = client.get("/api/trades/plan", params={
            "entry_price": 100.0, "stop_loss": 95.0, "take_profit": 90.0, "direction": "short",
        }, headers=auth_headers).json()
        assert body["direction"] == "SHORT"
        assert body["planned_risk_reward"] is None
        assert body["position_size"] is None

    def test_plan_rejects_unknown_direction(self, client, auth_headers):
        response = client.get("/api/trades/plan", params={
            "entry_price": 100.0, "stop_loss": 95.0, "direction": "sideways",
        }, headers=auth_headers)
        assert response.status_code == 422


class TestTags:
    def test_tag_usage_counts(self, client, auth_headers):
        _create(client, auth_headers, tags=["breakout", "earnings"])
        _create(client, auth_headers, tags=["breakout"])

        tags = client.get("/api/tags", headers=auth_headers).json()
        assert [(t["name"], t["trade_count"]) for t in tags] == [("breakout", 2), ("earnings", 1)]


# ---------------------------------------------------------------------------
# 3. Analytics
# ---------------------------------------------------------------------------

class TestAnalytics:
    def test_dashboard_excludes_open_trades(self, client, auth_headers):
        _create(client, auth_headers, exit_price=110.0)
        _create(client, auth_headers, exit_price=95.0, entry_date="2024-01-16T10:00:00",
                exit_date="2024-01-17T10:00:00")
        _create(client, auth_headers, exit_date=None, exit_price=None)

        body = client.get("/api/analytics/dashboard", headers=auth_headers).json()
        assert body["total_trades"] == 2
        assert body["performance"]["total_pnl"] == pytest.approx(50.0)
        assert body["performance"]["profit_factor"] == pytest.approx(2.0)
        assert body["drawdown"]["max_drawdown"] == pytest.approx(50.0)
        assert body["streaks"]["current_streak"] == -1

    def test_infinite_profit_factor_serialized_as_null(self, client, auth_headers):
        _create(client, auth_headers)
        body = client.get("/api/analytics/dashboard", headers=auth_headers).json()
        assert body["performance"]["profit_factor"] is None

    def test_empty_dashboard(self, client, auth_headers):
        body = client.get("/api/analytics/dashboard", headers=auth_headers).json()
        assert body["total_trades"] == 0
        assert body["performance"]["win_rate"] == 0

    def test_date_range_filter(self, client, auth_headers):
        _create(client, auth_headers)
        _create(client, auth_headers, entry_date="2024-03-01T10:00:00", exit_date="2024-03-02T10:00:00")

        body = client.get(
            "/api/analytics/dashboard",
            params={"start_date": "2024-02-01T00:00:00"},
            headers=auth_headers,
        ).json()
        assert body["total_trades"] == 1
        assert body["date_range"]["filtered"] is True

    def test_performance_by_dimension(self, client, auth_headers):
        _create(client, auth_headers, strategy_name="Breakout")
        _create(client, auth_headers)

        body = client.get(
            "/api/analytics/performance", params={"dimension": "strategy_name"}, headers=auth_headers,
        ).json()
        rows = body["performance"]["by_strategy_name"]
        assert {r["value"] for r in rows} == {"Breakout", "Unknown"}

    def test_unknown_dimension_rejected(self, client, auth_headers):
        response = client.get(
            "/api/analytics/performance", params={"dimension": "mood_ring"}, headers=auth_headers,
        )
        assert response.status_code == 422

    def test_equity_chart_only(self, client, auth_headers):
        _create(client, auth_headers)
        charts = client.get(
            "/api/analytics/charts", params={"chart_type": "equity"}, headers=auth_headers,
        ).json()["charts"]
        assert list(charts) == ["equity_curve"]
        assert charts["equity_curve"][0]["equity"] == pytest.approx(100.0)

    def test_all_charts(self, client, auth_headers):
        _create(client, auth_headers)
        charts = client.get("/api/analytics/charts", headers=auth_headers).json()["charts"]
        for key in ("equity_curve", "distribution", "pnl_distribution", "by_symbol",
                    "monthly_performance", "by_day_of_week", "by_hour"):
            assert key in charts
        assert charts["monthly_performance"][0]["name"] == "2024-01"
        assert charts["by_day_of_week"][0]["name"] == "Monday"


# ---------------------------------------------------------------------------
# 4. System and schema upkeep
# ---------------------------------------------------------------------------

def test_health_check(client):
    assert client.get("/api/system/health").json() == {"status": "ok", "database": "ok"}


def test_migration_adds_missing_columns(engine):
    with engine.connect() as conn:
        conn.execute(text("DROP TABLE screenshot"))
        conn.execute(text("DROP TABLE trade_tag"))
        conn.execute(text("DROP TABLE trade"))
        conn.execute(text(
            "CREATE TABLE trade (id INTEGER PRIMARY KEY, user_id INTEGER, symbol VARCHAR, "
            "asset_type VARCHAR, entry_date TIMESTAMP, entry_price FLOAT, exit_date TIMESTAMP, "
            "exit_price FLOAT, quantity FLOAT, direction VARCHAR)"
        ))
        conn.commit()

    create_db_and_tables(engine)

    columns = {col["name"] for col in inspect(engine).get_columns("trade")}
    assert {"currency", "emotional_state_exit", "risk_reward_ratio"} <= columns
    assert any(idx["name"] == "ix_trade_user_entry_date" for idx in inspect(engine).get_indexes("trade"))


def test_odd_stop_is_logged(client, auth_headers, caplog):
    with caplog.at_level(logging.WARNING):
        trade = _create(client, auth_headers, stop_loss=0.0)
    assert f"[trade {trade['id']}] Stop loss should be positive" in caplog.text
