"""
Tests for the InvestmentTracker facade.

Tests cover:
- End-to-end stock lifecycle through the facade
- Exit receipts for full and partial exits
- Zero defaults for aggregate queries on a failing store
- Construction from Config
"""

import pytest
from datetime import date

from investtrack.exceptions import NotFoundError, StoreError, ValidationError
from investtrack.portfolio.pnl import PNLAnalytics
from investtrack.portfolio.store import InMemoryRecordStore, SqliteRecordStore
from investtrack.portfolio.valuation import PortfolioSummary
from investtrack.tracker import InvestmentTracker


class TestStockLifecycle:

    def test_add_then_list_active(self, tracker):
        stock_id = tracker.add_stock("RELIANCE", 10, 2500.0, "2024-01-15")

        active = tracker.get_active_stocks()

        assert len(active) == 1
        assert active[0].id == stock_id
        assert tracker.get_portfolio_summary().stocks_holding_value == 25000.0

    def test_full_exit_receipt(self, tracker):
        stock_id = tracker.add_stock("TCS", 10, 100.0, "2024-01-01")

        receipt = tracker.exit_stock(stock_id, 150.0, "2024-01-31")

        assert receipt.stock_id == stock_id
        assert not receipt.partial
        assert receipt.trade.profit_loss == 500.0
        assert receipt.trade.profit_loss_percentage == 50.0
        assert receipt.trade.holding_days == 30
        assert tracker.get_active_stocks() == []
        assert [p.id for p in tracker.get_exited_stocks()] == [stock_id]

    def test_partial_exit_receipt(self, tracker):
        stock_id = tracker.add_stock("HDFC", 100, 50.0, "2024-01-10")

        receipt = tracker.exit_stock(stock_id, 60.0, "2024-04-10", exit_quantity=40)

        assert receipt.partial
        assert receipt.stock_id != stock_id
        assert receipt.trade.quantity == 40
        assert receipt.trade.profit_loss == 400.0

        summary = tracker.get_portfolio_summary()
        assert summary.stocks_holding_value == 3000.0
        assert summary.stocks_exited_value == 2400.0
        assert tracker.get_stock(stock_id).quantity == 60

    def test_errors_propagate_from_commands(self, tracker):
        stock_id = tracker.add_stock("HDFC", 100, 50.0, "2024-01-10")

        with pytest.raises(ValidationError):
            tracker.exit_stock(stock_id, 60.0, "2024-04-10", exit_quantity=101)
        with pytest.raises(NotFoundError):
            tracker.update_stock("missing", quantity=1)
        with pytest.raises(NotFoundError):
            tracker.delete_stock("missing")

    def test_update_and_delete(self, tracker):
        stock_id = tracker.add_stock("INFY", 10, 1500.0, "2024-01-15")

        tracker.update_stock(stock_id, quantity=12)
        assert tracker.get_stock(stock_id).quantity == 12

        tracker.delete_stock(stock_id)
        assert tracker.get_all_stocks() == []


class TestAssets:

    def test_asset_lifecycle(self, tracker):
        asset_id = tracker.add_asset("bonds", "GOI 2033", 100000, bond_type="government")

        tracker.update_asset(asset_id, current_gain=4200)

        assert tracker.get_asset(asset_id).current_value == 104200
        assert tracker.get_asset_totals().total_gains == 4200

        tracker.delete_asset(asset_id)
        assert tracker.get_all_assets() == []

    def test_distribution(self, tracker):
        tracker.add_stock("INFY", 10, 100.0, "2024-01-15")
        tracker.add_asset("fd", "SBI FD", 3000)

        slices = tracker.get_asset_distribution()

        assert [(s.category, s.percentage) for s in slices] == [
            ("Stocks", 25.0),
            ("Fixed Deposit", 75.0),
        ]


class TestAggregates:

    def test_empty_portfolio(self, tracker):
        assert tracker.get_portfolio_summary() == PortfolioSummary.empty()
        assert tracker.get_pnl_analytics() == PNLAnalytics.empty()
        assert tracker.get_asset_distribution() == []

    def test_summary_is_idempotent(self, tracker):
        stock_id = tracker.add_stock("HDFC", 100, 50.0, "2024-01-10")
        tracker.exit_stock(stock_id, 60.0, "2024-04-10", exit_quantity=40)
        tracker.add_asset("mutual_funds", "Index Fund", 10000, current_gain=1200)

        first = tracker.get_portfolio_summary()
        second = tracker.get_portfolio_summary()

        assert first == second

    def test_pnl_as_of(self, tracker, store):
        store.insert("stocks", {
            "name": "OLD", "quantity": 1, "buyPrice": 10.0,
            "buyDate": "2024-01-01", "isActive": False, "exitPrice": 11.0,
        })

        analytics = tracker.get_pnl_analytics(as_of=date(2024, 1, 11))

        assert analytics.average_holding_days == 10


class TestFailingStore:

    def test_summary_falls_back_to_zeros(self, broken_scan_store):
        tracker = InvestmentTracker(broken_scan_store())

        assert tracker.get_portfolio_summary() == PortfolioSummary.empty()
        assert tracker.get_pnl_analytics() == PNLAnalytics.empty()
        assert tracker.get_asset_distribution() == []

    def test_query_exposes_error(self, broken_scan_store):
        tracker = InvestmentTracker(broken_scan_store())

        result = tracker.query_portfolio_summary()

        assert not result.ok
        assert isinstance(result.error, StoreError)
        assert "database is locked" in str(result.error)

    def test_unexpected_errors_are_wrapped(self, broken_scan_store):
        cause = RuntimeError("connection reset")
        tracker = InvestmentTracker(broken_scan_store(cause))

        result = tracker.query_pnl_analytics()

        assert isinstance(result.error, StoreError)
        assert result.error.cause is cause

    def test_report_propagates_errors(self, broken_scan_store):
        tracker = InvestmentTracker(broken_scan_store())

        with pytest.raises(StoreError):
            tracker.build_report()


class TestFromConfig:

    def test_memory_backend(self):
        from investtrack.config import Config

        tracker = InvestmentTracker.from_config(Config(store_backend="memory", log_level="INFO"))

        assert isinstance(tracker.store, InMemoryRecordStore)

    def test_sqlite_backend(self, tmp_path):
        from investtrack.config import Config

        db_path = str(tmp_path / "tracker.db")
        tracker = InvestmentTracker.from_config(
            Config(db_path=db_path, store_backend="sqlite", log_level="INFO")
        )
        stock_id = tracker.add_stock("INFY", 1, 1500.0, "2024-01-15")
        tracker.store.close()

        with SqliteRecordStore(db_path) as reopened:
            assert InvestmentTracker(reopened).get_stock(stock_id).name == "INFY"

    def test_default_store_is_in_memory(self):
        assert isinstance(InvestmentTracker().store, InMemoryRecordStore)
