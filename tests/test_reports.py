"""
Tests for PortfolioReport.

Tests cover:
- Holdings, trade log, distribution and asset frames
- Text summary
- CSV and JSON export
"""

import json
import pytest
import pandas as pd
from datetime import date

from investtrack.portfolio.reports import (
    DISTRIBUTION_COLUMNS,
    HOLDINGS_COLUMNS,
    TRADE_LOG_COLUMNS,
)

AS_OF = date(2024, 6, 30)


@pytest.fixture
def report(tracker):
    tracker.add_stock("INFY", 10, 100.0, "2024-06-10")
    stock_id = tracker.add_stock("HDFC", 100, 50.0, "2024-01-10")
    tracker.exit_stock(stock_id, 60.0, "2024-04-10", exit_quantity=40)
    tracker.add_asset("fd", "SBI FD", 2000, current_gain=100)
    return tracker.build_report(as_of=AS_OF)


@pytest.fixture
def empty_report(tracker):
    return tracker.build_report(as_of=AS_OF)


class TestFrames:

    def test_holdings(self, report):
        holdings = report.generate_holdings()

        assert list(holdings.columns) == HOLDINGS_COLUMNS
        assert list(holdings["name"]) == ["INFY", "HDFC"]
        assert list(holdings["cost_value"]) == [1000.0, 3000.0]
        assert list(holdings["holding_days"]) == [20, 172]

    def test_trade_log(self, report):
        trades = report.generate_trade_log()

        assert list(trades.columns) == TRADE_LOG_COLUMNS
        assert len(trades) == 1
        row = trades.iloc[0]
        assert row["name"] == "HDFC"
        assert row["quantity"] == 40
        assert row["profit_loss"] == 400.0
        assert row["profit_loss_percentage"] == pytest.approx(20.0)
        assert row["holding_days"] == 91

    def test_distribution(self, report):
        distribution = report.generate_distribution()

        assert list(distribution.columns) == DISTRIBUTION_COLUMNS
        assert list(distribution["category"]) == ["Stocks", "Fixed Deposit"]
        assert distribution["percentage"].sum() == pytest.approx(100.0)

    def test_assets(self, report):
        assets = report.generate_assets()

        assert list(assets["name"]) == ["SBI FD"]
        assert list(assets["current_value"]) == [2100]

    def test_empty_frames_keep_columns(self, empty_report):
        assert empty_report.generate_holdings().empty
        assert list(empty_report.generate_holdings().columns) == HOLDINGS_COLUMNS
        assert list(empty_report.generate_trade_log().columns) == TRADE_LOG_COLUMNS
        assert list(empty_report.generate_distribution().columns) == DISTRIBUTION_COLUMNS


class TestSummaryText:

    def test_contains_totals_and_best_trade(self, report):
        text = report.generate_summary()

        assert "PORTFOLIO SUMMARY" in text
        assert "6,100.00" in text
        assert "Net P&L" in text
        assert "+400.00" in text
        assert "Best Trade:" in text
        assert "HDFC" in text

    def test_empty_portfolio_has_no_best_trade(self, empty_report):
        text = empty_report.generate_summary()

        assert "Best Trade" not in text
        assert "Worst Trade" not in text


class TestExport:

    def test_csv(self, report, tmp_path):
        output_dir = report.export_results(str(tmp_path / "portfolio"), format="csv")

        assert output_dir == tmp_path / "portfolio"
        for name in ["summary", "holdings", "trades", "distribution", "assets"]:
            assert (output_dir / f"{name}.csv").exists()

        holdings = pd.read_csv(output_dir / "holdings.csv")
        assert list(holdings["name"]) == ["INFY", "HDFC"]

        summary = pd.read_csv(output_dir / "summary.csv")
        assert summary.loc[0, "total_portfolio_capital"] == 6100.0

    def test_json(self, report, tmp_path):
        output_file = report.export_results(str(tmp_path / "portfolio"), format="JSON")

        assert output_file == tmp_path / "portfolio.json"
        with open(output_file) as f:
            data = json.load(f)

        assert data["as_of"] == "2024-06-30"
        assert data["summary"]["stocks_exited_value"] == 2400.0
        assert data["analytics"]["total_trades"] == 1
        assert data["analytics"]["best_trade"]["name"] == "HDFC"
        assert [h["name"] for h in data["holdings"]] == ["INFY", "HDFC"]
        assert data["assets"][0]["type"] == "fd"

    def test_unsupported_format(self, report, tmp_path):
        with pytest.raises(ValueError):
            report.export_results(str(tmp_path / "portfolio"), format="xlsx")
