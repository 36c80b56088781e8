"""
Portfolio report generation.

This module turns current records into pandas DataFrames (holdings, trade
log, distribution), a plain-text summary, and CSV or JSON exports.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Union

import pandas as pd

from .asset import Asset
from .pnl import PNLAnalytics, evaluate_trade
from .position import StockPosition
from .valuation import DistributionSlice, PortfolioSummary

logger = logging.getLogger(__name__)

HOLDINGS_COLUMNS = ["id", "name", "quantity", "buy_price", "buy_date", "cost_value", "holding_days"]
TRADE_LOG_COLUMNS = [
    "id", "name", "quantity", "buy_price", "exit_price", "buy_date", "exit_date",
    "invested", "realized", "profit_loss", "profit_loss_percentage", "holding_days",
]
DISTRIBUTION_COLUMNS = ["category", "value", "percentage"]


@dataclass
class PortfolioReport:
    """
    Reports over a snapshot of the portfolio.

    Example:
        >>> report = tracker.build_report()
        >>> print(report.generate_summary())
        >>> report.export_results("reports/portfolio", format="csv")
    """

    active: List[StockPosition]
    exited: List[StockPosition]
    assets: List[Asset]
    summary: PortfolioSummary
    analytics: PNLAnalytics
    distribution: List[DistributionSlice] = field(default_factory=list)
    as_of: date = field(default_factory=date.today)

    def generate_summary(self) -> str:
        """Generate a text summary of capital and realized P&L."""
        summary = self.summary
        analytics = self.analytics

        lines = [
            "PORTFOLIO SUMMARY",
            "-" * 60,
            f"Total Capital:      {summary.total_portfolio_capital:>14,.2f}",
            f"Stocks Holding:     {summary.stocks_holding_value:>14,.2f}",
            f"Assets:             {summary.assets_value:>14,.2f}",
            f"Stocks Exited:      {summary.stocks_exited_value:>14,.2f}",
            f"Holdings / Exits:   {summary.active_stocks_count:>7} / {summary.exited_stocks_count}",
            "",
            "REALIZED P&L",
            "-" * 60,
            f"Total Invested:     {analytics.total_invested:>14,.2f}",
            f"Total Realized:     {analytics.total_realized:>14,.2f}",
            f"Net P&L:            {analytics.net_profit_loss:>+14,.2f} "
            f"({analytics.net_profit_loss_percentage:+.2f}%)",
            f"Trades:             {analytics.total_trades:>14}",
            f"Win Rate:           {analytics.win_rate:>13.1f}%",
            f"Avg Holding Days:   {analytics.average_holding_days:>14}",
        ]

        if analytics.best_trade is not None:
            best = analytics.best_trade
            lines.append(
                f"Best Trade:         {best.name} {best.profit_loss:+,.2f} "
                f"({best.profit_loss_percentage:+.2f}%, {best.holding_days} days)"
            )
        if analytics.worst_trade is not None:
            worst = analytics.worst_trade
            lines.append(
                f"Worst Trade:        {worst.name} {worst.profit_loss:+,.2f} "
                f"({worst.profit_loss_percentage:+.2f}%, {worst.holding_days} days)"
            )

        return "\n".join(lines)

    def generate_holdings(self) -> pd.DataFrame:
        """Active positions with cost value and days held so far."""
        rows = [
            {
                "id": position.id,
                "name": position.name,
                "quantity": position.quantity,
                "buy_price": position.buy_price,
                "buy_date": position.buy_date.isoformat(),
                "cost_value": position.cost_value,
                "holding_days": position.holding_days(self.as_of),
            }
            for position in self.active
        ]
        return pd.DataFrame(rows, columns=HOLDINGS_COLUMNS)

    def generate_trade_log(self) -> pd.DataFrame:
        """Exited records with realized P&L per trade."""
        rows = []
        for position in self.exited:
            trade = evaluate_trade(position, self.as_of)
            rows.append({
                "id": position.id,
                "name": position.name,
                "quantity": trade.quantity,
                "buy_price": position.buy_price,
                "exit_price": position.exit_price,
                "buy_date": position.buy_date.isoformat(),
                "exit_date": position.exit_date.isoformat() if position.exit_date else None,
                "invested": trade.invested,
                "realized": trade.realized,
                "profit_loss": trade.profit_loss,
                "profit_loss_percentage": trade.profit_loss_percentage,
                "holding_days": trade.holding_days,
            })
        return pd.DataFrame(rows, columns=TRADE_LOG_COLUMNS)

    def generate_distribution(self) -> pd.DataFrame:
        """Category shares of total capital."""
        return pd.DataFrame(
            [slice_.to_dict() for slice_ in self.distribution],
            columns=DISTRIBUTION_COLUMNS,
        )

    def generate_assets(self) -> pd.DataFrame:
        rows = [asset.to_dict() for asset in self.assets]
        return pd.DataFrame(rows)

    def export_results(self, output_path: Union[str, Path], format: str = "csv") -> Path:
        """
        Export the report.

        Args:
            output_path: Base path; CSV writes a directory of that name,
                JSON writes ``<output_path>.json``
            format: "csv" or "json"

        Returns:
            Path of the written directory or file
        """
        path = Path(output_path)
        format = format.lower()

        if format == "csv":
            return self._export_csv(path)
        if format == "json":
            return self._export_json(path)
        raise ValueError(f"Unsupported export format: {format}")

    def _export_csv(self, output_path: Path) -> Path:
        output_dir = output_path.parent / output_path.stem
        output_dir.mkdir(parents=True, exist_ok=True)

        pd.DataFrame([self.summary.to_dict()]).to_csv(output_dir / "summary.csv", index=False)
        self.generate_holdings().to_csv(output_dir / "holdings.csv", index=False)
        self.generate_trade_log().to_csv(output_dir / "trades.csv", index=False)
        self.generate_distribution().to_csv(output_dir / "distribution.csv", index=False)
        self.generate_assets().to_csv(output_dir / "assets.csv", index=False)

        logger.info(f"Exported portfolio report to {output_dir}")
        return output_dir

    def _export_json(self, output_path: Path) -> Path:
        output_file = output_path.with_suffix(".json")
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "as_of": self.as_of.isoformat(),
            "summary": self.summary.to_dict(),
            "analytics": self.analytics.to_dict(),
            "distribution": [slice_.to_dict() for slice_ in self.distribution],
            "holdings": self.generate_holdings().to_dict(orient="records"),
            "trades": self.generate_trade_log().to_dict(orient="records"),
            "assets": [asset.to_dict() for asset in self.assets],
        }

        with open(output_file, "w") as f:
            json.dump(data, f, indent=2, default=str)

        logger.info(f"Exported portfolio report to {output_file}")
        return output_file
