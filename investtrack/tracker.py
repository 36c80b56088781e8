"""
InvestmentTracker: the operations offered to UI collaborators.

The tracker wires one RecordStore to the stock and asset ledgers, the
valuation and the P&L calculator, and exposes them as a flat set of
commands and queries.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional
import structlog

from .portfolio.asset import Asset
from .portfolio.assets import AssetLedger
from .portfolio.pnl import PNLAnalytics, PnLCalculator, TradeResult, evaluate_trade
from .portfolio.position import DateLike, StockPosition
from .portfolio.reports import PortfolioReport
from .portfolio.result import QueryResult
from .portfolio.store import InMemoryRecordStore, RecordStore, open_store
from .portfolio.stocks import StockLedger
from .portfolio.valuation import (
    AssetTotals,
    DistributionSlice,
    PortfolioSummary,
    PortfolioValuation,
)

logger = structlog.get_logger(__name__)


@dataclass
class ExitReceipt:
    """
    Outcome of exit_stock.

    Attributes:
        stock_id: Id of the exited record (a new id on a partial exit)
        partial: True when only part of the holding was exited
        trade: Realized P&L of the exited shares
    """

    stock_id: str
    partial: bool
    trade: TradeResult


class InvestmentTracker:
    """
    Facade over stocks, assets, valuation and P&L.

    Aggregate queries come in two flavours: ``query_*`` returns a
    QueryResult carrying any failure, while ``get_*`` falls back to the
    all-zero structure so a broken store renders as an empty portfolio.

    Example:
        >>> tracker = InvestmentTracker()
        >>> stock_id = tracker.add_stock("INFY", 100, 50.0, "2024-01-15")
        >>> receipt = tracker.exit_stock(stock_id, 60.0, "2024-06-01", exit_quantity=40)
        >>> receipt.trade.profit_loss
        400.0
        >>> tracker.get_portfolio_summary().stocks_holding_value
        3000.0
    """

    def __init__(self, store: Optional[RecordStore] = None):
        self.store = store if store is not None else InMemoryRecordStore()
        self.stocks = StockLedger(self.store)
        self.assets = AssetLedger(self.store)
        self.valuation = PortfolioValuation(self.stocks, self.assets)
        self.pnl = PnLCalculator(self.stocks)

    @classmethod
    def from_config(cls, config) -> "InvestmentTracker":
        """Build a tracker on the store named by a Config."""
        store = open_store(config.store_backend, config.db_path)
        logger.info(
            "tracker_initialized",
            backend=config.store_backend,
            db_path=config.db_path,
            environment=config.environment
        )
        return cls(store)

    # Stocks

    def add_stock(self, name: str, quantity: float, buy_price: float, buy_date: DateLike) -> str:
        return self.stocks.add(name, quantity, buy_price, buy_date)

    def update_stock(self, stock_id: str, **fields: Any) -> None:
        self.stocks.update(stock_id, **fields)

    def delete_stock(self, stock_id: str) -> None:
        self.stocks.delete(stock_id)

    def exit_stock(
        self,
        stock_id: str,
        exit_price: float,
        exit_date: DateLike,
        exit_quantity: Optional[float] = None
    ) -> ExitReceipt:
        """
        Exit all or part of a holding and report the realized P&L.

        See StockLedger.exit for the full/partial rules and errors.
        """
        exited_id = self.stocks.exit(stock_id, exit_price, exit_date, exit_quantity)
        exited = self.stocks.get(exited_id)
        return ExitReceipt(
            stock_id=exited_id,
            partial=exited_id != stock_id,
            trade=evaluate_trade(exited),
        )

    def get_stock(self, stock_id: str) -> StockPosition:
        return self.stocks.get(stock_id)

    def get_active_stocks(self) -> List[StockPosition]:
        return self.stocks.list_active()

    def get_exited_stocks(self) -> List[StockPosition]:
        return self.stocks.list_exited()

    def get_all_stocks(self) -> List[StockPosition]:
        return self.stocks.list_all()

    # Assets

    def add_asset(
        self,
        asset_type: Any,
        name: str,
        invested_amount: float,
        current_gain: Optional[float] = None,
        **extra: Any
    ) -> str:
        return self.assets.add(asset_type, name, invested_amount, current_gain, **extra)

    def update_asset(self, asset_id: str, **fields: Any) -> None:
        self.assets.update(asset_id, **fields)

    def delete_asset(self, asset_id: str) -> None:
        self.assets.delete(asset_id)

    def get_asset(self, asset_id: str) -> Asset:
        return self.assets.get(asset_id)

    def get_all_assets(self) -> List[Asset]:
        return self.assets.list_all()

    def get_asset_totals(self) -> AssetTotals:
        return self.valuation.asset_totals()

    # Aggregates

    def query_portfolio_summary(self) -> QueryResult[PortfolioSummary]:
        return self.valuation.query_summary()

    def get_portfolio_summary(self) -> PortfolioSummary:
        """Portfolio summary, or the all-zero summary if the query failed."""
        return self.query_portfolio_summary().unwrap_or(PortfolioSummary.empty())

    def query_pnl_analytics(self, as_of: Optional[date] = None) -> QueryResult[PNLAnalytics]:
        return self.pnl.query(as_of)

    def get_pnl_analytics(self, as_of: Optional[date] = None) -> PNLAnalytics:
        """P&L analytics, or the empty analytics if the query failed."""
        return self.query_pnl_analytics(as_of).unwrap_or(PNLAnalytics.empty())

    def get_asset_distribution(self) -> List[DistributionSlice]:
        """Category shares of capital; empty if the summary query failed."""
        result = self.query_portfolio_summary()
        if not result.ok:
            return []
        return self.valuation.distribution(result.value)

    def build_report(self, as_of: Optional[date] = None) -> PortfolioReport:
        """
        Snapshot the portfolio into a PortfolioReport.

        Unlike the get_* queries, store failures propagate here.
        """
        as_of = as_of or date.today()
        summary = self.valuation.summarize()
        assets = self.assets.list_all()
        return PortfolioReport(
            active=self.stocks.list_active(),
            exited=self.stocks.list_exited(),
            assets=assets,
            summary=summary,
            analytics=self.pnl.calculate(as_of),
            distribution=self.valuation.distribution(summary, assets),
            as_of=as_of,
        )
