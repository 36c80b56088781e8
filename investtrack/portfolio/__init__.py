"""
Portfolio engine for investtrack.

This package provides:
- Stock position lifecycle with full and partial exits
- A ledger of non-stock assets (funds, deposits, bonds, commodities, crypto)
- Portfolio valuation and capital distribution
- Realized P&L analytics with best/worst trade selection
- In-memory and SQLite record stores
- pandas reports with CSV/JSON export

Example usage:
    >>> from investtrack.portfolio import (
    ...     InMemoryRecordStore, StockLedger, AssetLedger,
    ...     PortfolioValuation, PnLCalculator
    ... )
    >>>
    >>> store = InMemoryRecordStore()
    >>> stocks = StockLedger(store)
    >>> assets = AssetLedger(store)
    >>>
    >>> stock_id = stocks.add("INFY", 100, 50.0, "2024-01-15")
    >>> stocks.exit(stock_id, 60.0, "2024-06-01", exit_quantity=40)
    >>> assets.add("fd", "SBI FD", 100000, current_gain=3500)
    >>>
    >>> summary = PortfolioValuation(stocks, assets).summarize()
    >>> analytics = PnLCalculator(stocks).calculate()
"""

from .position import StockPosition, parse_date
from .asset import (
    Asset,
    AssetType,
    BondAsset,
    BondType,
    CommodityAsset,
    CommodityType,
    CryptocurrencyAsset,
    FixedDepositAsset,
    MutualFundAsset,
    RecurringDepositAsset,
    SchemeAsset,
    StockInvestmentAsset,
    create_asset,
)
from .store import (
    ASSETS,
    STOCKS,
    InMemoryRecordStore,
    RecordStore,
    SqliteRecordStore,
    field_equals,
    open_store,
)
from .stocks import StockLedger
from .assets import AssetLedger
from .result import QueryResult
from .valuation import (
    AssetShare,
    AssetTotals,
    DistributionSlice,
    PortfolioSummary,
    PortfolioValuation,
)
from .pnl import PNLAnalytics, PnLCalculator, TradeResult, TradeSnapshot, evaluate_trade
from .reports import PortfolioReport

__all__ = [
    # Records
    "StockPosition",
    "parse_date",
    "Asset",
    "AssetType",
    "BondAsset",
    "BondType",
    "CommodityAsset",
    "CommodityType",
    "CryptocurrencyAsset",
    "FixedDepositAsset",
    "MutualFundAsset",
    "RecurringDepositAsset",
    "SchemeAsset",
    "StockInvestmentAsset",
    "create_asset",

    # Storage
    "STOCKS",
    "ASSETS",
    "RecordStore",
    "InMemoryRecordStore",
    "SqliteRecordStore",
    "field_equals",
    "open_store",

    # Ledgers
    "StockLedger",
    "AssetLedger",

    # Valuation
    "PortfolioValuation",
    "PortfolioSummary",
    "DistributionSlice",
    "AssetShare",
    "AssetTotals",

    # P&L
    "PnLCalculator",
    "PNLAnalytics",
    "TradeResult",
    "TradeSnapshot",
    "evaluate_trade",

    # Results and reports
    "QueryResult",
    "PortfolioReport",
]
