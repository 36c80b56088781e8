"""
Portfolio valuation.

Folds current stock and asset records into capital totals, counts, and the
category distribution shown on the dashboard. Nothing is cached: every call
re-reads the store.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
import structlog

from .asset import Asset
from .assets import AssetLedger
from .result import QueryResult, capture
from .stocks import StockLedger

logger = structlog.get_logger(__name__)

STOCKS_CATEGORY = "Stocks"


def share_of(value: float, total: float) -> float:
    """Percentage of ``total`` that ``value`` represents; 0 when total <= 0."""
    if total > 0:
        return (value / total) * 100.0
    return 0.0


@dataclass
class PortfolioSummary:
    """
    Aggregate portfolio value.

    Exited stock value is reported but excluded from total capital: realized
    exits are money already taken out of the portfolio.
    """

    total_portfolio_capital: float = 0.0
    stocks_holding_value: float = 0.0
    stocks_exited_value: float = 0.0
    assets_value: float = 0.0
    active_stocks_count: int = 0
    exited_stocks_count: int = 0
    assets_count: int = 0

    @classmethod
    def empty(cls) -> "PortfolioSummary":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DistributionSlice:
    """One category's share of total portfolio capital."""

    category: str
    value: float
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AssetShare:
    asset: Asset
    value: float
    percentage: float


@dataclass
class AssetTotals:
    """Totals across all assets plus each asset's share of their value."""

    total_value: float = 0.0
    total_invested: float = 0.0
    total_gains: float = 0.0
    shares: List[AssetShare] = field(default_factory=list)


class PortfolioValuation:
    """
    Compute portfolio value from the stock and asset ledgers.

    Example:
        >>> valuation = PortfolioValuation(stock_ledger, asset_ledger)
        >>> summary = valuation.summarize()
        >>> for slice_ in valuation.distribution(summary):
        ...     print(slice_.category, f"{slice_.percentage:.1f}%")
    """

    def __init__(self, stocks: StockLedger, assets: AssetLedger):
        self.stocks = stocks
        self.assets = assets

    def summarize(self) -> PortfolioSummary:
        """
        Fold all records into a PortfolioSummary.

        Raises:
            InvestTrackError: If reading the store fails
        """
        active = self.stocks.list_active()
        exited = self.stocks.list_exited()
        assets = self.assets.list_all()

        stocks_holding_value = sum(position.cost_value for position in active)
        stocks_exited_value = sum(position.exit_value for position in exited)
        assets_value = sum(asset.current_value for asset in assets)

        summary = PortfolioSummary(
            total_portfolio_capital=stocks_holding_value + assets_value,
            stocks_holding_value=stocks_holding_value,
            stocks_exited_value=stocks_exited_value,
            assets_value=assets_value,
            active_stocks_count=len(active),
            exited_stocks_count=len(exited),
            assets_count=len(assets),
        )

        logger.debug(
            "portfolio_summarized",
            total_portfolio_capital=summary.total_portfolio_capital,
            active=summary.active_stocks_count,
            exited=summary.exited_stocks_count,
            assets=summary.assets_count
        )
        return summary

    def query_summary(self) -> QueryResult[PortfolioSummary]:
        """Summarize without raising; failures come back in the result."""
        return capture("portfolio_summary_failed", self.summarize)

    def distribution(
        self,
        summary: Optional[PortfolioSummary] = None,
        assets: Optional[List[Asset]] = None
    ) -> List[DistributionSlice]:
        """
        Split total capital into a Stocks slice and one slice per asset label.

        The Stocks slice appears only when active holdings have value. Asset
        slices follow in the order their label is first seen; both commodity
        spellings share one slice.
        """
        if summary is None:
            summary = self.summarize()
        if assets is None:
            assets = self.assets.list_all()

        total = summary.total_portfolio_capital
        slices: List[DistributionSlice] = []

        if summary.stocks_holding_value > 0:
            slices.append(DistributionSlice(
                category=STOCKS_CATEGORY,
                value=summary.stocks_holding_value,
                percentage=share_of(summary.stocks_holding_value, total),
            ))

        groups: Dict[str, float] = {}
        for asset in assets:
            groups[asset.label] = groups.get(asset.label, 0.0) + asset.current_value

        for label, value in groups.items():
            slices.append(DistributionSlice(
                category=label,
                value=value,
                percentage=share_of(value, total),
            ))

        return slices

    def asset_totals(self, assets: Optional[List[Asset]] = None) -> AssetTotals:
        """Invested, gains and value across assets, with per-asset shares."""
        if assets is None:
            assets = self.assets.list_all()

        total_value = sum(asset.current_value for asset in assets)
        return AssetTotals(
            total_value=total_value,
            total_invested=sum(asset.invested_amount for asset in assets),
            total_gains=sum(asset.current_gain or 0.0 for asset in assets),
            shares=[
                AssetShare(
                    asset=asset,
                    value=asset.current_value,
                    percentage=share_of(asset.current_value, total_value),
                )
                for asset in assets
            ],
        )
