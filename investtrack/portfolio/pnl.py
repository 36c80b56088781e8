"""
Profit & Loss analytics over exited stock records.

This module computes realized gains per trade and across all trades,
holding periods, win/loss tallies, and the best and worst trade by
percentage return.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Optional
import structlog

from .position import StockPosition
from .result import QueryResult, capture
from .stocks import StockLedger

logger = structlog.get_logger(__name__)


@dataclass
class TradeResult:
    """Realized outcome of one exited record."""

    name: str
    quantity: float
    invested: float
    realized: float
    profit_loss: float
    profit_loss_percentage: float
    holding_days: int

    @property
    def is_win(self) -> bool:
        return self.profit_loss > 0

    @property
    def is_loss(self) -> bool:
        return self.profit_loss < 0

    def snapshot(self) -> "TradeSnapshot":
        return TradeSnapshot(
            name=self.name,
            profit_loss=self.profit_loss,
            profit_loss_percentage=self.profit_loss_percentage,
            holding_days=self.holding_days,
        )


@dataclass
class TradeSnapshot:
    """The fields of a trade shown as best or worst trade."""

    name: str
    profit_loss: float
    profit_loss_percentage: float
    holding_days: int


@dataclass
class PNLAnalytics:
    """
    Realized P&L statistics across all exited records.

    Attributes:
        total_invested: Cost of all exited shares
        total_realized: Proceeds of all exited shares
        net_profit_loss: total_realized - total_invested
        net_profit_loss_percentage: Net P&L as percentage of total_invested
        average_holding_days: Mean holding period, floored
        best_trade: Trade with the highest percentage return
        worst_trade: Trade with the lowest percentage return
        winning_trades: Trades with positive P&L
        losing_trades: Trades with negative P&L
        total_trades: All exited records, break-even ones included
    """

    total_invested: float = 0.0
    total_realized: float = 0.0
    net_profit_loss: float = 0.0
    net_profit_loss_percentage: float = 0.0
    average_holding_days: int = 0
    best_trade: Optional[TradeSnapshot] = None
    worst_trade: Optional[TradeSnapshot] = None
    winning_trades: int = 0
    losing_trades: int = 0
    total_trades: int = 0

    @classmethod
    def empty(cls) -> "PNLAnalytics":
        return cls()

    @property
    def win_rate(self) -> float:
        """Winning trades as a percentage of all trades."""
        if self.total_trades > 0:
            return (self.winning_trades / self.total_trades) * 100.0
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["win_rate"] = self.win_rate
        return data


def evaluate_trade(position: StockPosition, as_of: Optional[date] = None) -> TradeResult:
    """
    Compute the realized P&L of one exited record.

    A missing exit quantity falls back to the record's quantity, a missing
    exit price counts as 0, and a missing exit date is replaced by ``as_of``
    (default today).

    Example:
        >>> trade = evaluate_trade(exited_position)
        >>> print(f"{trade.profit_loss:+.2f} ({trade.profit_loss_percentage:+.2f}%)")
    """
    quantity = position.exited_quantity
    invested = quantity * position.buy_price
    realized = quantity * (position.exit_price or 0.0)
    profit_loss = realized - invested
    profit_loss_percentage = (profit_loss / invested) * 100.0 if invested > 0 else 0.0

    return TradeResult(
        name=position.name,
        quantity=quantity,
        invested=invested,
        realized=realized,
        profit_loss=profit_loss,
        profit_loss_percentage=profit_loss_percentage,
        holding_days=position.holding_days(as_of),
    )


class PnLCalculator:
    """
    Calculate realized profit and loss from exited stock records.

    Example:
        >>> calculator = PnLCalculator(stock_ledger)
        >>> analytics = calculator.calculate()
        >>> print(f"Net: {analytics.net_profit_loss:.2f} over {analytics.total_trades} trades")
    """

    def __init__(self, stocks: StockLedger):
        self.stocks = stocks

    def evaluate_trades(self, as_of: Optional[date] = None) -> List[TradeResult]:
        """Per-record results for every exited record, in store order."""
        return [evaluate_trade(position, as_of) for position in self.stocks.list_exited()]

    def calculate(self, as_of: Optional[date] = None) -> PNLAnalytics:
        """
        Aggregate realized P&L across exited records.

        Best and worst trade use strict comparisons, so on a tie the trade
        seen first is kept.

        Args:
            as_of: Date substituted for missing exit dates (default today)

        Raises:
            InvestTrackError: If reading the store fails
        """
        trades = self.evaluate_trades(as_of)
        if not trades:
            return PNLAnalytics.empty()

        total_invested = 0.0
        total_realized = 0.0
        total_holding_days = 0
        winning_trades = 0
        losing_trades = 0
        best: Optional[TradeResult] = None
        worst: Optional[TradeResult] = None

        for trade in trades:
            total_invested += trade.invested
            total_realized += trade.realized
            total_holding_days += trade.holding_days

            if trade.is_win:
                winning_trades += 1
            elif trade.is_loss:
                losing_trades += 1

            if best is None or trade.profit_loss_percentage > best.profit_loss_percentage:
                best = trade
            if worst is None or trade.profit_loss_percentage < worst.profit_loss_percentage:
                worst = trade

        net_profit_loss = total_realized - total_invested
        net_profit_loss_percentage = (
            (net_profit_loss / total_invested) * 100.0
            if total_invested > 0
            else 0.0
        )

        analytics = PNLAnalytics(
            total_invested=total_invested,
            total_realized=total_realized,
            net_profit_loss=net_profit_loss,
            net_profit_loss_percentage=net_profit_loss_percentage,
            average_holding_days=total_holding_days // len(trades),
            best_trade=best.snapshot(),
            worst_trade=worst.snapshot(),
            winning_trades=winning_trades,
            losing_trades=losing_trades,
            total_trades=len(trades),
        )

        logger.debug(
            "pnl_calculated",
            total_trades=analytics.total_trades,
            net_profit_loss=analytics.net_profit_loss,
            winning_trades=winning_trades,
            losing_trades=losing_trades
        )
        return analytics

    def query(self, as_of: Optional[date] = None) -> QueryResult[PNLAnalytics]:
        """Calculate without raising; failures come back in the result."""
        return capture("pnl_analytics_failed", lambda: self.calculate(as_of))
