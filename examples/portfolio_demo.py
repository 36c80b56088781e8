#!/usr/bin/env python3
"""
Portfolio Tracker Demo

This example walks through the investtrack engine:
- Adding stock holdings
- Full and partial exits
- Recording non-stock assets
- Portfolio summary and capital distribution
- Realized P&L analytics
- Persistent storage with SQLite
- CSV/JSON report export

Run this script to see the tracker in action.
"""

from datetime import date, timedelta
from pathlib import Path
import sys

# Add the project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from investtrack import InvestmentTracker
from investtrack.config import config


def demo_holdings(tracker: InvestmentTracker):
    """Add holdings and exit some of them."""
    print("=" * 80)
    print("DEMO 1: Holdings and Exits")
    print("=" * 80)

    today = date.today()
    holdings = [
        ("RELIANCE", 20, 2450.0, today - timedelta(days=200)),
        ("INFY", 100, 1400.0, today - timedelta(days=150)),
        ("TATAMOTORS", 50, 900.0, today - timedelta(days=120)),
    ]

    ids = {}
    for name, quantity, buy_price, buy_date in holdings:
        ids[name] = tracker.add_stock(name, quantity, buy_price, buy_date)
        print(f"  Added: {name} - {quantity} shares @ {buy_price:.2f}")

    print("\n✓ Exiting positions...")
    receipt = tracker.exit_stock(ids["INFY"], 1610.0, today - timedelta(days=20), exit_quantity=40)
    print(f"  Partial exit INFY x{receipt.trade.quantity:g}: "
          f"P&L {receipt.trade.profit_loss:+.2f} ({receipt.trade.profit_loss_percentage:+.2f}%)")

    receipt = tracker.exit_stock(ids["TATAMOTORS"], 810.0, today - timedelta(days=5))
    print(f"  Full exit TATAMOTORS: "
          f"P&L {receipt.trade.profit_loss:+.2f} ({receipt.trade.profit_loss_percentage:+.2f}%)")

    print("\n📊 Active Holdings:")
    for position in tracker.get_active_stocks():
        print(f"  {position.name:12s} | {position.quantity:8g} shares | "
              f"Cost: {position.cost_value:12.2f} | Held {position.holding_days()} days")


def demo_assets(tracker: InvestmentTracker):
    """Record one asset of several types."""
    print("\n" + "=" * 80)
    print("DEMO 2: Other Investments")
    print("=" * 80)

    tracker.add_asset("fd", "SBI Fixed Deposit", 200000, current_gain=9500)
    tracker.add_asset("mutual_funds", "Nifty 50 Index Fund", 150000, current_gain=21000)
    tracker.add_asset("commodities", "Sovereign Gold Bond", 60000, current_gain=7200,
                      commodity_type="gold")
    tracker.add_asset("rd", "Post Office RD", 24000, monthly_amount=2000, number_of_months=12)
    tracker.add_asset("bonds", "GOI 2033", 100000, bond_type="government",
                      return_rate=7.18, maturity_date="2033-06-30")
    tracker.add_asset("cryptocurrency", "Bitcoin", 50000, current_gain=-6000)

    totals = tracker.get_asset_totals()
    print(f"\n💰 Assets: invested {totals.total_invested:,.2f}, "
          f"gains {totals.total_gains:+,.2f}, value {totals.total_value:,.2f}")
    for share in totals.shares:
        asset = share.asset
        subtitle = f" ({asset.subtitle})" if asset.subtitle else ""
        print(f"  {asset.label:18s} | {asset.name}{subtitle:22s} | "
              f"{share.value:12,.2f} | {share.percentage:5.1f}%")


def demo_summary(tracker: InvestmentTracker):
    """Show the portfolio summary, distribution and analytics."""
    print("\n" + "=" * 80)
    print("DEMO 3: Summary and Analytics")
    print("=" * 80)

    summary = tracker.get_portfolio_summary()
    print(f"\n  Total Capital:   {summary.total_portfolio_capital:14,.2f}")
    print(f"  Stocks Holding:  {summary.stocks_holding_value:14,.2f}")
    print(f"  Stocks Exited:   {summary.stocks_exited_value:14,.2f}")
    print(f"  Assets:          {summary.assets_value:14,.2f}")

    print("\n✓ Distribution:")
    for slice_ in tracker.get_asset_distribution():
        print(f"  {slice_.category:18s} {slice_.percentage:6.2f}%")

    analytics = tracker.get_pnl_analytics()
    print("\n✓ Realized P&L:")
    print(f"  Trades: {analytics.total_trades} "
          f"(won {analytics.winning_trades}, lost {analytics.losing_trades})")
    print(f"  Net P&L: {analytics.net_profit_loss:+,.2f} "
          f"({analytics.net_profit_loss_percentage:+.2f}%)")
    print(f"  Average holding: {analytics.average_holding_days} days")
    if analytics.best_trade:
        print(f"  🏆 Best Trade: {analytics.best_trade.name} "
              f"({analytics.best_trade.profit_loss_percentage:+.2f}%)")
    if analytics.worst_trade:
        print(f"  📉 Worst Trade: {analytics.worst_trade.name} "
              f"({analytics.worst_trade.profit_loss_percentage:+.2f}%)")


def main():
    """Run all demos."""
    print("\n" + "=" * 80)
    print("Portfolio Tracker Demo")
    print("=" * 80)

    tracker = InvestmentTracker.from_config(config)
    try:
        demo_holdings(tracker)
        demo_assets(tracker)
        demo_summary(tracker)

        report = tracker.build_report()
        output_path = config.reports_dir / "demo_portfolio"
        csv_dir = report.export_results(output_path, format="csv")
        json_file = report.export_results(output_path, format="json")
    finally:
        if hasattr(tracker.store, "close"):
            tracker.store.close()

    print("\n" + "=" * 80)
    print("Demo Complete!")
    print("=" * 80)
    print(f"\nStore: {config.store_backend} ({config.db_path})")
    print(f"CSV reports: {csv_dir}")
    print(f"JSON report: {json_file}")


if __name__ == "__main__":
    main()
