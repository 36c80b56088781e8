"""
investtrack: track stock trades and other investments, value the portfolio,
and analyse realized profit and loss.
"""

from .exceptions import (
    ConfigurationError,
    InvestTrackError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .tracker import ExitReceipt, InvestmentTracker

__all__ = [
    "InvestmentTracker",
    "ExitReceipt",
    "InvestTrackError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "ConfigurationError",
]

__version__ = "1.0.0"
