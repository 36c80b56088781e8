"""
Explicit success/failure wrapper for aggregate queries.

Summary and analytics queries never raise to their caller. Instead they
return a QueryResult that carries either the computed value or the error,
so the caller decides whether to fall back to an all-zero default.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar
import structlog

from ..exceptions import InvestTrackError, StoreError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """
    Outcome of a query: a value on success, an error on failure.

    Example:
        >>> result = tracker.query_portfolio_summary()
        >>> summary = result.unwrap_or(PortfolioSummary.empty())
    """

    value: Optional[T] = None
    error: Optional[InvestTrackError] = None

    @classmethod
    def success(cls, value: T) -> "QueryResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: InvestTrackError) -> "QueryResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return the value, or ``default`` when the query failed."""
        if self.error is not None:
            return default
        return self.value


def capture(event: str, compute: Callable[[], T]) -> QueryResult[T]:
    """
    Run ``compute`` and wrap its outcome.

    Errors are logged under ``event``. Anything that is not already an
    InvestTrackError is wrapped in StoreError.
    """
    try:
        return QueryResult.success(compute())
    except InvestTrackError as e:
        logger.error(event, error=str(e), exc_info=True)
        return QueryResult.failure(e)
    except Exception as e:
        logger.error(event, error=str(e), exc_info=True)
        return QueryResult.failure(StoreError("Query failed", cause=e))
