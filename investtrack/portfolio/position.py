"""
Stock position records for portfolio tracking.

This module provides the StockPosition dataclass. A position record is either
holding (active) or exited; after a partial exit one purchase is represented
by two independent records, an active remainder and an exited sibling.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Dict, Any, Union

from ..exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike, field: str = "date") -> date:
    """
    Coerce a calendar date from a date, datetime or ISO string.

    Strings may be plain ``YYYY-MM-DD`` or a full ISO timestamp, in which
    case only the date part is kept.

    Raises:
        ValidationError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise ValidationError(
        f"{field} must be a calendar date",
        field=field,
        value=value,
        expected="YYYY-MM-DD"
    )


def _optional_date(value: Optional[DateLike], field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date(value, field)


@dataclass
class StockPosition:
    """
    A single stock holding record.

    Attributes:
        name: Free-text instrument name (e.g., "RELIANCE", "Apple Inc.")
        quantity: Number of shares attributed to this record
        buy_price: Price per share at acquisition
        buy_date: Acquisition date
        is_active: True while holding, False once exited
        exit_price: Price per share at exit (exited records only)
        exit_date: Exit date (exited records only)
        exit_quantity: Shares this exited record represents
        id: Store-assigned identifier

    Example:
        >>> position = StockPosition("INFY", 10, 100.0, date(2024, 1, 1))
        >>> position.cost_value
        1000.0
    """

    name: str
    quantity: float
    buy_price: float
    buy_date: date
    is_active: bool = True
    exit_price: Optional[float] = None
    exit_date: Optional[date] = None
    exit_quantity: Optional[float] = None
    id: Optional[str] = None

    def __post_init__(self):
        self.buy_date = parse_date(self.buy_date, "buy_date")
        self.exit_date = _optional_date(self.exit_date, "exit_date")

    @property
    def exited_quantity(self) -> float:
        """Shares counted for exit math: exit_quantity, else quantity."""
        if self.exit_quantity is not None:
            return self.exit_quantity
        return self.quantity

    @property
    def cost_value(self) -> float:
        """Capital tied up in this record at buy price."""
        return self.quantity * self.buy_price

    @property
    def exit_value(self) -> float:
        """Proceeds of this record's exit (0 when no exit price is recorded)."""
        return self.exited_quantity * (self.exit_price or 0.0)

    def holding_days(self, as_of: Optional[date] = None) -> int:
        """
        Whole days between buy date and exit date.

        Records without an exit date are measured up to ``as_of``
        (default today).
        """
        end = self.exit_date or as_of or date.today()
        return (end - self.buy_date).days

    def to_record(self) -> Dict[str, Any]:
        """
        Convert to the persisted document layout (without the id).

        Exit fields are omitted when unset.
        """
        record: Dict[str, Any] = {
            "name": self.name,
            "quantity": self.quantity,
            "buyPrice": self.buy_price,
            "buyDate": self.buy_date.isoformat(),
            "isActive": self.is_active,
        }
        if self.exit_price is not None:
            record["exitPrice"] = self.exit_price
        if self.exit_date is not None:
            record["exitDate"] = self.exit_date.isoformat()
        if self.exit_quantity is not None:
            record["exitQuantity"] = self.exit_quantity
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "StockPosition":
        """
        Create a position from a stored document.

        Missing exit fields are tolerated; analytics substitutes defaults.
        """
        return cls(
            id=record.get("id"),
            name=record["name"],
            quantity=record["quantity"],
            buy_price=record["buyPrice"],
            buy_date=record["buyDate"],
            is_active=bool(record.get("isActive", True)),
            exit_price=record.get("exitPrice"),
            exit_date=record.get("exitDate"),
            exit_quantity=record.get("exitQuantity"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Snake-case representation suitable for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "buy_price": self.buy_price,
            "buy_date": self.buy_date.isoformat(),
            "is_active": self.is_active,
            "exit_price": self.exit_price,
            "exit_date": self.exit_date.isoformat() if self.exit_date else None,
            "exit_quantity": self.exit_quantity,
            "cost_value": self.cost_value,
        }

    def __repr__(self) -> str:
        status = "HOLDING" if self.is_active else f"EXITED @ {self.exit_price}"
        return (
            f"StockPosition(id={self.id}, name={self.name}, "
            f"quantity={self.quantity:g}, buy_price={self.buy_price:.2f}, "
            f"buy_date={self.buy_date}, {status})"
        )
