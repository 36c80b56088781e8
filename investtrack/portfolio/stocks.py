"""
Stock position lifecycle.

This module provides StockLedger, which creates, edits, exits and deletes
stock position records in a RecordStore. A record moves from holding to
exited either in full (the same record is closed) or in part (a new exited
record is split off and the original keeps the remaining quantity).
"""

from typing import Any, Dict, List, Optional
import structlog

from ..exceptions import NotFoundError, ValidationError
from .position import DateLike, StockPosition, parse_date
from .store import STOCKS, RecordStore, field_equals
from .validation import require_positive, require_text

logger = structlog.get_logger(__name__)

# Editable attribute -> persisted key
UPDATABLE_FIELDS = {
    "name": "name",
    "quantity": "quantity",
    "buy_price": "buyPrice",
    "buy_date": "buyDate",
}


class StockLedger:
    """
    Manages stock position records.

    Example:
        >>> ledger = StockLedger(InMemoryRecordStore())
        >>> stock_id = ledger.add("INFY", 100, 50.0, "2024-01-15")
        >>> exited_id = ledger.exit(stock_id, 60.0, "2024-06-01", exit_quantity=40)
        >>> ledger.get(stock_id).quantity
        60
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def add(self, name: str, quantity: float, buy_price: float, buy_date: DateLike) -> str:
        """
        Record a new holding.

        Args:
            name: Instrument name
            quantity: Number of shares bought (> 0)
            buy_price: Price per share (> 0)
            buy_date: Purchase date (date or ISO string)

        Returns:
            Id of the new record

        Raises:
            ValidationError: If any input is invalid
        """
        position = StockPosition(
            name=require_text("name", name),
            quantity=require_positive("quantity", quantity),
            buy_price=require_positive("buy_price", buy_price),
            buy_date=parse_date(buy_date, "buy_date"),
        )
        stock_id = self.store.insert(STOCKS, position.to_record())

        logger.info(
            "stock_added",
            stock_id=stock_id,
            name=position.name,
            quantity=position.quantity,
            buy_price=position.buy_price
        )
        return stock_id

    def get(self, stock_id: str) -> StockPosition:
        """
        Fetch a record by id.

        Raises:
            NotFoundError: If no record has this id
        """
        record = self.store.get(STOCKS, stock_id)
        if record is None:
            raise NotFoundError(
                "Stock not found",
                collection=STOCKS,
                record_id=stock_id
            )
        return StockPosition.from_record(record)

    def update(self, stock_id: str, **fields: Any) -> None:
        """
        Patch supplied fields on an existing record, active or exited.

        Only ``name``, ``quantity``, ``buy_price`` and ``buy_date`` may be
        edited. Nothing derived is recomputed.

        Raises:
            ValidationError: On an unknown field or invalid value
            NotFoundError: If no record has this id
        """
        unknown = sorted(set(fields) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError(
                f"Cannot update stock field(s): {', '.join(unknown)}",
                field=unknown[0],
                expected=", ".join(UPDATABLE_FIELDS)
            )

        updates: Dict[str, Any] = {}
        for attr, value in fields.items():
            if attr == "name":
                value = require_text(attr, value)
            elif attr == "buy_date":
                value = parse_date(value, attr).isoformat()
            else:
                value = require_positive(attr, value)
            updates[UPDATABLE_FIELDS[attr]] = value

        # Raises NotFoundError for unknown ids, even for an empty update
        self.get(stock_id)
        if updates:
            self.store.patch(STOCKS, stock_id, updates)

        logger.info("stock_updated", stock_id=stock_id, fields=sorted(fields))

    def exit(
        self,
        stock_id: str,
        exit_price: float,
        exit_date: DateLike,
        exit_quantity: Optional[float] = None
    ) -> str:
        """
        Exit all or part of a holding.

        Exiting the full remaining quantity closes the record itself.
        Exiting less splits off a new exited record carrying the original
        name, buy price and buy date, and reduces the original's quantity;
        both writes happen in one store transaction.

        Args:
            stock_id: Id of an active record
            exit_price: Price per share received (> 0)
            exit_date: Exit date (date or ISO string)
            exit_quantity: Shares to exit (> 0); defaults to all

        Returns:
            Id of the exited record (the same id on a full exit, the new
            sibling's id on a partial exit)

        Raises:
            NotFoundError: If no record has this id
            ValidationError: On invalid input, an already exited record, or
                an exit quantity above the held quantity
        """
        exit_price = require_positive("exit_price", exit_price)
        exit_day = parse_date(exit_date, "exit_date")
        if exit_quantity is not None:
            exit_quantity = require_positive("exit_quantity", exit_quantity)

        with self.store.transaction():
            current = self.get(stock_id)
            if not current.is_active:
                raise ValidationError(
                    "Stock has already been exited",
                    field="stock_id",
                    value=stock_id
                )

            requested = exit_quantity if exit_quantity is not None else current.quantity
            if requested > current.quantity:
                raise ValidationError(
                    f"Cannot exit {requested:g} shares, only {current.quantity:g} held",
                    field="exit_quantity",
                    value=requested,
                    expected=f"<= {current.quantity:g}"
                )

            if requested >= current.quantity:
                self.store.patch(STOCKS, stock_id, {
                    "isActive": False,
                    "exitPrice": exit_price,
                    "exitDate": exit_day.isoformat(),
                    "exitQuantity": requested,
                })
                logger.info(
                    "stock_exited",
                    stock_id=stock_id,
                    quantity=requested,
                    exit_price=exit_price
                )
                return stock_id

            exited = StockPosition(
                name=current.name,
                quantity=requested,
                buy_price=current.buy_price,
                buy_date=current.buy_date,
                is_active=False,
                exit_price=exit_price,
                exit_date=exit_day,
                exit_quantity=requested,
            )
            exited_id = self.store.insert(STOCKS, exited.to_record())
            remaining = current.quantity - requested
            self.store.patch(STOCKS, stock_id, {"quantity": remaining})

        logger.info(
            "stock_partially_exited",
            stock_id=stock_id,
            exited_id=exited_id,
            exited_quantity=requested,
            remaining_quantity=remaining,
            exit_price=exit_price
        )
        return exited_id

    def delete(self, stock_id: str) -> None:
        """
        Remove a record. Partial-exit siblings are independent and stay.

        Raises:
            NotFoundError: If no record has this id
        """
        self.store.delete(STOCKS, stock_id)
        logger.info("stock_deleted", stock_id=stock_id)

    def list_active(self) -> List[StockPosition]:
        """All holding records, in store order."""
        return [
            StockPosition.from_record(record)
            for record in self.store.scan(STOCKS, field_equals("isActive", True))
        ]

    def list_exited(self) -> List[StockPosition]:
        """All exited records, in store order."""
        return [
            StockPosition.from_record(record)
            for record in self.store.scan(STOCKS, field_equals("isActive", False))
        ]

    def list_all(self) -> List[StockPosition]:
        return [StockPosition.from_record(record) for record in self.store.scan(STOCKS)]
