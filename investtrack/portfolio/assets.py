"""
Asset ledger: create, patch, delete and list non-stock assets.

Validation here is syntactic only (known type and field names, numeric
values, enum members, parseable dates). Whether a commodity has a
commodity_type or a bond a maturity date is left to the caller.
"""

from typing import Any, Dict, List, Optional
import structlog

from ..exceptions import NotFoundError, ValidationError
from .asset import (
    ASSET_CLASSES,
    EXTRA_FIELDS,
    Asset,
    AssetType,
    BondType,
    CommodityType,
    coerce_asset_type,
    coerce_enum,
    create_asset,
    encode_value,
)
from .position import parse_date
from .store import ASSETS, RecordStore
from .validation import require_number, require_positive, require_text

logger = structlog.get_logger(__name__)

COMMON_FIELDS = {
    "name": "name",
    "invested_amount": "investedAmount",
    "current_gain": "currentGain",
}


def _normalize(attr: str, value: Any) -> Any:
    """Validate one supplied field and return its Python value."""
    if attr == "name":
        return require_text(attr, value)
    if attr == "invested_amount":
        return require_positive(attr, value)
    if attr == "commodity_type":
        return coerce_enum(CommodityType, attr, value)
    if attr == "bond_type":
        return coerce_enum(BondType, attr, value)
    if attr == "maturity_date":
        return parse_date(value, attr)
    # current_gain, monthly_amount, number_of_months, return_rate
    return require_number(attr, value)


def _check_field_names(fields: Dict[str, Any]) -> None:
    unknown = sorted(set(fields) - set(COMMON_FIELDS) - set(EXTRA_FIELDS))
    if unknown:
        raise ValidationError(
            f"Unknown asset field(s): {', '.join(unknown)}",
            field=unknown[0]
        )


class AssetLedger:
    """
    Manages asset records.

    Example:
        >>> ledger = AssetLedger(InMemoryRecordStore())
        >>> asset_id = ledger.add("bonds", "GOI 2033", 100000, bond_type="government",
        ...                       return_rate=7.1, maturity_date="2033-06-30")
        >>> ledger.get(asset_id).subtitle
        'Government'
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def add(
        self,
        asset_type: Any,
        name: str,
        invested_amount: float,
        current_gain: Optional[float] = None,
        **extra: Any
    ) -> str:
        """
        Record a new asset.

        Type-specific fields that do not apply to ``asset_type`` are dropped.

        Args:
            asset_type: AssetType or its string value
            name: Asset name
            invested_amount: Amount invested (> 0)
            current_gain: Signed gain to date (optional)
            **extra: Type-specific fields (commodity_type, monthly_amount,
                number_of_months, bond_type, return_rate, maturity_date)

        Returns:
            Id of the new record

        Raises:
            ValidationError: On unknown type or field names, or invalid values
        """
        kind = coerce_asset_type(asset_type)
        _check_field_names(extra)

        values: Dict[str, Any] = {
            "name": _normalize("name", name),
            "invested_amount": _normalize("invested_amount", invested_amount),
        }
        if current_gain is not None:
            values["current_gain"] = _normalize("current_gain", current_gain)
        for attr, value in extra.items():
            if value is not None:
                values[attr] = _normalize(attr, value)

        dropped = sorted(set(extra) - set(ASSET_CLASSES[kind].extra_fields))
        if dropped:
            logger.debug("asset_fields_ignored", type=kind.value, fields=dropped)

        asset = create_asset(kind, **values)
        asset_id = self.store.insert(ASSETS, asset.to_record())

        logger.info(
            "asset_added",
            asset_id=asset_id,
            type=kind.value,
            name=asset.name,
            invested_amount=asset.invested_amount
        )
        return asset_id

    def get(self, asset_id: str) -> Asset:
        """
        Fetch an asset by id.

        Raises:
            NotFoundError: If no record has this id
        """
        record = self.store.get(ASSETS, asset_id)
        if record is None:
            raise NotFoundError(
                "Asset not found",
                collection=ASSETS,
                record_id=asset_id
            )
        return Asset.from_record(record)

    def update(self, asset_id: str, asset_type: Any = None, **fields: Any) -> None:
        """
        Patch supplied fields; every other field keeps its stored value.

        ``None`` means "not supplied". The type may change; stored fields
        that do not apply to the new type are then ignored on read.

        Raises:
            ValidationError: On unknown field names or invalid values
            NotFoundError: If no record has this id
        """
        _check_field_names(fields)

        updates: Dict[str, Any] = {}
        if asset_type is not None:
            updates["type"] = coerce_asset_type(asset_type).value
        for attr, value in fields.items():
            if value is None:
                continue
            key = COMMON_FIELDS.get(attr) or EXTRA_FIELDS[attr]
            updates[key] = encode_value(_normalize(attr, value))

        with self.store.transaction():
            current = self.store.get(ASSETS, asset_id)
            if current is None:
                raise NotFoundError(
                    "Asset not found",
                    collection=ASSETS,
                    record_id=asset_id
                )
            if updates:
                self.store.patch(ASSETS, asset_id, updates)

        logger.info("asset_updated", asset_id=asset_id, fields=sorted(updates))

    def delete(self, asset_id: str) -> None:
        """
        Remove an asset.

        Raises:
            NotFoundError: If no record has this id
        """
        self.store.delete(ASSETS, asset_id)
        logger.info("asset_deleted", asset_id=asset_id)

    def list_all(self) -> List[Asset]:
        """All assets, in store order."""
        return [Asset.from_record(record) for record in self.store.scan(ASSETS)]

    def list_by_type(self, asset_type: Any) -> List[Asset]:
        """
        Assets of one type. The commodity spellings match each other.
        """
        kind = coerce_asset_type(asset_type).canonical
        return [
            Asset.from_record(record)
            for record in self.store.scan(
                ASSETS,
                lambda record: _record_type(record) is kind
            )
        ]


def _record_type(record: Dict[str, Any]) -> Optional[AssetType]:
    try:
        return AssetType(record.get("type")).canonical
    except ValueError:
        return None
