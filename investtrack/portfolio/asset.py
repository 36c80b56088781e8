"""
Miscellaneous (non-stock) investment assets.

Assets are modelled as a tagged union: one dataclass per asset type, each
carrying only the fields that apply to it. Fields that belong to another
type are ignored when a record is read, so a stored document can never
produce an inconsistent asset object.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type

from ..exceptions import ValidationError
from .position import parse_date


class AssetType(Enum):
    """
    Kind of asset.

    ``COMMODITY`` is the legacy singular spelling of ``COMMODITIES`` still
    present in older stored records; both map to CommodityAsset.
    """
    SCHEMES = "schemes"
    CRYPTOCURRENCY = "cryptocurrency"
    STOCKS_INVESTMENT = "stocks_investment"
    MUTUAL_FUNDS = "mutual_funds"
    COMMODITIES = "commodities"
    COMMODITY = "commodity"
    FD = "fd"
    RD = "rd"
    BONDS = "bonds"

    def __str__(self) -> str:
        return self.value

    @property
    def canonical(self) -> "AssetType":
        """Type with the legacy commodity spelling folded in."""
        if self is AssetType.COMMODITY:
            return AssetType.COMMODITIES
        return self

    @property
    def label(self) -> str:
        """Display label used for grouping in distributions."""
        return _TYPE_LABELS[self.canonical]


_TYPE_LABELS = {
    AssetType.SCHEMES: "Schemes",
    AssetType.CRYPTOCURRENCY: "Cryptocurrency",
    AssetType.STOCKS_INVESTMENT: "Stock Investment",
    AssetType.MUTUAL_FUNDS: "Mutual Funds",
    AssetType.COMMODITIES: "Commodities",
    AssetType.FD: "Fixed Deposit",
    AssetType.RD: "Recurring Deposit",
    AssetType.BONDS: "Bonds",
}


class CommodityType(Enum):
    GOLD = "gold"
    SILVER = "silver"

    def __str__(self) -> str:
        return self.value


class BondType(Enum):
    GOVERNMENT = "government"
    CORPORATE = "corporate"

    def __str__(self) -> str:
        return self.value


def coerce_asset_type(value: Any) -> AssetType:
    """
    Convert a string (or AssetType) to AssetType.

    Raises:
        ValidationError: If the value names no known asset type
    """
    if isinstance(value, AssetType):
        return value
    try:
        return AssetType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown asset type: {value}",
            field="type",
            value=value,
            expected=", ".join(t.value for t in AssetType)
        )


def coerce_enum(enum_cls: Type[Enum], field: str, value: Any) -> Optional[Enum]:
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid {field}: {value}",
            field=field,
            value=value,
            expected=" or ".join(member.value for member in enum_cls)
        )


def encode_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


@dataclass
class Asset:
    """
    Base for every asset variant.

    Attributes:
        name: Asset name (e.g., "SBI Bluechip Fund")
        invested_amount: Amount put in
        current_gain: Signed gain or loss to date; None counts as 0
        id: Store-assigned identifier
    """

    name: str
    invested_amount: float
    current_gain: Optional[float] = None
    id: Optional[str] = None

    asset_type: ClassVar[AssetType]
    # attribute name -> persisted key, for fields specific to the variant
    extra_fields: ClassVar[Dict[str, str]] = {}

    @property
    def type(self) -> AssetType:
        return self.asset_type

    @property
    def label(self) -> str:
        return self.type.label

    @property
    def current_value(self) -> float:
        """Invested amount plus current gain."""
        return self.invested_amount + (self.current_gain or 0.0)

    @property
    def subtitle(self) -> str:
        """Short type-specific description; empty for plain assets."""
        return ""

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted document layout (without the id)."""
        record: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "investedAmount": self.invested_amount,
        }
        if self.current_gain is not None:
            record["currentGain"] = self.current_gain
        for attr, key in self.extra_fields.items():
            value = getattr(self, attr)
            if value is not None:
                record[key] = encode_value(value)
        return record

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "name": self.name,
            "invested_amount": self.invested_amount,
            "current_gain": self.current_gain,
            "current_value": self.current_value,
        }
        for attr in self.extra_fields:
            data[attr] = encode_value(getattr(self, attr))
        return data

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Asset":
        """
        Build the right variant for a stored document.

        Keys that do not apply to the record's type are ignored.
        """
        asset_type = coerce_asset_type(record["type"])
        variant = ASSET_CLASSES[asset_type]
        extras = {
            attr: record.get(key)
            for attr, key in variant.extra_fields.items()
        }
        return create_asset(
            asset_type,
            name=record["name"],
            invested_amount=record["investedAmount"],
            current_gain=record.get("currentGain"),
            id=record.get("id"),
            **extras
        )


@dataclass
class SchemeAsset(Asset):
    asset_type: ClassVar[AssetType] = AssetType.SCHEMES


@dataclass
class CryptocurrencyAsset(Asset):
    asset_type: ClassVar[AssetType] = AssetType.CRYPTOCURRENCY


@dataclass
class StockInvestmentAsset(Asset):
    """Stock holdings tracked as a lump sum rather than per position."""
    asset_type: ClassVar[AssetType] = AssetType.STOCKS_INVESTMENT


@dataclass
class MutualFundAsset(Asset):
    asset_type: ClassVar[AssetType] = AssetType.MUTUAL_FUNDS


@dataclass
class FixedDepositAsset(Asset):
    asset_type: ClassVar[AssetType] = AssetType.FD


@dataclass
class CommodityAsset(Asset):
    """Gold or silver holding. ``variant`` keeps the stored type spelling."""

    commodity_type: Optional[CommodityType] = None
    variant: AssetType = AssetType.COMMODITIES

    asset_type: ClassVar[AssetType] = AssetType.COMMODITIES
    extra_fields: ClassVar[Dict[str, str]] = {"commodity_type": "commodityType"}

    def __post_init__(self):
        self.commodity_type = coerce_enum(CommodityType, "commodity_type", self.commodity_type)
        self.variant = coerce_asset_type(self.variant)
        if self.variant.canonical is not AssetType.COMMODITIES:
            raise ValidationError(
                f"CommodityAsset cannot have type {self.variant}",
                field="type",
                value=self.variant.value
            )

    @property
    def type(self) -> AssetType:
        return self.variant

    @property
    def subtitle(self) -> str:
        if self.commodity_type is None:
            return ""
        return self.commodity_type.value.capitalize()


@dataclass
class RecurringDepositAsset(Asset):
    monthly_amount: Optional[float] = None
    number_of_months: Optional[int] = None

    asset_type: ClassVar[AssetType] = AssetType.RD
    extra_fields: ClassVar[Dict[str, str]] = {
        "monthly_amount": "monthlyAmount",
        "number_of_months": "numberOfMonths",
    }

    @property
    def subtitle(self) -> str:
        if not self.monthly_amount or not self.number_of_months:
            return ""
        return f"{self.monthly_amount:g}/month × {self.number_of_months:g}"


@dataclass
class BondAsset(Asset):
    bond_type: Optional[BondType] = None
    return_rate: Optional[float] = None
    maturity_date: Optional[date] = None

    asset_type: ClassVar[AssetType] = AssetType.BONDS
    extra_fields: ClassVar[Dict[str, str]] = {
        "bond_type": "bondType",
        "return_rate": "returnRate",
        "maturity_date": "maturityDate",
    }

    def __post_init__(self):
        self.bond_type = coerce_enum(BondType, "bond_type", self.bond_type)
        if self.maturity_date is not None:
            self.maturity_date = parse_date(self.maturity_date, "maturity_date")

    @property
    def subtitle(self) -> str:
        if self.bond_type is None:
            return ""
        return self.bond_type.value.capitalize()


ASSET_CLASSES: Dict[AssetType, Type[Asset]] = {
    AssetType.SCHEMES: SchemeAsset,
    AssetType.CRYPTOCURRENCY: CryptocurrencyAsset,
    AssetType.STOCKS_INVESTMENT: StockInvestmentAsset,
    AssetType.MUTUAL_FUNDS: MutualFundAsset,
    AssetType.COMMODITIES: CommodityAsset,
    AssetType.COMMODITY: CommodityAsset,
    AssetType.FD: FixedDepositAsset,
    AssetType.RD: RecurringDepositAsset,
    AssetType.BONDS: BondAsset,
}

# Every type-specific field name, across all variants
EXTRA_FIELDS: Dict[str, str] = {}
for _variant in ASSET_CLASSES.values():
    EXTRA_FIELDS.update(_variant.extra_fields)


def create_asset(
    asset_type: Any,
    name: str,
    invested_amount: float,
    current_gain: Optional[float] = None,
    id: Optional[str] = None,
    **extra: Any
) -> Asset:
    """
    Instantiate the variant for ``asset_type``.

    Extra fields that the variant does not carry are dropped.

    Example:
        >>> gold = create_asset("commodities", "Gold ETF", 50000, commodity_type="gold")
        >>> gold.subtitle
        'Gold'
    """
    kind = coerce_asset_type(asset_type)
    variant = ASSET_CLASSES[kind]
    kwargs = {attr: value for attr, value in extra.items() if attr in variant.extra_fields}
    if variant is CommodityAsset:
        kwargs["variant"] = kind
    return variant(
        name=name,
        invested_amount=invested_amount,
        current_gain=current_gain,
        id=id,
        **kwargs
    )
