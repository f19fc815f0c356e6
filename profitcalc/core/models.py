"""Core data models for Fulfillment Profit Calculator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from .money import ZERO, Numeric, clamp_non_negative


class FulfillmentMode(str, Enum):
    """Who stores and ships the product."""

    PLATFORM_FULFILLED = "platform_fulfilled"
    SELLER_FULFILLED = "seller_fulfilled"

    @classmethod
    def from_string(cls, value: str) -> "FulfillmentMode":
        """Convert string to FulfillmentMode enum."""
        value_lower = value.strip().lower()
        aliases = {
            "platform": cls.PLATFORM_FULFILLED,
            "wfs": cls.PLATFORM_FULFILLED,
            "seller": cls.SELLER_FULFILLED,
            "sf": cls.SELLER_FULFILLED,
        }
        if value_lower in aliases:
            return aliases[value_lower]
        for mode in cls:
            if mode.value == value_lower:
                return mode
        raise ValueError(f"Unknown fulfillment mode: {value}")


class SeasonWindow(str, Enum):
    """Storage season selecting the monthly storage rate."""

    STANDARD = "standard"  # Jan-Sep
    PEAK = "peak"  # Oct-Dec

    @classmethod
    def from_string(cls, value: str) -> "SeasonWindow":
        """Convert string to SeasonWindow enum."""
        value_lower = value.strip().lower()
        if value_lower == "jan-sep":
            return cls.STANDARD
        if value_lower == "oct-dec":
            return cls.PEAK
        for season in cls:
            if season.value == value_lower:
                return season
        raise ValueError(f"Unknown season: {value}")


class FeeField(str, Enum):
    """Fee fields that can be derived or overridden."""

    REFERRAL = "referral_fee"
    FULFILLMENT = "fulfillment_fee"
    INBOUND_SHIPPING = "inbound_shipping_fee"
    STORAGE = "storage_fee"
    PREP = "prep_fee"
    ADDITIONAL = "additional_fees"

    @classmethod
    def values(cls) -> list[str]:
        """Get list of field names."""
        return [f.value for f in cls]


class FieldStatus(str, Enum):
    """Whether a fee field is auto-computed or frozen by the user."""

    DERIVED = "derived"
    OVERRIDDEN = "overridden"


class WarningCode(str, Enum):
    """Fail-soft conditions reported on a calculation result."""

    INPUT_CLAMPED = "INPUT_CLAMPED"
    CATEGORY_DEFAULTED = "CATEGORY_DEFAULTED"
    WEIGHT_TIER_NOT_FOUND = "WEIGHT_TIER_NOT_FOUND"


@dataclass
class ProductPhysical:
    """Product dimensions in inches and weight in pounds."""

    length: Numeric = ZERO
    width: Numeric = ZERO
    height: Numeric = ZERO
    weight: Numeric = ZERO


@dataclass
class ProductFlags:
    """Product classification flags that may add fulfillment surcharges."""

    is_apparel: bool = False
    is_hazardous: bool = False
    is_bulky: bool | None = None  # None means derive from dimensions


@dataclass
class PricingInputs:
    """Seller's sale price and product cost."""

    sale_price: Numeric = ZERO
    product_cost: Numeric = ZERO


@dataclass
class FieldState:
    """Derived/overridden state of one fee field."""

    field: FeeField
    status: FieldStatus = FieldStatus.DERIVED
    raw_value: str | None = None

    @property
    def is_overridden(self) -> bool:
        return self.status == FieldStatus.OVERRIDDEN

    @property
    def value(self) -> Decimal:
        """Parsed override amount; unparseable or negative input counts as 0."""
        amount, _ = clamp_non_negative(self.raw_value)
        return amount


@dataclass
class CalculationRequest:
    """Everything the engine needs for one product calculation."""

    physical: ProductPhysical = field(default_factory=ProductPhysical)
    pricing: PricingInputs = field(default_factory=PricingInputs)
    mode: FulfillmentMode = FulfillmentMode.PLATFORM_FULFILLED
    category: str = ""
    season: SeasonWindow = SeasonWindow.STANDARD
    storage_months: Numeric = Decimal("1")
    field_states: list[FieldState] = field(default_factory=list)
    flags: ProductFlags = field(default_factory=ProductFlags)

    def overrides(self) -> dict[FeeField, Decimal]:
        """Get override amounts for every overridden field."""
        return {s.field: s.value for s in self.field_states if s.is_overridden}


@dataclass
class CalculationWarning:
    """A fallback or clamp that happened during calculation."""

    code: WarningCode
    description: str = ""


@dataclass
class NormalizedDimensions:
    """Clamped measurements with derived volume and billable weights."""

    length: Decimal = ZERO
    width: Decimal = ZERO
    height: Decimal = ZERO
    weight: Decimal = ZERO
    cubic_volume: Decimal = ZERO
    longest_side: Decimal = ZERO
    median_side: Decimal = ZERO
    girth: Decimal = ZERO
    inbound_billable_weight: Decimal = ZERO
    fulfillment_billable_weight: Decimal = ZERO
    is_bulky: bool = False
    clamped_fields: list[str] = field(default_factory=list)


@dataclass
class FeeBreakdown:
    """The six component fees, each already rounded to currency precision."""

    referral_fee: Decimal = ZERO
    fulfillment_fee: Decimal = ZERO
    inbound_shipping_fee: Decimal = ZERO
    storage_fee: Decimal = ZERO
    prep_fee: Decimal = ZERO
    additional_fees: Decimal = ZERO
    warnings: list[CalculationWarning] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return (
            self.referral_fee
            + self.fulfillment_fee
            + self.inbound_shipping_fee
            + self.storage_fee
            + self.prep_fee
            + self.additional_fees
        )

    def get(self, fee_field: FeeField) -> Decimal:
        """Get a fee by field."""
        return getattr(self, fee_field.value)


@dataclass
class ProfitSummary:
    """Totals derived from pricing and fees."""

    total_fees: Decimal = ZERO
    total_profit: Decimal = ZERO
    margin: Decimal = ZERO
    margin_valid: bool = False
    roi: Decimal = ZERO
    roi_valid: bool = False


@dataclass
class CostSolution:
    """Product cost required to reach a target margin."""

    target_margin: Decimal = ZERO
    sale_price: Decimal = ZERO
    total_fees: Decimal = ZERO
    product_cost: Decimal = ZERO  # Full precision, may be negative
    is_feasible: bool = False


@dataclass
class TargetCheck:
    """Comparison of a result against the seller's minimum goals."""

    meets_profit: bool = False
    meets_margin: bool = False
    meets_roi: bool = False

    @property
    def meets_all(self) -> bool:
        return self.meets_profit and self.meets_margin and self.meets_roi


@dataclass
class CalculationResult:
    """Complete output of one calculation."""

    referral_fee: Decimal = ZERO
    fulfillment_fee: Decimal = ZERO
    inbound_shipping_fee: Decimal = ZERO
    storage_fee: Decimal = ZERO
    prep_fee: Decimal = ZERO
    additional_fees: Decimal = ZERO
    total_fees: Decimal = ZERO
    total_profit: Decimal = ZERO
    margin: Decimal = ZERO
    roi: Decimal = ZERO
    margin_valid: bool = False
    roi_valid: bool = False
    warnings: list[CalculationWarning] = field(default_factory=list)

    # Context for display and export
    dimensions: NormalizedDimensions = field(default_factory=NormalizedDimensions)
    field_status: dict[FeeField, FieldStatus] = field(default_factory=dict)
    schedule_version: str = ""

    def has_warning(self, code: WarningCode) -> bool:
        """Check if a specific warning is present."""
        return any(w.code == code for w in self.warnings)

    def is_overridden(self, fee_field: FeeField) -> bool:
        """Check whether a fee came from a user override."""
        return self.field_status.get(fee_field) == FieldStatus.OVERRIDDEN

    def as_dict(self) -> dict[str, Any]:
        """Render as a JSON-safe dictionary."""
        return _to_json_safe(asdict(self))


def _to_json_safe(obj: Any) -> Any:
    """Recursively convert Decimal and Enum values for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, dict):
        return {_to_json_safe(k): _to_json_safe(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_to_json_safe(item) for item in obj]
    return obj
