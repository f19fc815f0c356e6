"""Fee schedule models and loading for Fulfillment Profit Calculator."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import FulfillmentMode, SeasonWindow
from .money import ZERO
from .rates import DEFAULT_SCHEDULE

logger = logging.getLogger(__name__)

NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]
PositiveDecimal = Annotated[Decimal, Field(gt=0)]
Rate = Annotated[Decimal, Field(ge=0, le=1)]


class ConfigurationError(Exception):
    """Raised when a fee schedule is missing or structurally invalid."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def _normalize_key(value: str) -> str:
    return " ".join(value.split()).casefold()


class _ScheduleModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PriceTier(_ScheduleModel):
    """Referral rate applied up to and including a sale price."""

    max_price: NonNegativeDecimal
    rate: Rate


class ReferralRate(_ScheduleModel):
    """Referral rate for one contract category."""

    rate: Rate
    price_tiers: tuple[PriceTier, ...] = ()

    @field_validator("price_tiers")
    @classmethod
    def check_tiers_ascending(cls, tiers: tuple[PriceTier, ...]) -> tuple[PriceTier, ...]:
        prices = [t.max_price for t in tiers]
        if any(b <= a for a, b in zip(prices, prices[1:])):
            raise ValueError("price tiers must be in strictly ascending max_price order")
        return tiers

    def rate_for(self, sale_price: Decimal) -> Decimal:
        """Get the rate that applies at a sale price."""
        for tier in self.price_tiers:
            if sale_price <= tier.max_price:
                return tier.rate
        return self.rate


class WeightBracket(_ScheduleModel):
    """Fulfillment fee for billable weights up to max_weight (None = no limit)."""

    max_weight: NonNegativeDecimal | None = None
    base_fee: NonNegativeDecimal
    per_unit_fee: NonNegativeDecimal = ZERO
    overage_from: NonNegativeDecimal = ZERO

    def fee_for(self, weight: Decimal) -> Decimal:
        """Base fee plus the per-unit charge above overage_from."""
        overage = max(weight - self.overage_from, ZERO)
        return self.base_fee + self.per_unit_fee * overage


class SizeRange(_ScheduleModel):
    """Measurement range, exclusive of ``over`` and inclusive of ``up_to``."""

    over: NonNegativeDecimal
    up_to: NonNegativeDecimal | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "SizeRange":
        if self.up_to is not None and self.up_to <= self.over:
            raise ValueError("up_to must be greater than over")
        return self

    def contains(self, value: Decimal) -> bool:
        return value > self.over and (self.up_to is None or value <= self.up_to)


class SizeSurcharge(_ScheduleModel):
    """Surcharge for products whose size falls in any of the given ranges.

    Bulky products never pay size surcharges; the bulky surcharge covers them.
    """

    amount: NonNegativeDecimal = ZERO
    longest_side: SizeRange | None = None
    median_side: SizeRange | None = None
    length_plus_girth: SizeRange | None = None

    def applies(self, longest_side: Decimal, median_side: Decimal, girth: Decimal) -> bool:
        """Check whether any configured range contains the product's size."""
        checks = (
            (self.longest_side, longest_side),
            (self.median_side, median_side),
            (self.length_plus_girth, longest_side + girth),
        )
        return any(size_range is not None and size_range.contains(value) for size_range, value in checks)


class Surcharges(_ScheduleModel):
    """Fixed fulfillment surcharges; any number may apply at once."""

    bulky: NonNegativeDecimal = ZERO
    apparel: NonNegativeDecimal = ZERO
    hazardous: NonNegativeDecimal = ZERO
    low_price: NonNegativeDecimal = ZERO
    low_price_threshold: NonNegativeDecimal = ZERO  # Sale price below this adds low_price
    oversize: SizeSurcharge = Field(default_factory=SizeSurcharge)
    additional_oversize: SizeSurcharge = Field(default_factory=SizeSurcharge)


class BulkyRule(_ScheduleModel):
    """Limits above which a product counts as bulky."""

    max_weight: PositiveDecimal = Decimal("150")
    max_longest_side: PositiveDecimal = Decimal("108")
    max_length_plus_girth: PositiveDecimal = Decimal("165")


class WeightRule(_ScheduleModel):
    """How one billing context reconciles actual and dimensional weight."""

    dim_divisor: PositiveDecimal
    packaging_buffer: NonNegativeDecimal = ZERO
    rounding_increment: NonNegativeDecimal = ZERO  # 0 disables rounding
    dim_weight_min_actual: NonNegativeDecimal = ZERO  # Below this, actual weight is used alone


class CostModelKind(str, Enum):
    """How prep and additional costs are charged."""

    PER_WEIGHT = "per_weight"
    PER_ITEM = "per_item"


# Older settings panels saved these spellings
_COST_MODEL_ALIASES = {
    "per lb": CostModelKind.PER_WEIGHT,
    "per_lb": CostModelKind.PER_WEIGHT,
    "perlb": CostModelKind.PER_WEIGHT,
    "each": CostModelKind.PER_ITEM,
    "per item": CostModelKind.PER_ITEM,
}


class CostModel(_ScheduleModel):
    """Prep or additional cost: rate per weight unit or flat per item."""

    kind: CostModelKind = CostModelKind.PER_WEIGHT
    rate: NonNegativeDecimal = ZERO

    @field_validator("kind", mode="before")
    @classmethod
    def accept_legacy_spelling(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _COST_MODEL_ALIASES.get(value.strip().lower(), value.strip().lower())
        return value

    def cost_for(self, weight: Decimal) -> Decimal:
        """Cost for one item of the given weight."""
        if self.kind == CostModelKind.PER_ITEM:
            return self.rate
        return self.rate * weight


class FeeScheduleConfig(_ScheduleModel):
    """Immutable, versioned bundle of marketplace rates."""

    version: str = Field(min_length=1)
    currency_precision: PositiveDecimal = Decimal("0.01")
    volume_divisor: PositiveDecimal = Decimal("1728")

    default_category: str
    referral_rates: Mapping[str, ReferralRate]

    fulfillment_tiers: tuple[WeightBracket, ...]
    fulfillment_fallback: WeightBracket | None = None
    surcharges: Surcharges = Field(default_factory=Surcharges)
    bulky_rule: BulkyRule = Field(default_factory=BulkyRule)

    inbound_weight: WeightRule
    fulfillment_weight: WeightRule

    storage_rates: Mapping[SeasonWindow, NonNegativeDecimal]
    peak_min_months: NonNegativeDecimal = ZERO  # Peak stays up to this long bill the standard rate
    inbound_rates: Mapping[FulfillmentMode, NonNegativeDecimal]

    prep_cost: CostModel = Field(default_factory=CostModel)
    additional_cost: CostModel = Field(default_factory=CostModel)

    @model_validator(mode="after")
    def check_structure(self) -> "FeeScheduleConfig":
        if not self.referral_rates:
            raise ValueError("referral_rates must not be empty")
        if self.default_category not in self.referral_rates:
            raise ValueError(
                f"default_category '{self.default_category}' is not in referral_rates"
            )

        if not self.fulfillment_tiers:
            raise ValueError("fulfillment_tiers must not be empty")
        previous: Decimal | None = None
        for index, bracket in enumerate(self.fulfillment_tiers):
            is_last = index == len(self.fulfillment_tiers) - 1
            if bracket.max_weight is None:
                if not is_last:
                    raise ValueError("only the last fulfillment tier may be unbounded")
                continue
            if previous is not None and bracket.max_weight <= previous:
                raise ValueError(
                    "fulfillment_tiers must be in strictly ascending max_weight order"
                )
            previous = bracket.max_weight

        missing_seasons = [s.value for s in SeasonWindow if s not in self.storage_rates]
        if missing_seasons:
            raise ValueError(f"storage_rates missing seasons: {', '.join(missing_seasons)}")
        missing_modes = [m.value for m in FulfillmentMode if m not in self.inbound_rates]
        if missing_modes:
            raise ValueError(f"inbound_rates missing modes: {', '.join(missing_modes)}")

        # Rate tables are read-only once loaded
        for name in ("referral_rates", "storage_rates", "inbound_rates"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        return self

    def resolve_category(self, category: str | None) -> tuple[str, bool]:
        """Get the referral table key for a category and whether it was defaulted."""
        if category:
            if category in self.referral_rates:
                return category, False
            wanted = _normalize_key(category)
            for key in self.referral_rates:
                if _normalize_key(key) == wanted:
                    return key, False
        return self.default_category, True

    def referral_rate(self, category: str | None, sale_price: Decimal) -> tuple[Decimal, bool]:
        """Get the referral rate for a category at a sale price."""
        key, defaulted = self.resolve_category(category)
        return self.referral_rates[key].rate_for(sale_price), defaulted

    def find_fulfillment_tier(self, weight: Decimal) -> WeightBracket | None:
        """Find the bracket covering a billable weight."""
        for bracket in self.fulfillment_tiers:
            if bracket.max_weight is None or weight <= bracket.max_weight:
                return bracket
        return None

    @property
    def fallback_tier(self) -> WeightBracket:
        """Bracket used when no tier covers a weight."""
        return self.fulfillment_fallback or self.fulfillment_tiers[-1]

    def storage_rate(self, season: SeasonWindow, storage_months: Decimal) -> Decimal:
        """Get the monthly storage rate for a season and length of stay."""
        if season == SeasonWindow.PEAK and storage_months <= self.peak_min_months:
            return self.storage_rates[SeasonWindow.STANDARD]
        return self.storage_rates[season]


def _format_errors(exc: ValidationError) -> list[str]:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        errors.append(f"{location}: {error['msg']}" if location else error["msg"])
    return errors


def load_schedule(
    source: FeeScheduleConfig | Mapping[str, Any] | str | Path | None = None,
) -> FeeScheduleConfig:
    """Load and validate a fee schedule.

    ``source`` may be an already-validated schedule, a mapping, or a path to a
    JSON file. ``None`` loads the built-in schedule.
    """
    if isinstance(source, FeeScheduleConfig):
        return source

    if source is None:
        data: Any = DEFAULT_SCHEDULE
        origin = "built-in schedule"
    elif isinstance(source, Mapping):
        data = source
        origin = "mapping"
    else:
        path = Path(source)
        origin = str(path)
        if not path.is_file():
            raise ConfigurationError(f"Fee schedule file not found: {path}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read fee schedule {path}: {e}") from e

    try:
        schedule = FeeScheduleConfig.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        raise ConfigurationError(
            f"Invalid fee schedule ({origin}): {'; '.join(errors)}", errors=errors
        ) from e

    logger.info(
        f"Loaded fee schedule {schedule.version} from {origin} "
        f"({len(schedule.referral_rates)} categories, "
        f"{len(schedule.fulfillment_tiers)} weight tiers)"
    )
    return schedule


def default_schedule() -> FeeScheduleConfig:
    """Get the built-in fee schedule."""
    return load_schedule(None)
