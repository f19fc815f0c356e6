"""Fee calculation for Fulfillment Profit Calculator."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from .models import (
    CalculationRequest,
    CalculationWarning,
    FeeBreakdown,
    FeeField,
    FulfillmentMode,
    NormalizedDimensions,
    ProductFlags,
    SeasonWindow,
    WarningCode,
)
from .money import ZERO, clamp_non_negative, round_money

if TYPE_CHECKING:
    from .schedule import FeeScheduleConfig

logger = logging.getLogger(__name__)


class FeeCalculator:
    """Applies a fee schedule to normalized product inputs.

    No fee depends on product cost. The closed-form margin solve in
    ProfitabilityAggregator relies on this; a cost-dependent fee would need
    an iterative solve instead.
    """

    def __init__(self, schedule: FeeScheduleConfig) -> None:
        """Initialize with a fee schedule."""
        self.schedule = schedule

    def _round(self, value: Decimal) -> Decimal:
        return round_money(value, self.schedule.currency_precision)

    def referral_fee(
        self, sale_price: Decimal, category: str | None
    ) -> tuple[Decimal, CalculationWarning | None]:
        """Calculate the referral fee and any category fallback warning."""
        rate, defaulted = self.schedule.referral_rate(category, sale_price)
        warning = None
        if defaulted:
            logger.debug(
                f"Category '{category}' not found, using '{self.schedule.default_category}'"
            )
            warning = CalculationWarning(
                code=WarningCode.CATEGORY_DEFAULTED,
                description=(
                    f"Category '{category or ''}' not found, "
                    f"used default '{self.schedule.default_category}'"
                ),
            )
        return self._round(sale_price * rate), warning

    def fulfillment_fee(
        self,
        dims: NormalizedDimensions,
        sale_price: Decimal,
        mode: FulfillmentMode,
        flags: ProductFlags | None = None,
    ) -> tuple[Decimal, CalculationWarning | None]:
        """Calculate the pick/pack fee from the weight tiers plus surcharges."""
        if mode != FulfillmentMode.PLATFORM_FULFILLED:
            return ZERO, None

        flags = flags or ProductFlags()
        weight = dims.fulfillment_billable_weight
        warning = None

        bracket = self.schedule.find_fulfillment_tier(weight)
        if bracket is None:
            bracket = self.schedule.fallback_tier
            logger.debug(f"No weight tier covers {weight}, using fallback tier")
            warning = CalculationWarning(
                code=WarningCode.WEIGHT_TIER_NOT_FOUND,
                description=f"No weight tier covers {weight}, used fallback tier",
            )

        fee = bracket.fee_for(weight) + self.surcharge_total(dims, sale_price, flags)
        return self._round(fee), warning

    def surcharge_total(
        self, dims: NormalizedDimensions, sale_price: Decimal, flags: ProductFlags
    ) -> Decimal:
        """Sum every surcharge that applies."""
        surcharges = self.schedule.surcharges
        total = ZERO
        if dims.is_bulky:
            total += surcharges.bulky
        else:
            for size_surcharge in (surcharges.oversize, surcharges.additional_oversize):
                if size_surcharge.applies(dims.longest_side, dims.median_side, dims.girth):
                    total += size_surcharge.amount
        if flags.is_apparel:
            total += surcharges.apparel
        if flags.is_hazardous:
            total += surcharges.hazardous
        if sale_price < surcharges.low_price_threshold:
            total += surcharges.low_price
        return total

    def inbound_shipping_fee(
        self, dims: NormalizedDimensions, mode: FulfillmentMode
    ) -> Decimal:
        """Calculate inbound shipping from the inbound billable weight."""
        rate = self.schedule.inbound_rates[mode]
        return self._round(dims.inbound_billable_weight * rate)

    def storage_fee(
        self,
        dims: NormalizedDimensions,
        season: SeasonWindow,
        storage_months: Decimal,
        mode: FulfillmentMode,
    ) -> Decimal:
        """Calculate storage for the given season and duration."""
        if mode != FulfillmentMode.PLATFORM_FULFILLED:
            return ZERO
        rate = self.schedule.storage_rate(season, storage_months)
        return self._round(dims.cubic_volume * rate * storage_months)

    def prep_fee(self, dims: NormalizedDimensions) -> Decimal:
        """Calculate prep cost from the configured cost model."""
        return self._round(self.schedule.prep_cost.cost_for(dims.weight))

    def additional_fees(self, dims: NormalizedDimensions) -> Decimal:
        """Calculate additional costs from the configured cost model."""
        return self._round(self.schedule.additional_cost.cost_for(dims.weight))

    def calculate(
        self,
        request: CalculationRequest,
        dims: NormalizedDimensions,
        overrides: Mapping[FeeField, Decimal] | None = None,
    ) -> FeeBreakdown:
        """Calculate every fee, using override amounts for overridden fields."""
        overrides = overrides or {}
        warnings: list[CalculationWarning] = []
        sale_price, _ = clamp_non_negative(request.pricing.sale_price)
        storage_months, _ = clamp_non_negative(request.storage_months)

        fees: dict[FeeField, Decimal] = {}
        for fee_field, amount in overrides.items():
            clean, _ = clamp_non_negative(amount)
            fees[fee_field] = self._round(clean)

        if FeeField.REFERRAL not in fees:
            fee, warning = self.referral_fee(sale_price, request.category)
            fees[FeeField.REFERRAL] = fee
            if warning:
                warnings.append(warning)

        if FeeField.FULFILLMENT not in fees:
            fee, warning = self.fulfillment_fee(dims, sale_price, request.mode, request.flags)
            fees[FeeField.FULFILLMENT] = fee
            if warning:
                warnings.append(warning)

        if FeeField.INBOUND_SHIPPING not in fees:
            fees[FeeField.INBOUND_SHIPPING] = self.inbound_shipping_fee(dims, request.mode)

        if FeeField.STORAGE not in fees:
            fees[FeeField.STORAGE] = self.storage_fee(
                dims, request.season, storage_months, request.mode
            )

        if FeeField.PREP not in fees:
            fees[FeeField.PREP] = self.prep_fee(dims)

        if FeeField.ADDITIONAL not in fees:
            fees[FeeField.ADDITIONAL] = self.additional_fees(dims)

        return FeeBreakdown(
            referral_fee=fees[FeeField.REFERRAL],
            fulfillment_fee=fees[FeeField.FULFILLMENT],
            inbound_shipping_fee=fees[FeeField.INBOUND_SHIPPING],
            storage_fee=fees[FeeField.STORAGE],
            prep_fee=fees[FeeField.PREP],
            additional_fees=fees[FeeField.ADDITIONAL],
            warnings=warnings,
        )
