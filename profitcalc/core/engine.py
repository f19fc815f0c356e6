"""Calculation engine for Fulfillment Profit Calculator."""

from __future__ import annotations

from .dimensions import DimensionNormalizer
from .fees import FeeCalculator
from .models import (
    CalculationRequest,
    CalculationResult,
    CalculationWarning,
    CostSolution,
    FeeBreakdown,
    FeeField,
    FieldStatus,
    NormalizedDimensions,
    WarningCode,
)
from .money import Numeric, clamp_non_negative
from .profitability import ProfitabilityAggregator
from .schedule import ConfigurationError, FeeScheduleConfig


class ProfitEngine:
    """Computes fees and profitability for one product at a time.

    The engine holds only its schedule; every call is independent and the
    same request always produces the same result.
    """

    def __init__(self, schedule: FeeScheduleConfig) -> None:
        """Initialize with a validated fee schedule."""
        if not isinstance(schedule, FeeScheduleConfig):
            raise ConfigurationError(
                f"ProfitEngine requires a loaded FeeScheduleConfig, got {type(schedule).__name__}"
            )
        self.schedule = schedule
        self.normalizer = DimensionNormalizer(schedule)
        self.fee_calculator = FeeCalculator(schedule)
        self.aggregator = ProfitabilityAggregator(schedule.currency_precision)

    def with_schedule(self, schedule: FeeScheduleConfig) -> "ProfitEngine":
        """Get an engine bound to another schedule."""
        return ProfitEngine(schedule)

    def _calculate_fees(
        self, request: CalculationRequest
    ) -> tuple[NormalizedDimensions, FeeBreakdown, list[CalculationWarning]]:
        dims = self.normalizer.normalize(request.physical, request.flags)
        fees = self.fee_calculator.calculate(request, dims, request.overrides())

        warnings: list[CalculationWarning] = []
        clamped = list(dims.clamped_fields)
        for name in ("sale_price", "product_cost"):
            _, was_clamped = clamp_non_negative(getattr(request.pricing, name))
            if was_clamped:
                clamped.append(name)
        _, months_clamped = clamp_non_negative(request.storage_months)
        if months_clamped:
            clamped.append("storage_months")
        for state in request.field_states:
            if state.is_overridden and clamp_non_negative(state.raw_value)[1]:
                clamped.append(state.field.value)
        if clamped:
            warnings.append(
                CalculationWarning(
                    code=WarningCode.INPUT_CLAMPED,
                    description=f"Invalid values treated as 0: {', '.join(clamped)}",
                )
            )
        warnings.extend(fees.warnings)
        return dims, fees, warnings

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        """Calculate every fee, total profit, margin and ROI."""
        dims, fees, warnings = self._calculate_fees(request)
        summary = self.aggregator.summarize(
            request.pricing.sale_price, request.pricing.product_cost, fees
        )

        overridden = {s.field for s in request.field_states if s.is_overridden}
        field_status = {
            f: FieldStatus.OVERRIDDEN if f in overridden else FieldStatus.DERIVED
            for f in FeeField
        }

        return CalculationResult(
            referral_fee=fees.referral_fee,
            fulfillment_fee=fees.fulfillment_fee,
            inbound_shipping_fee=fees.inbound_shipping_fee,
            storage_fee=fees.storage_fee,
            prep_fee=fees.prep_fee,
            additional_fees=fees.additional_fees,
            total_fees=summary.total_fees,
            total_profit=summary.total_profit,
            margin=summary.margin,
            roi=summary.roi,
            margin_valid=summary.margin_valid,
            roi_valid=summary.roi_valid,
            warnings=warnings,
            dimensions=dims,
            field_status=field_status,
            schedule_version=self.schedule.version,
        )

    def solve_cost_for_margin(
        self, request: CalculationRequest, target_margin: Numeric
    ) -> CostSolution:
        """Solve the product cost that reaches target_margin percent.

        Fees are computed once from the request (its product cost is ignored,
        since no fee depends on it) and held fixed.
        """
        _, fees, _ = self._calculate_fees(request)
        return self.aggregator.solve_cost_for_margin(
            request.pricing.sale_price, fees.total, target_margin
        )
