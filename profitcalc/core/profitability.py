"""Profit, margin and ROI aggregation for Fulfillment Profit Calculator."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from .models import CalculationResult, CostSolution, FeeBreakdown, ProfitSummary, TargetCheck
from .money import CENT, HUNDRED, ZERO, Numeric, clamp_non_negative, round_money, round_percent, to_decimal

if TYPE_CHECKING:
    from .config import MetricTargets


class ProfitabilityAggregator:
    """Sums fees against price and cost, and solves cost for a target margin."""

    DEFAULT_STARTING_COST_DIVISOR = Decimal("3")

    def __init__(self, currency_precision: Decimal = CENT) -> None:
        """Initialize with the currency precision used for presentation."""
        self.currency_precision = currency_precision

    def summarize(
        self, sale_price: Numeric, product_cost: Numeric, fees: FeeBreakdown
    ) -> ProfitSummary:
        """Calculate total fees, profit, margin and ROI."""
        sale, _ = clamp_non_negative(sale_price)
        cost, _ = clamp_non_negative(product_cost)

        total_fees = fees.total
        # Margin and ROI use the unrounded profit; only presentation values are rounded
        profit = sale - cost - total_fees

        if sale > 0:
            margin = round_percent(profit / sale * HUNDRED)
            margin_valid = True
        else:
            margin = ZERO
            margin_valid = False

        if cost > 0:
            roi = round_percent(profit / cost * HUNDRED)
            roi_valid = True
        else:
            roi = ZERO
            roi_valid = False

        return ProfitSummary(
            total_fees=total_fees,
            total_profit=round_money(profit, self.currency_precision),
            margin=margin,
            margin_valid=margin_valid,
            roi=roi,
            roi_valid=roi_valid,
        )

    def solve_cost_for_margin(
        self, sale_price: Numeric, total_fees: Decimal, target_margin: Numeric
    ) -> CostSolution:
        """Solve the product cost that yields target_margin percent.

        cost = sale_price * (1 - target_margin / 100) - total_fees

        Valid only while every fee is independent of product cost. The cost is
        returned at full precision so the forward calculation reproduces the
        target margin.
        """
        target = to_decimal(target_margin)
        if target is None or not target.is_finite():
            raise ValueError(f"Target margin must be a finite number: {target_margin}")

        sale, _ = clamp_non_negative(sale_price)
        cost = sale * (1 - target / HUNDRED) - total_fees

        return CostSolution(
            target_margin=target,
            sale_price=sale,
            total_fees=total_fees,
            product_cost=cost,
            is_feasible=sale > 0 and cost >= 0,
        )

    def suggest_starting_cost(
        self, sale_price: Numeric, divisor: Decimal = DEFAULT_STARTING_COST_DIVISOR
    ) -> Decimal:
        """Suggest an opening product cost as a fraction of the sale price."""
        sale, _ = clamp_non_negative(sale_price)
        if divisor <= 0:
            return ZERO
        return round_money(sale / divisor, self.currency_precision)

    def check_targets(self, result: CalculationResult, targets: MetricTargets) -> TargetCheck:
        """Compare a result against the seller's minimum profit, margin and ROI."""
        return TargetCheck(
            meets_profit=result.total_profit >= targets.min_profit,
            meets_margin=result.margin_valid and result.margin >= targets.min_margin,
            meets_roi=result.roi_valid and result.roi >= targets.min_roi,
        )
