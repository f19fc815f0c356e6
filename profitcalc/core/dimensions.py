"""Dimension and billable weight normalization for Fulfillment Profit Calculator."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from .models import NormalizedDimensions, ProductFlags, ProductPhysical
from .money import clamp_non_negative, round_up_to_increment

if TYPE_CHECKING:
    from .schedule import FeeScheduleConfig, WeightRule

logger = logging.getLogger(__name__)


class DimensionNormalizer:
    """Converts raw measurements into cubic volume and billable weights.

    Inbound carriers and the fulfillment program bill weight independently,
    so each gets its own billable weight from its own rule.
    """

    def __init__(self, schedule: FeeScheduleConfig) -> None:
        """Initialize with a fee schedule."""
        self.schedule = schedule

    def cubic_volume(self, length: Decimal, width: Decimal, height: Decimal) -> Decimal:
        """Calculate volume in the schedule's volume unit."""
        return (length * width * height) / self.schedule.volume_divisor

    def dimensional_weight(
        self, length: Decimal, width: Decimal, height: Decimal, rule: WeightRule
    ) -> Decimal:
        """Calculate the volume-derived weight estimate for a rule."""
        return (length * width * height) / rule.dim_divisor

    def billable_weight(
        self,
        weight: Decimal,
        length: Decimal,
        width: Decimal,
        height: Decimal,
        rule: WeightRule,
    ) -> Decimal:
        """Reconcile actual and dimensional weight, add packaging, round up."""
        if weight < rule.dim_weight_min_actual:
            base = weight
        else:
            base = max(weight, self.dimensional_weight(length, width, height, rule))
        return round_up_to_increment(base + rule.packaging_buffer, rule.rounding_increment)

    def is_bulky(
        self, weight: Decimal, longest_side: Decimal, girth: Decimal
    ) -> bool:
        """Check the product against the schedule's bulky limits."""
        rule = self.schedule.bulky_rule
        return (
            weight > rule.max_weight
            or longest_side > rule.max_longest_side
            or longest_side + girth > rule.max_length_plus_girth
        )

    def normalize(
        self, physical: ProductPhysical, flags: ProductFlags | None = None
    ) -> NormalizedDimensions:
        """Normalize raw measurements for fee calculation."""
        clamped_fields: list[str] = []
        values: dict[str, Decimal] = {}
        for name in ("length", "width", "height", "weight"):
            value, was_clamped = clamp_non_negative(getattr(physical, name))
            if was_clamped:
                clamped_fields.append(name)
            values[name] = value

        if clamped_fields:
            logger.debug(f"Clamped invalid measurements to 0: {', '.join(clamped_fields)}")

        length, width, height, weight = (
            values["length"],
            values["width"],
            values["height"],
            values["weight"],
        )
        sides = sorted([length, width, height])
        longest_side = sides[2]
        median_side = sides[1]
        girth = 2 * (sides[0] + sides[1])

        if flags is not None and flags.is_bulky is not None:
            bulky = flags.is_bulky
        else:
            bulky = self.is_bulky(weight, longest_side, girth)

        return NormalizedDimensions(
            length=length,
            width=width,
            height=height,
            weight=weight,
            cubic_volume=self.cubic_volume(length, width, height),
            longest_side=longest_side,
            median_side=median_side,
            girth=girth,
            inbound_billable_weight=self.billable_weight(
                weight, length, width, height, self.schedule.inbound_weight
            ),
            fulfillment_billable_weight=self.billable_weight(
                weight, length, width, height, self.schedule.fulfillment_weight
            ),
            is_bulky=bulky,
            clamped_fields=clamped_fields,
        )
