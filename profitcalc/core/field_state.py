"""Per-field override tracking for Fulfillment Profit Calculator."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from .models import FeeField, FieldState, FieldStatus

logger = logging.getLogger(__name__)


class FieldGroup(str, Enum):
    """Fee fields that are reset together."""

    MARKETPLACE = "marketplace"
    SHIPPING = "shipping"
    SELLER_COSTS = "seller_costs"
    ALL = "all"


FIELD_GROUPS: dict[FieldGroup, tuple[FeeField, ...]] = {
    FieldGroup.MARKETPLACE: (FeeField.REFERRAL,),
    FieldGroup.SHIPPING: (FeeField.FULFILLMENT, FeeField.INBOUND_SHIPPING, FeeField.STORAGE),
    FieldGroup.SELLER_COSTS: (FeeField.PREP, FeeField.ADDITIONAL),
    FieldGroup.ALL: tuple(FeeField),
}


class FieldStateTracker:
    """Tracks which fee fields the user has overridden, per product.

    Every field starts DERIVED. Any edit makes it OVERRIDDEN; only an explicit
    reset (field, group or whole product) makes it DERIVED again.
    """

    def __init__(self) -> None:
        """Initialize an empty tracker for the session."""
        self._overrides: dict[str, dict[FeeField, str]] = {}

    def record_edit(self, product_id: str, fee_field: FeeField, raw_value: str) -> FieldState:
        """Record a user edit, freezing the field at the entered value."""
        self._overrides.setdefault(product_id, {})[fee_field] = raw_value
        logger.debug(f"{product_id}: {fee_field.value} overridden with '{raw_value}'")
        return self.get(product_id, fee_field)

    def get(self, product_id: str, fee_field: FeeField) -> FieldState:
        """Get the state of one field."""
        raw_value = self._overrides.get(product_id, {}).get(fee_field)
        if raw_value is None:
            return FieldState(field=fee_field)
        return FieldState(field=fee_field, status=FieldStatus.OVERRIDDEN, raw_value=raw_value)

    def states(self, product_id: str) -> list[FieldState]:
        """Get the state of every fee field for a product."""
        return [self.get(product_id, fee_field) for fee_field in FeeField]

    def is_overridden(self, product_id: str, fee_field: FeeField) -> bool:
        """Check whether a field is frozen by a user edit."""
        return fee_field in self._overrides.get(product_id, {})

    def overridden_fields(self, product_id: str) -> list[FeeField]:
        """Get the overridden fields for a product, in field order."""
        overrides = self._overrides.get(product_id, {})
        return [f for f in FeeField if f in overrides]

    def reset_field(self, product_id: str, fee_field: FeeField) -> None:
        """Return one field to DERIVED."""
        self._reset(product_id, (fee_field,))

    def reset_group(self, product_id: str, group: FieldGroup) -> None:
        """Return every field in a group to DERIVED."""
        self._reset(product_id, FIELD_GROUPS[group])

    def reset_product(self, product_id: str) -> None:
        """Return every field of a product to DERIVED."""
        if self._overrides.pop(product_id, None) is not None:
            logger.debug(f"{product_id}: all fee overrides reset")

    def _reset(self, product_id: str, fields: tuple[FeeField, ...]) -> None:
        overrides = self._overrides.get(product_id)
        if not overrides:
            return
        removed = [f for f in fields if overrides.pop(f, None) is not None]
        if not overrides:
            del self._overrides[product_id]
        if removed:
            logger.debug(f"{product_id}: reset {', '.join(f.value for f in removed)}")

    def snapshot(self, product_id: str) -> dict[str, str]:
        """Get the overrides for a product as plain strings for the host to persist."""
        overrides = self._overrides.get(product_id, {})
        return {f.value: overrides[f] for f in FeeField if f in overrides}

    def restore(self, product_id: str, saved: Mapping[str, str]) -> None:
        """Replace a product's overrides with previously persisted ones.

        Unknown field names are skipped.
        """
        restored: dict[FeeField, str] = {}
        for name, raw_value in saved.items():
            try:
                fee_field = FeeField(name)
            except ValueError:
                logger.warning(f"{product_id}: ignoring saved override for unknown field '{name}'")
                continue
            restored[fee_field] = str(raw_value)

        if restored:
            self._overrides[product_id] = restored
        else:
            self._overrides.pop(product_id, None)
