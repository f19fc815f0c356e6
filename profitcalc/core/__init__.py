"""Core fee and profitability logic for Fulfillment Profit Calculator."""

from .config import MetricTargets, Settings, get_settings
from .dimensions import DimensionNormalizer
from .engine import ProfitEngine
from .fees import FeeCalculator
from .field_state import FieldGroup, FieldStateTracker
from .models import (
    CalculationRequest,
    CalculationResult,
    CalculationWarning,
    CostSolution,
    FeeField,
    FieldState,
    FieldStatus,
    FulfillmentMode,
    PricingInputs,
    ProductFlags,
    ProductPhysical,
    SeasonWindow,
    WarningCode,
)
from .profitability import ProfitabilityAggregator
from .schedule import ConfigurationError, FeeScheduleConfig, default_schedule, load_schedule

__all__ = [
    "MetricTargets",
    "Settings",
    "get_settings",
    "DimensionNormalizer",
    "ProfitEngine",
    "FeeCalculator",
    "FieldGroup",
    "FieldStateTracker",
    "CalculationRequest",
    "CalculationResult",
    "CalculationWarning",
    "CostSolution",
    "FeeField",
    "FieldState",
    "FieldStatus",
    "FulfillmentMode",
    "PricingInputs",
    "ProductFlags",
    "ProductPhysical",
    "SeasonWindow",
    "WarningCode",
    "ProfitabilityAggregator",
    "ConfigurationError",
    "FeeScheduleConfig",
    "default_schedule",
    "load_schedule",
]
