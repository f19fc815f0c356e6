"""Pytest configuration and fixtures."""

from __future__ import annotations

import copy
from decimal import Decimal
from typing import Any, Callable

import pytest

from profitcalc.core import config as core_config
from profitcalc.core.engine import ProfitEngine
from profitcalc.core.field_state import FieldStateTracker
from profitcalc.core.models import (
    CalculationRequest,
    FulfillmentMode,
    PricingInputs,
    ProductPhysical,
    SeasonWindow,
)
from profitcalc.core.rates import DEFAULT_SCHEDULE
from profitcalc.core.schedule import FeeScheduleConfig, default_schedule, load_schedule


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep config and log files out of the real home directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in ("PFC_SCHEDULE_PATH", "PFC_SEASON", "PFC_FULFILLMENT_MODE", "PFC_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    core_config._settings = None
    yield tmp_path
    core_config._settings = None


@pytest.fixture
def schedule() -> FeeScheduleConfig:
    """Built-in fee schedule."""
    return default_schedule()


@pytest.fixture
def schedule_factory() -> Callable[..., FeeScheduleConfig]:
    """Build a schedule from the built-in one with top-level keys replaced."""

    def make(**changes: Any) -> FeeScheduleConfig:
        data = copy.deepcopy(DEFAULT_SCHEDULE)
        data.update(changes)
        return load_schedule(data)

    return make


@pytest.fixture
def engine(schedule: FeeScheduleConfig) -> ProfitEngine:
    return ProfitEngine(schedule)


@pytest.fixture
def tracker() -> FieldStateTracker:
    return FieldStateTracker()


@pytest.fixture
def sample_request() -> CalculationRequest:
    """29.99 sale, 10.00 cost, 2 lb, 10x8x2 in, 15% category, one standard month."""
    return CalculationRequest(
        physical=ProductPhysical(
            length=Decimal("10"), width=Decimal("8"), height=Decimal("2"), weight=Decimal("2.0")
        ),
        pricing=PricingInputs(sale_price=Decimal("29.99"), product_cost=Decimal("10.00")),
        mode=FulfillmentMode.PLATFORM_FULFILLED,
        category="Home & Garden",
        season=SeasonWindow.STANDARD,
        storage_months=Decimal("1"),
    )
