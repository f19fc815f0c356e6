"""Tests for fee calculation."""

from decimal import Decimal

import pytest

from profitcalc.core.dimensions import DimensionNormalizer
from profitcalc.core.fees import FeeCalculator
from profitcalc.core.models import (
    CalculationRequest,
    FeeField,
    FulfillmentMode,
    NormalizedDimensions,
    PricingInputs,
    ProductFlags,
    ProductPhysical,
    SeasonWindow,
    WarningCode,
)
from profitcalc.core.schedule import FeeScheduleConfig


@pytest.fixture
def calculator(schedule: FeeScheduleConfig) -> FeeCalculator:
    return FeeCalculator(schedule)


def normalize(schedule: FeeScheduleConfig, **physical) -> NormalizedDimensions:
    return DimensionNormalizer(schedule).normalize(ProductPhysical(**physical))


class TestReferralFee:
    """Tests for category referral fees."""

    def test_flat_rate(self, calculator: FeeCalculator) -> None:
        fee, warning = calculator.referral_fee(Decimal("29.99"), "Home & Garden")
        # 29.99 * 0.15 = 4.4985
        assert fee == Decimal("4.50")
        assert warning is None

    @pytest.mark.parametrize(
        "price,expected",
        [
            ("12", "0.60"),  # 5% tier
            ("18", "1.80"),  # 10% tier
            ("30", "4.50"),  # category rate
        ],
    )
    def test_price_tiers(self, calculator: FeeCalculator, price: str, expected: str) -> None:
        fee, _ = calculator.referral_fee(Decimal(price), "Apparel & Accessories")
        assert fee == Decimal(expected)

    def test_unknown_category_uses_default(self, calculator: FeeCalculator) -> None:
        fee, warning = calculator.referral_fee(Decimal("20"), "Antique Spaceships")
        assert fee == Decimal("3.00")
        assert warning is not None
        assert warning.code == WarningCode.CATEGORY_DEFAULTED
        assert "Antique Spaceships" in warning.description

    def test_zero_price(self, calculator: FeeCalculator) -> None:
        fee, _ = calculator.referral_fee(Decimal("0"), "Home & Garden")
        assert fee == Decimal("0.00")


class TestFulfillmentFee:
    """Tests for the weight-tiered pick/pack fee."""

    def test_tier_lookup(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight="2.0")
        fee, warning = calculator.fulfillment_fee(
            dims, Decimal("29.99"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # Billable weight 3 lb
        assert fee == Decimal("5.45")
        assert warning is None

    def test_per_pound_overage(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=20, width=10, height=10, weight=2)
        fee, _ = calculator.fulfillment_fee(
            dims, Decimal("50"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 13 lb: 5.75 + 0.40 * (13 - 4)
        assert fee == Decimal("9.35")

    def test_seller_fulfilled_is_free(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig
    ) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        fee, warning = calculator.fulfillment_fee(
            dims, Decimal("29.99"), FulfillmentMode.SELLER_FULFILLED
        )
        assert fee == 0
        assert warning is None

    def test_surcharges_stack(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        flags = ProductFlags(is_apparel=True, is_hazardous=True)
        fee, _ = calculator.fulfillment_fee(
            dims, Decimal("29.99"), FulfillmentMode.PLATFORM_FULFILLED, flags
        )
        # 5.45 + 0.50 apparel + 0.50 hazardous
        assert fee == Decimal("6.45")

    def test_low_price_surcharge(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, weight="0.5")
        fee, _ = calculator.fulfillment_fee(
            dims, Decimal("9.99"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 3.45 + 1.00 below the 10.00 threshold
        assert fee == Decimal("4.45")
        at_threshold, _ = calculator.fulfillment_fee(
            dims, Decimal("10.00"), FulfillmentMode.PLATFORM_FULFILLED
        )
        assert at_threshold == Decimal("3.45")

    def test_bulky_surcharge(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=110, width=4, height=4, weight=10)
        assert dims.is_bulky
        fee, _ = calculator.fulfillment_fee(
            dims, Decimal("100"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 11 lb: 5.75 + 0.40 * 7 = 8.55, plus 20.00 bulky
        assert fee == Decimal("28.55")

    def test_bulky_skips_size_surcharges(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig
    ) -> None:
        # Length plus girth 126 is in the oversize band, but bulky pays only the bulky surcharge
        dims = normalize(schedule, length=110, width=4, height=4)
        assert calculator.surcharge_total(dims, Decimal("100"), ProductFlags()) == Decimal("20.00")

    def test_missing_tier_uses_fallback(self, schedule_factory) -> None:
        bounded = schedule_factory(
            fulfillment_tiers=[
                {"max_weight": "1", "base_fee": "3.00"},
                {"max_weight": "5", "base_fee": "6.00"},
            ],
            fulfillment_fallback={"base_fee": "9.00", "per_unit_fee": "1.00", "overage_from": "5"},
        )
        dims = normalize(bounded, weight="7.5")
        fee, warning = FeeCalculator(bounded).fulfillment_fee(
            dims, Decimal("50"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # Billable 8 lb: 9.00 + 1.00 * 3
        assert fee == Decimal("12.00")
        assert warning is not None
        assert warning.code == WarningCode.WEIGHT_TIER_NOT_FOUND

    def test_missing_tier_without_fallback_uses_last_tier(self, schedule_factory) -> None:
        bounded = schedule_factory(
            fulfillment_tiers=[{"max_weight": "1", "base_fee": "3.00"}]
        )
        dims = normalize(bounded, weight=4)
        fee, warning = FeeCalculator(bounded).fulfillment_fee(
            dims, Decimal("50"), FulfillmentMode.PLATFORM_FULFILLED
        )
        assert fee == Decimal("3.00")
        assert warning.code == WarningCode.WEIGHT_TIER_NOT_FOUND


class TestSizeSurcharges:
    """Tests for oversize and additional oversize bands."""

    @pytest.mark.parametrize(
        "length,width,height,expected",
        [
            ("48", "1", "1", "3.45"),  # longest side at the limit
            ("48.01", "1", "1", "6.45"),  # oversize by longest side
            ("96", "1", "1", "6.45"),  # still oversize
            ("96.01", "1", "1", "23.45"),  # additional oversize by longest side
            ("108", "1", "1", "26.45"),  # additional oversize, and length plus girth 112
            ("30", "30", "1", "3.45"),  # median side at the limit
            ("31", "31", "1", "6.45"),  # oversize by median side
            ("40", "12.5", "12.5", "3.45"),  # length plus girth 90
            ("40", "20", "20", "6.45"),  # length plus girth 120
            ("40", "22.5", "22.5", "6.45"),  # length plus girth 130
            ("40", "23", "23", "23.45"),  # length plus girth 132
            ("45", "30", "30", "23.45"),  # length plus girth 165
        ],
    )
    def test_boundaries(
        self,
        calculator: FeeCalculator,
        schedule: FeeScheduleConfig,
        length: str,
        width: str,
        height: str,
        expected: str,
    ) -> None:
        # Weightless items bill the 1 lb tier (3.45)
        dims = normalize(schedule, length=length, width=width, height=height)
        assert not dims.is_bulky
        fee, _ = calculator.fulfillment_fee(dims, Decimal("50"), FulfillmentMode.PLATFORM_FULFILLED)
        assert fee == Decimal(expected)

    def test_schedule_without_bands(self, schedule_factory) -> None:
        plain = schedule_factory(surcharges={"bulky": "20.00"})
        dims = normalize(plain, length="60", width="1", height="1")
        fee, _ = FeeCalculator(plain).fulfillment_fee(
            dims, Decimal("50"), FulfillmentMode.PLATFORM_FULFILLED
        )
        assert fee == Decimal("3.45")


class TestInboundShipping:
    """Tests for inbound shipping."""

    def test_platform_rate(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        fee = calculator.inbound_shipping_fee(dims, FulfillmentMode.PLATFORM_FULFILLED)
        assert fee == Decimal("1.00")

    def test_dimensional_weight(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=20, width=10, height=10, weight=2)
        fee = calculator.inbound_shipping_fee(dims, FulfillmentMode.PLATFORM_FULFILLED)
        # 2000 / 166 * 0.50 = 6.024...
        assert fee == Decimal("6.02")

    def test_seller_fulfilled_rate(self, schedule_factory) -> None:
        custom = schedule_factory(
            inbound_rates={"platform_fulfilled": "0.50", "seller_fulfilled": "0.30"}
        )
        dims = normalize(custom, length=10, width=8, height=2, weight=2)
        fee = FeeCalculator(custom).inbound_shipping_fee(dims, FulfillmentMode.SELLER_FULFILLED)
        assert fee == Decimal("0.60")


class TestStorageFee:
    """Tests for storage fees."""

    def test_standard_month(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        fee = calculator.storage_fee(
            dims, SeasonWindow.STANDARD, Decimal("1"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 160 / 1728 * 0.75 = 0.069...
        assert fee == Decimal("0.07")

    def test_peak_months(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        fee = calculator.storage_fee(
            dims, SeasonWindow.PEAK, Decimal("3"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 160 / 1728 * 1.50 * 3 = 0.4166...
        assert fee == Decimal("0.42")

    def test_short_peak_stay_uses_standard_rate(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig
    ) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        one_month = calculator.storage_fee(
            dims, SeasonWindow.PEAK, Decimal("1"), FulfillmentMode.PLATFORM_FULFILLED
        )
        longer = calculator.storage_fee(
            dims, SeasonWindow.PEAK, Decimal("1.5"), FulfillmentMode.PLATFORM_FULFILLED
        )
        # 160 / 1728 * 0.75 and 160 / 1728 * 1.50 * 1.5
        assert one_month == Decimal("0.07")
        assert longer == Decimal("0.21")

    def test_seller_fulfilled_not_stored(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig
    ) -> None:
        dims = normalize(schedule, length=10, width=8, height=2, weight=2)
        fee = calculator.storage_fee(
            dims, SeasonWindow.PEAK, Decimal("3"), FulfillmentMode.SELLER_FULFILLED
        )
        assert fee == 0


class TestSellerCosts:
    """Tests for prep and additional cost models."""

    def test_defaults_are_zero(self, calculator: FeeCalculator, schedule: FeeScheduleConfig) -> None:
        dims = normalize(schedule, weight=5)
        assert calculator.prep_fee(dims) == 0
        assert calculator.additional_fees(dims) == 0

    def test_per_weight(self, schedule_factory) -> None:
        custom = schedule_factory(prep_cost={"kind": "per_weight", "rate": "0.50"})
        dims = normalize(custom, weight=2)
        assert FeeCalculator(custom).prep_fee(dims) == Decimal("1.00")

    def test_per_item(self, schedule_factory) -> None:
        custom = schedule_factory(additional_cost={"kind": "each", "rate": "1.25"})
        dims = normalize(custom, weight=40)
        assert FeeCalculator(custom).additional_fees(dims) == Decimal("1.25")


class TestOverrides:
    """Tests for override handling in the full breakdown."""

    def test_override_replaces_computed_fee(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig, sample_request: CalculationRequest
    ) -> None:
        dims = DimensionNormalizer(schedule).normalize(sample_request.physical)
        fees = calculator.calculate(sample_request, dims, {FeeField.FULFILLMENT: Decimal("7.123")})
        assert fees.fulfillment_fee == Decimal("7.12")
        assert fees.referral_fee == Decimal("4.50")

    def test_override_suppresses_warning(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig
    ) -> None:
        request = CalculationRequest(
            pricing=PricingInputs(sale_price="20"), category="Nonexistent"
        )
        dims = DimensionNormalizer(schedule).normalize(request.physical)
        fees = calculator.calculate(request, dims, {FeeField.REFERRAL: Decimal("2")})
        assert fees.referral_fee == Decimal("2.00")
        assert fees.warnings == []

    def test_negative_override_clamped(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig, sample_request: CalculationRequest
    ) -> None:
        dims = DimensionNormalizer(schedule).normalize(sample_request.physical)
        fees = calculator.calculate(sample_request, dims, {FeeField.STORAGE: Decimal("-5")})
        assert fees.storage_fee == Decimal("0.00")

    def test_breakdown_total(
        self, calculator: FeeCalculator, schedule: FeeScheduleConfig, sample_request: CalculationRequest
    ) -> None:
        dims = DimensionNormalizer(schedule).normalize(sample_request.physical)
        fees = calculator.calculate(sample_request, dims)
        assert fees.total == Decimal("11.02")
        assert fees.get(FeeField.INBOUND_SHIPPING) == Decimal("1.00")
