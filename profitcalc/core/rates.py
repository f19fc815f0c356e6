"""Built-in fee schedule for Fulfillment Profit Calculator.

Rates follow the marketplace's published seller fee tables as consumed by the
pricing panel. Replace them by pointing ``PFC_SCHEDULE_PATH`` at a JSON file
with the same shape when the marketplace revises its fees.
"""

from __future__ import annotations

from typing import Any

DEFAULT_CATEGORY = "Everything Else (Most Items)"

# Referral rate by contract category. "price_tiers" apply the tier rate up to
# and including max_price, otherwise the category rate applies.
REFERRAL_RATES: dict[str, dict[str, Any]] = {
    "Apparel & Accessories": {
        "rate": "0.15",
        "price_tiers": [
            {"max_price": "15", "rate": "0.05"},
            {"max_price": "20", "rate": "0.10"},
        ],
    },
    "Automotive & Powersports": {"rate": "0.12"},
    "Automotive Electronics": {"rate": "0.15"},
    "Baby": {"rate": "0.15", "price_tiers": [{"max_price": "10", "rate": "0.08"}]},
    "Beauty": {"rate": "0.15", "price_tiers": [{"max_price": "10", "rate": "0.08"}]},
    "Books": {"rate": "0.15"},
    "Camera & Photo": {"rate": "0.08"},
    "Cell Phones": {"rate": "0.08"},
    "Consumer Electronics": {"rate": "0.08"},
    "Electronics Accessories": {
        "rate": "0.08",
        "price_tiers": [{"max_price": "100", "rate": "0.15"}],
    },
    "Indoor & Outdoor Furniture": {
        "rate": "0.10",
        "price_tiers": [{"max_price": "200", "rate": "0.15"}],
    },
    "Decor": {"rate": "0.15"},
    "Gourmet Food": {"rate": "0.15"},
    "Grocery": {"rate": "0.15", "price_tiers": [{"max_price": "10", "rate": "0.08"}]},
    "Health & Personal Care": {
        "rate": "0.15",
        "price_tiers": [{"max_price": "10", "rate": "0.08"}],
    },
    "Home & Garden": {"rate": "0.15"},
    "Industrial & Scientific": {"rate": "0.12"},
    "Jewelry": {"rate": "0.05", "price_tiers": [{"max_price": "250", "rate": "0.20"}]},
    "Kitchen": {"rate": "0.15"},
    "Luggage & Travel Accessories": {"rate": "0.15"},
    "Major Appliances": {"rate": "0.08"},
    "Music": {"rate": "0.15"},
    "Musical Instruments": {"rate": "0.12"},
    "Office Products": {"rate": "0.15"},
    "Outdoors": {"rate": "0.15"},
    "Outdoor Power Tools": {
        "rate": "0.08",
        "price_tiers": [{"max_price": "500", "rate": "0.15"}],
    },
    "Personal Computers": {"rate": "0.06"},
    "Pet Supplies": {"rate": "0.15"},
    "Plumbing Heating Cooling & Ventilation": {"rate": "0.10"},
    "Shoes, Handbags & Sunglasses": {"rate": "0.15"},
    "Software & Computer Video Games": {"rate": "0.15"},
    "Sporting Goods": {"rate": "0.15"},
    "Tires & Wheels": {"rate": "0.10"},
    "Tools & Home Improvement": {"rate": "0.15"},
    "Toys & Games": {"rate": "0.15"},
    "Video & DVD": {"rate": "0.15"},
    "Video Game Consoles": {"rate": "0.08"},
    "Video Games": {"rate": "0.15"},
    "Watches": {"rate": "0.03", "price_tiers": [{"max_price": "1500", "rate": "0.15"}]},
    DEFAULT_CATEGORY: {"rate": "0.15"},
}

# Fulfillment fee by billable weight (lb)
FULFILLMENT_TIERS: list[dict[str, Any]] = [
    {"max_weight": "1", "base_fee": "3.45"},
    {"max_weight": "2", "base_fee": "4.95"},
    {"max_weight": "3", "base_fee": "5.45"},
    {"max_weight": "20", "base_fee": "5.75", "per_unit_fee": "0.40", "overage_from": "4"},
    {"max_weight": "30", "base_fee": "15.55", "per_unit_fee": "0.40", "overage_from": "21"},
    {"max_weight": "50", "base_fee": "14.55", "per_unit_fee": "0.40", "overage_from": "31"},
    {"max_weight": None, "base_fee": "17.55", "per_unit_fee": "0.40", "overage_from": "51"},
]

DEFAULT_SCHEDULE: dict[str, Any] = {
    "version": "2024.1",
    "currency_precision": "0.01",
    "volume_divisor": "1728",  # cubic inches per cubic foot
    "default_category": DEFAULT_CATEGORY,
    "referral_rates": REFERRAL_RATES,
    "fulfillment_tiers": FULFILLMENT_TIERS,
    "surcharges": {
        "bulky": "20.00",
        "apparel": "0.50",
        "hazardous": "0.50",
        "low_price": "1.00",
        "low_price_threshold": "10.00",
        "oversize": {
            "amount": "3.00",
            "longest_side": {"over": "48", "up_to": "96"},
            "median_side": {"over": "30"},
            "length_plus_girth": {"over": "105", "up_to": "130"},
        },
        "additional_oversize": {
            "amount": "20.00",
            "longest_side": {"over": "96", "up_to": "108"},
            "length_plus_girth": {"over": "130", "up_to": "165"},
        },
    },
    "bulky_rule": {
        "max_weight": "150",
        "max_longest_side": "108",
        "max_length_plus_girth": "165",
    },
    "inbound_weight": {
        "dim_divisor": "166",
        "packaging_buffer": "0",
        "rounding_increment": "0",
        "dim_weight_min_actual": "0",
    },
    "fulfillment_weight": {
        "dim_divisor": "166",
        "packaging_buffer": "0.25",
        "rounding_increment": "1",
        "dim_weight_min_actual": "1",
    },
    "storage_rates": {"standard": "0.75", "peak": "1.50"},
    "peak_min_months": "1",
    "inbound_rates": {"platform_fulfilled": "0.50", "seller_fulfilled": "0.00"},
    "prep_cost": {"kind": "per_weight", "rate": "0"},
    "additional_cost": {"kind": "per_weight", "rate": "0"},
}
