"""Main entry point for Fulfillment Profit Calculator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal

from profitcalc.core.config import Settings, get_log_dir, get_settings
from profitcalc.core.engine import ProfitEngine
from profitcalc.core.models import (
    CalculationRequest,
    CalculationResult,
    FeeField,
    FieldState,
    FieldStatus,
    FulfillmentMode,
    PricingInputs,
    ProductFlags,
    ProductPhysical,
    SeasonWindow,
)
from profitcalc.core.money import round_money
from profitcalc.core.schedule import ConfigurationError, load_schedule

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    log_file = get_log_dir() / "calculator.log"

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
    )


def _parse_override(value: str) -> FieldState:
    """Parse FIELD=VALUE into an overridden field state."""
    name, sep, raw_value = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"Expected FIELD=VALUE, got '{value}'")
    try:
        fee_field = FeeField(name.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Unknown fee field '{name}'. Choose from: {', '.join(FeeField.values())}"
        ) from None
    return FieldState(field=fee_field, status=FieldStatus.OVERRIDDEN, raw_value=raw_value.strip())


def _parse_mode(value: str) -> FulfillmentMode:
    try:
        return FulfillmentMode.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _parse_season(value: str) -> SeasonWindow:
    try:
        return SeasonWindow.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    product = argparse.ArgumentParser(add_help=False)
    product.add_argument("--price", required=True, help="Sale price")
    product.add_argument("--length", default="0", help="Length (in)")
    product.add_argument("--width", default="0", help="Width (in)")
    product.add_argument("--height", default="0", help="Height (in)")
    product.add_argument("--weight", default="0", help="Weight (lb)")
    product.add_argument("--category", default="", help="Contract category")
    product.add_argument("--mode", type=_parse_mode, help="platform or seller fulfilled")
    product.add_argument("--season", type=_parse_season, help="standard (Jan-Sep) or peak (Oct-Dec)")
    product.add_argument("--months", help="Storage duration in months")
    product.add_argument("--apparel", action="store_true", help="Product is apparel")
    product.add_argument("--hazardous", action="store_true", help="Product is hazardous material")
    product.add_argument("--bulky", action="store_true", default=None, help="Treat product as bulky")
    product.add_argument(
        "--override",
        action="append",
        type=_parse_override,
        default=[],
        metavar="FIELD=VALUE",
        help="Use a fixed amount for a fee field",
    )
    product.add_argument("--schedule", help="Fee schedule JSON file")
    product.add_argument("--json", action="store_true", help="Print JSON")

    parser = argparse.ArgumentParser(
        prog="profitcalc",
        description="Estimate fulfillment fees and profitability for a product.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    calculate = commands.add_parser("calculate", parents=[product], help="Calculate fees and profit")
    calculate.add_argument("--cost", help="Product cost (default: suggested starting cost)")

    solve = commands.add_parser("solve", parents=[product], help="Solve product cost for a margin")
    solve.add_argument("--margin", required=True, help="Target margin percent")

    return parser


def build_request(args: argparse.Namespace, settings: Settings, product_cost: Decimal | str) -> CalculationRequest:
    """Build a calculation request from parsed arguments and settings defaults."""
    return CalculationRequest(
        physical=ProductPhysical(
            length=args.length, width=args.width, height=args.height, weight=args.weight
        ),
        pricing=PricingInputs(sale_price=args.price, product_cost=product_cost),
        mode=args.mode or settings.fulfillment_mode,
        category=args.category,
        season=args.season or settings.season,
        storage_months=args.months if args.months is not None else settings.storage_months,
        field_states=list(args.override),
        flags=ProductFlags(
            is_apparel=args.apparel, is_hazardous=args.hazardous, is_bulky=args.bulky
        ),
    )


def format_result(result: CalculationResult, settings: Settings, engine: ProfitEngine) -> str:
    """Render a result as aligned text."""
    lines = []
    for fee_field in FeeField:
        label = fee_field.value.replace("_", " ").capitalize()
        marker = " (override)" if result.is_overridden(fee_field) else ""
        lines.append(f"{label:<24}{getattr(result, fee_field.value):>10}{marker}")
    lines.append(f"{'Total fees':<24}{result.total_fees:>10}")
    lines.append(f"{'Total profit':<24}{result.total_profit:>10}")
    margin = f"{result.margin}%" if result.margin_valid else "n/a"
    roi = f"{result.roi}%" if result.roi_valid else "n/a"
    lines.append(f"{'Margin':<24}{margin:>10}")
    lines.append(f"{'ROI':<24}{roi:>10}")

    check = engine.aggregator.check_targets(result, settings.targets)
    lines.append(
        "Targets: "
        f"profit {'met' if check.meets_profit else 'not met'}, "
        f"margin {'met' if check.meets_margin else 'not met'}, "
        f"ROI {'met' if check.meets_roi else 'not met'}"
    )
    for warning in result.warnings:
        lines.append(f"Warning [{warning.code.value}]: {warning.description}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        schedule = load_schedule(args.schedule) if args.schedule else settings.load_schedule()
    except ConfigurationError as e:
        logger.error(f"Cannot load fee schedule: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine = ProfitEngine(schedule)

    if args.command == "solve":
        request = build_request(args, settings, product_cost="0")
        try:
            solution = engine.solve_cost_for_margin(request, args.margin)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        cost = round_money(solution.product_cost, schedule.currency_precision)
        if args.json:
            print(
                json.dumps(
                    {
                        "target_margin": str(solution.target_margin),
                        "sale_price": str(solution.sale_price),
                        "total_fees": str(solution.total_fees),
                        "product_cost": str(solution.product_cost),
                        "is_feasible": solution.is_feasible,
                    },
                    indent=2,
                )
            )
        elif solution.is_feasible:
            print(f"Max product cost for {solution.target_margin}% margin: {cost}")
        else:
            print(f"No product cost reaches {solution.target_margin}% margin (fees {solution.total_fees})")
        return 0

    if args.cost is None:
        product_cost: Decimal | str = engine.aggregator.suggest_starting_cost(
            args.price, settings.starting_cost_divisor
        )
    else:
        product_cost = args.cost
    result = engine.calculate(build_request(args, settings, product_cost))

    if args.json:
        print(json.dumps(result.as_dict(), indent=2))
    else:
        print(format_result(result, settings, engine))
    return 0


if __name__ == "__main__":
    sys.exit(main())
