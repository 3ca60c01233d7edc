#!/usr/bin/env python3
"""
Home Battery Amortization Calculator - Entry Point
==================================================

Usage:
    python -m battery_calculator.main run --config configs/default.yaml
    python -m battery_calculator.main calculate export.csv --capacity-kwh 10.2 --battery-price 6500
    python -m battery_calculator.main calculate export.csv --model "HVS 10.2" --battery-price 6500
    python -m battery_calculator.main vendors
"""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

from battery_calculator.config.calculator_config import (
    BatteryConfig,
    CalculatorConfig,
    DataSourceConfig,
    TariffConfig,
)
from battery_calculator.simulation.amortization import AmortizationResult
from battery_calculator.simulation.battery_simulation import BatteryCalculation
from battery_calculator.vendors.vendor_catalog import get_all_vendors


def format_result(result: AmortizationResult) -> str:
    """Plain text summary of an amortization result."""
    if math.isinf(result.amortization_period_years):
        payback = "never (no positive savings)"
    else:
        payback = (f"{result.amortization_period_years:.1f} years "
                   f"({result.amortization_period_months:.0f} months)")

    lines = [
        "=" * 70,
        "Battery Amortization Result",
        "=" * 70,
        f"Simulated days:              {result.simulation_days}",
        f"Battery price:               {result.battery_price:,.2f} EUR",
        f"Grid cost without battery:   {result.total_cost_without_battery:,.2f} EUR",
        f"Grid cost with battery:      {result.total_cost_with_battery:,.2f} EUR",
        f"Total savings:               {result.total_savings:,.2f} EUR",
        f"Annual savings:              {result.annual_savings:,.2f} EUR",
        f"Payback period:              {payback}",
        f"Energy saved (discharge):    {result.total_energy_saved_kwh:,.1f} kWh",
        f"Feed used for charging:      {result.total_energy_used_for_charging_kwh:,.1f} kWh",
    ]
    if result.unmatched_days:
        lines.append(f"Days without energy record:  {result.unmatched_days} (not costed)")
    lines.append("=" * 70)
    return "\n".join(lines)


def format_vendors() -> str:
    """Plain text listing of known vendors and their battery catalogs."""
    lines = []
    for vendor in get_all_vendors():
        editable = " (editable)" if vendor.editable else ""
        lines.append(
            f"{vendor.name}: charge loss {vendor.charge_loss_percent:.1f}%, "
            f"discharge loss {vendor.discharge_loss_percent:.1f}%{editable}"
        )
        for battery in vendor.batteries:
            price = f"{battery.price:.2f} EUR" if battery.price is not None else "price unknown"
            lines.append(f"  - {battery.name}: {battery.capacity_kwh:.1f} kWh, {price}")
    return "\n".join(lines)


def run_from_config(config_path: Path) -> AmortizationResult:
    """
    Run calculation from YAML configuration file.

    Args:
        config_path: Path to YAML configuration file
    """
    calculation = BatteryCalculation.from_config(str(config_path))
    return calculation.run()


def run_calculate(args) -> AmortizationResult:
    """Ad hoc calculation with command-line parameters."""
    config = CalculatorConfig(
        battery=BatteryConfig(
            capacity_kwh=args.capacity_kwh,
            model=args.model,
            price=args.battery_price,
            charge_loss_percent=args.charge_loss,
            discharge_loss_percent=args.discharge_loss,
        ),
        tariff=TariffConfig(
            purchase_price_per_kwh=args.purchase_price,
            feed_price_per_kwh=args.feed_price,
        ),
        data_source=DataSourceConfig(
            csv_file=str(Path(args.csv_file).resolve()),
            vendor=args.vendor,
        ),
    )
    return BatteryCalculation(config).run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Home Battery Amortization Calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run from YAML configuration
  python -m battery_calculator.main run --config configs/default.yaml

  # Ad hoc calculation
  python -m battery_calculator.main calculate export.csv --capacity-kwh 10 --battery-price 6000
  python -m battery_calculator.main calculate export.csv --model "HVS 7.7" --battery-price 4800
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # RUN command (from YAML config)
    run_parser = subparsers.add_parser("run", help="Run calculation from YAML config")
    run_parser.add_argument("--config", type=str, required=True,
                            help="Path to YAML configuration file")

    # CALCULATE command (CLI parameters)
    calc_parser = subparsers.add_parser("calculate", help="Run calculation for a CSV export")
    calc_parser.add_argument("csv_file", type=str,
                             help="CSV export with daily energy data (Wh)")
    calc_parser.add_argument("--capacity-kwh", type=float, default=None,
                             help="Battery capacity (kWh)")
    calc_parser.add_argument("--model", type=str, default=None,
                             help="Catalog battery model (e.g. 'HVS 10.2')")
    calc_parser.add_argument("--battery-price", type=float, default=None,
                             help="Battery price (EUR)")
    calc_parser.add_argument("--purchase-price", type=float, default=0.30,
                             help="Grid purchase price (EUR/kWh)")
    calc_parser.add_argument("--feed-price", type=float, default=0.08,
                             help="Feed-in compensation (EUR/kWh)")
    calc_parser.add_argument("--charge-loss", type=float, default=None,
                             help="Charge loss (%%), overrides vendor default")
    calc_parser.add_argument("--discharge-loss", type=float, default=None,
                             help="Discharge loss (%%), overrides vendor default")
    calc_parser.add_argument("--vendor", type=str, default=None,
                             help="Vendor name, skips auto-detection")

    # VENDORS command
    subparsers.add_parser("vendors", help="List known vendors and batteries")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "vendors":
        print(format_vendors())
        return 0

    try:
        if args.command == "run":
            result = run_from_config(Path(args.config))
        else:
            result = run_calculate(args)
    except (ValueError, FileNotFoundError, KeyError) as e:
        print(f"Error: {e}")
        return 1

    print(format_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
