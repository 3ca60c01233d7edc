"""
Home Battery Amortization Calculator

Estimates whether a home battery pays for itself, based on a household's
historical daily energy export (generation, consumption, grid feed and grid
draw) from the inverter portal.

Main Components:
- Data: CSV ingestion, column mapping, EnergyRecord
- Vendors: Export format detection, default losses, battery catalogs
- Simulation: Day-by-day battery simulation with charge/discharge losses
- Amortization: Savings, annualized savings and payback period
- Infrastructure: Memoized battery price lookup
- Configuration: YAML-backed dataclasses

Quick Start:
    >>> from battery_calculator import BatteryCalculation
    >>>
    >>> calculation = BatteryCalculation.from_config("configs/default.yaml")
    >>> result = calculation.run()
    >>> print(f"Annual savings: {result.annual_savings:.2f} EUR")
    >>> print(f"Payback: {result.amortization_period_years:.1f} years")

Step by step:
    >>> from battery_calculator.data import load_energy_records
    >>> from battery_calculator.simulation import BatterySimulationEngine, AmortizationCalculator
    >>>
    >>> records = load_energy_records("export.csv")
    >>> outcomes = BatterySimulationEngine().simulate(records, 10.2, 5.0, 5.0)
    >>> result = AmortizationCalculator().calculate(outcomes, records, 0.30, 0.08, 6500)

Dependency Flow:
    simulation → data, vendors, infrastructure, config
    (data and vendors have no dependencies on other modules)
"""

from battery_calculator.config import CalculatorConfig
from battery_calculator.data import (
    ColumnMapping,
    EnergyRecord,
    create_auto_mapping,
    load_energy_records,
    read_headers,
)
from battery_calculator.infrastructure.pricing import BatteryPriceService
from battery_calculator.simulation import (
    AmortizationCalculator,
    AmortizationResult,
    BatteryCalculation,
    BatterySimulationEngine,
    DailySimulationOutcome,
)
from battery_calculator.vendors import BatteryModel, VendorProfile, detect_vendor

__version__ = "0.1.0"

__all__ = [
    "CalculatorConfig",
    "ColumnMapping",
    "EnergyRecord",
    "create_auto_mapping",
    "load_energy_records",
    "read_headers",
    "BatteryPriceService",
    "AmortizationCalculator",
    "AmortizationResult",
    "BatteryCalculation",
    "BatterySimulationEngine",
    "DailySimulationOutcome",
    "BatteryModel",
    "VendorProfile",
    "detect_vendor",
]
