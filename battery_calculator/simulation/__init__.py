"""
Battery simulation and amortization.

Components:
    - HomeBattery: Charge level with charge/discharge losses
    - BatterySimulationEngine: Day-by-day simulation over energy records
    - AmortizationCalculator: Savings and payback period
    - BatteryCalculation: End-to-end facade (config/CSV → result)
"""

from .battery_model import HomeBattery, validate_battery_parameters
from .engine import BatterySimulationEngine, DailySimulationOutcome, outcomes_to_dataframe
from .amortization import AmortizationCalculator, AmortizationResult, calculate_payback_years
from .battery_simulation import BatteryCalculation

__all__ = [
    'HomeBattery',
    'validate_battery_parameters',
    'BatterySimulationEngine',
    'DailySimulationOutcome',
    'outcomes_to_dataframe',
    'AmortizationCalculator',
    'AmortizationResult',
    'calculate_payback_years',
    'BatteryCalculation',
]
