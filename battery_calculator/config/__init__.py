"""
Configuration module for battery amortization calculations.

Provides dataclass-based configuration management with YAML support.

Usage:
    >>> from battery_calculator.config import CalculatorConfig
    >>>
    >>> config = CalculatorConfig.from_yaml("configs/default.yaml")
    >>> config.validate()
    >>> print(config.battery.capacity_kwh)
"""

from .calculator_config import (
    CalculatorConfig,
    BatteryConfig,
    TariffConfig,
    DataSourceConfig,
)

__all__ = [
    "CalculatorConfig",
    "BatteryConfig",
    "TariffConfig",
    "DataSourceConfig",
]
