"""
Configuration for battery amortization calculations.

One configuration describes exactly one battery and one tariff evaluated
against one CSV export of daily energy data.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import yaml

from battery_calculator.vendors.vendor_catalog import get_vendor


def _number(section: str, key: str, value, default: Optional[float] = None) -> Optional[float]:
    """Convert a YAML value to float; None keeps the default."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{section}.{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{section}.{key} must be a number, got {value!r}") from None


@dataclass
class BatteryConfig:
    """
    Battery parameters.

    None means "take from the vendor catalog": the model's capacity and
    price, and the vendor's default loss percentages.
    """
    capacity_kwh: Optional[float] = None
    model: Optional[str] = None
    price: Optional[float] = None
    charge_loss_percent: Optional[float] = None
    discharge_loss_percent: Optional[float] = None


@dataclass
class TariffConfig:
    """Grid prices (EUR/kWh)."""
    purchase_price_per_kwh: float = 0.30
    feed_price_per_kwh: float = 0.08


@dataclass
class DataSourceConfig:
    """Configuration for the input CSV export."""
    csv_file: str = "data/energy_export.csv"
    vendor: Optional[str] = None

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Convert a relative CSV path to an absolute path.

        Args:
            base_dir: Base directory for resolving relative paths
        """
        csv_path = Path(self.csv_file)
        if not csv_path.is_absolute():
            csv_path = Path(base_dir) / csv_path
        self.csv_file = str(csv_path.resolve())


@dataclass
class CalculatorConfig:
    """
    Master configuration for a battery amortization calculation.
    """
    battery: BatteryConfig = field(default_factory=BatteryConfig)
    tariff: TariffConfig = field(default_factory=TariffConfig)
    data_source: DataSourceConfig = field(default_factory=DataSourceConfig)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "CalculatorConfig":
        """
        Load calculator configuration from YAML file.

        Relative CSV paths are resolved against the YAML file's directory.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            CalculatorConfig instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML is empty or not a mapping, or a numeric
                setting is not a number
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None or not isinstance(config_dict, dict):
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

        config = cls()

        if 'battery' in config_dict:
            battery_dict = config_dict['battery'] or {}
            config.battery = BatteryConfig(
                capacity_kwh=_number('battery', 'capacity_kwh', battery_dict.get('capacity_kwh')),
                model=None if battery_dict.get('model') is None else str(battery_dict['model']),
                price=_number('battery', 'price', battery_dict.get('price')),
                charge_loss_percent=_number(
                    'battery', 'charge_loss_percent', battery_dict.get('charge_loss_percent')),
                discharge_loss_percent=_number(
                    'battery', 'discharge_loss_percent', battery_dict.get('discharge_loss_percent')),
            )

        if 'tariff' in config_dict:
            tariff_dict = config_dict['tariff'] or {}
            config.tariff = TariffConfig(
                purchase_price_per_kwh=_number(
                    'tariff', 'purchase_price_per_kwh', tariff_dict.get('purchase_price_per_kwh'), 0.30),
                feed_price_per_kwh=_number(
                    'tariff', 'feed_price_per_kwh', tariff_dict.get('feed_price_per_kwh'), 0.08),
            )

        if 'data_source' in config_dict:
            data_dict = config_dict['data_source'] or {}
            config.data_source = DataSourceConfig(
                csv_file=data_dict.get('csv_file', 'data/energy_export.csv'),
                vendor=data_dict.get('vendor'),
            )

        config.data_source.resolve_paths(yaml_path.parent)

        return config

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML file
        """
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = {
            'battery': {
                'capacity_kwh': self.battery.capacity_kwh,
                'model': self.battery.model,
                'price': self.battery.price,
                'charge_loss_percent': self.battery.charge_loss_percent,
                'discharge_loss_percent': self.battery.discharge_loss_percent,
            },
            'tariff': {
                'purchase_price_per_kwh': self.tariff.purchase_price_per_kwh,
                'feed_price_per_kwh': self.tariff.feed_price_per_kwh,
            },
            'data_source': {
                'csv_file': self.data_source.csv_file,
                'vendor': self.data_source.vendor,
            },
        }

        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If configuration is invalid
            FileNotFoundError: If the CSV file doesn't exist
        """
        if self.battery.capacity_kwh is None and self.battery.model is None:
            raise ValueError("Battery needs either capacity_kwh or a catalog model")
        if self.battery.capacity_kwh is not None and self.battery.capacity_kwh <= 0:
            raise ValueError("Battery capacity_kwh must be positive")
        if self.battery.price is not None and self.battery.price < 0:
            raise ValueError("Battery price must not be negative")

        for attr in ['charge_loss_percent', 'discharge_loss_percent']:
            value = getattr(self.battery, attr)
            if value is not None and not (0 <= value <= 100):
                raise ValueError(f"Battery {attr} must be between 0 and 100")

        if self.tariff.purchase_price_per_kwh < 0:
            raise ValueError("Tariff purchase_price_per_kwh must not be negative")
        if self.tariff.feed_price_per_kwh < 0:
            raise ValueError("Tariff feed_price_per_kwh must not be negative")

        if self.data_source.vendor is not None:
            try:
                get_vendor(self.data_source.vendor)
            except KeyError as e:
                raise ValueError(str(e.args[0])) from e

        csv_path = Path(self.data_source.csv_file)
        if not csv_path.exists():
            raise FileNotFoundError(f"Data file not found: {csv_path}")
