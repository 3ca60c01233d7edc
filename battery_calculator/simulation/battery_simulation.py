"""
BatteryCalculation facade.

Wires CSV ingestion, vendor detection, battery simulation and amortization
into a single call, driven either by a YAML configuration or by records the
caller already holds.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging

from battery_calculator.config.calculator_config import CalculatorConfig
from battery_calculator.data.csv_loader import load_energy_records, read_headers
from battery_calculator.data.energy_record import EnergyRecord
from battery_calculator.infrastructure.pricing.battery_price_service import BatteryPriceService
from battery_calculator.simulation.amortization import AmortizationCalculator, AmortizationResult
from battery_calculator.simulation.engine import BatterySimulationEngine
from battery_calculator.vendors.vendor_catalog import VendorProfile, detect_vendor, get_vendor

logger = logging.getLogger(__name__)


class BatteryCalculation:
    """
    One battery/tariff evaluation.

    Examples:
        # From YAML configuration
        >>> calculation = BatteryCalculation.from_config('configs/default.yaml')
        >>> result = calculation.run()

        # From records already in memory
        >>> result = BatteryCalculation.run_records(
        ...     records, capacity_kwh=10.2, battery_price=6500,
        ...     purchase_price_per_kwh=0.30, feed_price_per_kwh=0.08,
        ...     charge_loss_percent=5, discharge_loss_percent=5)
    """

    def __init__(
        self,
        config: CalculatorConfig,
        price_service: Optional[BatteryPriceService] = None
    ):
        """
        Initialize battery calculation.

        Args:
            config: Calculator configuration
            price_service: Price lookup for catalog batteries without a price
        """
        self.config = config
        self.price_service = price_service if price_service is not None else BatteryPriceService()
        self.vendor: Optional[VendorProfile] = None
        self.records: List[EnergyRecord] = []

    @classmethod
    def from_config(cls, config_path: str) -> "BatteryCalculation":
        """
        Create calculation from YAML config file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            BatteryCalculation instance
        """
        config = CalculatorConfig.from_yaml(config_path)
        return cls(config=config)

    def run(self) -> AmortizationResult:
        """
        Load the CSV export, simulate the battery and compute amortization.

        Returns:
            AmortizationResult

        Raises:
            FileNotFoundError: If the CSV file doesn't exist
            ValueError: If configuration or CSV data is invalid, or the
                battery price cannot be determined
        """
        self.config.validate()

        csv_path = Path(self.config.data_source.csv_file)
        headers = read_headers(csv_path)
        self.records = load_energy_records(csv_path)

        self.vendor = self._resolve_vendor(headers, csv_path.name)
        capacity_kwh, battery_price = self._resolve_battery(self.vendor)

        logger.info(
            "Evaluating %.2f kWh battery (vendor %s, losses %.1f%%/%.1f%%) over %d days",
            capacity_kwh, self.vendor.name, self.vendor.charge_loss_percent,
            self.vendor.discharge_loss_percent, len(self.records)
        )

        return self.run_records(
            self.records,
            capacity_kwh=capacity_kwh,
            battery_price=battery_price,
            purchase_price_per_kwh=self.config.tariff.purchase_price_per_kwh,
            feed_price_per_kwh=self.config.tariff.feed_price_per_kwh,
            charge_loss_percent=self.vendor.charge_loss_percent,
            discharge_loss_percent=self.vendor.discharge_loss_percent,
        )

    @staticmethod
    def run_records(
        records: Sequence[EnergyRecord],
        capacity_kwh: float,
        battery_price: float,
        purchase_price_per_kwh: float,
        feed_price_per_kwh: float,
        charge_loss_percent: float,
        discharge_loss_percent: float,
    ) -> AmortizationResult:
        """
        Simulate and amortize a battery over the given records.

        Returns:
            AmortizationResult
        """
        outcomes = BatterySimulationEngine().simulate(
            records,
            capacity_kwh=capacity_kwh,
            charge_loss_percent=charge_loss_percent,
            discharge_loss_percent=discharge_loss_percent,
        )
        return AmortizationCalculator().calculate(
            outcomes,
            records,
            purchase_price_per_kwh=purchase_price_per_kwh,
            feed_price_per_kwh=feed_price_per_kwh,
            battery_price=battery_price,
        )

    def _resolve_vendor(self, headers: Sequence[str], filename: str) -> VendorProfile:
        """Pick the vendor and apply configured loss overrides."""
        if self.config.data_source.vendor:
            vendor = get_vendor(self.config.data_source.vendor)
        else:
            vendor = detect_vendor(headers, filename)

        battery = self.config.battery
        if battery.charge_loss_percent is not None or battery.discharge_loss_percent is not None:
            vendor = vendor.with_losses(battery.charge_loss_percent, battery.discharge_loss_percent)

        return vendor

    def _resolve_battery(self, vendor: VendorProfile) -> Tuple[float, float]:
        """
        Determine capacity and price from configuration and vendor catalog.

        Returns:
            Tuple of (capacity_kwh, battery_price)
        """
        battery = self.config.battery
        capacity_kwh = battery.capacity_kwh
        price = battery.price

        if battery.model is not None:
            model = vendor.find_battery(battery.model)
            if model is None:
                raise ValueError(
                    f"Battery model '{battery.model}' not in {vendor.name} catalog: "
                    f"{[b.name for b in vendor.batteries]}"
                )
            if capacity_kwh is None:
                capacity_kwh = model.capacity_kwh
            if price is None:
                price = self.price_service.fetch_price(model)

        if price is None:
            raise ValueError(
                "Battery price is unknown. Set battery.price in the configuration."
            )

        return capacity_kwh, price
