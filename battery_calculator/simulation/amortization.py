"""
Amortization of a home battery from simulated grid flows.

Compares daily grid costs with and without the battery, extrapolates the
average daily saving to a year and derives the payback period.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence
import logging
import math

import numpy as np
import pandas as pd

from battery_calculator.data.energy_record import EnergyRecord, to_calendar_date
from battery_calculator.simulation.engine import DailySimulationOutcome, outcomes_to_dataframe

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0


@dataclass
class AmortizationResult:
    """
    Economic result of one battery/tariff configuration.

    Attributes:
        battery_price: Battery purchase price (currency)
        total_savings: Savings over the simulated period (currency)
        annual_savings: Average daily savings extrapolated to 365 days
        amortization_period_years: Payback period, math.inf if never paid back
        total_energy_saved_kwh: Grid purchase avoided by discharging
        total_energy_used_for_charging_kwh: Grid feed given up for charging
        total_cost_without_battery: Net grid cost without battery
        total_cost_with_battery: Net grid cost with battery
        daily_results: Simulation outcomes in date order
        unmatched_days: Outcomes without a matching original record (not costed)
    """
    battery_price: float
    total_savings: float = 0.0
    annual_savings: float = 0.0
    amortization_period_years: float = math.inf
    total_energy_saved_kwh: float = 0.0
    total_energy_used_for_charging_kwh: float = 0.0
    total_cost_without_battery: float = 0.0
    total_cost_with_battery: float = 0.0
    daily_results: List[DailySimulationOutcome] = field(default_factory=list)
    unmatched_days: int = 0

    @property
    def amortization_period_months(self) -> float:
        return self.amortization_period_years * 12

    @property
    def simulation_days(self) -> int:
        return len(self.daily_results)

    @property
    def is_profitable(self) -> bool:
        """True if the battery saves money at all (annual savings > 0)."""
        return self.annual_savings > 0

    def summary(self) -> Dict[str, float]:
        """Scalar metrics as a flat dictionary."""
        return {
            'battery_price': self.battery_price,
            'simulation_days': self.simulation_days,
            'unmatched_days': self.unmatched_days,
            'total_cost_without_battery': self.total_cost_without_battery,
            'total_cost_with_battery': self.total_cost_with_battery,
            'total_savings': self.total_savings,
            'annual_savings': self.annual_savings,
            'amortization_period_years': self.amortization_period_years,
            'amortization_period_months': self.amortization_period_months,
            'total_energy_saved_kwh': self.total_energy_saved_kwh,
            'total_energy_used_for_charging_kwh': self.total_energy_used_for_charging_kwh,
            'is_profitable': self.is_profitable,
        }

    def daily_dataframe(self) -> pd.DataFrame:
        """Daily simulation results as a DataFrame indexed by date."""
        return outcomes_to_dataframe(self.daily_results)


def calculate_payback_years(battery_price: float, annual_savings: float) -> float:
    """
    Simple payback period.

    Returns:
        battery_price / annual_savings, or math.inf if annual_savings <= 0
    """
    if annual_savings <= 0:
        return math.inf
    return battery_price / annual_savings


class AmortizationCalculator:
    """
    Calculates battery savings against the original (no battery) grid flows.

    Usage:
        >>> calculator = AmortizationCalculator()
        >>> result = calculator.calculate(outcomes, records,
        ...                               purchase_price_per_kwh=0.30,
        ...                               feed_price_per_kwh=0.08,
        ...                               battery_price=6500)
        >>> print(f"Payback: {result.amortization_period_years:.1f} years")
    """

    def calculate(
        self,
        outcomes: Sequence[DailySimulationOutcome],
        original_records: Sequence[EnergyRecord],
        purchase_price_per_kwh: float,
        feed_price_per_kwh: float,
        battery_price: float,
    ) -> AmortizationResult:
        """
        Calculate the amortization result.

        Days without a matching original record are not costed; they are
        counted in ``unmatched_days`` but still count towards the number of
        simulated days used for annualization.

        Args:
            outcomes: Daily simulation outcomes
            original_records: Energy records without battery
            purchase_price_per_kwh: Grid purchase price (currency/kWh)
            feed_price_per_kwh: Feed-in compensation (currency/kWh)
            battery_price: Battery purchase price (currency)

        Returns:
            AmortizationResult

        Raises:
            ValueError: If original_records contains the same date twice
        """
        records_by_date = self._index_by_date(original_records)

        result = AmortizationResult(
            battery_price=battery_price,
            daily_results=list(outcomes),
        )

        matched = []
        for outcome in result.daily_results:
            original = records_by_date.get(to_calendar_date(outcome.date))
            if original is None:
                result.unmatched_days += 1
                continue
            matched.append((outcome, original))

        if result.unmatched_days:
            logger.warning(
                "%d of %d simulated days have no matching energy record and were not costed",
                result.unmatched_days, len(result.daily_results)
            )

        if matched:
            draw_before = np.array([orig.energy_drawn_from_grid_kwh for _, orig in matched])
            feed_before = np.array([orig.energy_fed_to_grid_kwh for _, orig in matched])
            draw_after = np.array([out.grid_draw_after_battery_kwh for out, _ in matched])
            feed_after = np.array([out.grid_feed_after_battery_kwh for out, _ in matched])

            # Purchase cost (positive) minus feed-in revenue
            cost_without = draw_before * purchase_price_per_kwh - feed_before * feed_price_per_kwh
            cost_with = draw_after * purchase_price_per_kwh - feed_after * feed_price_per_kwh

            result.total_cost_without_battery = float(np.sum(cost_without))
            result.total_cost_with_battery = float(np.sum(cost_with))
            result.total_energy_saved_kwh = float(
                np.sum([out.energy_saved_from_discharge_kwh for out, _ in matched])
            )
            result.total_energy_used_for_charging_kwh = float(
                np.sum([out.energy_used_for_charging_kwh for out, _ in matched])
            )

        result.total_savings = result.total_cost_without_battery - result.total_cost_with_battery

        if result.daily_results:
            daily_savings = result.total_savings / len(result.daily_results)
            result.annual_savings = daily_savings * DAYS_PER_YEAR
        else:
            result.annual_savings = 0.0

        result.amortization_period_years = calculate_payback_years(battery_price, result.annual_savings)

        logger.info(
            "Savings %.2f over %d days (%.2f per year), payback %.1f years",
            result.total_savings, result.simulation_days,
            result.annual_savings, result.amortization_period_years
        )
        return result

    @staticmethod
    def _index_by_date(records: Sequence[EnergyRecord]) -> Dict[date, EnergyRecord]:
        """Build the date lookup, rejecting ambiguous duplicate dates."""
        records_by_date: Dict[date, EnergyRecord] = {}
        for record in records:
            if record.date in records_by_date:
                raise ValueError(
                    f"Duplicate energy record for {record.date.isoformat()}; "
                    "each date may appear only once"
                )
            records_by_date[record.date] = record
        return records_by_date
