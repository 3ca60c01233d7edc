"""
Day-by-day battery simulation over historical energy records.

For each day the battery first discharges to cover that day's grid draw, then
charges from that day's grid feed. The charge level carries over to the next
day; the battery starts empty.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence
import logging

import pandas as pd

from battery_calculator.data.energy_record import EnergyRecord
from battery_calculator.simulation.battery_model import HomeBattery, validate_battery_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailySimulationOutcome:
    """
    Battery operation for a single day. All energies in kWh.

    Attributes:
        date: Simulated calendar date
        battery_charge_start_kwh: Charge level at start of day
        battery_charge_end_kwh: Charge level at end of day
        energy_discharged_kwh: Energy delivered by the battery (after discharge loss)
        energy_charged_kwh: Energy stored in the battery (after charge loss)
        original_grid_draw_kwh: Grid draw without battery
        grid_draw_after_battery_kwh: Grid draw with battery
        original_grid_feed_kwh: Grid feed without battery
        grid_feed_after_battery_kwh: Grid feed with battery
    """
    date: date
    battery_charge_start_kwh: float
    battery_charge_end_kwh: float
    energy_discharged_kwh: float
    energy_charged_kwh: float
    original_grid_draw_kwh: float
    grid_draw_after_battery_kwh: float
    original_grid_feed_kwh: float
    grid_feed_after_battery_kwh: float

    @property
    def energy_saved_from_discharge_kwh(self) -> float:
        """Grid purchase avoided by discharging."""
        return self.original_grid_draw_kwh - self.grid_draw_after_battery_kwh

    @property
    def energy_used_for_charging_kwh(self) -> float:
        """Grid feed given up for charging."""
        return self.original_grid_feed_kwh - self.grid_feed_after_battery_kwh


class BatterySimulationEngine:
    """
    Sequential battery simulation with charge/discharge losses.

    The engine is stateless between calls; every call to :meth:`simulate`
    starts with an empty battery.

    Usage:
        >>> engine = BatterySimulationEngine()
        >>> outcomes = engine.simulate(records, capacity_kwh=10.2,
        ...                            charge_loss_percent=5, discharge_loss_percent=5)
        >>> outcomes[-1].battery_charge_end_kwh
    """

    def simulate(
        self,
        records: Sequence[EnergyRecord],
        capacity_kwh: float,
        charge_loss_percent: float,
        discharge_loss_percent: float,
    ) -> List[DailySimulationOutcome]:
        """
        Simulate battery operation day by day.

        Args:
            records: Daily energy records (sorted by date before simulating)
            capacity_kwh: Battery capacity [kWh], must be positive
            charge_loss_percent: Charge loss [%], 0-100
            discharge_loss_percent: Discharge loss [%], 0-100

        Returns:
            One DailySimulationOutcome per record, in date order

        Raises:
            ValueError: If capacity or loss percentages are out of range
        """
        validate_battery_parameters(capacity_kwh, charge_loss_percent, discharge_loss_percent)

        battery = HomeBattery(
            capacity_kwh=capacity_kwh,
            charge_loss_percent=charge_loss_percent,
            discharge_loss_percent=discharge_loss_percent,
        )

        outcomes = []
        # sorted() is stable: records sharing a date keep their input order
        for day in sorted(records, key=lambda record: record.date):
            outcomes.append(self._simulate_day(battery, day))

        if outcomes:
            logger.info(
                "Simulated %d days with %.2f kWh battery (final charge %.2f kWh)",
                len(outcomes), capacity_kwh, outcomes[-1].battery_charge_end_kwh
            )
        else:
            logger.info("No energy records to simulate")

        return outcomes

    @staticmethod
    def _simulate_day(battery: HomeBattery, day: EnergyRecord) -> DailySimulationOutcome:
        """Run discharge then charge for one day."""
        charge_start = battery.charge_kwh
        grid_draw = day.energy_drawn_from_grid_kwh
        grid_feed = day.energy_fed_to_grid_kwh

        # Step 1: discharge to reduce grid draw
        energy_delivered = battery.discharge(grid_draw)

        # Step 2: charge from grid feed
        energy_stored, feed_consumed = battery.charge(grid_feed)

        # Step 3: keep charge within physical bounds
        charge_end = battery.settle()

        return DailySimulationOutcome(
            date=day.date,
            battery_charge_start_kwh=charge_start,
            battery_charge_end_kwh=charge_end,
            energy_discharged_kwh=energy_delivered,
            energy_charged_kwh=energy_stored,
            original_grid_draw_kwh=grid_draw,
            grid_draw_after_battery_kwh=grid_draw - energy_delivered,
            original_grid_feed_kwh=grid_feed,
            grid_feed_after_battery_kwh=grid_feed - feed_consumed,
        )


def outcomes_to_dataframe(outcomes: Iterable[DailySimulationOutcome]) -> pd.DataFrame:
    """
    Convert simulation outcomes to a DataFrame indexed by date.

    Includes the derived energy_saved_from_discharge_kwh and
    energy_used_for_charging_kwh columns.
    """
    rows = []
    for outcome in outcomes:
        rows.append({
            'date': outcome.date,
            'battery_charge_start_kwh': outcome.battery_charge_start_kwh,
            'battery_charge_end_kwh': outcome.battery_charge_end_kwh,
            'energy_discharged_kwh': outcome.energy_discharged_kwh,
            'energy_charged_kwh': outcome.energy_charged_kwh,
            'original_grid_draw_kwh': outcome.original_grid_draw_kwh,
            'grid_draw_after_battery_kwh': outcome.grid_draw_after_battery_kwh,
            'original_grid_feed_kwh': outcome.original_grid_feed_kwh,
            'grid_feed_after_battery_kwh': outcome.grid_feed_after_battery_kwh,
            'energy_saved_from_discharge_kwh': outcome.energy_saved_from_discharge_kwh,
            'energy_used_for_charging_kwh': outcome.energy_used_for_charging_kwh,
        })

    columns = [
        'date',
        'battery_charge_start_kwh',
        'battery_charge_end_kwh',
        'energy_discharged_kwh',
        'energy_charged_kwh',
        'original_grid_draw_kwh',
        'grid_draw_after_battery_kwh',
        'original_grid_feed_kwh',
        'grid_feed_after_battery_kwh',
        'energy_saved_from_discharge_kwh',
        'energy_used_for_charging_kwh',
    ]
    return pd.DataFrame(rows, columns=columns).set_index('date')
