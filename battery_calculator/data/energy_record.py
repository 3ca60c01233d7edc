"""
Daily energy record as ingested from inverter exports.

All energy values are stored in Wh, the unit used by the exported CSV files.
kWh properties are pure conversions for the simulation and cost calculations.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

import pandas as pd


WH_PER_KWH = 1000.0


def to_calendar_date(value) -> date:
    """Strip time-of-day from a date-like value."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, pd.Timestamp):
        return value.date()
    raise TypeError(f"Expected a date or datetime, got {type(value).__name__}")


@dataclass(frozen=True)
class EnergyRecord:
    """
    Energy measurements for a single calendar day.

    Attributes:
        date: Calendar date of the measurement (time-of-day is discarded)
        total_generation_wh: Total PV generation [Wh]
        total_consumption_wh: Total household consumption [Wh]
        energy_fed_to_grid_wh: Energy exported to the grid [Wh]
        energy_drawn_from_grid_wh: Energy imported from the grid [Wh]
        self_consumption_wh: Generation consumed on-site [Wh] (optional column)
    """
    date: date
    total_generation_wh: float
    total_consumption_wh: float
    energy_fed_to_grid_wh: float
    energy_drawn_from_grid_wh: float
    self_consumption_wh: float = 0.0

    def __post_init__(self):
        """Normalize the date and validate quantities."""
        object.__setattr__(self, 'date', to_calendar_date(self.date))

        for attr in [
            'total_generation_wh',
            'total_consumption_wh',
            'self_consumption_wh',
            'energy_fed_to_grid_wh',
            'energy_drawn_from_grid_wh',
        ]:
            value = getattr(self, attr)
            if value < 0:
                raise ValueError(f"{attr} must be non-negative; received {value!r} for {self.date}")

    @property
    def total_generation_kwh(self) -> float:
        return self.total_generation_wh / WH_PER_KWH

    @property
    def total_consumption_kwh(self) -> float:
        return self.total_consumption_wh / WH_PER_KWH

    @property
    def self_consumption_kwh(self) -> float:
        return self.self_consumption_wh / WH_PER_KWH

    @property
    def energy_fed_to_grid_kwh(self) -> float:
        return self.energy_fed_to_grid_wh / WH_PER_KWH

    @property
    def energy_drawn_from_grid_kwh(self) -> float:
        return self.energy_drawn_from_grid_wh / WH_PER_KWH


def records_to_dataframe(records: Iterable[EnergyRecord]) -> pd.DataFrame:
    """
    Convert energy records to a DataFrame with kWh columns.

    Args:
        records: Energy records in any order

    Returns:
        DataFrame indexed by date (input order preserved)
    """
    rows = [
        {
            'date': record.date,
            'total_generation_kwh': record.total_generation_kwh,
            'total_consumption_kwh': record.total_consumption_kwh,
            'self_consumption_kwh': record.self_consumption_kwh,
            'energy_fed_to_grid_kwh': record.energy_fed_to_grid_kwh,
            'energy_drawn_from_grid_kwh': record.energy_drawn_from_grid_kwh,
        }
        for record in records
    ]
    columns = [
        'date',
        'total_generation_kwh',
        'total_consumption_kwh',
        'self_consumption_kwh',
        'energy_fed_to_grid_kwh',
        'energy_drawn_from_grid_kwh',
    ]
    return pd.DataFrame(rows, columns=columns).set_index('date')
