"""
Data ingestion module for daily energy exports.

Handles CSV parsing, column mapping and the EnergyRecord data type.
"""

from .energy_record import EnergyRecord, records_to_dataframe, to_calendar_date
from .column_mapping import ColumnMapping, create_auto_mapping
from .csv_loader import (
    read_headers,
    load_energy_records,
    parse_date,
    parse_energy_value,
)

__all__ = [
    'EnergyRecord',
    'records_to_dataframe',
    'to_calendar_date',
    'ColumnMapping',
    'create_auto_mapping',
    'read_headers',
    'load_energy_records',
    'parse_date',
    'parse_energy_value',
]
