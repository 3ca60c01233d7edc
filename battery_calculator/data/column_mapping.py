"""
Mapping of CSV header columns to energy record fields.

Headers from inverter exports are German or English; columns are assigned to
fields by case-insensitive keyword matching.
"""

from dataclasses import dataclass
from typing import List, Sequence
import logging

logger = logging.getLogger(__name__)


REQUIRED_FIELDS = [
    'date_index',
    'total_generation_index',
    'total_consumption_index',
    'energy_fed_to_grid_index',
    'energy_drawn_from_grid_index',
]


@dataclass
class ColumnMapping:
    """
    Column indices for each energy record field (-1 = not mapped).

    Self-consumption is optional; all other fields must be mapped.
    """
    date_index: int = -1
    total_generation_index: int = -1
    total_consumption_index: int = -1
    self_consumption_index: int = -1
    energy_fed_to_grid_index: int = -1
    energy_drawn_from_grid_index: int = -1

    def is_valid(self) -> bool:
        """Check that all required columns are mapped."""
        return not self.missing_fields()

    def missing_fields(self) -> List[str]:
        """Names of required fields without a column."""
        return [name for name in REQUIRED_FIELDS if getattr(self, name) < 0]

    def required_width(self) -> int:
        """Minimum number of fields a data row needs."""
        return max(getattr(self, name) for name in REQUIRED_FIELDS) + 1


def _is_date(header: str) -> bool:
    return 'datum' in header or 'date' in header or 'zeit' in header or 'time' in header


def _is_total_generation(header: str) -> bool:
    return (('gesamt' in header and 'erzeugung' in header)
            or 'generation' in header
            or 'produktion' in header)


def _is_total_consumption(header: str) -> bool:
    return (('gesamt' in header and 'verbrauch' in header)
            or 'consumption' in header
            or 'verbrauch' in header)


def _is_self_consumption(header: str) -> bool:
    return 'eigenverbrauch' in header or ('self' in header and 'consumption' in header)


def _is_fed_to_grid(header: str) -> bool:
    # Fronius writes "eingespeist", which does not contain "einspeis"
    return ('einspeis' in header
            or 'eingespeist' in header
            or ('fed' in header and 'grid' in header)
            or 'export' in header)


def _is_drawn_from_grid(header: str) -> bool:
    return ('bezogen' in header
            or 'bezug' in header
            or ('drawn' in header and 'grid' in header)
            or 'import' in header)


# Checked in this order; a header is assigned to the first unmapped field it matches
_FIELD_MATCHERS = [
    ('date_index', _is_date),
    ('total_generation_index', _is_total_generation),
    ('total_consumption_index', _is_total_consumption),
    ('self_consumption_index', _is_self_consumption),
    ('energy_fed_to_grid_index', _is_fed_to_grid),
    ('energy_drawn_from_grid_index', _is_drawn_from_grid),
]


def create_auto_mapping(headers: Sequence[str]) -> ColumnMapping:
    """
    Suggest a column mapping from header names.

    Args:
        headers: Header column names in file order

    Returns:
        ColumnMapping (may be invalid if required columns were not recognized)

    Example:
        >>> mapping = create_auto_mapping(['Date', 'Generation', 'Consumption',
        ...                                'Fed to grid', 'Drawn from grid'])
        >>> mapping.is_valid()
        True
    """
    mapping = ColumnMapping()

    for index, raw_header in enumerate(headers):
        header = raw_header.strip().lower()

        for field_name, matches in _FIELD_MATCHERS:
            if getattr(mapping, field_name) == -1 and matches(header):
                setattr(mapping, field_name, index)
                break

    if not mapping.is_valid():
        logger.info("Auto-mapping left required columns unmapped: %s", mapping.missing_fields())

    return mapping
