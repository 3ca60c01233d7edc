"""
CSV loading utilities for daily energy exports.

Supports comma-delimited exports with double-quoted fields, an optional units
row directly after the header (e.g. ``[dd.MM.yyyy],[Wh],[Wh],...``), dates in
``dd.MM.yyyy`` format and decimal numbers with either ``.`` or ``,`` as the
decimal separator. All energy values are expected in Wh.
"""

import io
import logging
import math
import re
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, TextIO, Tuple, Union

import pandas as pd

from .column_mapping import ColumnMapping, create_auto_mapping
from .energy_record import EnergyRecord

logger = logging.getLogger(__name__)

DATE_FORMAT = "%d.%m.%Y"
UNITS_ROW_PREFIX = "["

# Day, month and year parts, e.g. "1.3.24" or "01/03/2024 00:00"
_DAY_MONTH_YEAR = re.compile(r"\d{1,2}[./-]\d{1,2}[./-]\d{2,4}")

CsvSource = Union[str, Path, TextIO]


def _read_text(source: CsvSource) -> Tuple[str, Optional[str]]:
    """
    Read the full CSV text from a path or an open text stream.

    Returns:
        Tuple of (text, name) where name is the file name if known
    """
    if hasattr(source, 'read'):
        return source.read(), getattr(source, 'name', None)

    file_path = Path(source)
    if not file_path.exists():
        raise FileNotFoundError(f"Energy data file not found: {file_path}")

    # utf-8-sig strips the BOM written by some inverter portals
    return file_path.read_text(encoding='utf-8-sig'), file_path.name


def _split_header(header_line: str) -> List[str]:
    """Split a single CSV line into trimmed fields."""
    row = pd.read_csv(
        io.StringIO(header_line),
        header=None,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
    ).iloc[0]
    return [str(value).strip() for value in row]


def _header_line(text: str) -> str:
    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise ValueError("CSV file is empty or header line is missing.")
    return lines[0]


def read_headers(source: CsvSource) -> List[str]:
    """
    Read the header row of a CSV export.

    Args:
        source: Path to CSV file or text stream

    Returns:
        List of trimmed header names

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file is empty or the header line is blank
    """
    text, _ = _read_text(source)
    return _split_header(_header_line(text))


def parse_date(text: str) -> Optional[date]:
    """
    Parse a date cell.

    Tries ``dd.MM.yyyy`` first, then a day-first general parse (handles
    values such as ``01.03.2024 00:00``). The general parse is only used
    when the text starts with day, month and year parts, so a bare year
    such as ``2024`` is not a date.

    Returns:
        Calendar date, or None if the value is not a date
    """
    text = text.strip()
    if not text:
        return None

    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        pass

    if not _DAY_MONTH_YEAR.match(text):
        return None

    try:
        parsed = pd.to_datetime(text, dayfirst=True)
    except (ValueError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_energy_value(text: str) -> float:
    """
    Parse a numeric cell, accepting ``,`` as decimal separator.

    Blank or unparsable values count as 0.
    """
    if text is None:
        return 0.0
    text = text.strip().replace(",", ".")
    if not text:
        return 0.0

    try:
        value = float(text)
    except ValueError:
        return 0.0

    return value if math.isfinite(value) else 0.0


def _delimiter_positions(line: str) -> List[int]:
    """Positions of commas outside double quotes."""
    positions = []
    in_quotes = False
    for index, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            positions.append(index)
    return positions


def _field_count(line: str) -> int:
    return len(_delimiter_positions(line)) + 1


def _truncate_fields(line: str, width: int) -> str:
    """Drop fields beyond ``width``."""
    positions = _delimiter_positions(line)
    if len(positions) < width:
        return line
    return line[:positions[width - 1]]


def _parse_row(row: tuple, mapping: ColumnMapping) -> Optional[EnergyRecord]:
    """Convert one data row to an EnergyRecord, or None if the row is unusable."""
    if len(row) < mapping.required_width():
        return None
    for index in (
        mapping.date_index,
        mapping.total_generation_index,
        mapping.total_consumption_index,
        mapping.energy_fed_to_grid_index,
        mapping.energy_drawn_from_grid_index,
    ):
        if pd.isna(row[index]):
            return None

    record_date = parse_date(row[mapping.date_index])
    if record_date is None:
        return None

    self_consumption = 0.0
    if 0 <= mapping.self_consumption_index < len(row) and not pd.isna(row[mapping.self_consumption_index]):
        self_consumption = parse_energy_value(row[mapping.self_consumption_index])

    try:
        return EnergyRecord(
            date=record_date,
            total_generation_wh=parse_energy_value(row[mapping.total_generation_index]),
            total_consumption_wh=parse_energy_value(row[mapping.total_consumption_index]),
            self_consumption_wh=self_consumption,
            energy_fed_to_grid_wh=parse_energy_value(row[mapping.energy_fed_to_grid_index]),
            energy_drawn_from_grid_wh=parse_energy_value(row[mapping.energy_drawn_from_grid_index]),
        )
    except ValueError as e:
        logger.debug("Rejected record: %s", e)
        return None


def load_energy_records(
    source: CsvSource,
    mapping: Optional[ColumnMapping] = None
) -> List[EnergyRecord]:
    """
    Load daily energy records from a CSV export.

    Rows with too few columns, an unparsable date or negative values are
    skipped. The order of the file is preserved.

    Args:
        source: Path to CSV file or text stream
        mapping: Column mapping. Auto-detected from the header if None.

    Returns:
        List of EnergyRecord

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If header is missing, the mapping is invalid or no
            valid rows were found
    """
    text, name = _read_text(source)
    header_line = _header_line(text)
    headers = _split_header(header_line)

    if mapping is None:
        mapping = create_auto_mapping(headers)

    if not mapping.is_valid():
        raise ValueError(
            "Column mapping is invalid. All required columns must be mapped. "
            f"Missing: {mapping.missing_fields()}"
        )

    lines = text.splitlines()[1:]
    if lines and lines[0].startswith(UNITS_ROW_PREFIX):
        lines = lines[1:]
    lines = [line for line in lines if line.strip()]
    if not lines:
        raise ValueError("No valid data records found in CSV file.")

    # Rows missing required columns are dropped before pandas pads them
    data_lines = [line for line in lines if _field_count(line) >= mapping.required_width()]
    skipped = len(lines) - len(data_lines)
    if not data_lines:
        raise ValueError("No valid data records found in CSV file.")

    width = max(len(headers), mapping.required_width())
    data_lines = [_truncate_fields(line, width) for line in data_lines]
    table = pd.read_csv(
        io.StringIO("\n".join(data_lines)),
        header=None,
        names=list(range(width)),
        index_col=False,
        dtype=object,
        na_filter=False,
        skip_blank_lines=True,
        skipinitialspace=True,
        engine='python',
    )

    records = []
    for row in table.itertuples(index=False, name=None):
        row = tuple(value.strip() if isinstance(value, str) else value for value in row)
        record = _parse_row(row, mapping)
        if record is None:
            skipped += 1
            logger.debug("Skipping unparsable data row: %r", row)
            continue
        records.append(record)

    if not records:
        raise ValueError("No valid data records found in CSV file.")

    logger.info(
        "Loaded %d energy records from %s (%d rows skipped)",
        len(records), name or "stream", skipped
    )
    return records
