"""
Tests for CSV export loading.
"""

import io
import warnings
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from battery_calculator.data.column_mapping import ColumnMapping
from battery_calculator.data.csv_loader import (
    load_energy_records,
    parse_date,
    parse_energy_value,
    read_headers,
)

FIXTURES = Path(__file__).parent.parent / "fixtures"


class TestParseHelpers:
    """Test cell parsing."""

    def test_parse_date_german_format(self):
        assert parse_date("24.12.2023") == date(2023, 12, 24)

    def test_parse_date_with_time(self):
        """Day-first fallback handles a trailing time of day."""
        assert parse_date("01.03.2024 00:00") == date(2024, 3, 1)

    @pytest.mark.parametrize("text", ["", "   ", "not a date", "2024", "Summe 2024"])
    def test_parse_date_invalid(self, text):
        assert parse_date(text) is None

    @pytest.mark.parametrize("text,expected", [
        ("1234", 1234.0),
        ("1234.5", 1234.5),
        ("1234,5", 1234.5),
        (" 42 ", 42.0),
        ("", 0.0),
        ("n/a", 0.0),
        ("nan", 0.0),
    ])
    def test_parse_energy_value(self, text, expected):
        assert parse_energy_value(text) == expected


class TestReadHeaders:
    """Test header extraction."""

    def test_fronius_headers(self):
        headers = read_headers(FIXTURES / "fronius_daily.csv")
        assert headers == [
            "Datum und Uhrzeit",
            "Gesamt Erzeugung",
            "Gesamt Verbrauch",
            "Eigenverbrauch",
            "Energie ins Netz eingespeist",
            "Energie vom Netz bezogen",
        ]

    def test_quoted_headers_are_trimmed(self):
        headers = read_headers(io.StringIO('"Date", "Fed to grid, total"\n'))
        assert headers == ["Date", "Fed to grid, total"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_headers(tmp_path / "missing.csv")

    def test_empty_file(self):
        with pytest.raises(ValueError, match="empty or header line is missing"):
            read_headers(io.StringIO(""))


class TestLoadEnergyRecords:
    """Test loading daily records."""

    def test_fronius_export(self):
        """Units row, blank line, bad date and short row are skipped."""
        records = load_energy_records(FIXTURES / "fronius_daily.csv")

        assert [r.date for r in records] == [
            date(2024, 1, 3),
            date(2024, 1, 1),
            date(2024, 1, 2),
            date(2024, 1, 5),
        ]

    def test_fronius_values(self):
        records = load_energy_records(FIXTURES / "fronius_daily.csv")
        first_of_january = records[1]

        assert first_of_january.total_generation_wh == pytest.approx(1000.5)
        assert first_of_january.total_consumption_wh == 8000
        assert first_of_january.self_consumption_wh == 800
        assert first_of_january.energy_fed_to_grid_wh == 200
        assert first_of_january.energy_drawn_from_grid_wh == 7200
        assert first_of_january.energy_drawn_from_grid_kwh == pytest.approx(7.2)

    def test_generic_export_without_self_consumption(self):
        records = load_energy_records(FIXTURES / "generic_export.csv")

        assert len(records) == 3
        assert records[0].date == date(2024, 5, 1)
        assert records[0].self_consumption_wh == 0.0
        assert records[0].energy_fed_to_grid_wh == 14000
        assert records[2].energy_drawn_from_grid_wh == 8000

    def test_explicit_mapping(self):
        """A caller-supplied mapping overrides header detection."""
        csv_text = (
            "a,b,c,d,e\n"
            "01.05.2024,4000,1000,2000,3000\n"
        )
        mapping = ColumnMapping(
            date_index=0,
            total_generation_index=3,
            total_consumption_index=4,
            energy_fed_to_grid_index=2,
            energy_drawn_from_grid_index=1,
        )
        records = load_energy_records(io.StringIO(csv_text), mapping)

        assert len(records) == 1
        assert records[0].total_generation_wh == 2000
        assert records[0].total_consumption_wh == 3000
        assert records[0].energy_fed_to_grid_wh == 1000
        assert records[0].energy_drawn_from_grid_wh == 4000

    def test_negative_values_skipped(self):
        csv_text = (
            "Date,Generation,Consumption,Fed to grid,Drawn from grid\n"
            "01.05.2024,1000,2000,-5,1005\n"
            "02.05.2024,1000,2000,0,1000\n"
        )
        records = load_energy_records(io.StringIO(csv_text))
        assert [r.date for r in records] == [date(2024, 5, 2)]

    def test_invalid_mapping_raises(self):
        csv_text = "Foo,Bar\n1,2\n"
        with pytest.raises(ValueError, match="Column mapping is invalid"):
            load_energy_records(io.StringIO(csv_text))

    def test_header_only_raises(self):
        csv_text = "Date,Generation,Consumption,Fed to grid,Drawn from grid\n"
        with pytest.raises(ValueError, match="No valid data records"):
            load_energy_records(io.StringIO(csv_text))

    def test_no_parsable_rows_raises(self):
        csv_text = (
            "Date,Generation,Consumption,Fed to grid,Drawn from grid\n"
            "[dd.MM.yyyy],[Wh],[Wh],[Wh],[Wh]\n"
            "n/a,1,2,3,4\n"
        )
        with pytest.raises(ValueError, match="No valid data records"):
            load_energy_records(io.StringIO(csv_text))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_energy_records(tmp_path / "missing.csv")

    def test_utf8_bom_is_ignored(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(
            "\ufeffDate,Generation,Consumption,Fed to grid,Drawn from grid\n"
            "01.05.2024,1000,2000,300,1300\n".encode("utf-8")
        )
        records = load_energy_records(path)
        assert len(records) == 1

    def test_year_only_summary_row_skipped(self):
        csv_text = (
            "Date,Generation,Consumption,Fed to grid,Drawn from grid\n"
            "01.05.2024,1000,2000,300,1300\n"
            "2024,1000,2000,300,1300\n"
        )
        records = load_energy_records(io.StringIO(csv_text))
        assert [r.date for r in records] == [date(2024, 5, 1)]

    def test_extra_fields_truncated_quietly(self):
        """Rows wider than the header load without a pandas ParserWarning."""
        csv_text = (
            "Date,Generation,Consumption,Fed to grid,Drawn from grid\n"
            '01.05.2024,1000,2000,300,1300,"note, with comma",extra\n'
            "02.05.2024,1100,2100,400,1400\n"
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error", pd.errors.ParserWarning)
            records = load_energy_records(io.StringIO(csv_text))

        assert len(records) == 2
        assert records[0].energy_drawn_from_grid_wh == 1300
