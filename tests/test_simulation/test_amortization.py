"""
Tests for amortization and payback calculation.
"""

import math
from datetime import date, timedelta

import pytest

from battery_calculator.data.energy_record import EnergyRecord
from battery_calculator.simulation.amortization import (
    AmortizationCalculator,
    AmortizationResult,
    calculate_payback_years,
)
from battery_calculator.simulation.engine import BatterySimulationEngine, DailySimulationOutcome


def make_record(day, feed_kwh, draw_kwh):
    return EnergyRecord(day, feed_kwh * 1000, draw_kwh * 1000, feed_kwh * 1000, draw_kwh * 1000)


def make_outcome(day, draw_before, draw_after, feed_before, feed_after):
    return DailySimulationOutcome(
        date=day,
        battery_charge_start_kwh=0.0,
        battery_charge_end_kwh=0.0,
        energy_discharged_kwh=draw_before - draw_after,
        energy_charged_kwh=feed_before - feed_after,
        original_grid_draw_kwh=draw_before,
        grid_draw_after_battery_kwh=draw_after,
        original_grid_feed_kwh=feed_before,
        grid_feed_after_battery_kwh=feed_after,
    )


@pytest.fixture
def calculator():
    return AmortizationCalculator()


class TestCalculatePaybackYears:

    def test_simple_payback(self):
        assert calculate_payback_years(5000, 500) == pytest.approx(10.0)

    @pytest.mark.parametrize("annual_savings", [0.0, -10.0])
    def test_no_savings_never_pays_back(self, annual_savings):
        assert math.isinf(calculate_payback_years(5000, annual_savings))


class TestAmortizationCalculator:
    """Test cost comparison and annualization."""

    def test_single_day_costs(self, calculator):
        """4 kWh less purchase at 0.30, 5 kWh less feed at 0.10."""
        day = date(2024, 1, 2)
        outcomes = [make_outcome(day, draw_before=10, draw_after=6, feed_before=5, feed_after=0)]
        records = [make_record(day, feed_kwh=5, draw_kwh=10)]

        result = calculator.calculate(outcomes, records, 0.30, 0.10, battery_price=1000)

        assert result.total_cost_without_battery == pytest.approx(10 * 0.30 - 5 * 0.10)
        assert result.total_cost_with_battery == pytest.approx(6 * 0.30)
        assert result.total_savings == pytest.approx(0.7)
        assert result.annual_savings == pytest.approx(0.7 * 365)
        assert result.amortization_period_years == pytest.approx(1000 / (0.7 * 365))
        assert result.total_energy_saved_kwh == pytest.approx(4.0)
        assert result.total_energy_used_for_charging_kwh == pytest.approx(5.0)
        assert result.unmatched_days == 0

    def test_no_outcomes(self, calculator):
        result = calculator.calculate([], [], 0.30, 0.08, battery_price=6500)

        assert result.total_savings == 0.0
        assert result.annual_savings == 0.0
        assert math.isinf(result.amortization_period_years)
        assert math.isinf(result.amortization_period_months)
        assert not result.is_profitable

    def test_months_are_years_times_twelve(self, calculator):
        day = date(2024, 1, 1)
        result = calculator.calculate(
            [make_outcome(day, 10, 5, 5, 0)], [make_record(day, 5, 10)],
            0.30, 0.08, battery_price=3000
        )
        assert result.amortization_period_months == pytest.approx(result.amortization_period_years * 12)

    def test_unmatched_days_are_counted_not_costed(self, calculator, caplog):
        matched_day = date(2024, 1, 1)
        outcomes = [
            make_outcome(matched_day, 10, 6, 5, 0),
            make_outcome(date(2024, 1, 2), 10, 0, 5, 0),
        ]
        records = [make_record(matched_day, 5, 10)]

        with caplog.at_level("WARNING"):
            result = calculator.calculate(outcomes, records, 0.30, 0.10, battery_price=1000)

        assert result.unmatched_days == 1
        assert result.total_savings == pytest.approx(0.7)
        # Annualization still divides by all simulated days
        assert result.annual_savings == pytest.approx(0.7 / 2 * 365)
        assert "no matching energy record" in caplog.text

    def test_duplicate_record_dates_rejected(self, calculator):
        day = date(2024, 1, 1)
        records = [make_record(day, 5, 10), make_record(day, 1, 1)]
        with pytest.raises(ValueError, match="Duplicate"):
            calculator.calculate([make_outcome(day, 10, 6, 5, 0)], records, 0.30, 0.10, 1000)

    def test_zero_price_battery(self, calculator):
        day = date(2024, 1, 1)
        result = calculator.calculate(
            [make_outcome(day, 10, 6, 5, 0)], [make_record(day, 5, 10)], 0.30, 0.10, 0.0
        )
        assert result.amortization_period_years == 0.0
        assert result.is_profitable


class TestAmortizationFromSimulation:
    """Amortization on real simulation output."""

    @pytest.fixture
    def records(self):
        start = date(2024, 6, 1)
        return [make_record(start + timedelta(days=i), feed_kwh=8.0, draw_kwh=6.0) for i in range(30)]

    def test_higher_purchase_price_pays_back_faster(self, calculator, records):
        outcomes = BatterySimulationEngine().simulate(records, 5.0, 5, 5)

        cheap = calculator.calculate(outcomes, records, 0.25, 0.08, 5000)
        expensive = calculator.calculate(outcomes, records, 0.40, 0.08, 5000)

        assert expensive.annual_savings > cheap.annual_savings
        assert expensive.amortization_period_years < cheap.amortization_period_years

    @pytest.mark.parametrize("cheaper,dearer", [
        (0.0, 100.0),
        (100.0, 1000.0),
        (1000.0, 5000.0),
        (5000.0, 50000.0),
    ])
    def test_higher_battery_price_never_pays_back_sooner(self, calculator, records, cheaper, dearer):
        outcomes = BatterySimulationEngine().simulate(records, 5.0, 5, 5)

        low = calculator.calculate(outcomes, records, 0.30, 0.08, cheaper)
        high = calculator.calculate(outcomes, records, 0.30, 0.08, dearer)

        assert low.annual_savings == pytest.approx(high.annual_savings)
        assert high.amortization_period_years >= low.amortization_period_years

    def test_feed_price_above_purchase_price_loses_money(self, calculator, records):
        outcomes = BatterySimulationEngine().simulate(records, 5.0, 5, 5)
        result = calculator.calculate(outcomes, records, 0.10, 0.40, 5000)

        assert result.total_savings < 0
        assert math.isinf(result.amortization_period_years)

    def test_summary_and_dataframe(self, calculator, records):
        outcomes = BatterySimulationEngine().simulate(records, 5.0, 5, 5)
        result = calculator.calculate(outcomes, records, 0.30, 0.08, 5000)

        summary = result.summary()
        assert summary['simulation_days'] == 30
        assert summary['annual_savings'] == pytest.approx(result.annual_savings)

        df = result.daily_dataframe()
        assert len(df) == 30
        assert df['grid_draw_after_battery_kwh'].sum() == pytest.approx(
            sum(o.grid_draw_after_battery_kwh for o in result.daily_results)
        )


def test_result_defaults():
    result = AmortizationResult(battery_price=100.0)
    assert math.isinf(result.amortization_period_years)
    assert result.simulation_days == 0
