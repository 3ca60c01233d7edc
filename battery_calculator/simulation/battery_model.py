"""
Home battery model with charge and discharge losses
"""
from typing import Tuple


def validate_battery_parameters(
    capacity_kwh: float,
    charge_loss_percent: float,
    discharge_loss_percent: float
) -> None:
    """
    Check battery parameters before any simulation state is created.

    Raises:
        ValueError: If capacity is not positive or a loss is outside [0, 100]
    """
    if not capacity_kwh > 0:
        raise ValueError(
            f"Battery capacity must be positive; received capacity_kwh={capacity_kwh!r}"
        )
    if not (0.0 <= charge_loss_percent <= 100.0):
        raise ValueError(
            f"Charge loss must be in [0, 100] percent; received {charge_loss_percent!r}"
        )
    if not (0.0 <= discharge_loss_percent <= 100.0):
        raise ValueError(
            f"Discharge loss must be in [0, 100] percent; received {discharge_loss_percent!r}"
        )


class HomeBattery:
    """
    Battery model with separate charge and discharge loss factors

    Losses are percentages of the larger quantity: storing E kWh takes
    E / (1 - charge_loss) from the grid feed, delivering E kWh takes
    E / (1 - discharge_loss) out of the battery.

    Parameters:
        capacity_kwh: Usable battery capacity (kWh)
        charge_loss_percent: Charge loss (0-100 %)
        discharge_loss_percent: Discharge loss (0-100 %)
        initial_charge_kwh: Starting charge (kWh, default empty)
    """

    def __init__(
        self,
        capacity_kwh: float,
        charge_loss_percent: float = 5.0,
        discharge_loss_percent: float = 5.0,
        initial_charge_kwh: float = 0.0
    ):
        validate_battery_parameters(capacity_kwh, charge_loss_percent, discharge_loss_percent)

        self.capacity_kwh = capacity_kwh
        self.charge_efficiency = 1.0 - charge_loss_percent / 100.0
        self.discharge_efficiency = 1.0 - discharge_loss_percent / 100.0

        self.charge_kwh = self._clamp(initial_charge_kwh)

    def discharge(self, energy_needed_kwh: float) -> float:
        """
        Deliver energy to cover demand

        Args:
            energy_needed_kwh: Demand that would otherwise come from the grid (kWh)

        Returns:
            float: Energy delivered to the household after losses (kWh)
        """
        # 100 % discharge loss: nothing reaches the household
        if self.discharge_efficiency <= 0:
            return 0.0

        energy_available = self.charge_kwh * self.discharge_efficiency
        if energy_available <= 0 or energy_needed_kwh <= 0:
            return 0.0

        energy_out = min(energy_available, energy_needed_kwh)

        # Energy taken from the battery includes the loss
        self.charge_kwh -= energy_out / self.discharge_efficiency

        return energy_out

    def charge(self, energy_offered_kwh: float) -> Tuple[float, float]:
        """
        Store surplus energy that would otherwise be fed to the grid

        Args:
            energy_offered_kwh: Surplus available for charging (kWh)

        Returns:
            Tuple of (energy stored after losses, surplus energy consumed) in kWh
        """
        if self.charge_efficiency <= 0:
            return 0.0, 0.0

        headroom = self.capacity_kwh - self.charge_kwh
        if headroom <= 0 or energy_offered_kwh <= 0:
            return 0.0, 0.0

        energy_stored = min(headroom, energy_offered_kwh * self.charge_efficiency)
        # Rounding in stored / efficiency must not consume more than was offered
        energy_consumed = min(energy_stored / self.charge_efficiency, energy_offered_kwh)

        self.charge_kwh += energy_stored

        return energy_stored, energy_consumed

    def settle(self) -> float:
        """Clamp the charge level into [0, capacity] and return it."""
        self.charge_kwh = self._clamp(self.charge_kwh)
        return self.charge_kwh

    def get_soc_fraction(self) -> float:
        """
        Return state of charge as a fraction (0-1)
        """
        return self.charge_kwh / self.capacity_kwh

    def _clamp(self, charge_kwh: float) -> float:
        return max(0.0, min(self.capacity_kwh, charge_kwh))

    def __repr__(self):
        return (f"HomeBattery(capacity={self.capacity_kwh:.1f}kWh, "
                f"charge={self.charge_kwh:.2f}kWh ({self.get_soc_fraction()*100:.1f}%))")
