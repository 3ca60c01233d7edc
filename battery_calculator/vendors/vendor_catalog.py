"""
Inverter vendor catalog and export format detection.

Each known vendor supplies default charge/discharge losses and a catalog of
battery models. Vendors are plain lookup-table entries; the generic "Custom"
vendor is the fallback for unrecognized exports and the only one whose losses
may be edited.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

FRONIUS_PRICE_URL = "https://www.idealo.de/preisvergleich/OffersOfProduct/201960731.html"

# Exact header row of a Fronius Solar.web daily export
FRONIUS_HEADERS = [
    "datum und uhrzeit",
    "gesamt erzeugung",
    "gesamt verbrauch",
    "eigenverbrauch",
    "energie ins netz eingespeist",
    "energie vom netz bezogen",
]


@dataclass(frozen=True)
class BatteryModel:
    """
    Battery product from a vendor catalog.

    Attributes:
        name: Model name
        capacity_wh: Usable capacity [Wh]
        price: Purchase price (EUR), None if unknown
        price_url: Page to look up the current price
        is_custom: True for user-defined batteries
    """
    name: str
    capacity_wh: float
    price: Optional[float] = None
    price_url: Optional[str] = None
    is_custom: bool = False

    @property
    def capacity_kwh(self) -> float:
        return self.capacity_wh / 1000.0

    @classmethod
    def custom(
        cls,
        name: str,
        capacity_kwh: float,
        price: Optional[float] = None,
        price_url: Optional[str] = None
    ) -> "BatteryModel":
        """Create a user-defined battery from its capacity in kWh."""
        return cls(
            name=name,
            capacity_wh=capacity_kwh * 1000.0,
            price=price,
            price_url=price_url,
            is_custom=True,
        )


@dataclass(frozen=True)
class VendorProfile:
    """
    Inverter vendor with default losses and battery catalog.

    Attributes:
        name: Vendor name
        charge_loss_percent: Default charge loss [%]
        discharge_loss_percent: Default discharge loss [%]
        batteries: Battery catalog
        editable: Whether the loss percentages may be overridden
    """
    name: str
    charge_loss_percent: float = 5.0
    discharge_loss_percent: float = 5.0
    batteries: Tuple[BatteryModel, ...] = field(default_factory=tuple)
    editable: bool = False

    def with_losses(
        self,
        charge_loss_percent: Optional[float] = None,
        discharge_loss_percent: Optional[float] = None
    ) -> "VendorProfile":
        """
        Return a copy with overridden loss percentages.

        Raises:
            ValueError: If the vendor's losses are fixed
        """
        if not self.editable:
            raise ValueError(
                f"Loss percentages for vendor '{self.name}' are fixed and cannot be overridden"
            )
        return replace(
            self,
            charge_loss_percent=(self.charge_loss_percent if charge_loss_percent is None
                                 else charge_loss_percent),
            discharge_loss_percent=(self.discharge_loss_percent if discharge_loss_percent is None
                                    else discharge_loss_percent),
        )

    def find_battery(self, name: str) -> Optional[BatteryModel]:
        """Look up a catalog battery by name (case-insensitive)."""
        wanted = name.strip().lower()
        for battery in self.batteries:
            if battery.name.lower() == wanted:
                return battery
        return None


FRONIUS = VendorProfile(
    name="Fronius",
    charge_loss_percent=5.0,
    discharge_loss_percent=5.0,
    batteries=(
        BatteryModel("HVS 5.1", 5100.0, price_url=FRONIUS_PRICE_URL),
        BatteryModel("HVS 7.7", 7700.0, price_url=FRONIUS_PRICE_URL),
        BatteryModel("HVS 10.2", 10200.0, price_url=FRONIUS_PRICE_URL),
        BatteryModel("HVS 12.8", 12800.0, price_url=FRONIUS_PRICE_URL),
    ),
)

CUSTOM = VendorProfile(
    name="Custom",
    charge_loss_percent=5.0,
    discharge_loss_percent=5.0,
    editable=True,
)

VENDORS: Dict[str, VendorProfile] = {
    vendor.name.lower(): vendor for vendor in (FRONIUS, CUSTOM)
}


def get_all_vendors() -> List[VendorProfile]:
    """All known vendors, fallback last."""
    return list(VENDORS.values())


def get_vendor(name: str) -> VendorProfile:
    """
    Look up a vendor by name (case-insensitive).

    Raises:
        KeyError: If the vendor is unknown
    """
    key = name.strip().lower()
    if key not in VENDORS:
        raise KeyError(f"Unknown vendor '{name}'. Known vendors: {[v.name for v in VENDORS.values()]}")
    return VENDORS[key]


def is_fronius_format(headers: Sequence[str]) -> bool:
    """Check headers against the Fronius export format."""
    if len(headers) < len(FRONIUS_HEADERS):
        return False

    normalized = [header.strip().lower() for header in headers]
    if normalized == FRONIUS_HEADERS:
        return True

    joined = ",".join(headers).lower()
    has_date = "datum" in joined or "uhrzeit" in joined
    has_total_generation = "gesamt" in joined and "erzeugung" in joined
    has_total_consumption = "gesamt" in joined and "verbrauch" in joined
    has_self_consumption = "eigenverbrauch" in joined
    has_fed_to_grid = "einspeis" in joined or "eingespeist" in joined
    has_drawn_from_grid = "bezogen" in joined or "bezug" in joined

    return (has_date and has_total_generation and has_total_consumption
            and has_self_consumption and has_fed_to_grid and has_drawn_from_grid)


def detect_vendor(headers: Sequence[str], filename: Optional[str] = None) -> VendorProfile:
    """
    Detect the inverter vendor of an export.

    Args:
        headers: CSV header names
        filename: Optional file name hint

    Returns:
        Detected vendor, CUSTOM if the format is not recognized
    """
    if filename and "fronius" in filename.lower():
        logger.info("Detected vendor Fronius from file name %s", filename)
        return FRONIUS

    if is_fronius_format(headers):
        logger.info("Detected vendor Fronius from CSV headers")
        return FRONIUS

    logger.info("Unrecognized export format, using Custom vendor")
    return CUSTOM
