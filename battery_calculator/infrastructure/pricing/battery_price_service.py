"""
Battery price lookup with per-URL memoization.

Prices are looked up through an injectable fetcher. No network fetcher ships
with the package: without one, batteries without a known price resolve to
None. Lookups never raise; failures are logged and resolve to None.
"""

import logging
import re
import threading
from typing import Callable, Dict, Optional

from battery_calculator.vendors.vendor_catalog import BatteryModel

logger = logging.getLogger(__name__)

PriceFetcher = Callable[[str], Optional[float]]

# e.g. "1.299,00 €", "849,90 €" or "849.90€"
_PRICE_PATTERN = re.compile(r"(\d{1,3}(?:\.\d{3})+,\d{1,2}|\d+[.,]\d+)\s*€")


def extract_price_from_html(html: str) -> Optional[float]:
    """
    Extract the first euro amount from an HTML page.

    Args:
        html: Page content

    Returns:
        Price in EUR, or None if no amount was found
    """
    match = _PRICE_PATTERN.search(html)
    if not match:
        return None
    amount = match.group(1)
    if "," in amount:
        # German notation: dots group thousands, comma is the decimal mark
        amount = amount.replace(".", "").replace(",", ".")
    try:
        return float(amount)
    except ValueError:
        return None


class BatteryPriceService:
    """
    Memoized battery price lookup.

    The cache belongs to one service instance. Use the service as a context
    manager to scope the cache to a session:

        >>> with BatteryPriceService() as prices:
        ...     price = prices.fetch_price(battery)
    """

    def __init__(self, fetcher: Optional[PriceFetcher] = None):
        """
        Initialize price service.

        Args:
            fetcher: Callable mapping a price URL to a price (or None).
                     None disables remote lookups.
        """
        self._fetcher = fetcher
        self._cache: Dict[str, Optional[float]] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> "BatteryPriceService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear_cache()

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def fetch_price(self, battery: BatteryModel) -> Optional[float]:
        """
        Get the price of a battery.

        Order: battery without URL → its own price; cached URL → cached price;
        battery with known price → cached and returned; otherwise the fetcher,
        whose result is cached even when it is None. Failed lookups (the
        fetcher raised) are not cached.

        Args:
            battery: Battery to price

        Returns:
            Price in EUR, or None if unknown
        """
        if not battery.price_url:
            return battery.price

        with self._lock:
            if battery.price_url in self._cache:
                return self._cache[battery.price_url]

            if battery.price is not None:
                self._cache[battery.price_url] = battery.price
                return battery.price

        if self._fetcher is None:
            logger.debug("No price fetcher configured for %s", battery.name)
            return None

        try:
            price = self._fetcher(battery.price_url)
        except Exception as e:
            logger.warning("Price lookup for %s failed: %s", battery.name, e)
            return None

        # A page without a price is remembered too; clear_cache() forces a retry
        with self._lock:
            self._cache[battery.price_url] = price
        return price

    def clear_cache(self) -> None:
        """Drop all cached prices."""
        with self._lock:
            self._cache.clear()
