"""
Tests for BatteryPriceService
"""
import pytest

from battery_calculator.infrastructure.pricing.battery_price_service import (
    BatteryPriceService,
    extract_price_from_html,
)
from battery_calculator.vendors.vendor_catalog import BatteryModel

URL = "https://example.com/battery"


class CountingFetcher:
    """Fetcher stub that records calls"""

    def __init__(self, price=None, error=None):
        self.price = price
        self.error = error
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.price


class TestExtractPriceFromHtml:

    @pytest.mark.parametrize("html,expected", [
        ('<span class="price">849,90 €</span>', 849.90),
        ('<span>849.90€</span>', 849.90),
        ('<b>ab 1.299,00 €</b>', 1299.00),
        ('<b>12.345,5 €</b> <i>99,00 €</i>', 12345.5),
    ])
    def test_extract(self, html, expected):
        assert extract_price_from_html(html) == pytest.approx(expected)

    def test_no_price(self):
        assert extract_price_from_html("<html>Nicht verfügbar</html>") is None


class TestBatteryPriceService:
    """Test lookup order and caching"""

    def test_battery_without_url_returns_own_price(self):
        fetcher = CountingFetcher(price=1.0)
        service = BatteryPriceService(fetcher)

        assert service.fetch_price(BatteryModel("A", 5000.0, price=2500.0)) == 2500.0
        assert service.fetch_price(BatteryModel("B", 5000.0)) is None
        assert fetcher.calls == []
        assert service.cache_size == 0

    def test_known_price_is_cached(self):
        fetcher = CountingFetcher(price=1.0)
        service = BatteryPriceService(fetcher)

        price = service.fetch_price(BatteryModel("A", 5000.0, price=2500.0, price_url=URL))

        assert price == 2500.0
        assert fetcher.calls == []
        assert service.cache_size == 1

    def test_fetched_price_is_memoized(self):
        fetcher = CountingFetcher(price=4999.0)
        service = BatteryPriceService(fetcher)
        battery = BatteryModel("A", 5000.0, price_url=URL)

        assert service.fetch_price(battery) == 4999.0
        assert service.fetch_price(battery) == 4999.0
        assert fetcher.calls == [URL]

    def test_cache_is_per_url(self):
        """Batteries sharing a price page share the cached price."""
        fetcher = CountingFetcher(price=4999.0)
        service = BatteryPriceService(fetcher)

        service.fetch_price(BatteryModel("A", 5000.0, price_url=URL))
        assert service.fetch_price(BatteryModel("B", 7700.0, price_url=URL)) == 4999.0
        assert len(fetcher.calls) == 1

    def test_no_fetcher(self):
        service = BatteryPriceService()
        assert service.fetch_price(BatteryModel("A", 5000.0, price_url=URL)) is None

    def test_fetcher_failure_returns_none(self, caplog):
        fetcher = CountingFetcher(error=ConnectionError("offline"))
        service = BatteryPriceService(fetcher)

        with caplog.at_level("WARNING"):
            assert service.fetch_price(BatteryModel("A", 5000.0, price_url=URL)) is None

        assert "offline" in caplog.text
        assert service.cache_size == 0

    def test_missing_price_is_cached(self):
        """A page without a price is not fetched again until the cache is cleared."""
        fetcher = CountingFetcher(price=None)
        service = BatteryPriceService(fetcher)
        battery = BatteryModel("A", 5000.0, price_url=URL)

        assert service.fetch_price(battery) is None
        assert service.fetch_price(battery) is None
        assert len(fetcher.calls) == 1
        assert service.cache_size == 1

        service.clear_cache()
        service.fetch_price(battery)
        assert len(fetcher.calls) == 2

    def test_context_manager_clears_cache(self):
        fetcher = CountingFetcher(price=4999.0)
        with BatteryPriceService(fetcher) as service:
            service.fetch_price(BatteryModel("A", 5000.0, price_url=URL))
            assert service.cache_size == 1
        assert service.cache_size == 0
