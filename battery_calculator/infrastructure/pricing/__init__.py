"""
Battery price lookup.
"""

from .battery_price_service import BatteryPriceService, extract_price_from_html

__all__ = [
    'BatteryPriceService',
    'extract_price_from_html',
]
