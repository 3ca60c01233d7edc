"""
Vendor catalog: default losses and battery models per inverter vendor.
"""

from .vendor_catalog import (
    BatteryModel,
    VendorProfile,
    FRONIUS,
    CUSTOM,
    detect_vendor,
    get_all_vendors,
    get_vendor,
    is_fronius_format,
)

__all__ = [
    'BatteryModel',
    'VendorProfile',
    'FRONIUS',
    'CUSTOM',
    'detect_vendor',
    'get_all_vendors',
    'get_vendor',
    'is_fronius_format',
]
