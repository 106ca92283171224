"""
Hardware catalog of supported keyboards.
"""

from dygma_focus.hardware.catalog import (
    CATALOG,
    DEVICES,
    DeviceFamily,
    Grid,
    HardwareDescriptor,
    build_catalog,
    lookup,
)

__all__ = [
    "CATALOG",
    "DEVICES",
    "DeviceFamily",
    "Grid",
    "HardwareDescriptor",
    "build_catalog",
    "lookup",
]
