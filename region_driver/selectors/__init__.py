# region_driver/selectors/__init__.py
"""
Selectors package
-----------------
Turns symbolic region paths into CSS lookups against a nested selector table,
with index-based narrowing and descriptive errors.
"""

from .table import (
    SELF_KEY,
    SelectorError,
    SelectorTableError,
    UnknownRegion,
    build_selector,
    freeze_table,
    iter_regions,
    load_selector_table,
)
from .resolver import InvalidRegionPath, RegionResolutionError, RegionResolver, format_region, parse_region, resolve

__all__ = [
    "SELF_KEY",
    "SelectorError",
    "SelectorTableError",
    "UnknownRegion",
    "InvalidRegionPath",
    "RegionResolutionError",
    "RegionResolver",
    "build_selector",
    "format_region",
    "freeze_table",
    "iter_regions",
    "load_selector_table",
    "parse_region",
    "resolve",
]
