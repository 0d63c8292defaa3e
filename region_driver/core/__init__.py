"""
Core package for the region driver.
Lightweight package init; import the facade from its module:
  from region_driver.core.driver import RegionDriver
"""

__all__: list[str] = []
