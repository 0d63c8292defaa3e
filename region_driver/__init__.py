"""
region_driver
-------------
Address page regions by name instead of raw CSS selectors, and wait for
asynchronously rendered content, on top of Playwright.
"""

__version__ = "0.1.0"
