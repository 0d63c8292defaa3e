from __future__ import annotations

"""Region driver
----------------
Facade over a Playwright page that addresses page regions by name (see
region_driver.selectors) and waits for asynchronously rendered content.
"""

import asyncio
from typing import Any, Callable, List, Mapping, Optional

from playwright.async_api import ElementHandle, Page

from region_driver.selectors.resolver import (
    RegionPath,
    RegionResolutionError,
    RegionResolver,
    format_region,
)
from region_driver.selectors.table import (
    SelectorError,
    SelectorTable,
    freeze_table,
    load_selector_table,
)
from region_driver.utils.config import Settings, get_settings
from region_driver.utils.logger import get_logger, log_with_context
from region_driver.utils.timing import measure, wait_for


class OptionNotFound(SelectorError):
    pass


class RegionDriver:
    """
    Authoring API for UI tests.

    Args:
        page: Playwright page lookups start from
        root: application URL that goto() paths are appended to
              (defaults to settings.BASE_URL)
        selectors: nested mapping of region names to CSS selectors
                   (defaults to the table in settings.SELECTORS_FILE)

    Example:
        driver = RegionDriver(page, "http://localhost:8080", selectors)
        await driver.goto("/home")
        await driver.wait_for_region("home.menu.tabs")
        links = await driver.resolve(["home.menu.tabs", 2, "links"])
    """

    def __init__(
        self,
        page: Page,
        root: Optional[str] = None,
        selectors: Optional[Mapping[str, Any]] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.log = get_logger(__name__)
        self.page = page
        self.root = self.settings.BASE_URL if root is None else root
        self.selectors = self._load_selectors(selectors)
        self._resolver = RegionResolver(self.selectors, page)

    def _load_selectors(self, selectors: Optional[Mapping[str, Any]]) -> SelectorTable:
        if selectors is not None:
            return freeze_table(selectors)
        if self.settings.SELECTORS_FILE is None:
            raise ValueError("No selector table given and SELECTORS_FILE is not set")
        return load_selector_table(self.settings.SELECTORS_FILE)

    # ---------- Lookup ----------

    async def resolve(self, path: RegionPath) -> List[ElementHandle]:
        """Elements at a region path, e.g. "home.menu.tabs.links" or ["home.menu.tabs", 2, "links"]."""
        return await self._resolver.resolve(path)

    async def _first(self, region: RegionPath) -> ElementHandle:
        els = await self.resolve(region)
        if not els:
            raise RegionResolutionError(1, format_region(region), 0)
        return els[0]

    async def read(self, region: RegionPath) -> str:
        """Visible text of the first element in a region."""
        el = await self._first(region)
        return await el.inner_text()

    async def read_all(self, region: RegionPath) -> List[str]:
        """Visible text of every element in a region, in document order."""
        els = await self.resolve(region)
        return list(await asyncio.gather(*(el.inner_text() for el in els)))

    async def count(self, region: RegionPath) -> int:
        return len(await self.resolve(region))

    # ---------- Navigation / waiting ----------

    async def goto(self, path: str) -> None:
        url = self.root + path
        self.log.info(f"Navigating to {url}")
        await self.page.goto(url)

    async def wait_until(
        self,
        condition_fn: Callable[[], Any],
        timeout_ms: Optional[int] = None,
        error_msg: Optional[str] = None,
    ) -> None:
        """wait_for() with settings.WAIT_TIMEOUT_MS / settings.WAIT_ERROR_MSG as defaults."""
        await wait_for(
            condition_fn,
            timeout_ms=self.settings.WAIT_TIMEOUT_MS if timeout_ms is None else timeout_ms,
            error_msg=error_msg or self.settings.WAIT_ERROR_MSG,
        )

    @measure("wait_for_region")
    async def wait_for_region(self, region: RegionPath, timeout_ms: Optional[int] = None) -> None:
        """
        Wait until a region matches at least one element.

        Raises PollTimeout('Unable to find element at region "<region>"') when
        the region is still empty after `timeout_ms` (default
        settings.WAIT_TIMEOUT_MS). Resolution errors are not retried.
        """
        name = format_region(region)
        log_with_context(self.log, region=name).debug(f"Waiting for {name}")

        async def has_elements() -> bool:
            return len(await self.resolve(region)) > 0

        await self.wait_until(has_elements, timeout_ms, f'Unable to find element at region "{name}"')

    # ---------- Forms ----------

    async def select_option(self, element: ElementHandle, value: str) -> None:
        """Select the <option> of a <select> element whose visible text equals `value`."""
        options = await element.query_selector_all("option")
        texts = [t.strip() for t in await asyncio.gather(*(o.inner_text() for o in options))]
        if value not in texts:
            raise OptionNotFound(f'Could not find option value "{value}".')
        await element.select_option(index=texts.index(value))

    # ---------- Geometry ----------

    async def get_element_at_position(self, x: float, y: float) -> Optional[ElementHandle]:
        """Element rendered at viewport position (x, y), or None outside the viewport."""
        handle = await self.page.evaluate_handle("([x, y]) => document.elementFromPoint(x, y)", [x, y])
        return handle.as_element()

    async def element_is_in_viewport(self, el: ElementHandle) -> bool:
        """
        Whether an element is displayed and rendered inside the viewport.

        Treated as not displayed:
        - display: none / visibility: hidden
        - zero width or height
        - positioned outside the viewport
        """
        if not await el.is_visible():
            return False
        box = await el.bounding_box()
        if box is None:
            return False
        hit = await self.get_element_at_position(box["x"] + box["width"] / 2, box["y"] + box["height"] / 2)
        return hit is not None
