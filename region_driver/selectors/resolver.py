# region_driver/selectors/resolver.py
from __future__ import annotations

import re
from typing import Any, List, Optional, Protocol, Sequence, Union

from region_driver.selectors.table import SelectorError, SelectorTable, build_selector
from region_driver.utils.logger import get_logger

log = get_logger(__name__)

RegionPath = Union[str, Sequence[Any]]


class ElementSource(Protocol):
    """Anything that can run a scoped CSS query: Playwright Page, Frame or ElementHandle."""

    async def query_selector_all(self, selector: str) -> List[Any]: ...


class RegionResolutionError(SelectorError):
    def __init__(self, required: int, region: str, found: int) -> None:
        super().__init__(
            f'Expected at least {required} elements at region "{region}", but only found {found}.'
        )
        self.required = required
        self.region = region
        self.found = found


class InvalidRegionPath(SelectorError):
    def __init__(self, path: Any, reason: str) -> None:
        super().__init__(f"Invalid region path {path!r}: {reason}")
        self.path = path


def _label_of(part: RegionPath) -> str:
    if isinstance(part, str):
        return part
    return ".".join(_label_of(p) for p in part if not isinstance(p, int))


def format_region(path: RegionPath) -> str:
    """Readable form of a region path: ["menu.tabs", 2, "links"] -> "menu.tabs[2].links"."""
    if isinstance(path, str):
        return path
    out = ""
    for part in path:
        if isinstance(part, int) and not isinstance(part, bool):
            out += f"[{part}]"
        else:
            name = format_region(part)
            out = f"{out}.{name}" if out else name
    return out


def parse_region(text: str) -> RegionPath:
    """Inverse of format_region(): "menu.tabs[2].links" -> ["menu.tabs", 2, "links"]."""
    if "[" not in text:
        return text
    pieces = re.split(r"\[(\d+)\]\.?", text)
    path: List[Any] = []
    for i, piece in enumerate(pieces):
        if i % 2:
            path.append(int(piece))
        elif piece:
            path.append(piece)
    if "[" in "".join(p for p in path if isinstance(p, str)):
        raise InvalidRegionPath(text, "malformed [index]")
    return path


def _check_index(path: Sequence[Any]) -> Optional[int]:
    if not path:
        raise InvalidRegionPath(path, "path is empty")
    if not isinstance(path[0], (str, list, tuple)):
        raise InvalidRegionPath(path, "must start with a region name")
    if len(path) < 2:
        return None
    index = path[1]
    # bool is an int subclass; True/False as an index is always a mistake
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidRegionPath(path, f"expected an element index after {path[0]!r}, got {index!r}")
    if index < 0:
        raise InvalidRegionPath(path, f"element index must be >= 0, got {index}")
    return index


async def resolve(
    table: SelectorTable,
    path: RegionPath,
    context: ElementSource,
    context_label: str = "",
) -> List[Any]:
    """
    Resolve a region path to the list of matching elements.

    `path` is either a dotted region name ("home.menu.tabs.links") or a
    sequence mixing region names and element indices
    (["home.menu.tabs", 2, "links"]). An index narrows the elements found so
    far to the single element at that position, and the rest of the path is
    resolved inside it.

    Raises:
        UnknownRegion if a name is missing from the table.
        RegionResolutionError if an index is past the elements found.
        InvalidRegionPath if the path is malformed.
    """
    if isinstance(path, str):
        selector = build_selector(table, context_label, path)
        els = await context.query_selector_all(selector)
        log.debug(f"{path!r} -> {selector!r} matched {len(els)} element(s)")
        return els

    index = _check_index(path)
    first_part = path[0]
    rest = list(path[2:])

    els = await resolve(table, first_part, context, context_label)
    if index is None:
        return els

    part_label = _label_of(first_part)
    context_label = f"{context_label}.{part_label}" if context_label else part_label

    if index >= len(els):
        raise RegionResolutionError(index + 1, context_label, len(els))
    el = els[index]

    if not rest:
        return [el]
    return await resolve(table, rest, el, context_label)


class RegionResolver:
    """Binds a selector table to the root context lookups start from."""

    def __init__(self, table: SelectorTable, root: ElementSource) -> None:
        self.table = table
        self.root = root

    async def resolve(
        self,
        path: RegionPath,
        context: Optional[ElementSource] = None,
        context_label: str = "",
    ) -> List[Any]:
        return await resolve(self.table, path, self.root if context is None else context, context_label)
