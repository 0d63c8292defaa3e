# region_driver/selectors/table.py
from __future__ import annotations

"""Region selector table
------------------------
Loads the nested region-name → CSS-fragment table, validates it with pydantic,
freezes it, and builds concrete CSS selectors from dotted region names.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Any, Dict, Iterator, Mapping, Optional, Tuple, Union

import yaml
from pydantic import StringConstraints, TypeAdapter, ValidationError
from typing_extensions import TypeAliasType

from region_driver.utils.logger import get_logger

log = get_logger(__name__)

# A mapping node may name its own element under this key, e.g.
#   {"menu": {"_": "nav.menu", "links": "a"}}
SELF_KEY = "_"

SelectorTable = Mapping[str, Any]

LeafSelector = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
SelectorNode = TypeAliasType("SelectorNode", "Union[LeafSelector, Dict[str, SelectorNode]]")

_TABLE_ADAPTER = TypeAdapter(Dict[str, SelectorNode])


class SelectorError(RuntimeError):
    pass


class UnknownRegion(SelectorError):
    def __init__(self, region: str, reason: str = "no such region") -> None:
        super().__init__(f'Unknown region "{region}": {reason}.')
        self.region = region


class SelectorTableError(ValueError):
    pass


# ---------- Building / loading ----------


def _freeze(node: Mapping[str, Any], trail: Tuple[str, ...] = ()) -> SelectorTable:
    frozen: Dict[str, Any] = {}
    for key, value in node.items():
        if not key or "." in key:
            raise SelectorTableError(f"Invalid region name {'.'.join(trail + (key,))!r}")
        if isinstance(value, Mapping):
            if key == SELF_KEY:
                raise SelectorTableError(f"{'.'.join(trail + (key,))!r} must be a selector string")
            frozen[key] = _freeze(value, trail + (key,))
        else:
            frozen[key] = value
    return MappingProxyType(frozen)


def freeze_table(data: Mapping[str, Any]) -> SelectorTable:
    """
    Validate a plain nested mapping and return a read-only copy of it.

    Leaves must be non-empty strings; anything else is a SelectorTableError.
    """
    try:
        validated = _TABLE_ADAPTER.validate_python(dict(data))
    except ValidationError as e:
        raise SelectorTableError(f"Invalid selector table:\n{e}") from e
    return _freeze(validated)


def load_selector_table(path: str | Path) -> SelectorTable:
    """
    Load a selector table from a .json, .yaml or .yml file.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        elif p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            raise SelectorTableError(f"{p.name}: unsupported selector file type {p.suffix!r}")
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SelectorTableError(f"{p.name}: could not parse: {e}") from e

    if not isinstance(data, Mapping):
        raise SelectorTableError(f"{p.name}: top level must be a mapping of region names")

    try:
        table = freeze_table(data)
    except SelectorTableError as e:
        raise SelectorTableError(f"{p.name}: {e}") from e
    log.debug(f"Loaded {sum(1 for _ in iter_regions(table))} region(s) from {p}")
    return table


# ---------- Selector construction ----------


def _fragment(node: Any) -> Optional[str]:
    if isinstance(node, str):
        return node
    return node.get(SELF_KEY)


def build_selector(table: SelectorTable, context_label: str, path: str) -> str:
    """
    Build the CSS selector for region `path`, relative to `context_label`.

    The segments of `context_label` only walk down the table: the DOM context
    element already applies their scope. Every segment of `path` then
    contributes its fragment, joined as descendant selectors:

        {"menu": {"_": "nav", "tabs": {"_": "li", "links": "a"}}}
        build_selector(t, "", "menu.tabs.links")   -> "nav li a"
        build_selector(t, "menu.tabs", "links")    -> "a"
    """
    prefix = [s for s in context_label.split(".") if s] if context_label else []
    segments = path.split(".")
    region = ".".join(prefix + segments)

    node: Any = table
    for seg in prefix:
        if not isinstance(node, Mapping) or seg not in node:
            raise UnknownRegion(region)
        node = node[seg]

    parts = []
    for seg in segments:
        if not isinstance(node, Mapping):
            raise UnknownRegion(region, f'"{seg}" is below a selector leaf')
        if seg not in node:
            raise UnknownRegion(region)
        node = node[seg]
        fragment = _fragment(node)
        if fragment:
            parts.append(fragment)

    if _fragment(node) is None:
        raise UnknownRegion(region, "region has no selector of its own")
    return " ".join(parts)


def iter_regions(table: SelectorTable) -> Iterator[Tuple[str, str]]:
    """Yield (dotted region name, full CSS selector) for every selectable region."""

    def walk(node: SelectorTable, trail: Tuple[str, ...]) -> Iterator[Tuple[str, str]]:
        for key, child in node.items():
            if key == SELF_KEY:
                continue
            region = ".".join(trail + (key,))
            if _fragment(child) is not None:
                yield region, build_selector(table, "", region)
            if isinstance(child, Mapping):
                yield from walk(child, trail + (key,))

    return walk(table, ())
