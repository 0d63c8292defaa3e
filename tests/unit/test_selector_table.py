import json
import textwrap
from pathlib import Path

import pytest

from region_driver.selectors.table import (
    SelectorTableError,
    UnknownRegion,
    build_selector,
    freeze_table,
    iter_regions,
    load_selector_table,
)


TABLE = {
    "home": {
        "_": "#home",
        "menu": {
            "_": "nav.menu",
            "tabs": {"_": "li.tab", "links": "a"},
        },
        "title": "h1",
    },
    "a": {"b": ".foo"},
}


def test_build_selector_joins_fragments_along_the_path():
    table = freeze_table(TABLE)
    assert build_selector(table, "", "home.menu.tabs.links") == "#home nav.menu li.tab a"
    assert build_selector(table, "", "home.title") == "#home h1"


def test_build_selector_skips_namespaces_without_own_selector():
    assert build_selector(freeze_table(TABLE), "", "a.b") == ".foo"


def test_build_selector_is_relative_to_context_label():
    table = freeze_table(TABLE)
    assert build_selector(table, "home.menu.tabs", "links") == "a"
    assert build_selector(table, "home", "menu.tabs") == "nav.menu li.tab"


@pytest.mark.parametrize(
    "label, path",
    [
        ("", "home.footer"),
        ("", "nope"),
        ("home.title", "x"),
        ("missing", "title"),
        ("", "a"),
    ],
)
def test_build_selector_unknown_regions(label, path):
    with pytest.raises(UnknownRegion) as exc_info:
        build_selector(freeze_table(TABLE), label, path)
    expected = f"{label}.{path}" if label else path
    assert exc_info.value.region == expected
    assert f'"{expected}"' in str(exc_info.value)


def test_frozen_table_is_read_only():
    table = freeze_table(TABLE)
    with pytest.raises(TypeError):
        table["home"]["title"] = "h2"  # type: ignore[index]


def test_freeze_rejects_bad_leaves():
    with pytest.raises(SelectorTableError):
        freeze_table({"home": {"title": 3}})
    with pytest.raises(SelectorTableError):
        freeze_table({"home": {"title": "   "}})
    with pytest.raises(SelectorTableError):
        freeze_table({"home": {"_": {"nested": "a"}}})
    with pytest.raises(SelectorTableError):
        freeze_table({"home.title": "h1"})


def test_iter_regions_lists_selectable_regions():
    regions = dict(iter_regions(freeze_table(TABLE)))
    assert regions == {
        "home": "#home",
        "home.menu": "#home nav.menu",
        "home.menu.tabs": "#home nav.menu li.tab",
        "home.menu.tabs.links": "#home nav.menu li.tab a",
        "home.title": "#home h1",
        "a.b": ".foo",
    }


def test_load_yaml_table(tmp_path: Path):
    f = tmp_path / "selectors.yaml"
    f.write_text(
        textwrap.dedent(
            """
            home:
              _: "#home"
              title: h1
            """
        ),
        encoding="utf-8",
    )
    table = load_selector_table(f)
    assert build_selector(table, "", "home.title") == "#home h1"


def test_load_json_table(tmp_path: Path):
    f = tmp_path / "selectors.json"
    f.write_text(json.dumps(TABLE), encoding="utf-8")
    table = load_selector_table(f)
    assert build_selector(table, "", "a.b") == ".foo"


def test_load_rejects_non_mapping_and_unknown_suffix(tmp_path: Path):
    f = tmp_path / "selectors.yaml"
    f.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(SelectorTableError, match="selectors.yaml"):
        load_selector_table(f)

    txt = tmp_path / "selectors.txt"
    txt.write_text("a: b\n", encoding="utf-8")
    with pytest.raises(SelectorTableError, match="unsupported"):
        load_selector_table(txt)


def test_load_reports_parse_errors(tmp_path: Path):
    f = tmp_path / "broken.json"
    f.write_text("{not json", encoding="utf-8")
    with pytest.raises(SelectorTableError, match="could not parse"):
        load_selector_table(f)
