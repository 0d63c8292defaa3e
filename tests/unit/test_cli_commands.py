import json
import textwrap
from pathlib import Path

from click.testing import CliRunner

from region_driver.cli import cli


def write_selectors_yaml(tmp_path: Path) -> Path:
    y = textwrap.dedent(
        """
        home:
          _: "#home"
          menu:
            _: nav.menu
            tabs:
              _: li.tab
              links: a
          title: h1
        """
    )
    p = tmp_path / "selectors.yaml"
    p.write_text(y, encoding="utf-8")
    return p


def test_cli_validate_ok_and_error(tmp_path: Path):
    good = write_selectors_yaml(tmp_path)
    bad = tmp_path / "bad.yaml"
    bad.write_text("home:\n  title: 3\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["validate", str(good)])
    assert result.exit_code == 0
    assert "OK  " in result.output
    assert "5 region(s)" in result.output

    result = runner.invoke(cli, ["validate", str(good), str(bad)])
    assert result.exit_code == 1
    assert result.output.count("OK  ") == 1
    assert "ERR " in result.output


def test_cli_regions_lists_full_selectors(tmp_path: Path):
    f = write_selectors_yaml(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["regions", str(f)])
    assert result.exit_code == 0
    assert "home.menu.tabs.links  ->  #home nav.menu li.tab a" in result.output

    result = runner.invoke(cli, ["regions", "--json", str(f)])
    assert result.exit_code == 0
    assert json.loads(result.output)["home.title"] == "#home h1"


def test_cli_config_prints_settings():
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 0
    assert "WAIT_TIMEOUT_MS" in json.loads(result.output)


def test_cli_count_requires_selectors(monkeypatch):
    monkeypatch.delenv("SELECTORS_FILE", raising=False)
    result = CliRunner().invoke(cli, ["count", "http://localhost", "home.title"])
    assert result.exit_code == 2
    assert "Provide --selectors" in result.output


def test_cli_count_reports_invalid_table(tmp_path: Path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("home:\n  title: 3\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["count", "http://localhost", "home.title", "--selectors", str(bad)])
    assert result.exit_code == 1
    assert f"ERR {bad}  ->  " in result.output
    assert "Traceback" not in result.output
