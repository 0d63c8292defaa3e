# region_driver/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Check selector tables and count region matches on a live page.
Thin wrapper around the selector loader and the region driver.
"""

import asyncio
import json
import sys
from typing import Optional

import click

from region_driver.selectors.table import SelectorTableError, iter_regions, load_selector_table
from region_driver.utils.config import get_settings
from region_driver.utils.logger import bind, configure_logging, get_logger, unbind


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _selectors_option(f):
    return click.option(
        "--selectors", "selectors_file",
        type=click.Path(dir_okay=False, exists=True),
        default=lambda: str(get_settings().SELECTORS_FILE) if get_settings().SELECTORS_FILE else None,
        help="JSON/YAML selector table (defaults to SELECTORS_FILE)",
    )(f)


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="region-driver")
def cli(log_level: Optional[str]):
    configure_logging(get_settings(), level=log_level)


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    _echo_json(get_settings().model_dump(mode="json"))


@cli.command("validate")
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False, exists=True))
def cmd_validate(files):
    """Validate one or more selector tables."""
    ok = True
    for fp in files:
        try:
            table = load_selector_table(fp)
            click.echo(f"OK  {fp}  ->  {sum(1 for _ in iter_regions(table))} region(s)")
        except SelectorTableError as e:
            ok = False
            click.echo(f"ERR {fp}  ->  {e}")

    sys.exit(0 if ok else 1)


@cli.command("regions")
@click.argument("file", type=click.Path(dir_okay=False, exists=True))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print a JSON object instead of lines")
def cmd_regions(file: str, as_json: bool):
    """List every region in a selector table with its full CSS selector."""
    try:
        table = load_selector_table(file)
    except SelectorTableError as e:
        click.echo(f"ERR {file}  ->  {e}")
        sys.exit(1)

    rows = list(iter_regions(table))
    if as_json:
        _echo_json(dict(rows))
        return
    for region, selector in rows:
        click.echo(f"{region}  ->  {selector}")


@cli.command("count")
@click.argument("url")
@click.argument("region")
@_selectors_option
@click.option("--timeout", "timeout_ms", type=int, default=None, help="Override WAIT_TIMEOUT_MS from settings")
def cmd_count(url: str, region: str, selectors_file: Optional[str], timeout_ms: Optional[int]):
    """
    Open URL in a browser, wait for REGION and print how many elements it matches.

    REGION accepts indices, e.g. "home.menu.tabs[2].links".

    Examples:
      region-driver count http://localhost:8080/home home.menu.tabs --selectors selectors.yaml
    """
    from region_driver.core.driver import RegionDriver  # local import keeps playwright off the validate path
    from region_driver.selectors.resolver import parse_region
    from region_driver.selectors.table import SelectorError
    from region_driver.utils.timing import PollTimeout
    from playwright.async_api import async_playwright

    if not selectors_file:
        click.echo("Provide --selectors or set SELECTORS_FILE.")
        sys.exit(2)

    settings = get_settings()
    log = get_logger(__name__)
    try:
        table = load_selector_table(selectors_file)
    except SelectorTableError as e:
        click.echo(f"ERR {selectors_file}  ->  {e}")
        sys.exit(1)

    async def _run() -> int:
        async with async_playwright() as pw:
            browser_type = getattr(pw, settings.BROWSER_TYPE.value)
            browser = await browser_type.launch(**settings.playwright_launch_kwargs())
            try:
                context = await browser.new_context(**settings.playwright_context_kwargs())
                page = await context.new_page()
                page.set_default_navigation_timeout(settings.PAGE_LOAD_TIMEOUT)
                driver = RegionDriver(page, "", table, settings=settings)
                await driver.goto(url)
                await driver.wait_for_region(path, timeout_ms=timeout_ms)
                return await driver.count(path)
            finally:
                await browser.close()

    bind(url=url)
    try:
        path = parse_region(region)
        n = asyncio.run(_run())
    except (PollTimeout, SelectorError) as e:
        log.debug(f"count failed: {e!r}")
        click.echo(f"ERR {region}  ->  {e}")
        sys.exit(1)
    finally:
        unbind("url")
    click.echo(f"{region}: {n}")


def main() -> None:
    cli(prog_name="region-driver")


if __name__ == "__main__":
    main()
