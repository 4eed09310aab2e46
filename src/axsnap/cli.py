"""
Command line entry point for one-shot snapshots and actions.

Example:
    axsnap observe https://example.com --verbosity detailed
    axsnap act https://example.com click --ref r3
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
from typing import Any, Awaitable, Callable, Optional

import click

from .actions import SUPPORTED_ACTIONS, execute_action
from .errors import AxsnapError
from .logger import setup_logging
from .models import PageSnapshot, Verbosity
from .runtime import BrowserRuntime
from .session import Session
from .settings import AxsnapSettings, load_settings
from .snapshot import format_snapshot


def _prepare_settings(config: Optional[str], headed: bool) -> AxsnapSettings:
    settings = load_settings(config)
    if headed:
        settings = dataclasses.replace(settings, headless=False)
    return settings


async def _with_session(
    settings: AxsnapSettings,
    url: str,
    fn: Callable[[Session], Awaitable[PageSnapshot]],
) -> PageSnapshot:
    async with BrowserRuntime(settings) as runtime:
        session = await runtime.new_session()
        await execute_action(session, "navigate", {"url": url})
        return await fn(session)


def _emit(snapshot: PageSnapshot, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(snapshot.to_wire(), ensure_ascii=False, indent=2))
    else:
        click.echo(format_snapshot(snapshot))


def _run(logger: Any, make_coro: Callable[[], Awaitable[PageSnapshot]]) -> PageSnapshot:
    try:
        return asyncio.run(make_coro())
    except KeyboardInterrupt:
        click.echo("Interrupted.")
        raise SystemExit(130)
    except AxsnapError as exc:
        logger.error("axsnap failed code=%s error=%s", exc.code, exc)
        click.echo(f"Error [{exc.code}]: {exc}")
        raise SystemExit(1)
    except Exception as exc:
        logger.error("axsnap failed: %s", exc)
        click.echo(f"Error: {exc}")
        raise SystemExit(1)


_config_option = click.option(
    "--config",
    "-c",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Optional axsnap settings file (JSON/YAML).",
)
_headed_option = click.option("--headed", is_flag=True, help="Show the browser window.")
_verbose_option = click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
_json_option = click.option("--json", "as_json", is_flag=True, help="Print the snapshot as JSON.")


@click.group(name="axsnap")
def main() -> None:
    """Accessibility snapshots with stable element refs."""


@main.command(name="observe")
@click.argument("url")
@click.option("--scope", default=None, help="CSS selector limiting the snapshot to a subtree.")
@click.option(
    "--verbosity",
    type=click.Choice([level.value for level in Verbosity]),
    default=None,
    help="Snapshot detail level.",
)
@click.option("--max-refs", type=click.IntRange(min=0), default=None, help="Cap on refs (0 = no cap).")
@_json_option
@_config_option
@_headed_option
@_verbose_option
def observe_command(
    url: str,
    scope: Optional[str],
    verbosity: Optional[str],
    max_refs: Optional[int],
    as_json: bool,
    config: Optional[str],
    headed: bool,
    verbose: bool,
) -> None:
    """Open URL and print its accessibility snapshot."""
    logger = setup_logging(verbose=verbose)

    async def observe_page(session: Session) -> PageSnapshot:
        return await session.run(
            lambda: session.observe(scope=scope, verbosity=verbosity, max_refs=max_refs)
        )

    snapshot = _run(
        logger,
        lambda: _with_session(_prepare_settings(config, headed), url, observe_page),
    )
    _emit(snapshot, as_json)


@main.command(name="act")
@click.argument("url")
@click.argument("action", type=click.Choice(list(SUPPORTED_ACTIONS)))
@click.option("--ref", default=None, help="Element ref from the page's first snapshot.")
@click.option("--selector", default=None, help="CSS selector fallback.")
@click.option("--value", default=None, help="Text, option, key, path or URL for the action.")
@click.option(
    "--direction",
    type=click.Choice(["up", "down", "left", "right"]),
    default=None,
    help="Scroll direction.",
)
@_json_option
@_config_option
@_headed_option
@_verbose_option
def act_command(
    url: str,
    action: str,
    ref: Optional[str],
    selector: Optional[str],
    value: Optional[str],
    direction: Optional[str],
    as_json: bool,
    config: Optional[str],
    headed: bool,
    verbose: bool,
) -> None:
    """Open URL, take a snapshot, run one ACTION and print the resulting snapshot."""
    logger = setup_logging(verbose=verbose)
    params = {"ref": ref, "selector": selector, "value": value, "direction": direction}

    async def act_on_page(session: Session) -> PageSnapshot:
        await session.run(lambda: session.observe())
        result = await execute_action(session, action, params)
        return result.snapshot

    snapshot = _run(
        logger,
        lambda: _with_session(_prepare_settings(config, headed), url, act_on_page),
    )
    _emit(snapshot, as_json)


if __name__ == "__main__":
    main()
