#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""CLI command that watches a directory and prints handler invocations."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path
import signal
from typing import Any

from attrs import evolve
import click
from provide.foundation import TelemetryConfig, get_hub
from provide.foundation.cli.decorators import logging_options
from provide.foundation.logger import get_logger
from structlog.typing import FilteringBoundLogger as StructLogger

from hostfs.watch import EventCategory, HostFsWatchError, watch
from hostfs.watch.defaults import DEFAULT_POLL_INTERVAL_SECONDS

log: StructLogger = get_logger(__name__)


def _setup_logging(log_level: str | None) -> None:
    base_config = TelemetryConfig.from_env()
    telemetry_config = evolve(base_config, service_name="hostfs")
    if log_level:
        telemetry_config = evolve(
            telemetry_config,
            logging=evolve(telemetry_config.logging, default_level=log_level.upper()),
        )
    get_hub().initialize_foundation(telemetry_config)


def _echo_handler(category: EventCategory):
    def handler(paths: list[str]) -> None:
        click.echo(f"{category.handler_key}: {', '.join(paths)}")

    return handler


def build_handlers() -> dict[str, Any]:
    """Handlers that print one line per invocation, for every category."""
    return {category.handler_key: _echo_handler(category) for category in EventCategory}


async def _run_watch(root: Path, options: dict[str, Any]) -> None:
    """Run a watch until SIGINT/SIGTERM cancels it."""
    loop = asyncio.get_running_loop()
    task = asyncio.create_task(watch(root, options, build_handlers()))

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, task.cancel)

    try:
        await task
    except asyncio.CancelledError:
        log.info("Watch stopped by signal")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.remove_signal_handler(sig)


@click.command(name="watch")
@click.argument("root", type=click.Path(file_okay=True, dir_okay=True, path_type=Path))
@click.option(
    "-p",
    "--pattern",
    default="*",
    show_default=True,
    help="Glob pattern a changed path must match.",
)
@click.option("-r", "--recursive", is_flag=True, help="Watch subdirectories as well.")
@click.option("--files/--no-files", default=True, show_default=True, help="Report changes to files.")
@click.option(
    "--dirs/--no-dirs", default=True, show_default=True, help="Report changes to directories."
)
@click.option(
    "--interval",
    type=click.IntRange(min=1),
    default=DEFAULT_POLL_INTERVAL_SECONDS,
    show_default=True,
    envvar="HOSTFS_POLL_INTERVAL",
    show_envvar=True,
    help="Seconds between scans when polling.",
)
@click.option("--poll", is_flag=True, help="Poll for changes instead of using native notifications.")
@logging_options
@click.pass_context
def watch_cli(
    ctx: click.Context,
    root: Path,
    pattern: str,
    recursive: bool,
    files: bool,
    dirs: bool,
    interval: int,
    poll: bool,
    **kwargs,
):
    """Watch ROOT and print matching changes until interrupted.

    Each line names the handler category and the changed paths, e.g.

        changed: /tmp/project/notes.txt
    """
    _setup_logging(kwargs.get("log_level"))

    options = {
        "pattern": pattern,
        "recursive": recursive,
        "watchFiles": files,
        "watchDirectories": dirs,
        "interval": interval,
        "poll": poll,
    }
    log.debug("Starting watch from CLI", root=str(root), **options)

    try:
        asyncio.run(_run_watch(root, options))
    except HostFsWatchError as e:
        click.echo(f"❌ Error: {e}", err=True)
        ctx.exit(1)
    except KeyboardInterrupt:
        click.echo("\nAborted by user.", err=True)
        ctx.exit(1)


# 🔼⚙️🔚
