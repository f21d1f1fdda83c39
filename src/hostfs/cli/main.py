#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Main entry point for the hostfs CLI."""

from __future__ import annotations

import click

from hostfs import __version__
from hostfs.cli.watch_cmds import watch_cli


@click.group(name="hostfs")
@click.version_option(version=__version__, prog_name="hostfs")
def cli():
    """hostfs - filesystem tools for embedding hosts."""


cli.add_command(watch_cli)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

# 🔼⚙️🔚
