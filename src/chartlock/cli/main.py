"""chartlock CLI: Reproducible dependency locks for charts.

Entry point for the ``chartlock`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    lock: Resolve dependencies and write Chart.lock.
    verify: Check that Chart.lock still matches Chart.yaml.

Usage::

    chartlock lock ./mychart
    chartlock lock ./mychart --repository-cache ~/.cache/chartlock/repository
    chartlock verify ./mychart
    chartlock --verbose lock ./mychart
"""

from __future__ import annotations

import logging

import click

from chartlock import __version__
from chartlock.cli.lock import lock_command
from chartlock.cli.verify import verify_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log resolution steps to stderr.")
def cli(verbose: bool) -> None:
    """chartlock: Reproducible dependency resolution for charts.

    Resolve declared chart dependencies against local paths, cached
    repository indexes, and OCI registries, and detect when a lock no
    longer matches the chart that produced it.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(lock_command)
cli.add_command(verify_command)
