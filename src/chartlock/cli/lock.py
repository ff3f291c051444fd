"""``chartlock lock <chart>``: Resolve dependencies and write Chart.lock.

Reads the chart's ``Chart.yaml``, maps each remote dependency to a
configured repository, resolves every dependency against the local
filesystem, the cached repository indexes, and OCI registries, and writes a
``Chart.lock`` carrying the resolved versions and the requirements digest.

Exit Codes:
    0: Lock written successfully.
    1: Resolution failed, or the chart, configuration, or lock could not
       be read or written.
    2: The chart declares no dependencies.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from chartlock.cli.output import print_error, print_lock_summary
from chartlock.config import Settings, load_repositories
from chartlock.core.chart import load_chart_metadata
from chartlock.core.dependency import build_alias_map
from chartlock.core.dependency.resolver import Resolver
from chartlock.core.lockfile import LOCK_FILE, write_lock
from chartlock.exceptions import ChartLockError
from chartlock.registry import OCIRegistryClient


@click.command("lock")
@click.argument("chart", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--repository-cache",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory of cached repository indexes (default: $CHARTLOCK_REPOSITORY_CACHE).",
)
@click.option(
    "--repository-config",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to repositories.yaml (default: $CHARTLOCK_REPOSITORY_CONFIG).",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output path for the lock (default: <chart>/Chart.lock).",
)
@click.option("--plain-http", is_flag=True, help="Use plain HTTP for OCI registries.")
def lock_command(
    chart: str,
    repository_cache: str | None,
    repository_config: str | None,
    output: str | None,
    plain_http: bool,
) -> None:
    """Resolve CHART's dependencies and write Chart.lock.

    Exit code 0 on success, 1 on resolution failure, 2 if the chart
    declares no dependencies.
    """
    chart_dir = Path(chart)
    try:
        settings = Settings.from_env()
        cache = Path(repository_cache) if repository_cache else settings.repository_cache
        config = Path(repository_config) if repository_config else settings.repository_config

        metadata = load_chart_metadata(chart_dir)
        if not metadata.dependencies:
            click.echo(f"Chart {metadata.name} declares no dependencies.")
            sys.exit(2)

        aliases = build_alias_map(metadata.dependencies, load_repositories(config))
        resolver = Resolver(
            chart_dir,
            cache,
            registry_client=OCIRegistryClient(
                timeout=settings.registry_timeout, plain_http=plain_http
            ),
        )
        lock = resolver.resolve(metadata.dependencies, aliases)

        out_path = Path(output) if output else chart_dir / LOCK_FILE
        write_lock(lock, out_path)
    except ChartLockError as exc:
        print_error(exc)
        sys.exit(1)

    print_lock_summary(lock)
    click.echo(f"\nLock written to: {out_path}")
    sys.exit(0)
