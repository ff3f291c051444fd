"""``chartlock verify <chart>``: Check that Chart.lock matches Chart.yaml.

Recomputes the requirements digest from the dependencies currently declared
in ``Chart.yaml`` and the versions recorded in ``Chart.lock``. Any change to
a declared name, source, or version constraint makes the lock stale, even
when the locked version would still be selected.

Exit Codes:
    0: The lock is up to date.
    1: The lock is stale, or the chart or lock could not be read.
    2: No lock file exists.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from chartlock.cli.output import console, print_error, print_stale
from chartlock.core.chart import load_chart_metadata
from chartlock.core.lockfile import LOCK_FILE, is_stale, read_lock, validate_lock
from chartlock.exceptions import ChartLockError


def _label(name: str, repository: str) -> str:
    return f"{name} ({repository})" if repository else name


@click.command("verify")
@click.argument("chart", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--lockfile",
    type=click.Path(dir_okay=False),
    default=None,
    help="Lock file to check (default: <chart>/Chart.lock).",
)
def verify_command(chart: str, lockfile: str | None) -> None:
    """Verify that CHART's lock matches its declared dependencies.

    Exit code 0 if up to date, 1 if stale, 2 if there is no lock.
    """
    chart_dir = Path(chart)
    lock_path = Path(lockfile) if lockfile else chart_dir / LOCK_FILE
    if not lock_path.exists():
        click.echo(f"No lock file found at {lock_path}.")
        sys.exit(2)

    try:
        metadata = load_chart_metadata(chart_dir)
        lock = read_lock(lock_path)
    except ChartLockError as exc:
        print_error(exc)
        sys.exit(1)

    problems = validate_lock(lock)
    if problems:
        for problem in problems:
            console.print(f"  [red]- {problem}[/red]")
        sys.exit(1)

    requirements = metadata.dependencies
    if is_stale(requirements, lock):
        declared = {_label(d.name, d.repository) for d in requirements}
        locked = {_label(d.name, d.repository) for d in lock.dependencies}
        print_stale(str(lock_path), sorted(declared - locked), sorted(locked - declared))
        sys.exit(1)

    click.echo(f"{lock_path} is up to date ({len(lock.dependencies)} dependencies).")
    sys.exit(0)
